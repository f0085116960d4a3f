# src/tasktree/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local directories exist,
- wires concrete implementations (SQLite store, external editor) into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import Editor, Emitter
from ..core.state import AppState
from ..editor import ExternalEditor
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(
    *,
    settings=None,
    editor: Editor | None = None,
    emit: Emitter | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    state = AppState(
        settings=settings,
        task_store=TaskStore(settings.db_path),
        editor=editor if editor is not None else ExternalEditor(settings.editor),
    )
    if emit is not None:
        state.emit = emit
    logger.debug("State ready db=%s editor=%s", settings.db_path, settings.editor)
    return state
