# src/tasktree/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .ports import Editor, Emitter, TaskRepo


@dataclass
class AppState:
    # Settings are kept on the state so commands never read global config.
    settings: Any

    task_store: TaskRepo
    editor: Editor
    emit: Emitter = field(default=print)
