# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from tasktree.core.state import AppState
from tasktree.tasks.task_store import TaskStore

from .fakes import FakeEditor, Output


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the commands.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="tasktree-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        db_path=tmp_path / "tasks.sqlite3",
        rc_path=tmp_path / "rc",
        editor="true",
        review_days=7,
    )


@pytest.fixture()
def store(settings: SimpleNamespace) -> TaskStore:
    """Real SQLite store with the schema created."""
    s = TaskStore(settings.db_path)
    s.create_tables()
    return s


@pytest.fixture()
def editor() -> FakeEditor:
    return FakeEditor()


@pytest.fixture()
def output() -> Output:
    return Output()


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore, editor: FakeEditor, output: Output) -> AppState:
    """
    AppState wired with a fake editor and captured output.

    NOTE: We keep the real SQLite store here because its correctness is part
    of what we want to test.
    """
    return AppState(settings=settings, task_store=store, editor=editor, emit=output)
