# src/tasktree/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the commands.

Commands depend on Protocols instead of concrete implementations.
This keeps the editor and the storage swappable and makes testing easier.
"""

from typing import Callable, Protocol

from ..tasks.task_models import Note, NoteWithDuration, ReviewEntry, Task, TaskWithDuration, Template

Emitter = Callable[[str], None]
# Where command output goes (print by default).


class Editor(Protocol):
    """Given pre-fill text, return the user-edited text (or raise EditorError)."""

    def __call__(self, template: str) -> str: ...


class TaskRepo(Protocol):
    # Schema
    def create_tables(self) -> None: ...
    def drop_tables(self) -> None: ...

    # Tasks
    def all_tasks(self) -> list[Task]: ...
    def find_task(self, task_id: int) -> Task | None: ...
    def find_task_with_duration(self, task_id: int) -> TaskWithDuration | None: ...
    def open_leaves(self) -> list[Task]: ...
    def recently_updated(self, days: int, *, now_ts: float | None = None) -> list[ReviewEntry]: ...
    def create_task(
            self,
            *,
            title: str,
            body: str = "",
            parent_id: int | None = None,
            date_created: float | None = None,
    ) -> int: ...
    def finish_task(self, task_id: int) -> None: ...
    def delete_task(self, task_id: int) -> None: ...

    # Notes
    def find_notes(self, task_id: int) -> list[Note]: ...
    def find_notes_with_duration(self, task_id: int) -> list[NoteWithDuration]: ...
    def append_note(
            self,
            task_id: int,
            note_body: str,
            task_body: str,
            date_start: float,
            date_end: float,
    ) -> int: ...
    def delete_note(self, note_id: int) -> None: ...

    # Templates
    def upsert_template(self, name: str, body: str) -> None: ...
    def find_template(self, name: str) -> str | None: ...
    def all_templates(self) -> list[Template]: ...
