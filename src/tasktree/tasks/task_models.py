# src/tasktree/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class Task:
    """
    A node of the task tree.

    Notes:
    - timestamps are POSIX seconds (same representation as the SQLite columns)
    - `open` only ever goes True -> False ("finish"); nothing reopens a task
    """

    id: int
    parent_id: int | None
    title: str
    body: str
    open: bool
    date_created: float

    def __str__(self) -> str:
        return f"{self.id:3}: {self.title}"


@dataclass(slots=True)
class Note:
    id: int
    task_id: int
    body: str
    date_start: float
    date_end: float


@dataclass(slots=True)
class Template:
    name: str
    body: str


@dataclass(slots=True)
class TaskWithDuration:
    task: Task
    duration_seconds: float


@dataclass(slots=True)
class NoteWithDuration:
    note: Note
    duration_seconds: float


@dataclass(slots=True)
class ReviewEntry:
    """One (task, note) row of the recently-updated query."""

    task_id: int
    task_title: str
    open: bool
    note_id: int
    note_body: str
    last_updated: float


@dataclass(slots=True)
class ReviewGroup:
    task_id: int
    task_title: str
    open: bool
    entries: list[ReviewEntry] = field(default_factory=list)


@dataclass(slots=True)
class TreeLine:
    task: Task
    indent_level: int
