# src/tasktree/tasks/duration.py

"""
Elapsed-time aggregation over notes.

A note's duration is simply `date_end - date_start`. Notes whose end precedes
their start produce a negative figure; it is summed as-is, never clamped.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from .task_models import Note, NoteWithDuration, Task, TaskWithDuration


def note_duration_seconds(note: Note) -> float:
    return float(note.date_end) - float(note.date_start)


def total_duration_seconds(notes: Iterable[Note]) -> float:
    """Sum of note durations; 0.0 for a task without notes."""
    return float(sum((note_duration_seconds(n) for n in notes), 0.0))


def note_with_duration(note: Note) -> NoteWithDuration:
    return NoteWithDuration(note=note, duration_seconds=note_duration_seconds(note))


def task_with_duration(task: Task, notes: Iterable[Note]) -> TaskWithDuration:
    return TaskWithDuration(task=task, duration_seconds=total_duration_seconds(notes))


def humanize_duration(seconds: float) -> tuple[int, int]:
    """
    Split seconds into (hours, minutes) using floor division.

    The sub-minute remainder is dropped, not rounded:
    3661 -> (1, 1), 59 -> (0, 0), 3600 -> (1, 0).
    """
    hours = math.floor(seconds / 3600.0)
    minutes = math.floor((seconds - hours * 3600.0) / 60.0)
    return int(hours), int(minutes)


def format_duration(seconds: float) -> str:
    hours, minutes = humanize_duration(seconds)
    return f"{hours:02} hours {minutes:02} minutes"
