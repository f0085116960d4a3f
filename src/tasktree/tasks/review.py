# src/tasktree/tasks/review.py

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from itertools import groupby

from .task_models import ReviewEntry, ReviewGroup


def _review_sort_key(entry: ReviewEntry) -> tuple[int, int, float]:
    return (-entry.task_id, -entry.note_id, -entry.last_updated)


def group_review_entries(entries: Iterable[ReviewEntry]) -> list[ReviewGroup]:
    """
    Group review rows under their task.

    Rows are sorted here (task id desc, note id desc, timestamp desc) before
    grouping, so the result does not depend on the order the store returned.
    """
    ordered = sorted(entries, key=_review_sort_key)
    groups: list[ReviewGroup] = []
    for task_id, rows in groupby(ordered, key=lambda e: e.task_id):
        items = list(rows)
        head = items[0]
        groups.append(
            ReviewGroup(
                task_id=task_id,
                task_title=head.task_title,
                open=head.open,
                entries=items,
            )
        )
    return groups


def format_day(ts: float) -> str:
    d = datetime.fromtimestamp(ts).astimezone()
    return f"{d.day}-{d.month}-{d.year}"


def render_review(groups: Iterable[ReviewGroup], indent: str = "    ") -> list[str]:
    lines: list[str] = []
    for group in groups:
        status = "open" if group.open else "closed"
        lines.append(f"[{group.task_id}] {group.task_title} ({status})")
        for entry in group.entries:
            body_lines = entry.note_body.splitlines() or [""]
            lines.append(f"{indent}{format_day(entry.last_updated)}: {body_lines[0]}")
            for extra in body_lines[1:]:
                lines.append(f"{indent}{indent}{extra}")
    return lines
