# src/tasktree/tasks/hierarchy.py

"""
Tree reconstruction from the flat task list.

The whole task set is held in memory as an arena keyed by id; adjacency is a
plain `id -> [child ids]` mapping, never linked node objects.

Sibling order: children (and roots) are emitted in the order they appear in
the input. `TaskStore.all_tasks()` returns newest first, so the printed tree
lists newer siblings above older ones.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .task_models import Task, TreeLine

logger = logging.getLogger(__name__)


def build_tree(tasks: Iterable[Task], *, open_only: bool = False) -> list[TreeLine]:
    """
    Depth-first, indent-annotated traversal of the task forest.

    - A task whose parent id is unknown is treated as a root (indent 0).
    - `open_only` filters at emission time: a closed task is not emitted, but
      its subtree is still walked and keeps its depth-based indent.
    """
    task_table: dict[int, Task] = {}
    order: list[int] = []
    for task in tasks:
        if task.id in task_table:
            continue
        task_table[task.id] = task
        order.append(task.id)

    children: dict[int, list[int]] = {tid: [] for tid in order}
    is_root: dict[int, bool] = {tid: True for tid in order}

    for tid in order:
        parent_id = task_table[tid].parent_id
        if parent_id is None:
            continue
        if parent_id in task_table and parent_id != tid:
            children[parent_id].append(tid)
            is_root[tid] = False
        else:
            logger.debug("Task %s references unknown parent %s; shown as root", tid, parent_id)

    out: list[TreeLine] = []
    seen: set[int] = set()

    def walk(stack: list[tuple[int, int]]) -> None:
        while stack:
            tid, indent = stack.pop()
            if tid in seen:
                continue
            seen.add(tid)

            task = task_table[tid]
            if not open_only or task.open:
                out.append(TreeLine(task=task, indent_level=indent))

            for child_id in reversed(children[tid]):
                stack.append((child_id, indent + 1))

    # LIFO stack: push in reverse so the first discovered item pops first.
    walk([(tid, 0) for tid in reversed(order) if is_root[tid]])

    # Rows forming a parent cycle have no root; surface them at top level.
    for tid in order:
        if tid not in seen:
            logger.warning("Task %s is part of a parent cycle; shown as root", tid)
            walk([(tid, 0)])

    return out


def render_tree(lines: Iterable[TreeLine], indent: str = "    ") -> list[str]:
    return [f"{indent * line.indent_level}{line.task}" for line in lines]
