# src/tasktree/cli/commands.py

from __future__ import annotations

import argparse
import logging
import time
from collections.abc import Callable

from ..core.state import AppState
from ..editor import join_sections, split_title_body
from ..tasks.duration import format_duration
from ..tasks.errors import NotFoundError
from ..tasks.hierarchy import build_tree, render_tree
from ..tasks.review import format_day, group_review_entries, render_review

CommandHandler = Callable[[AppState, argparse.Namespace], int]
ArgsBuilder = Callable[[argparse.ArgumentParser], None]

logger = logging.getLogger(__name__)

DEFAULT_TASK_TITLE = "Title for your task"
DEFAULT_TASK_BODY = "Description for your task"
DEFAULT_NOTE_BODY = "Add your note here"
DEFAULT_TEMPLATE_BODY = "Type your template body here"


class CommandRegistry:
    """Subcommand registry: handler, help text and argument builder per command."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}
        self._args: dict[str, ArgsBuilder | None] = {}
        self._aliases: dict[str, list[str]] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        configure: ArgsBuilder | None = None,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        self._args[key] = configure
        self._aliases[key] = [a.lower() for a in aliases]
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def build_parser(self, prog: str = "tasktree") -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog=prog,
            description="Hierarchical task list with a work log.",
            epilog=self.build_help(),
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        sub = parser.add_subparsers(dest="cmd", required=True, metavar="COMMAND")
        for name, help_text in self._help.items():
            p = sub.add_parser(name, help=help_text, description=help_text, aliases=self._aliases[name])
            configure = self._args[name]
            if configure is not None:
                configure(p)
        return parser

    def handle(self, state: AppState, argv: list[str]) -> int:
        """Parse argv and run the selected command. Returns the exit status."""
        args = self.build_parser().parse_args(argv)
        handler = self._handlers[args.cmd]
        logger.debug("Running command %s", args.cmd)
        return handler(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  {name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _template_body(state: AppState, name: str) -> str:
    body = state.task_store.find_template(name)
    if body is None:
        raise NotFoundError(f"template {name!r} does not exist")
    return body


# ---- commands ----


def cmd_init(state: AppState, args: argparse.Namespace) -> int:
    state.task_store.create_tables()
    state.emit(f"Initialized {state.settings.db_path}")
    return 0


def cmd_new_task(state: AppState, args: argparse.Namespace) -> int:
    """
    new-task [parent] [--title T] [--body B] [--template NAME]

    The editor opens unless both title and body are given on the command line.
    Prints the new task's id.
    """
    store = state.task_store
    if args.parent is not None and store.find_task(args.parent) is None:
        raise NotFoundError(f"parent task {args.parent} does not exist")

    default_body = _template_body(state, args.template) if args.template else DEFAULT_TASK_BODY
    title = args.title if args.title is not None else DEFAULT_TASK_TITLE
    body = args.body if args.body is not None else default_body
    date_created = time.time()

    if args.title is None or args.body is None:
        text = state.editor(join_sections(title, body))
        title, body = split_title_body(text)

    task_id = store.create_task(
        title=title.strip(),
        body=body.rstrip("\n"),
        parent_id=args.parent,
        date_created=date_created,
    )
    state.emit(str(task_id))
    return 0


def cmd_tree(state: AppState, args: argparse.Namespace) -> int:
    lines = build_tree(state.task_store.all_tasks(), open_only=args.open)
    for line in render_tree(lines):
        state.emit(line)
    return 0


def cmd_view_task(state: AppState, args: argparse.Namespace) -> int:
    store = state.task_store
    found = store.find_task_with_duration(args.task)
    if found is None:
        raise NotFoundError(f"task {args.task} does not exist")

    task = found.task
    status = "" if task.open else " [closed]"
    state.emit(
        f"[{task.title}]{status} (accumulated: {format_duration(found.duration_seconds)})\n"
        f"{task.body}\n\n[Notes]"
    )
    for item in store.find_notes_with_duration(task.id):
        note = item.note
        state.emit(
            f"{note.id}: {format_duration(item.duration_seconds)} on {format_day(note.date_start)}\n"
            f"{note.body}\n"
        )
    return 0


def cmd_leaves(state: AppState, args: argparse.Namespace) -> int:
    state.emit("id\tTitle")
    for task in state.task_store.open_leaves():
        state.emit(str(task))
    return 0


def cmd_new_note(state: AppState, args: argparse.Namespace) -> int:
    """
    new-note <task> [--template NAME]

    The editor shows the note body above the delimiter and the task's current
    body below it; both come back edited and are saved atomically. The time
    spent in the editor is the note's duration.
    """
    store = state.task_store
    task = store.find_task(args.task)
    if task is None:
        raise NotFoundError(f"task {args.task} does not exist")

    note_body = _template_body(state, args.template) if args.template else DEFAULT_NOTE_BODY

    date_start = time.time()
    text = state.editor(join_sections(note_body, task.body))
    date_end = time.time()

    new_note_body, new_task_body = split_title_body(text)
    note_id = store.append_note(
        task.id,
        new_note_body.strip(),
        new_task_body.rstrip("\n"),
        date_start,
        date_end,
    )
    logger.info("Note %s added to task %s", note_id, task.id)
    state.emit(f"Note {note_id} added to task {task.id} ({format_duration(date_end - date_start)})")
    return 0


def cmd_finish(state: AppState, args: argparse.Namespace) -> int:
    state.task_store.finish_task(args.task)
    state.emit(f"Task {args.task} finished")
    return 0


def cmd_new_template(state: AppState, args: argparse.Namespace) -> int:
    store = state.task_store
    existing = store.find_template(args.name)
    body = state.editor(existing if existing is not None else DEFAULT_TEMPLATE_BODY)
    store.upsert_template(args.name, body.rstrip("\n"))
    state.emit(f"Template {args.name!r} saved")
    return 0


def cmd_templates(state: AppState, args: argparse.Namespace) -> int:
    templates = state.task_store.all_templates()
    if not templates:
        state.emit("No templates.")
        return 0
    for t in templates:
        first = (t.body.splitlines() or [""])[0]
        state.emit(f"{t.name}\t{first}")
    return 0


def cmd_review(state: AppState, args: argparse.Namespace) -> int:
    days = args.days if args.days is not None else int(state.settings.review_days)
    groups = group_review_entries(state.task_store.recently_updated(days))
    if not groups:
        state.emit(f"No notes in the last {days} day(s).")
        return 0
    for line in render_review(groups):
        state.emit(line)
    return 0


def cmd_delete_task(state: AppState, args: argparse.Namespace) -> int:
    state.task_store.delete_task(args.task)
    state.emit(f"Task {args.task} deleted (with its notes and subtasks)")
    return 0


def cmd_delete_note(state: AppState, args: argparse.Namespace) -> int:
    state.task_store.delete_note(args.note)
    state.emit(f"Note {args.note} deleted")
    return 0


def cmd_drop_tables(state: AppState, args: argparse.Namespace) -> int:
    if not args.yes:
        state.emit("Refusing to drop tables without --yes.")
        return 1
    state.task_store.drop_tables()
    state.emit(f"Dropped all tables in {state.settings.db_path}")
    return 0


# ---- argument builders ----


def _task_arg(p: argparse.ArgumentParser) -> None:
    p.add_argument("task", type=int, help="Task's ID")


def _template_opt(p: argparse.ArgumentParser) -> None:
    p.add_argument("-t", "--template", help="Name of a template to pre-fill the body with")


def _new_task_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("parent", nargs="?", type=int, default=None, help="Parent task's ID")
    p.add_argument("--title", help="A title for this new task")
    p.add_argument("--body", help="A description for this new task")
    _template_opt(p)


def _tree_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("-o", "--open", action="store_true", help="Hide finished tasks")


def _new_note_args(p: argparse.ArgumentParser) -> None:
    _task_arg(p)
    _template_opt(p)


def _name_arg(p: argparse.ArgumentParser) -> None:
    p.add_argument("name", help="Template's name (unique)")


def _review_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("days", nargs="?", type=int, default=None, help="Trailing window in days")


def _note_arg(p: argparse.ArgumentParser) -> None:
    p.add_argument("note", type=int, help="Note's ID")


def _drop_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--yes", action="store_true", help="Confirm dropping every table")


registry.register("init", cmd_init, help_text="Initialize the tables.")
registry.register(
    "new-task", cmd_new_task, help_text="Add a new task, printing its ID.", configure=_new_task_args
)
registry.register("tree", cmd_tree, help_text="List all tasks as a tree.", configure=_tree_args)
registry.register(
    "view-task", cmd_view_task, help_text="View a task's contents, notes and time spent.", configure=_task_arg
)
registry.register("leaves", cmd_leaves, help_text="List open tasks without open subtasks.")
registry.register(
    "new-note", cmd_new_note, help_text="Log a note on a task and update its body.", configure=_new_note_args
)
registry.register("finish", cmd_finish, help_text="Mark a task as done.", configure=_task_arg)
registry.register(
    "new-template", cmd_new_template, help_text="Create or edit a named template.", configure=_name_arg
)
registry.register("templates", cmd_templates, help_text="List templates.")
registry.register(
    "review", cmd_review, help_text="Show notes logged in the last N days.", configure=_review_args
)
registry.register(
    "delete-task", cmd_delete_task, help_text="Delete a task, its notes and subtasks.", configure=_task_arg
)
registry.register("delete-note", cmd_delete_note, help_text="Delete a single note.", configure=_note_arg)
registry.register("drop-tables", cmd_drop_tables, help_text="Drop every table.", configure=_drop_args)
