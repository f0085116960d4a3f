# tests/test_commands.py

from __future__ import annotations

import pytest

from tasktree.cli.bootstrap import create_initial_state
from tasktree.cli.commands import CommandRegistry, registry
from tasktree.cli.main import run
from tasktree.core.state import AppState
from tasktree.editor import join_sections
from tasktree.tasks.task_store import TaskStore

from .fakes import FakeEditor, Output


def test_registry_builds_help_and_routes(state: AppState) -> None:
    reg = CommandRegistry()
    called: list[int] = []

    def handler(state, args):
        called.append(args.n)
        return 0

    reg.register("ping", handler, "Ping.", configure=lambda p: p.add_argument("n", type=int), aliases=["p"])

    assert reg.handle(state, ["ping", "3"]) == 0
    assert reg.handle(state, ["p", "4"]) == 0
    assert called == [3, 4]
    assert "ping - Ping." in reg.build_help()


def test_top_level_help_lists_every_command(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit):
        registry.build_parser().parse_args(["--help"])
    out = capsys.readouterr().out
    assert "Available commands:" in out
    assert "  new-note - Log a note on a task and update its body." in out
    assert "  drop-tables - Drop every table." in out


def test_unknown_command_exits_with_usage_error(state: AppState) -> None:
    with pytest.raises(SystemExit):
        registry.handle(state, ["nope"])


def test_init_creates_tables(settings, output: Output) -> None:
    state = create_initial_state(settings=settings, editor=FakeEditor(), emit=output)
    assert run(state, ["init"]) == 0
    assert state.task_store.all_tasks() == []
    assert str(settings.db_path) in output.text


def test_new_task_without_editor(state: AppState, store: TaskStore, editor: FakeEditor, output: Output) -> None:
    assert run(state, ["new-task", "--title", "Write report", "--body", "Q3 numbers"]) == 0
    assert editor.calls == []

    task_id = int(output.lines[-1])
    task = store.find_task(task_id)
    assert task is not None
    assert (task.title, task.body, task.parent_id, task.open) == ("Write report", "Q3 numbers", None, True)


def test_new_task_with_editor_and_template(
    state: AppState, store: TaskStore, editor: FakeEditor, output: Output
) -> None:
    parent = store.create_task(title="parent")
    store.upsert_template("bug", "Steps to reproduce:")
    editor.replies.append("  Fix crash  \n==========\nSteps to reproduce: click\n")

    assert run(state, ["new-task", str(parent), "--template", "bug"]) == 0
    assert editor.calls == [join_sections("Title for your task", "Steps to reproduce:")]

    task = store.find_task(int(output.lines[-1]))
    assert task is not None
    assert task.title == "Fix crash"
    assert task.body == "Steps to reproduce: click"
    assert task.parent_id == parent


def test_new_task_malformed_editor_text_creates_nothing(
    state: AppState, store: TaskStore, editor: FakeEditor, capsys: pytest.CaptureFixture[str]
) -> None:
    editor.replies.append("no delimiter here")
    assert run(state, ["new-task", "--title", "only title"]) == 1
    assert store.all_tasks() == []
    assert "delimiter" in capsys.readouterr().err


def test_new_task_unknown_parent_or_template(
    state: AppState, store: TaskStore, editor: FakeEditor, capsys: pytest.CaptureFixture[str]
) -> None:
    assert run(state, ["new-task", "77", "--title", "t", "--body", "b"]) == 1
    assert run(state, ["new-task", "--template", "missing"]) == 1
    err = capsys.readouterr().err
    assert "parent task 77" in err
    assert "template 'missing'" in err
    assert editor.calls == []
    assert store.all_tasks() == []


def test_new_note_updates_body_atomically(
    state: AppState, store: TaskStore, editor: FakeEditor, output: Output
) -> None:
    tid = store.create_task(title="t", body="old summary")
    editor.replies.append(lambda prefill: prefill.replace("Add your note here", "spent time").replace("old", "new"))

    assert run(state, ["new-note", str(tid)]) == 0
    assert editor.calls == [join_sections("Add your note here", "old summary")]

    task = store.find_task(tid)
    assert task is not None and task.body == "new summary"
    notes = store.find_notes(tid)
    assert [n.body for n in notes] == ["spent time"]
    assert notes[0].date_end >= notes[0].date_start
    assert f"Note {notes[0].id} added to task {tid}" in output.text


def test_new_note_editor_failure_leaves_state(
    state: AppState, store: TaskStore, capsys: pytest.CaptureFixture[str]
) -> None:
    tid = store.create_task(title="t", body="body")
    # FakeEditor with no scripted reply raises EditorError
    assert run(state, ["new-note", str(tid)]) == 1
    assert store.find_notes(tid) == []
    assert "editor" in capsys.readouterr().err


def test_new_note_unknown_task(state: AppState, editor: FakeEditor) -> None:
    assert run(state, ["new-note", "5"]) == 1
    assert editor.calls == []


def test_tree_and_open_filter(state: AppState, store: TaskStore, output: Output) -> None:
    root = store.create_task(title="root", date_created=1.0)
    mid = store.create_task(title="mid", parent_id=root, date_created=2.0)
    store.create_task(title="leaf", parent_id=mid, date_created=3.0)
    store.finish_task(mid)

    assert run(state, ["tree"]) == 0
    assert output.lines == ["  1: root", "      2: mid", "          3: leaf"]

    output.lines.clear()
    assert run(state, ["tree", "--open"]) == 0
    assert output.lines == ["  1: root", "          3: leaf"]


def test_leaves_and_finish(state: AppState, store: TaskStore, output: Output) -> None:
    t1 = store.create_task(title="root")
    t2 = store.create_task(title="child", parent_id=t1)
    t3 = store.create_task(title="grandchild", parent_id=t2)

    assert run(state, ["finish", str(t2)]) == 0
    output.lines.clear()
    assert run(state, ["leaves"]) == 0
    assert output.lines == ["id\tTitle", f"{t3:3}: grandchild"]

    assert run(state, ["finish", "999"]) == 1


def test_view_task_shows_accumulated_time(state: AppState, store: TaskStore, output: Output) -> None:
    tid = store.create_task(title="Read paper", body="summary")
    store.append_note(tid, "intro", "summary", 0.0, 3661.0)
    store.append_note(tid, "methods", "summary", 10000.0, 10059.0)

    assert run(state, ["view-task", str(tid)]) == 0
    text = output.text
    assert text.startswith("[Read paper] (accumulated: 01 hours 02 minutes)\nsummary\n\n[Notes]")
    assert "01 hours 01 minutes on" in text
    assert "00 hours 00 minutes on" in text
    assert "intro" in text and "methods" in text

    assert run(state, ["view-task", str(tid + 1)]) == 1


def test_new_template_and_listing(state: AppState, store: TaskStore, editor: FakeEditor, output: Output) -> None:
    editor.replies.extend(["Standup:\n- yesterday\n", "Standup v2\n"])

    assert run(state, ["new-template", "standup"]) == 0
    assert editor.calls[0] == "Type your template body here"
    assert store.find_template("standup") == "Standup:\n- yesterday"

    assert run(state, ["new-template", "standup"]) == 0
    assert editor.calls[1] == "Standup:\n- yesterday"
    assert store.find_template("standup") == "Standup v2"

    output.lines.clear()
    assert run(state, ["templates"]) == 0
    assert output.lines == ["standup\tStandup v2"]


def test_review_groups_recent_notes(state: AppState, store: TaskStore, output: Output) -> None:
    import time

    now = time.time()
    t1 = store.create_task(title="alpha")
    t2 = store.create_task(title="beta")
    store.append_note(t1, "a1", "b", now - 3600, now - 3000)
    store.append_note(t2, "b1", "b", now - 1800, now - 1200)
    store.append_note(t1, "a-old", "b", now - 30 * 86400, now - 30 * 86400 + 60)
    store.finish_task(t2)

    assert run(state, ["review", "2"]) == 0
    headers = [line for line in output.lines if line.startswith("[")]
    assert headers == [f"[{t2}] beta (closed)", f"[{t1}] alpha (open)"]
    assert "a-old" not in output.text

    output.lines.clear()
    assert run(state, ["review"]) == 0
    assert "a1" in output.text


def test_review_empty_window(state: AppState, output: Output) -> None:
    assert run(state, ["review", "3"]) == 0
    assert output.lines == ["No notes in the last 3 day(s)."]


def test_delete_commands(state: AppState, store: TaskStore) -> None:
    tid = store.create_task(title="t")
    child = store.create_task(title="c", parent_id=tid)
    nid = store.append_note(child, "n", "b", 0.0, 1.0)

    assert run(state, ["delete-note", str(nid)]) == 0
    assert store.find_notes(child) == []

    assert run(state, ["delete-task", str(tid)]) == 0
    assert store.all_tasks() == []


def test_drop_tables_requires_confirmation(state: AppState, store: TaskStore) -> None:
    store.create_task(title="t")
    assert run(state, ["drop-tables"]) == 1
    assert store.count_tasks() == 1

    assert run(state, ["drop-tables", "--yes"]) == 0
    assert run(state, ["tree"]) == 1
