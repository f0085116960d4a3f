# src/tasktree/tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import time
from collections.abc import Iterator
from pathlib import Path

from .duration import note_with_duration, task_with_duration
from .errors import MalformedInputError, NotFoundError, StoreError, TaskTreeError, TransactionError
from .task_models import Note, NoteWithDuration, ReviewEntry, Task, TaskWithDuration, Template

logger = logging.getLogger(__name__)

_SECONDS_PER_DAY = 86400.0

_TASK_COLUMNS = "id, parent_id, title, body, open, date_created"


class TaskStore:
    """
    SQLite store for tasks, notes and templates.

    Referential integrity is enforced by SQLite itself (PRAGMA foreign_keys):
    - a note belongs to exactly one task,
    - a task's parent, if any, is another task,
    - deleting a task cascades to its notes and descendant tasks.

    Thread-safety:
    - each method opens its own SQLite connection

    Tables are created by `create_tables()` (the `init` command), not implicitly.
    """

    def __init__(self, db_path: str | Path = "tasktree.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        logger.debug("TaskStore db=%s", self._db_path)

    @property
    def db_path(self) -> Path:
        return self._db_path

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        conn.execute("PRAGMA foreign_keys=ON")
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    @contextlib.contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Short-lived connection; sqlite errors surface as StoreError."""
        try:
            conn = self._get_conn()
        except sqlite3.Error as exc:
            raise StoreError(f"cannot open database {self._db_path}: {exc}") from exc
        try:
            yield conn
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc
        finally:
            conn.close()

    @contextlib.contextmanager
    def _transaction(self) -> Iterator[sqlite3.Cursor]:
        """
        Explicit transaction scope.

        Commits only when the block completes; any failure rolls back every
        write made through the yielded cursor. The connection is always closed.
        """
        try:
            conn = self._get_conn()
        except sqlite3.Error as exc:
            raise StoreError(f"cannot open database {self._db_path}: {exc}") from exc
        try:
            conn.execute("BEGIN")
            yield conn.cursor()
            conn.commit()
        except Exception as exc:
            conn.rollback()
            logger.debug("Transaction rolled back: %r", exc)
            if isinstance(exc, TaskTreeError):
                raise
            raise TransactionError(f"transaction rolled back: {exc}") from exc
        finally:
            conn.close()

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=int(row["id"]),
            parent_id=int(row["parent_id"]) if row["parent_id"] is not None else None,
            title=str(row["title"]),
            body=str(row["body"]),
            open=bool(row["open"]),
            date_created=float(row["date_created"]),
        )

    @staticmethod
    def _row_to_note(row: sqlite3.Row) -> Note:
        return Note(
            id=int(row["id"]),
            task_id=int(row["task_id"]),
            body=str(row["body"]),
            date_start=float(row["date_start"]),
            date_end=float(row["date_end"]),
        )

    @staticmethod
    def _task_exists(cur: sqlite3.Cursor, task_id: int) -> bool:
        cur.execute("SELECT 1 FROM task WHERE id = ?", (int(task_id),))
        return cur.fetchone() is not None

    # ---- schema ----

    def create_tables(self) -> None:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS task (
                    id            INTEGER PRIMARY KEY AUTOINCREMENT,
                    parent_id     INTEGER REFERENCES task(id) ON DELETE CASCADE,
                    title         TEXT NOT NULL,
                    body          TEXT NOT NULL,
                    open          INTEGER NOT NULL DEFAULT 1,
                    date_created  REAL NOT NULL,
                    CHECK (parent_id IS NULL OR parent_id <> id)
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS note (
                    id          INTEGER PRIMARY KEY AUTOINCREMENT,
                    task_id     INTEGER NOT NULL REFERENCES task(id) ON DELETE CASCADE,
                    body        TEXT NOT NULL,
                    date_start  REAL NOT NULL,
                    date_end    REAL NOT NULL
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS template (
                    name  TEXT PRIMARY KEY,
                    body  TEXT NOT NULL
                )
                """
            )
            cur.execute("CREATE INDEX IF NOT EXISTS idx_task_parent ON task(parent_id, open)")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_task_created ON task(date_created)")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_note_task ON note(task_id, date_start)")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_note_start ON note(date_start)")
            conn.commit()
        logger.info("TaskStore tables ready db=%s", self._db_path)

    def drop_tables(self) -> None:
        with self._connect() as conn:
            conn.execute("DROP TABLE IF EXISTS note")
            conn.execute("DROP TABLE IF EXISTS task")
            conn.execute("DROP TABLE IF EXISTS template")
            conn.commit()
        logger.info("TaskStore tables dropped db=%s", self._db_path)

    # ---- tasks ----

    def count_tasks(self) -> int:
        with self._connect() as conn:
            (n,) = conn.execute("SELECT COUNT(*) FROM task").fetchone()
            return int(n)

    def create_task(
        self,
        *,
        title: str,
        body: str = "",
        parent_id: int | None = None,
        date_created: float | None = None,
    ) -> int:
        """Insert an open task and return its id. The parent, if given, must already exist."""
        if not title or not title.strip():
            raise MalformedInputError("task title is required")

        created = time.time() if date_created is None else float(date_created)

        with self._connect() as conn:
            cur = conn.cursor()
            if parent_id is not None and not self._task_exists(cur, parent_id):
                raise NotFoundError(f"parent task {parent_id} does not exist")
            cur.execute(
                "INSERT INTO task(parent_id, title, body, date_created) VALUES (?, ?, ?, ?)",
                (parent_id, title, body, created),
            )
            conn.commit()
            rowid = cur.lastrowid
            if rowid is None:
                raise StoreError("SQLite did not return lastrowid for task insert")
            task_id = int(rowid)
            logger.debug("Task added id=%s parent=%s", task_id, parent_id)
            return task_id

    def finish_task(self, task_id: int) -> None:
        """Mark a task as closed. Closing an already closed task is a no-op."""
        with self._connect() as conn:
            cur = conn.execute("UPDATE task SET open = 0 WHERE id = ?", (int(task_id),))
            conn.commit()
            if cur.rowcount != 1:
                raise NotFoundError(f"task {task_id} does not exist")
        logger.info("Task finished id=%s", task_id)

    def delete_task(self, task_id: int) -> None:
        """Delete a task together with its notes and its whole subtree."""
        with self._connect() as conn:
            cur = conn.execute("DELETE FROM task WHERE id = ?", (int(task_id),))
            conn.commit()
            if cur.rowcount != 1:
                raise NotFoundError(f"task {task_id} does not exist")
        logger.info("Task deleted id=%s", task_id)

    def all_tasks(self) -> list[Task]:
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT {_TASK_COLUMNS} FROM task ORDER BY date_created DESC, id DESC"
            ).fetchall()
            return [self._row_to_task(r) for r in rows]

    def find_task(self, task_id: int) -> Task | None:
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT {_TASK_COLUMNS} FROM task WHERE id = ?",
                (int(task_id),),
            ).fetchone()
            return self._row_to_task(row) if row else None

    def find_task_with_duration(self, task_id: int) -> TaskWithDuration | None:
        task = self.find_task(task_id)
        if task is None:
            return None
        return task_with_duration(task, self.find_notes(task_id))

    def open_leaves(self) -> list[Task]:
        """Open tasks without any open child (closed children do not count)."""
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT t1.id, t1.parent_id, t1.title, t1.body, t1.open, t1.date_created
                FROM task t1
                WHERE t1.open = 1
                  AND NOT EXISTS (
                    SELECT 1 FROM task t2 WHERE t2.parent_id = t1.id AND t2.open = 1
                  )
                ORDER BY t1.date_created DESC, t1.id DESC
                """
            ).fetchall()
            return [self._row_to_task(r) for r in rows]

    def recently_updated(self, days: int, *, now_ts: float | None = None) -> list[ReviewEntry]:
        """
        (task, note) pairs whose note started within the last `days` days.

        Ordered by task id desc, note id desc, note start desc.
        """
        now = time.time() if now_ts is None else float(now_ts)
        cutoff = now - float(days) * _SECONDS_PER_DAY

        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT task.id AS task_id, task.title AS task_title, task.open AS open,
                       note.id AS note_id, note.body AS note_body,
                       note.date_start AS last_updated
                FROM task
                JOIN note ON note.task_id = task.id
                WHERE note.date_start > ?
                ORDER BY task.id DESC, note.id DESC, last_updated DESC
                """,
                (cutoff,),
            ).fetchall()
            return [
                ReviewEntry(
                    task_id=int(r["task_id"]),
                    task_title=str(r["task_title"]),
                    open=bool(r["open"]),
                    note_id=int(r["note_id"]),
                    note_body=str(r["note_body"]),
                    last_updated=float(r["last_updated"]),
                )
                for r in rows
            ]

    # ---- notes ----

    def find_notes(self, task_id: int) -> list[Note]:
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT id, task_id, body, date_start, date_end
                FROM note
                WHERE task_id = ?
                ORDER BY date_start ASC, id ASC
                """,
                (int(task_id),),
            ).fetchall()
            return [self._row_to_note(r) for r in rows]

    def find_notes_with_duration(self, task_id: int) -> list[NoteWithDuration]:
        return [note_with_duration(n) for n in self.find_notes(task_id)]

    @staticmethod
    def _insert_note(
        cur: sqlite3.Cursor,
        task_id: int,
        body: str,
        date_start: float,
        date_end: float,
    ) -> int:
        cur.execute(
            "INSERT INTO note(task_id, body, date_start, date_end) VALUES (?, ?, ?, ?)",
            (int(task_id), body, float(date_start), float(date_end)),
        )
        rowid = cur.lastrowid
        if rowid is None:
            raise StoreError("SQLite did not return lastrowid for note insert")
        return int(rowid)

    @staticmethod
    def _set_task_body(cur: sqlite3.Cursor, task_id: int, body: str) -> None:
        cur.execute("UPDATE task SET body = ? WHERE id = ?", (body, int(task_id)))
        if cur.rowcount != 1:
            raise NotFoundError(f"task {task_id} does not exist")

    def append_note(
        self,
        task_id: int,
        note_body: str,
        task_body: str,
        date_start: float,
        date_end: float,
    ) -> int:
        """
        Insert a note and overwrite its task's body as one atomic unit.

        Either both writes land or neither does. Returns the new note id.
        """
        with self._transaction() as cur:
            if not self._task_exists(cur, task_id):
                raise NotFoundError(f"task {task_id} does not exist")
            note_id = self._insert_note(cur, task_id, note_body, date_start, date_end)
            self._set_task_body(cur, task_id, task_body)

        logger.debug(
            "Note added id=%s task=%s duration=%.0fs",
            note_id,
            task_id,
            float(date_end) - float(date_start),
        )
        return note_id

    def delete_note(self, note_id: int) -> None:
        with self._connect() as conn:
            cur = conn.execute("DELETE FROM note WHERE id = ?", (int(note_id),))
            conn.commit()
            if cur.rowcount != 1:
                raise NotFoundError(f"note {note_id} does not exist")
        logger.info("Note deleted id=%s", note_id)

    # ---- templates ----

    def upsert_template(self, name: str, body: str) -> None:
        if not name or not name.strip():
            raise MalformedInputError("template name is required")
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO template(name, body) VALUES (?, ?)
                ON CONFLICT(name) DO UPDATE SET body = excluded.body
                """,
                (name, body),
            )
            conn.commit()
        logger.debug("Template saved name=%s", name)

    def find_template(self, name: str) -> str | None:
        """Return the template body, or None when no template has that name."""
        with self._connect() as conn:
            row = conn.execute("SELECT body FROM template WHERE name = ?", (name,)).fetchone()
            return str(row["body"]) if row else None

    def all_templates(self) -> list[Template]:
        with self._connect() as conn:
            rows = conn.execute("SELECT name, body FROM template ORDER BY name").fetchall()
            return [Template(name=str(r["name"]), body=str(r["body"])) for r in rows]
