# src/tasktree/editor.py

"""
External editor round-trip.

Pre-fill text is built from sections joined by a fixed delimiter line; the
edited text is split back on the same line. A missing delimiter is an error,
never a silent truncation.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import tempfile
from pathlib import Path

from .tasks.errors import EditorError, MalformedInputError

logger = logging.getLogger(__name__)

DELIMITER = "\n==========\n"
DEFAULT_EDITOR = "vim"


def join_sections(*sections: str) -> str:
    return DELIMITER.join(sections)


def split_sections(text: str, expected: int = 2) -> list[str]:
    """
    Split `text` into exactly `expected` sections.

    Extra delimiters beyond the first `expected - 1` stay inside the last
    section. Fewer delimiters raise MalformedInputError.
    """
    if expected < 1:
        raise ValueError("expected must be >= 1")
    parts = text.split(DELIMITER, expected - 1)
    if len(parts) < expected:
        found = len(parts) - 1
        raise MalformedInputError(
            f"expected {expected - 1} delimiter line(s) '{DELIMITER.strip()}', found {found}"
        )
    return parts


def split_title_body(text: str) -> tuple[str, str]:
    title, body = split_sections(text, expected=2)
    return title, body


def read_editor_input(template: str, editor_cmd: str | None = None) -> str:
    """
    Open `template` in the user's editor and return the saved text.

    Raises EditorError when the temp file cannot be written or read back as
    UTF-8, or when the editor exits with a non-zero status.
    """
    cmd = shlex.split(editor_cmd or DEFAULT_EDITOR)
    if not cmd:
        raise EditorError("no editor command configured")

    fd, raw_path = tempfile.mkstemp(prefix="tasktree-", suffix=".txt")
    path = Path(raw_path)
    try:
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(template)
        except OSError as exc:
            raise EditorError(f"cannot write editor file {path}: {exc}") from exc

        logger.debug("Launching editor %s on %s", cmd, path)
        try:
            result = subprocess.run([*cmd, str(path)], check=False)
        except OSError as exc:
            raise EditorError(f"cannot run editor {cmd[0]!r}: {exc}") from exc

        if result.returncode != 0:
            raise EditorError(f"editor {cmd[0]!r} exited with status {result.returncode}")

        try:
            return path.read_text("utf-8")
        except UnicodeDecodeError as exc:
            raise EditorError(f"editor file {path} is not valid UTF-8: {exc}") from exc
        except OSError as exc:
            raise EditorError(f"cannot read editor file {path}: {exc}") from exc
    finally:
        path.unlink(missing_ok=True)


class ExternalEditor:
    """Callable editor bound to a configured command line."""

    def __init__(self, editor_cmd: str | None = None) -> None:
        self.editor_cmd = editor_cmd or DEFAULT_EDITOR

    def __call__(self, template: str) -> str:
        return read_editor_input(template, self.editor_cmd)
