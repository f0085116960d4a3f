# src/tasktree/tasks/errors.py

from __future__ import annotations


class TaskTreeError(Exception):
    """Base class for every error the task engine raises on purpose."""


class NotFoundError(TaskTreeError):
    """A referenced task, note or template does not exist."""


class MalformedInputError(TaskTreeError, ValueError):
    """User-supplied text could not be parsed (missing delimiter, empty title, ...)."""


class StoreError(TaskTreeError):
    """A read or write against the SQLite store failed."""


class TransactionError(StoreError):
    """An atomic multi-row write failed and was rolled back as a whole."""


class EditorError(TaskTreeError):
    """The external editor could not be run or exited with a failure status."""
