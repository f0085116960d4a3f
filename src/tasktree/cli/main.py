# src/tasktree/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs one subcommand.
Expected failures (unknown ids, malformed editor text, store errors) are
reported on stderr with exit status 1.
"""

from __future__ import annotations

import logging
import sys

from ..cli.bootstrap import create_initial_state
from ..cli.commands import registry
from ..config import get_settings
from ..core.state import AppState
from ..logging_setup import setup_logging
from ..tasks.errors import TaskTreeError

logger = logging.getLogger(__name__)


def run(state: AppState, argv: list[str]) -> int:
    """Run one command against an already-built state."""
    try:
        return registry.handle(state, argv)
    except TaskTreeError as exc:
        logger.debug("Command failed: %s", exc, exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "WARNING")).upper()
    console_level = getattr(logging, level_name, logging.WARNING)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    state = create_initial_state(settings=settings)
    if argv is None:
        argv = sys.argv[1:]
    return run(state, argv)


if __name__ == "__main__":
    sys.exit(main())
