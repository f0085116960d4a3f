# src/tasktree/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing touches the filesystem at import time except reading .env / the rc file.
- The database location can come from a one-line rc file (~/.tasktreerc),
  like the classic `~/.todorc` setup, with the environment taking priority.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ENV_PREFIX = "TASKTREE"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r; using %s", name, raw, default)
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def _read_rc_db_path(rc_path: Path) -> Path | None:
    """First non-empty line of the rc file, if the file exists."""
    try:
        text = rc_path.read_text("utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError):
        logger.warning("Cannot read rc file %s", rc_path, exc_info=True)
        return None
    for line in text.splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            return Path(line).expanduser()
    return None


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths ----
    data_dir: Path
    db_path: Path
    rc_path: Path

    # ---- Editor / review ----
    editor: str
    review_days: int

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "tasktree") or "tasktree"
        log_level = _env(_k("LOG_LEVEL"), "WARNING")

        data_dir = _env_path(_k("DATA_DIR"), Path("~/.local/share/tasktree").expanduser())
        rc_path = _env_path(_k("RC_PATH"), Path("~/.tasktreerc").expanduser())

        # Priority: env var, then rc file, then the data dir.
        raw_db_path = _first_env(_k("DB_PATH"))
        if raw_db_path is not None:
            db_path = Path(raw_db_path).expanduser()
        else:
            db_path = _read_rc_db_path(rc_path) or data_dir / "tasktree.sqlite3"

        editor = _first_env(_k("EDITOR"), "VISUAL", "EDITOR", default="vim") or "vim"
        review_days = max(0, _env_int(_k("REVIEW_DAYS"), 7))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            db_path=db_path,
            rc_path=rc_path,
            editor=editor,
            review_days=review_days,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
