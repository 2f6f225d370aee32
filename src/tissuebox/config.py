# src/tissuebox/config.py

"""Settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object, built explicitly and passed to whoever needs it.
- No module-level singleton: tests and callers build their own.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

ENV_PREFIX = "TISSUEBOX"

DEFAULT_BOX_PATH = Path(".tissuebox")
DEFAULT_LOG_LEVEL = "WARNING"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_path(name: str, default: Path | None) -> Path | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- Storage ----
    box_path: Path

    # ---- Logging ----
    log_level: str
    log_file: Path | None

    @property
    def console_level(self) -> int:
        level = logging.getLevelName(self.log_level.strip().upper())
        return level if isinstance(level, int) else logging.WARNING

    @staticmethod
    def from_env(*, dotenv: bool = True) -> "Settings":
        if dotenv:
            # .env from the working directory; real environment wins.
            load_dotenv(find_dotenv(usecwd=True), override=False)

        box_path = _env_path(_k("PATH"), DEFAULT_BOX_PATH) or DEFAULT_BOX_PATH
        log_level = _env(_k("LOG_LEVEL"), DEFAULT_LOG_LEVEL).strip() or DEFAULT_LOG_LEVEL
        log_file = _env_path(_k("LOG_FILE"), None)

        return Settings(
            box_path=box_path,
            log_level=log_level,
            log_file=log_file,
        )
