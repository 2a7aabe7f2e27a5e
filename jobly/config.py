"""
Runtime settings, read from the environment (and .env via python-dotenv).
"""

import os
from dataclasses import dataclass
from pathlib import Path

from .env import load_env

DEFAULT_DATABASE_URL = "sqlite:///data/jobly.db"

_FALSY = {"0", "false", "no", "off", ""}


def _flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() not in _FALSY


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    log_level: str = "INFO"
    log_dir: Path = Path("logs")
    log_to_file: bool = True
    sql_echo: bool = False


def get_settings() -> Settings:
    """
    Build settings from JOBLY_* environment variables.

    A .env file in the working directory is loaded first; values already in
    the environment take precedence over it.
    """
    load_env()
    return Settings(
        database_url=os.getenv("JOBLY_DATABASE_URL", DEFAULT_DATABASE_URL),
        log_level=os.getenv("JOBLY_LOG_LEVEL", "INFO").upper(),
        log_dir=Path(os.getenv("JOBLY_LOG_DIR", "logs")),
        log_to_file=_flag("JOBLY_LOG_TO_FILE", True),
        sql_echo=_flag("JOBLY_SQL_ECHO", False),
    )
