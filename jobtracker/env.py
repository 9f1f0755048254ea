import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DB_PATH_VAR = "JOBTRACKER_DB_PATH"
LOG_LEVEL_VAR = "JOBTRACKER_LOG_LEVEL"
LOG_DIR_VAR = "JOBTRACKER_LOG_DIR"

DEFAULT_LOG_LEVEL = "WARNING"
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def load_env() -> None:
    """Load .env from the current directory if present.
    Variables already set in the environment win.
    """
    env_path = Path.cwd() / ".env"
    if not env_path.exists():
        return
    load_dotenv(dotenv_path=env_path, override=False)


def default_db_path() -> Path:
    home = os.getenv("HOME") or "."
    return Path(home) / ".local" / "share" / "job-tracker" / "job_tracker.db"


def resolve_db_path(cli_value: Optional[str] = None) -> Path:
    """--db-path, then JOBTRACKER_DB_PATH, then the per-user default."""
    if cli_value:
        return Path(cli_value)
    env_value = os.getenv(DB_PATH_VAR)
    if env_value:
        return Path(env_value)
    return default_db_path()


def resolve_log_level(cli_value: Optional[str] = None) -> str:
    """--log-level, then JOBTRACKER_LOG_LEVEL, then WARNING. Unknown names raise ValueError."""
    level = (cli_value or os.getenv(LOG_LEVEL_VAR) or DEFAULT_LOG_LEVEL).upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"invalid log level '{level}' (choose from {', '.join(LOG_LEVELS)})")
    return level


def resolve_log_dir() -> Optional[Path]:
    """Directory for log files; None disables file logging."""
    value = os.getenv(LOG_DIR_VAR)
    return Path(value) if value else None
