import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_SECRET_KEY = "secret-dev"
DEFAULT_DATABASE_URL = "sqlite:///data/jobly.db"
JWT_ALGORITHM = "HS256"


def load_env() -> None:
    """Load .env from project root if present. Existing variables win."""
    env_path = Path.cwd() / ".env"
    if not env_path.exists():
        return
    load_dotenv(dotenv_path=env_path, override=False)


def get_secret_key() -> str:
    return os.getenv("JOBLY_SECRET_KEY") or DEFAULT_SECRET_KEY


def get_database_url() -> str:
    return os.getenv("JOBLY_DATABASE_URL") or DEFAULT_DATABASE_URL


def get_log_level() -> str:
    return (os.getenv("JOBLY_LOG_LEVEL") or "INFO").upper()


def get_log_dir() -> Optional[Path]:
    raw = os.getenv("JOBLY_LOG_DIR")
    return Path(raw) if raw else None


def get_token_ttl_minutes() -> Optional[int]:
    """Token lifetime in minutes; None means tokens do not expire."""
    raw = (os.getenv("JOBLY_TOKEN_TTL_MINUTES") or "").strip()
    if not raw:
        return None
    return int(raw)
