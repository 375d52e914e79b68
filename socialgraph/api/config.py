"""
API configuration loaded from environment or defaults.
"""

import os
from pathlib import Path


def _get_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def get_database_path() -> str:
    """Get database file path (or full SQLAlchemy URL) from env or default."""
    url = os.getenv("DATABASE_URL", "")
    if url.startswith("sqlite:///"):
        url = url.replace("sqlite:///", "")
    return url or str(Path(__file__).resolve().parents[2] / "data" / "socialgraph.db")


def get_log_level() -> str:
    """Get log level from env or default."""
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_api_host() -> str:
    """Get API host for binding."""
    return os.getenv("API_HOST", "0.0.0.0")


def get_api_port() -> int:
    """Get API port."""
    return int(os.getenv("API_PORT", "8000"))


def get_store_timeout() -> float:
    """Seconds a store call may wait for a connection or lock."""
    return float(os.getenv("STORE_TIMEOUT_SECONDS", "5"))


def get_store_retry_attempts() -> int:
    """Attempts per store call before surfacing Unavailable."""
    return int(os.getenv("STORE_RETRY_ATTEMPTS", "3"))


def get_cache_enabled() -> bool:
    """Whether the in-process adjacency cache is used."""
    return _get_bool("ADJACENCY_CACHE_ENABLED", True)


def get_cache_ttl() -> float:
    """Adjacency cache time-to-live in seconds."""
    return float(os.getenv("ADJACENCY_CACHE_TTL_SECONDS", "300"))


def get_suggestion_timeout() -> float:
    """Time budget in seconds for friends-of-friends expansion."""
    return float(os.getenv("SUGGESTION_TIMEOUT_SECONDS", "2.0"))


def get_decay_factor() -> float:
    """Multiplier applied by the scheduled weight decay job."""
    return float(os.getenv("DECAY_FACTOR", "0.99"))


def get_decay_floor() -> float:
    """Weight floor for the scheduled weight decay job."""
    return float(os.getenv("DECAY_FLOOR", "0.05"))
