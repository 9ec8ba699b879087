import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"

DEFAULT_ALLOWED_ORIGINS = "http://localhost:3000,http://localhost:3001,http://localhost:5000"
INSECURE_DEV_SECRET = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only


@dataclass(frozen=True)
class Settings:
    """Runtime configuration handed to the app factory and every component it builds"""

    database_url: str = "sqlite:///./medconnect.db"
    secret_key: str = INSECURE_DEV_SECRET
    jwt_algorithm: str = "HS256"
    jwt_expire_days: int = 30
    allowed_origins: list[str] = field(
        default_factory=lambda: DEFAULT_ALLOWED_ORIGINS.split(",")
    )
    slot_minutes: int = 30

    # Connection pool (ignored for SQLite)
    db_pool_size: int = 20
    db_max_overflow: int = 30
    db_pool_timeout: int = 30
    db_pool_recycle: int = 300
    log_slow_queries: bool = True
    slow_query_threshold: float = 1.0

    log_level: str = "INFO"
    port: int = 5000

    # Optional bootstrap admin account
    admin_email: Optional[str] = None
    admin_password: Optional[str] = None


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def load_settings(dotenv_path: Optional[Path] = None) -> Settings:
    """Build Settings from the environment, reading a .env file first if present"""
    load_dotenv(dotenv_path=dotenv_path or env_path)

    # Security - CRITICAL: No default secret key in production
    secret_key = os.getenv("SECRET_KEY")
    if not secret_key:
        import warnings

        warnings.warn(
            "SECRET_KEY not set! Using insecure default - DO NOT USE IN PRODUCTION",
            RuntimeWarning,
            stacklevel=2,
        )
        secret_key = INSECURE_DEV_SECRET

    slot_minutes = int(os.getenv("SLOT_MINUTES", "30"))
    if slot_minutes < 1:
        raise ValueError(f"SLOT_MINUTES must be at least 1, got {slot_minutes}")

    origins = os.getenv("ALLOWED_ORIGINS", DEFAULT_ALLOWED_ORIGINS)

    return Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite:///./medconnect.db"),
        secret_key=secret_key,
        jwt_expire_days=int(os.getenv("JWT_EXPIRE_DAYS", "30")),
        allowed_origins=[o.strip() for o in origins.split(",") if o.strip()],
        slot_minutes=slot_minutes,
        db_pool_size=int(os.getenv("DB_POOL_SIZE", "20")),
        db_max_overflow=int(os.getenv("DB_MAX_OVERFLOW", "30")),
        db_pool_timeout=int(os.getenv("DB_POOL_TIMEOUT", "30")),
        db_pool_recycle=int(os.getenv("DB_POOL_RECYCLE", "300")),
        log_slow_queries=_env_bool("DB_LOG_SLOW_QUERIES", "true"),
        slow_query_threshold=float(os.getenv("DB_SLOW_QUERY_THRESHOLD", "1.0")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        port=int(os.getenv("PORT", "5000")),
        admin_email=os.getenv("ADMIN_EMAIL") or None,
        admin_password=os.getenv("ADMIN_PASSWORD") or None,
    )
