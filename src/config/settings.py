"""
Configuration settings for the Users Backend
"""

import os
import logging
from dataclasses import dataclass, field
from typing import List, Optional

logger = logging.getLogger(__name__)

STORAGE_BACKENDS = ("postgres", "memory")


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes"}


def _env_list(name: str) -> List[str]:
    raw = os.getenv(name, "")
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(frozen=True)
class DatabaseSettings:
    """Connection parameters for the users store"""
    host: str = "localhost"
    port: int = 5432
    user: Optional[str] = None
    password: Optional[str] = None
    database: Optional[str] = None
    min_pool_size: int = 2
    max_pool_size: int = 10
    command_timeout: float = 60
    synchronize: bool = False

    @classmethod
    def from_env(cls) -> "DatabaseSettings":
        return cls(
            host=os.getenv("DB_HOST", "localhost"),
            port=int(os.getenv("DB_PORT", 5432)),
            user=os.getenv("DB_USER"),
            password=os.getenv("DB_PASSWORD"),
            database=os.getenv("DB_DATABASE"),
            min_pool_size=int(os.getenv("DB_POOL_MIN_SIZE", 2)),
            max_pool_size=int(os.getenv("DB_POOL_MAX_SIZE", 10)),
            command_timeout=float(os.getenv("DB_COMMAND_TIMEOUT", 60)),
            synchronize=_env_bool("DB_SYNCHRONIZE"),
        )

    def __repr__(self) -> str:
        # Keep the password out of logs
        return (
            f"DatabaseSettings(host={self.host!r}, port={self.port}, user={self.user!r}, "
            f"database={self.database!r}, pool={self.min_pool_size}-{self.max_pool_size})"
        )


@dataclass(frozen=True)
class Settings:
    """Application settings, built once at process start"""
    env: str = "PROD"
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"
    allowed_origins: List[str] = field(default_factory=list)
    storage_backend: str = "postgres"
    database: DatabaseSettings = field(default_factory=DatabaseSettings)

    def validate(self) -> "Settings":
        """Raise ValueError when the selected backend is missing required values"""
        if self.storage_backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}, got {self.storage_backend!r}"
            )

        if self.storage_backend == "postgres":
            missing = []
            if not self.database.user:
                missing.append("DB_USER")
            if not self.database.database:
                missing.append("DB_DATABASE")
            if missing:
                raise ValueError(f"Missing required environment variables: {', '.join(missing)}")

        if self.database.min_pool_size > self.database.max_pool_size:
            raise ValueError("DB_POOL_MIN_SIZE cannot exceed DB_POOL_MAX_SIZE")

        return self


def load_settings() -> Settings:
    """Read settings from the environment"""
    settings = Settings(
        env=os.getenv("ENV", "PROD"),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", 8080)),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        allowed_origins=_env_list("ALLOWED_ORIGINS"),
        storage_backend=os.getenv("STORAGE_BACKEND", "postgres").strip().lower(),
        database=DatabaseSettings.from_env(),
    )
    logger.info(f"Environment: {settings.env}, storage backend: {settings.storage_backend}")
    return settings
