from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str, default: str = "") -> tuple[str, ...]:
    raw = os.environ.get(name, default)
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class Config:
    """Central configuration loaded from environment variables.

    Built once at process start and handed to the app and every service.
    """

    # Database
    db_path: Path = field(
        default_factory=lambda: Path(
            os.environ.get("LEADFLOW_DB_PATH", "data/leadflow.db")
        )
    )

    # Server
    host: str = field(default_factory=lambda: os.environ.get("LEADFLOW_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.environ.get("LEADFLOW_PORT", "5000")))
    cors_origins: tuple[str, ...] = field(
        default_factory=lambda: _env_list(
            "LEADFLOW_CORS_ORIGINS", "http://localhost:3000,http://localhost:5173"
        )
    )

    # Auth: bearer tokens accepted by the API (empty disables the check)
    api_tokens: tuple[str, ...] = field(
        default_factory=lambda: _env_list("LEADFLOW_API_TOKENS")
    )

    # Agent credentials
    password_iterations: int = field(
        default_factory=lambda: int(
            os.environ.get("LEADFLOW_PASSWORD_ITERATIONS", "390000")
        )
    )

    # Uploads
    upload_dir: Path = field(
        default_factory=lambda: Path(os.environ.get("LEADFLOW_UPLOAD_DIR", "uploads"))
    )
    max_upload_bytes: int = field(
        default_factory=lambda: int(
            os.environ.get("LEADFLOW_MAX_UPLOAD_BYTES", str(10 * 1024 * 1024))
        )
    )

    # Distribution batch writes
    write_concurrency: int = field(
        default_factory=lambda: int(os.environ.get("LEADFLOW_WRITE_CONCURRENCY", "8"))
    )
    rollback_partial_batch: bool = field(
        default_factory=lambda: _env_bool("LEADFLOW_ROLLBACK_PARTIAL_BATCH", "true")
    )

    # Logging
    log_level: str = field(
        default_factory=lambda: os.environ.get("LEADFLOW_LOG_LEVEL", "INFO")
    )


def get_config() -> Config:
    """Return a fresh Config built from the current environment."""
    return Config()
