"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from environment
variables.  Defaults are provided for all fields, so the registry starts
with a local SQLite file and no extra setup.  In a production deployment
you should override these via environment variables.
"""

import os
from dataclasses import dataclass
from typing import Optional


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Pet Registry API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = _env_flag("DEBUG")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: Optional[str] = os.getenv("LOG_FILE") or None
    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))

    # When enabled, mutating requests without an Authorization header are
    # attributed to the ``anonymous`` caller instead of being rejected.
    allow_anonymous: bool = _env_flag("ALLOW_ANONYMOUS")

    # Path to the SQLite database holding the counter, pet and found-report
    # segments.  Relative paths are resolved against the package root by
    # the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "pet_registry.db")

    # Upper bound on every user supplied text field.
    max_field_length: int = int(os.getenv("MAX_FIELD_LENGTH", "256"))

    # Upper bounds on the encoded size of a single stored record.
    pet_record_max_bytes: int = int(os.getenv("PET_RECORD_MAX_BYTES", "4096"))
    found_report_max_bytes: int = int(os.getenv("FOUND_REPORT_MAX_BYTES", "2048"))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables should
# be set before importing this module; tests build their own ``Settings``.
settings = Settings()
