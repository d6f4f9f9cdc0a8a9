"""Settings loaded from environment variables (+ optional .env)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

ENV_PREFIX = "CONSISTENCY"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    app_name: str
    database_url: str

    # ---- Sessions / auth ----
    secret_key: str
    session_max_age: int
    production: bool
    bcrypt_rounds: int

    # ---- Logging ----
    log_level: str
    log_file: Optional[str]

    @staticmethod
    def from_env() -> "Settings":
        log_file = _env(_k("LOG_FILE")).strip() or None
        return Settings(
            app_name=_env(_k("APP_NAME"), "Consistency Tracker"),
            database_url=_env(_k("DATABASE_URL"), "sqlite:///./consistency.db"),
            secret_key=_env(_k("SECRET_KEY"), "consistency-tracker-secret-key"),
            session_max_age=_env_int(_k("SESSION_MAX_AGE"), 60 * 60 * 24 * 7),
            production=_env_bool(_k("PRODUCTION"), False),
            bcrypt_rounds=_env_int(_k("BCRYPT_ROUNDS"), 10),
            log_level=_env(_k("LOG_LEVEL"), "INFO").upper(),
            log_file=log_file,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
