# src/schedule_maker/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time.
- Local state lives under a gitignored data dir by default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "SCHEDULE_MAKER"

BACKEND_KINDS = ("memory", "http", "none")

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    state_db_path: Path

    # ---- Remote backend ----
    backend: str
    api_url: str
    api_token: str | None
    owner_id: str | None
    http_timeout_seconds: float

    # ---- Behaviour ----
    auto_create_schedule: bool
    auto_sign_in: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "schedule-maker")
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/schedule_maker"))
        state_db_path = _env_path(_k("STATE_DB_PATH"), data_dir / "state.sqlite3")

        backend = _env(_k("BACKEND"), "memory").strip().lower()
        if backend not in BACKEND_KINDS:
            backend = "none"

        api_url = _env(_k("API_URL"), "http://127.0.0.1:8000").strip()
        api_token = _first_env(_k("API_TOKEN"), default=None)
        owner_id = (_first_env(_k("OWNER_ID"), "USER", default="") or "").strip() or None
        http_timeout_seconds = max(1.0, _env_float(_k("HTTP_TIMEOUT_SECONDS"), 10.0))

        auto_create_schedule = _env_bool(_k("AUTO_CREATE_SCHEDULE"), True)
        auto_sign_in = _env_bool(_k("AUTO_SIGN_IN"), False)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            state_db_path=state_db_path,
            backend=backend,
            api_url=api_url,
            api_token=api_token,
            owner_id=owner_id,
            http_timeout_seconds=http_timeout_seconds,
            auto_create_schedule=auto_create_schedule,
            auto_sign_in=auto_sign_in,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
