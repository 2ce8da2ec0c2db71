# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real API tokens. Put them in .env (local, gitignored).

See src/schedule_maker/config.py for parsing rules and defaults.
"""

ENV_VARS = {
    # App / logging
    "SCHEDULE_MAKER_APP_NAME": "App display name (default: schedule-maker).",
    "SCHEDULE_MAKER_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Local data
    "SCHEDULE_MAKER_DATA_DIR": "Directory for local state and logs (default: .local/schedule_maker).",
    "SCHEDULE_MAKER_STATE_DB_PATH": "SQLite file for schedules and preferences (default: <data_dir>/state.sqlite3).",
    # Remote backend
    "SCHEDULE_MAKER_BACKEND": "memory | http | none (default: memory, an in-process demo remote).",
    "SCHEDULE_MAKER_API_URL": "Base URL of the HTTP backend (default: http://127.0.0.1:8000).",
    "SCHEDULE_MAKER_API_TOKEN": "Bearer token for the HTTP backend (required for owner-scoped calls).",
    "SCHEDULE_MAKER_OWNER_ID": "Owner id used by the memory backend (default: $USER).",
    "SCHEDULE_MAKER_HTTP_TIMEOUT_SECONDS": "HTTP read/write timeout in seconds (default: 10, minimum 1).",
    # Behaviour
    "SCHEDULE_MAKER_AUTO_CREATE_SCHEDULE": "Create 'My Schedule' on first start (default: true).",
    "SCHEDULE_MAKER_AUTO_SIGN_IN": "Sign in and sync on startup (default: false).",
}
