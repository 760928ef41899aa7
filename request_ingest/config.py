"""
Runtime configuration for Request Ingest.

Values are read once from environment variables at import time.
"""

import os


def _int_env(name: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return max(minimum, int(raw))
    except ValueError:
        return default


# SQLite database URL - file-based storage
DATABASE_URL = os.getenv("REQUEST_INGEST_DATABASE_URL", "sqlite:///./request_ingest.db")

# Store caps
MAX_HISTORY_ITEMS = _int_env("REQUEST_INGEST_MAX_HISTORY_ITEMS", 100)
MAX_SAVED_REQUESTS = _int_env("REQUEST_INGEST_MAX_SAVED_REQUESTS", 100)

# Blob store keys
HISTORY_KEY = "requestHistory"
SAVED_REQUESTS_KEY = "savedRequests"

LOG_LEVEL = os.getenv("REQUEST_INGEST_LOG_LEVEL", "INFO").upper()

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("REQUEST_INGEST_CORS_ORIGINS", "*").split(",")
    if origin.strip()
]
