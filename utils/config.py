"""Environment-driven configuration."""

import os
from typing import Optional

DEFAULT_GEMINI_MODEL = "gemini-1.5-flash"


def get_gemini_api_key() -> Optional[str]:
    """Return the configured Gemini API key, or None when unset or blank."""
    value = os.getenv("GEMINI_API_KEY")
    if value is None or not value.strip():
        return None
    return value.strip()


def get_gemini_model() -> str:
    return os.getenv("GEMINI_MODEL") or DEFAULT_GEMINI_MODEL


def get_log_level() -> str:
    return (os.getenv("LOG_LEVEL") or "INFO").upper()
