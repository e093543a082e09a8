"""
Environment-driven settings.

Rationale:
- Secrets come from the process environment (or a local .env during dev).
- Read once at startup; handlers only ever see the resulting Settings.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv, find_dotenv

DEFAULT_MODEL = "gemini-2.5-flash"


def load_env_file() -> None:
    """Load a .env file if one exists.

    In hosted deployments secrets should be provided via environment variables, not committed .env files.
    Some Windows editors save .env as UTF-16, so fall back to that encoding.
    """
    dotenv_path = find_dotenv(usecwd=True) or None
    if dotenv_path:
        try:
            load_dotenv(dotenv_path)
        except UnicodeError:
            load_dotenv(dotenv_path, encoding="utf-16")
    else:
        load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str]
    model_name: str = DEFAULT_MODEL
    log_level: str = "INFO"
    cors_enabled: bool = True
    max_file_size_mb: int = 20

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


def load_settings() -> Settings:
    return Settings(
        api_key=os.getenv("GEMINI_API_KEY") or os.getenv("LLM_API_KEY") or None,
        model_name=os.getenv("GEMINI_MODEL") or DEFAULT_MODEL,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        cors_enabled=_env_bool("CORS_ENABLED", True),
        max_file_size_mb=int(os.getenv("MAX_FILE_SIZE_MB", "20")),
    )


def validate_startup(settings: Settings) -> None:
    """Refuse to serve traffic without a provider credential."""
    if not settings.api_key:
        raise RuntimeError("GEMINI_API_KEY (or LLM_API_KEY) must be set in environment")
    if not settings.model_name:
        raise RuntimeError("GEMINI_MODEL must not be empty")
