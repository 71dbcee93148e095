"""Client configuration via Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

# Resolve .env from the repository root regardless of CWD
_ENV_FILE = Path(__file__).resolve().parents[3] / ".env"


class Settings(BaseSettings):
    """Central configuration loaded from environment variables / .env file."""

    # Backend
    backend_url: str = "https://logic-i.com"
    request_timeout_seconds: float = 10.0

    # Pagination
    search_page_size: int = 8
    management_page_size: int = 10

    # UI timings
    suggestion_debounce_ms: int = 300
    success_banner_seconds: float = 3.0
    user_success_banner_seconds: float = 2.0
    error_banner_seconds: float = 5.0

    # Role id the backend assigns to administrators
    admin_role_id: str = ""

    # Persistent key-value store for the session token
    session_file: str = str(Path.home() / ".logici" / "session.json")

    # General
    debug: bool = False

    model_config = {
        "env_file": str(_ENV_FILE),
        "env_file_encoding": "utf-8",
        "env_prefix": "LOGICI_",
        "extra": "ignore",
    }

    @property
    def base_url(self) -> str:
        """Backend URL without a trailing slash."""
        return self.backend_url.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """Return cached Settings instance."""
    return Settings()
