"""Runtime configuration read from the environment."""

import os
from dataclasses import dataclass, replace

# Backend
API_URL = os.environ.get("STOREFRONT_API_URL", "http://localhost:8000")
API_TIMEOUT = float(os.environ.get("STOREFRONT_TIMEOUT", 30.0))

# Web server
WEB_HOST = os.environ.get("WEB_HOST", "0.0.0.0")
WEB_PORT = int(os.environ.get("WEB_PORT", 8080))
SECRET_KEY = os.environ.get("STOREFRONT_SECRET_KEY", "dev-secret-change-me")
SESSION_COOKIE = "session_id"
SESSION_MAX_AGE = 86400

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Page sizes used by the list screens
PRODUCTS_PER_PAGE = 12
ADMIN_PER_PAGE = 20


@dataclass(frozen=True)
class Settings:
    """Settings handed to the app factory."""

    api_url: str = API_URL
    api_timeout: float = API_TIMEOUT
    secret_key: str = SECRET_KEY
    session_cookie: str = SESSION_COOKIE
    session_max_age: int = SESSION_MAX_AGE

    def with_overrides(self, **changes) -> "Settings":
        """Return a copy with the non-None values in ``changes`` applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def load_settings() -> Settings:
    return Settings()
