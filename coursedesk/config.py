import json
import logging
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel
from pydantic_settings import BaseSettings

_config_logger = logging.getLogger(__name__)

_ROOT_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _ROOT_DIR / ".env",
    ".env",
)


class AdminUser(BaseModel):
    email: str
    password: str


class Settings(BaseSettings):
    """Dashboard settings loaded from environment variables."""

    app_title: str = "Course Admin"

    # REST backend
    api_url: str = "http://localhost:5000"
    request_timeout: float = 30.0

    # Tables
    page_size: int = 10
    page_size_options: list[int] = [10, 25, 50, 100]
    page_window: int = 5

    # Toasts auto-hide after this many seconds
    toast_seconds: float = 3.0

    # Coupons
    coupon_prefix: str = "learnleap"

    # Certificate form options
    year_options: list[str] = ["2024 - 2025", "2025 - 2026", "2026 - 2027", "2027 - 2028"]
    duration_options: list[str] = ["Two Months", "Three Months", "Four Months", "Five Months", "Six Months"]

    # Local sign-in list, e.g. ADMIN_USERS='[{"email": "...", "password": "..."}]'
    admin_users: list[AdminUser] = [AdminUser(email="admin@example.com", password="admin123")]
    admin_users_file: str = ""

    # Logging: per-category levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"
    log_level_http: str = "WARNING"        # httpx / httpcore
    log_level_streamlit: str = "WARNING"   # streamlit internals
    log_level_api: str = "INFO"            # coursedesk.api_client

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    def model_post_init(self, __context: object) -> None:
        """Replace the sign-in list with the contents of admin_users_file when set."""
        if not self.admin_users_file:
            return
        path = Path(self.admin_users_file)
        if not path.exists():
            _config_logger.warning("Admin users file not found: %s", path)
            return
        try:
            raw = json.loads(path.read_text("utf-8"))
            users = [AdminUser.model_validate(item) for item in raw]
        except Exception as exc:
            _config_logger.warning("Could not load admin users file: %s", exc)
            return
        object.__setattr__(self, "admin_users", users)


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance; reads .env once."""
    return Settings()
