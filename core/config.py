"""Runtime configuration.

Reads settings from environment variables, loading a ``.env`` file from the
repository root first when one exists.

Variables:
- WEBFLOW_API_TOKEN: Webflow Data API token (server side / direct mode)
- WEBFLOW_SITE_ID: Default Webflow site ID
- WEBFLOW_API_ENDPOINT: Proxy endpoint URL (browser-safe mode)
- WEBFLOW_API_BASE: Webflow API base URL (default https://api.webflow.com/v2)
- WEBFLOW_TIMEOUT_SECONDS: Per-request timeout (default 30)
- WEBFLOW_MAX_RETRIES: Retries on 429/5xx/transport errors (default 3)
- CALENDAR_DEFAULT_LOCALE: Locale used by format_date (default en-US)
- CALENDAR_USE_MOCK_DATA: Serve mock calendar data instead of calling Webflow
- CALENDAR_LOG_LEVEL: Logging level name (default INFO)
- CALENDAR_LOG_JSON: Emit JSON log lines when true
- CALENDAR_CORS_ORIGINS: Comma separated allowed origins (default *)
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

REPO_ROOT = Path(__file__).resolve().parents[1]

env_path = REPO_ROOT / ".env"
if env_path.exists():
    load_dotenv(env_path)


WEBFLOW_API_BASE = "https://api.webflow.com/v2"


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


@dataclass
class Settings:
    """Application settings resolved from the environment."""
    webflow_api_token: Optional[str] = None
    webflow_site_id: Optional[str] = None
    webflow_api_endpoint: Optional[str] = None
    webflow_api_base: str = WEBFLOW_API_BASE
    timeout_seconds: int = 30
    max_retries: int = 3
    default_locale: str = "en-US"
    use_mock_data: bool = False
    log_level: str = "INFO"
    log_json: bool = False
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the current environment."""
        origins = os.getenv("CALENDAR_CORS_ORIGINS", "*")
        return cls(
            webflow_api_token=os.getenv("WEBFLOW_API_TOKEN") or None,
            webflow_site_id=os.getenv("WEBFLOW_SITE_ID") or None,
            webflow_api_endpoint=os.getenv("WEBFLOW_API_ENDPOINT") or None,
            webflow_api_base=os.getenv("WEBFLOW_API_BASE", WEBFLOW_API_BASE).rstrip("/"),
            timeout_seconds=_env_int("WEBFLOW_TIMEOUT_SECONDS", 30),
            max_retries=_env_int("WEBFLOW_MAX_RETRIES", 3),
            default_locale=os.getenv("CALENDAR_DEFAULT_LOCALE", "en-US"),
            use_mock_data=_env_bool("CALENDAR_USE_MOCK_DATA"),
            log_level=os.getenv("CALENDAR_LOG_LEVEL", "INFO").upper(),
            log_json=_env_bool("CALENDAR_LOG_JSON"),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        )


def get_settings() -> Settings:
    """Return settings for the current environment.

    Not cached: tests and the API re-read the environment on each call.
    """
    return Settings.from_env()
