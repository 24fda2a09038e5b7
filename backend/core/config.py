import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


def _default_database_url() -> str:
    """Default DB path. When PVP_ANALYTICS_DATA_DIR is set, the SQLite file lives there."""
    data_dir_env = os.environ.get("PVP_ANALYTICS_DATA_DIR")
    if data_dir_env:
        data_dir = Path(data_dir_env)
        data_dir.mkdir(parents=True, exist_ok=True)
        db_path = (data_dir / "pvp_analytics.sqlite").resolve()
        return f"sqlite+aiosqlite:///{db_path.as_posix()}"
    return "sqlite+aiosqlite:///./pvp_analytics.db"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass
class Settings:
    """Application settings loaded from environment variables with safe defaults."""

    app_name: str = "PvP Analytics"
    env: str = "dev"
    database_url: str = ""  # set from from_env
    log_level: str = "INFO"
    max_upload_bytes: int = 100 * 1024 * 1024

    # Blizzard profile API (enrichment). Disabled when client id/secret are empty.
    wow_api_client_id: str = ""
    wow_api_client_secret: str = ""
    wow_api_timeout_seconds: float = 10.0
    wow_api_eu_oauth_url: str = "https://eu.battle.net/oauth/token"
    wow_api_us_oauth_url: str = "https://us.battle.net/oauth/token"
    wow_api_eu_base_url: str = "https://eu.api.blizzard.com"
    wow_api_us_base_url: str = "https://us.api.blizzard.com"

    @property
    def wow_api_enabled(self) -> bool:
        return bool(self.wow_api_client_id and self.wow_api_client_secret)

    @classmethod
    def from_env(cls) -> "Settings":
        """Create Settings from environment variables."""
        db_url = os.getenv("DATABASE_URL") or _default_database_url()
        timeout_raw = os.getenv("WOW_API_TIMEOUT_SECONDS")
        return cls(
            app_name=os.getenv("APP_NAME", cls.app_name),
            env=os.getenv("ENV", cls.env),
            database_url=db_url,
            log_level=os.getenv("LOG_LEVEL", cls.log_level),
            max_upload_bytes=_int_env("MAX_UPLOAD_BYTES", cls.max_upload_bytes),
            wow_api_client_id=os.getenv("WOW_API_CLIENT_ID", ""),
            wow_api_client_secret=os.getenv("WOW_API_CLIENT_SECRET", ""),
            wow_api_timeout_seconds=float(timeout_raw) if timeout_raw else cls.wow_api_timeout_seconds,
            wow_api_eu_oauth_url=os.getenv("WOW_API_EU_OAUTH_URL", cls.wow_api_eu_oauth_url),
            wow_api_us_oauth_url=os.getenv("WOW_API_US_OAUTH_URL", cls.wow_api_us_oauth_url),
            wow_api_eu_base_url=os.getenv("WOW_API_EU_BASE_URL", cls.wow_api_eu_base_url),
            wow_api_us_base_url=os.getenv("WOW_API_US_BASE_URL", cls.wow_api_us_base_url),
        )


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings.from_env()
