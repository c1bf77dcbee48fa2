from typing import Literal
import logging

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError


logger = logging.getLogger(__name__)


class CustomSettings(BaseSettings):
    """Application settings loaded from environment variables.

    Validates configuration at startup to catch misconfiguration early.
    """

    guide_url: str | None = None  # http(s) URL or local path of the XMLTV feed
    database_url: str = "sqlite+aiosqlite:///./data/schedule.db"
    feed_fetch_timeout_sec: float = 120.0
    feed_parse_timeout_sec: int = 600  # XML parsing timeout, 0 disables timeout
    channel_match_mode: Literal["exact", "normalized"] = "exact"
    sort_feed_programmes: bool = True
    insert_new_slots: bool = False
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("guide_url", mode="before")
    @classmethod
    def parse_guide_url(cls, value):
        """Treat blank values as not configured."""
        if value is None:
            return None
        if isinstance(value, str) and not value.strip():
            return None
        return value.strip() if isinstance(value, str) else value

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, value: str) -> str:
        """Validate the database URL is something SQLAlchemy understands."""
        try:
            make_url(value)
        except ArgumentError as exc:
            raise ValueError(f"Invalid database URL '{value}': {exc}") from exc
        return value

    @field_validator("feed_fetch_timeout_sec")
    @classmethod
    def validate_fetch_timeout(cls, value: float) -> float:
        """Validate feed download timeout (seconds)."""
        if value <= 0:
            raise ValueError("feed_fetch_timeout_sec must be > 0")
        return value

    @field_validator("feed_parse_timeout_sec")
    @classmethod
    def validate_parse_timeout(cls, value: int) -> int:
        """Validate XML parsing timeout (seconds)."""
        if value < 0:
            raise ValueError("feed_parse_timeout_sec must be >= 0")
        return value

    @field_validator("channel_match_mode", mode="before")
    @classmethod
    def normalize_match_mode(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate log level name."""
        normalized = value.upper()
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if normalized not in allowed:
            raise ValueError(f"log_level must be one of {sorted(allowed)}")
        return normalized

    @model_validator(mode="after")
    def validate_sync_configuration(self):
        """Validate cross-field configuration."""
        if not self.guide_url:
            logger.warning(
                "No GUIDE_URL configured - schedule sync will not retrieve any data"
            )
        return self

    def __init__(self, **data):
        """Initialize settings and log configuration."""
        super().__init__(**data)

        logger.info("Configuration loaded:")
        logger.info("  Database: %s", make_url(self.database_url).render_as_string(hide_password=True))
        logger.info("  Guide source: %s", "configured" if self.guide_url else "not configured")
        logger.info("  Fetch Timeout: %s seconds", self.feed_fetch_timeout_sec)
        logger.info(
            "  Parse Timeout: %s seconds",
            self.feed_parse_timeout_sec or "disabled",
        )
        logger.info("  Channel Match Mode: %s", self.channel_match_mode)
        logger.info("  Sort Feed Programmes: %s", self.sort_feed_programmes)
        logger.info("  Insert New Slots: %s", self.insert_new_slots)


settings = CustomSettings()


def setup_logging() -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
