"""Configuration models."""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class DatabaseConfig(BaseModel):
    """Database configuration."""

    type: str = Field("sqlite", description="Database backend (sqlite, postgres)")
    file: Optional[str] = Field(None, description="SQLite database file")
    dsn: Optional[str] = Field(None, description="PostgreSQL connection string")
    host: Optional[str] = Field(None, description="Database host")
    port: int = Field(5432, description="Database port")
    name: str = Field("echopan", description="Database name")
    user: str = Field("echopan", description="Database user")
    password: Optional[str] = Field(None, description="Database password")
    password_env: Optional[str] = Field(None, description="Environment variable for password")

    @field_validator("type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        """Only sqlite and postgres are supported."""
        v = (v or "sqlite").lower()
        if v not in ("sqlite", "postgres"):
            raise ValueError(f"Unsupported database type: {v}")
        return v


class TelegramConfig(BaseModel):
    """Outbound Telegram bot configuration."""

    token: Optional[str] = Field(None, description="Bot token (prefer token_env)")
    token_env: Optional[str] = Field("EP_TG_BOT_TOKEN", description="Environment variable for bot token")
    api_url: Optional[str] = Field(None, description="Bot API endpoint override")
    poll_timeout: float = Field(10.0, description="Long-poll timeout in seconds", gt=0)


class SyncConfig(BaseModel):
    """Feed synchronization limits."""

    check_limit: int = Field(9, description="Items ingested per feed by check-feeds", ge=1)
    full_sync_limit: int = Field(200, description="Items ingested by full-feed", ge=1)
    timeout: float = Field(30.0, description="Feed fetch timeout in seconds", gt=0)
    user_agent: str = Field("echopan/1.0", description="User agent for feed requests")


class PublishConfig(BaseModel):
    """Publish pipeline settings."""

    delay_seconds: float = Field(5.0, description="Pause between publications", ge=0)
    caption_limit: int = Field(800, description="Max subtitle characters in a caption", ge=0)
    caption_suppressed_feed_ids: List[int] = Field(
        default_factory=lambda: [34],
        description="Feed ids whose items are published without a subtitle",
    )
    download_dir: Optional[str] = Field(None, description="Transient storage for downloads")
    download_timeout: float = Field(300.0, description="Enclosure download timeout", gt=0)


class ServiceConfig(BaseModel):
    """Service loop settings."""

    interval_minutes: float = Field(10.0, description="Pause between service passes", ge=0)


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = Field("INFO", description="Console log level")
    log_dir: Optional[str] = Field(None, description="Directory for rotating log files")


class ConfigModel(BaseModel):
    """Main configuration model."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    telegram: TelegramConfig = Field(default_factory=TelegramConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    publish: PublishConfig = Field(default_factory=PublishConfig)
    service: ServiceConfig = Field(default_factory=ServiceConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
