"""Configuration loader."""

import os
import tempfile
from pathlib import Path
from typing import Mapping, Optional

import yaml
from pydantic import ValidationError

from ..errors import ConfigurationError
from .models import ConfigModel, DatabaseConfig, TelegramConfig

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "echopan" / "config.yaml"


class Config:
    """Configuration manager."""

    def __init__(
        self,
        config_path: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        """Initialize config manager."""
        if config_path is None:
            config_path = Path(os.environ.get("ECHOPAN_CONFIG", DEFAULT_CONFIG_PATH))
        self.config_path = config_path
        self.environ = os.environ if environ is None else environ
        self._config: Optional[ConfigModel] = None

    @property
    def config(self) -> ConfigModel:
        """Get loaded config."""
        if self._config is None:
            self._config = load_config(self.config_path)
        return self._config

    @property
    def download_dir(self) -> Path:
        """Get transient download directory."""
        configured = self.config.publish.download_dir
        path = Path(configured).expanduser() if configured else Path(tempfile.gettempdir())
        path.mkdir(parents=True, exist_ok=True)
        return path

    def get_db_config(self) -> DatabaseConfig:
        """Get database configuration with environment overrides applied."""
        overrides = {}
        if self.environ.get("ECHOPAN_DB_TYPE"):
            overrides["type"] = self.environ["ECHOPAN_DB_TYPE"]
        if self.environ.get("ECHOPAN_DB_FILE"):
            overrides["file"] = self.environ["ECHOPAN_DB_FILE"]
        if self.environ.get("ECHOPAN_DB_DSN_POSTGRES"):
            overrides["dsn"] = self.environ["ECHOPAN_DB_DSN_POSTGRES"]

        try:
            db_config = DatabaseConfig(**{**self.config.database.model_dump(), **overrides})
        except ValidationError as e:
            raise ConfigurationError(f"Invalid database configuration: {e}")

        # Handle password from environment if specified
        if db_config.password_env and self.environ.get(db_config.password_env):
            db_config.password = self.environ[db_config.password_env]

        if db_config.type == "sqlite" and not db_config.file:
            raise ConfigurationError(
                "database file path (ECHOPAN_DB_FILE) is required for sqlite"
            )
        if db_config.type == "postgres" and not (db_config.dsn or db_config.host):
            raise ConfigurationError(
                "PostgreSQL DSN (ECHOPAN_DB_DSN_POSTGRES) is required when DB type is postgres"
            )
        return db_config

    def get_telegram_config(self) -> TelegramConfig:
        """Get Telegram configuration with token and endpoint from environment."""
        telegram = self.config.telegram.model_copy()
        if telegram.token_env and self.environ.get(telegram.token_env):
            telegram.token = self.environ[telegram.token_env]
        if self.environ.get("EP_TG_BOT_URL"):
            telegram.api_url = self.environ["EP_TG_BOT_URL"]
        return telegram


def load_config(config_path: Path) -> ConfigModel:
    """Load configuration from YAML file. A missing file yields defaults."""
    if not config_path.exists():
        return ConfigModel()

    try:
        with open(config_path) as f:
            config_data = yaml.safe_load(f)

        if config_data is None:
            config_data = {}

        return ConfigModel(**config_data)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in config file: {e}")
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def save_config(config: ConfigModel, config_path: Path) -> None:
    """Save configuration to YAML file."""
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        yaml.dump(config.model_dump(), f, default_flow_style=False, sort_keys=False)
