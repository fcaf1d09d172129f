"""Configuration loader for the book catalog export service."""

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field


class AppInfo(BaseModel):
    """Application metadata."""

    name: str = "Book Catalog"
    version: str = "1.0.0"


class StorageConfig(BaseModel):
    """Storage paths configuration."""

    sqlite_path: str = "./db/catalog.db"


class ExportConfig(BaseModel):
    """XML export configuration."""

    default_limit: int | None = None
    output_path: str | None = None


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"


class AppConfig(BaseModel):
    """Root application configuration."""

    app: AppInfo = Field(default_factory=AppInfo)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(config_path: str | Path = "config.yaml") -> AppConfig:
    """Load configuration from YAML file and environment variables.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Fully populated AppConfig instance.
    """
    load_dotenv()

    yaml_data: dict = {}
    config_file = Path(config_path)
    if config_file.exists():
        with open(config_file, encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}

    config = AppConfig(**yaml_data)

    # Environment overrides
    db_path = os.getenv("CATALOG_DB_PATH")
    if db_path:
        config.storage.sqlite_path = db_path
    log_level = os.getenv("CATALOG_LOG_LEVEL")
    if log_level:
        config.logging.level = log_level.upper()

    return config
