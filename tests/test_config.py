"""Tests for configuration loading."""

from pathlib import Path

import pytest
import yaml

from catalog.config import AppConfig, load_config

PROJECT_CONFIG = Path(__file__).parent.parent / "config.yaml"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CATALOG_DB_PATH", raising=False)
    monkeypatch.delenv("CATALOG_LOG_LEVEL", raising=False)


class TestAppConfigDefaults:
    """Test that AppConfig provides sensible defaults."""

    def test_default_config_creates_successfully(self) -> None:
        config = AppConfig()
        assert config.app.name == "Book Catalog"
        assert config.app.version == "1.0.0"

    def test_default_storage_config(self) -> None:
        config = AppConfig()
        assert config.storage.sqlite_path == "./db/catalog.db"

    def test_default_export_config(self) -> None:
        config = AppConfig()
        assert config.export.default_limit is None
        assert config.export.output_path is None

    def test_default_logging_config(self) -> None:
        config = AppConfig()
        assert config.logging.level == "INFO"


class TestLoadConfig:
    """Test loading config from YAML files."""

    def test_load_from_yaml(self, tmp_path: Path) -> None:
        yaml_data = {
            "app": {"name": "Test Catalog", "version": "0.1.0"},
            "export": {"default_limit": 25},
        }
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump(yaml_data))

        config = load_config(config_file)
        assert config.app.name == "Test Catalog"
        assert config.app.version == "0.1.0"
        assert config.export.default_limit == 25
        # Other fields keep defaults
        assert config.storage.sqlite_path == "./db/catalog.db"

    def test_load_missing_yaml_uses_defaults(self, tmp_path: Path) -> None:
        config = load_config(tmp_path / "nonexistent.yaml")
        assert config.app.name == "Book Catalog"

    def test_empty_yaml_uses_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")

        config = load_config(config_file)
        assert config.logging.level == "INFO"

    def test_env_vars_override_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump({"storage": {"sqlite_path": "./from-file.db"}}))

        monkeypatch.setenv("CATALOG_DB_PATH", "/tmp/override.db")
        monkeypatch.setenv("CATALOG_LOG_LEVEL", "debug")

        config = load_config(config_file)
        assert config.storage.sqlite_path == "/tmp/override.db"
        assert config.logging.level == "DEBUG"

    def test_load_project_config_yaml(self) -> None:
        """Test loading the actual project config.yaml."""
        config = load_config(PROJECT_CONFIG)
        assert config.app.name == "Book Catalog"
        assert config.storage.sqlite_path == "./db/catalog.db"
        assert config.export.default_limit is None
