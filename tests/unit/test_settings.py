"""Unit tests for patrimoine.core.settings module."""

import pytest

from patrimoine.core.exceptions import DataLoadError
from patrimoine.core.settings import AppSettings, get_settings
from patrimoine.services.fiscal_loader import load_fiscal_config


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestAppSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("PATRIMOINE_MAX_WORKERS", raising=False)
        monkeypatch.delenv("PATRIMOINE_LOG_TO_FILE", raising=False)
        settings = AppSettings(_env_file=None)
        assert settings.export_dir == "results"
        assert settings.max_workers is None
        assert settings.log_to_file is False
        assert settings.log_dir == "logs"

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("PATRIMOINE_EXPORT_DIR", "/tmp/exports")
        monkeypatch.setenv("PATRIMOINE_MAX_WORKERS", "3")
        settings = get_settings()
        assert settings.export_dir == "/tmp/exports"
        assert settings.max_workers == 3

    def test_fiscal_config_path(self, monkeypatch, tmp_path):
        monkeypatch.setenv("PATRIMOINE_FISCAL_CONFIG_PATH", str(tmp_path / "missing.json"))
        with pytest.raises(DataLoadError):
            load_fiscal_config()
