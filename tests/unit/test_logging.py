"""Unit tests for patrimoine.core.logging module."""

import json
import logging

import pytest

from patrimoine.core.logging import LOG_FILE_NAME, configure_from_settings, configure_logging, get_logger, trial_context
from patrimoine.core.settings import get_settings


def flush_handlers():
    for handler in logging.getLogger().handlers:
        handler.flush()


@pytest.fixture(autouse=True)
def restore_logging():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    configure_logging(force=True)


class TestLogFile:
    def test_settings_enable_log_file(self, monkeypatch, tmp_path):
        monkeypatch.setenv("PATRIMOINE_LOG_TO_FILE", "true")
        monkeypatch.setenv("PATRIMOINE_LOG_DIR", str(tmp_path / "logs"))
        configure_from_settings(force=True)
        get_logger("tests").info("trial_started", run=1)
        flush_handlers()
        assert "trial_started" in (tmp_path / "logs" / LOG_FILE_NAME).read_text(encoding="utf-8")

    def test_no_log_file_by_default(self, monkeypatch, tmp_path):
        monkeypatch.delenv("PATRIMOINE_LOG_TO_FILE", raising=False)
        monkeypatch.chdir(tmp_path)
        configure_from_settings(force=True)
        get_logger("tests").info("nothing_on_disk")
        assert not (tmp_path / "logs").exists()
        assert not any(isinstance(h, logging.FileHandler) for h in logging.getLogger().handlers)


class TestTrialContext:
    def test_run_and_seed_bound(self, tmp_path):
        log_file = tmp_path / LOG_FILE_NAME
        configure_logging(level="INFO", json_output=True, log_file=log_file, force=True)
        with trial_context(run=7, seed=1234):
            get_logger("tests").warning("financial_assets_exhausted", year=2030)
        get_logger("tests").info("after_trial")
        flush_handlers()

        events = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
        inside, after = events
        assert (inside["run"], inside["seed"], inside["year"]) == (7, 1234, 2030)
        assert "run" not in after
