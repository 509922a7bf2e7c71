"""
Unit tests for the configuration system and logger setup.

Tests the layered configuration loading:
1. Default values
2. YAML config file overrides
3. Environment variable overrides
"""
import logging

import pytest

from streakmind.core import config
from streakmind.core.config import LoggingConfig, get_config_source, settings
from streakmind.core.logging import LOGGER_NAME, configure_logging


@pytest.mark.unit
class TestConfigSource:
    """Tests for get_config_source."""

    def test_env_var_with_different_name(self, monkeypatch):
        """Test the streak policy is reported from STREAKMIND_STREAK_POLICY."""
        monkeypatch.setenv("STREAKMIND_STREAK_POLICY", "contiguous_days")

        assert get_config_source("tracking.streak_policy") == "env"

    def test_dotted_key_is_not_an_env_name(self, monkeypatch):
        """Test TRACKING_STREAK_POLICY is not mistaken for the real variable."""
        monkeypatch.delenv("STREAKMIND_STREAK_POLICY", raising=False)
        monkeypatch.setenv("TRACKING_STREAK_POLICY", "contiguous_days")
        monkeypatch.setattr(config, "YAML_CONFIG", {})

        assert get_config_source("tracking.streak_policy") == "default"

    def test_llm_keys(self, monkeypatch):
        monkeypatch.setenv("LLM_TIMEOUT_SECONDS", "3")

        assert get_config_source("llm.timeout_seconds") == "env"

    def test_yaml_only_key(self, monkeypatch):
        monkeypatch.setattr(config, "YAML_CONFIG", {"tracking": {"stats_log_limit": 20}})

        assert get_config_source("tracking.stats_log_limit") == "yaml"

    def test_default(self, monkeypatch):
        monkeypatch.delenv("STREAKMIND_USER_NAME", raising=False)
        monkeypatch.setattr(config, "YAML_CONFIG", {})

        assert get_config_source("user.name") == "default"


@pytest.mark.unit
class TestConfigureLogging:
    """Tests for building the streakmind logger from the logging section."""

    @pytest.fixture(autouse=True)
    def restore_logger(self):
        yield
        configure_logging(settings.logging, settings.paths.logs)

    def test_level_and_format_come_from_config(self):
        section = LoggingConfig(level="debug", format="%(levelname)s|%(message)s", to_file=False)

        log = configure_logging(section, settings.paths.logs)

        assert log.name == LOGGER_NAME
        assert log.level == logging.DEBUG
        assert len(log.handlers) == 1
        assert log.handlers[0].formatter._fmt == "%(levelname)s|%(message)s"

    def test_unknown_level_falls_back_to_info(self):
        log = configure_logging(LoggingConfig(level="chatty", to_file=False), settings.paths.logs)

        assert log.level == logging.INFO

    def test_file_handler(self, tmp_path):
        section = LoggingConfig(level="INFO", to_file=True, file_name="test.log")

        log = configure_logging(section, tmp_path / "logs")
        log.info("hello file")
        for handler in log.handlers:
            handler.flush()

        assert "hello file" in (tmp_path / "logs" / "test.log").read_text()

    def test_reconfigure_replaces_handlers(self):
        section = LoggingConfig(to_file=False)

        configure_logging(section, settings.paths.logs)
        log = configure_logging(section, settings.paths.logs)

        assert len(log.handlers) == 1
