"""Tests for process settings and logging setup."""

import structlog

from py_rlmod.config.config import Settings
from py_rlmod.logging_config import configure_logging


class TestSettings:
    """Test environment driven settings."""

    def test_defaults(self, monkeypatch):
        for name in ("RLMOD_RANDOM_SEED", "RLMOD_COUNTRIES_COUNT", "RLMOD_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)
        assert settings.random_seed == 114514
        assert settings.countries_count == 100
        assert settings.value_mean == 5000.0
        assert settings.value_std_dev == 1000.0
        assert settings.log_format == "console"

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("RLMOD_RANDOM_SEED", "42")
        monkeypatch.setenv("RLMOD_COUNTRIES_COUNT", "7")
        settings = Settings(_env_file=None)
        assert settings.random_seed == 42
        assert settings.countries_count == 7


def test_configure_logging_is_idempotent():
    configure_logging("DEBUG", "json")
    configure_logging("INFO", "console")
    logger = structlog.get_logger()
    logger.info("Logging configured", test=True)
