import config
import logging_config


class TestLogLevel:
    def test_follows_configured_environment(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.setattr(config, "ENVIRONMENT", "production")
        assert logging_config.get_log_level() == "INFO"

        monkeypatch.setattr(config, "ENVIRONMENT", "test")
        assert logging_config.get_log_level() == "WARNING"

    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "error")
        assert logging_config.get_log_level() == "ERROR"
