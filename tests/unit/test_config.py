"""
Unit tests for Config
"""

import json
import os

import pytest

from remote_bridge.utils.config import Config, LoggingConfig, RemoteConfig

ENV_KEYS = [
    "REMOTE_ENABLED", "REMOTE_PORT", "REMOTE_HOST", "REMOTE_LABEL",
    "REMOTE_PIN_LENGTH", "REMOTE_EXPOSE_PINS",
    "LOG_LEVEL", "LOG_FILE", "LOG_MAX_SIZE", "LOG_BACKUP_COUNT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class TestConfig:
    """Test cases for configuration management"""

    def test_config_dataclasses(self):
        """Test configuration dataclass defaults"""
        remote = RemoteConfig()
        assert remote.enabled is False
        assert remote.port == 3000
        assert remote.host == "0.0.0.0"
        assert remote.label is None
        assert remote.pin_length == 4
        assert remote.max_port_attempts == 100
        assert remote.expose_pins_in_listing is False

        logging_config = LoggingConfig()
        assert logging_config.level == "INFO"
        assert logging_config.file is None
        assert logging_config.max_size == "10MB"
        assert logging_config.backup_count == 5

    def test_default(self):
        config = Config.default()
        assert config.remote == RemoteConfig()
        assert config.logging == LoggingConfig()
        assert config.validate()

    def test_load_from_file_basic(self, tmp_path):
        """Test basic configuration file loading"""
        config_data = {
            "remote": {
                "enabled": True,
                "port": 4000,
                "host": "127.0.0.1",
                "label": "Project X",
                "pin_length": 6,
                "max_port_attempts": 10,
                "expose_pins_in_listing": True
            },
            "logging": {
                "level": "DEBUG",
                "file": "test.log",
                "max_size": "5MB",
                "backup_count": 3
            }
        }
        config_path = tmp_path / "remote_config.json"
        config_path.write_text(json.dumps(config_data), encoding="utf-8")

        config = Config.load_from_file(config_path)

        assert config.remote.enabled is True
        assert config.remote.port == 4000
        assert config.remote.host == "127.0.0.1"
        assert config.remote.label == "Project X"
        assert config.remote.pin_length == 6
        assert config.remote.max_port_attempts == 10
        assert config.remote.expose_pins_in_listing is True

        assert config.logging.level == "DEBUG"
        assert config.logging.file == "test.log"
        assert config.logging.max_size == "5MB"
        assert config.logging.backup_count == 3

    def test_load_from_file_with_env_override(self, tmp_path, monkeypatch):
        """Test configuration loading with environment variable override"""
        config_path = tmp_path / "remote_config.json"
        config_path.write_text(json.dumps({"remote": {"port": 4000, "enabled": False}}))

        monkeypatch.setenv("REMOTE_PORT", "5000")
        monkeypatch.setenv("REMOTE_ENABLED", "yes")
        monkeypatch.setenv("LOG_LEVEL", "WARNING")

        config = Config.load_from_file(config_path)

        assert config.remote.port == 5000
        assert config.remote.enabled is True
        assert config.logging.level == "WARNING"

    def test_load_from_file_reads_dotenv(self, tmp_path):
        """Test that a .env next to the config file is honoured"""
        config_path = tmp_path / "remote_config.json"
        config_path.write_text("{}")
        (tmp_path / ".env").write_text("REMOTE_LABEL=From Dotenv\n")

        try:
            config = Config.load_from_file(config_path)
            assert config.remote.label == "From Dotenv"
        finally:
            os.environ.pop("REMOTE_LABEL", None)

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Config.load_from_file(tmp_path / "missing.json")

    def test_validation_errors(self):
        """Test that every invalid value is reported at once"""
        config = Config(
            remote=RemoteConfig(port=70000, host="", pin_length=0, max_port_attempts=0),
            logging=LoggingConfig(level="LOUD", backup_count=-1)
        )

        with pytest.raises(ValueError) as exc_info:
            config.validate()

        message = str(exc_info.value)
        assert message.startswith("Configuration validation failed")
        assert "Remote port" in message
        assert "Remote host" in message
        assert "PIN length" in message
        assert "Max port attempts" in message
        assert "Unknown log level" in message
        assert "backup count" in message

    def test_to_dict(self):
        data = Config.default().to_dict()
        assert data["remote"]["port"] == 3000
        assert data["logging"]["level"] == "INFO"


if __name__ == "__main__":
    pytest.main([__file__])
