"""
Configuration management for Remote Bridge

Handles loading and validation of configuration from JSON files and environment variables.
"""

import json
import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class RemoteConfig:
    """Remote bridge server configuration"""
    enabled: bool = False
    port: int = 3000
    host: str = "0.0.0.0"
    label: Optional[str] = None
    pin_length: int = 4
    max_port_attempts: int = 100
    expose_pins_in_listing: bool = False
    cors_allowed_origins: str = "*"


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    file: Optional[str] = None
    max_size: str = "10MB"
    backup_count: int = 5


@dataclass
class Config:
    """Main configuration class"""
    remote: RemoteConfig = field(default_factory=RemoteConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def default(cls) -> 'Config':
        """Configuration with defaults and environment overrides applied"""
        return cls.from_dict({})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Build configuration from a dict, letting environment variables win"""
        remote = data.get('remote', {})
        log = data.get('logging', {})
        defaults = RemoteConfig()
        log_defaults = LoggingConfig()

        remote_config = RemoteConfig(
            enabled=_to_bool(os.getenv('REMOTE_ENABLED', remote.get('enabled', defaults.enabled))),
            port=int(os.getenv('REMOTE_PORT', remote.get('port', defaults.port))),
            host=os.getenv('REMOTE_HOST', remote.get('host', defaults.host)),
            label=os.getenv('REMOTE_LABEL', remote.get('label', defaults.label)),
            pin_length=int(os.getenv('REMOTE_PIN_LENGTH', remote.get('pin_length', defaults.pin_length))),
            max_port_attempts=int(remote.get('max_port_attempts', defaults.max_port_attempts)),
            expose_pins_in_listing=_to_bool(os.getenv(
                'REMOTE_EXPOSE_PINS',
                remote.get('expose_pins_in_listing', defaults.expose_pins_in_listing)
            )),
            cors_allowed_origins=remote.get('cors_allowed_origins', defaults.cors_allowed_origins)
        )

        logging_config = LoggingConfig(
            level=os.getenv('LOG_LEVEL', log.get('level', log_defaults.level)),
            file=os.getenv('LOG_FILE', log.get('file', log_defaults.file)),
            max_size=os.getenv('LOG_MAX_SIZE', log.get('max_size', log_defaults.max_size)),
            backup_count=int(os.getenv('LOG_BACKUP_COUNT', log.get('backup_count', log_defaults.backup_count)))
        )

        return cls(remote=remote_config, logging=logging_config)

    @classmethod
    def load_from_file(cls, config_path: Path) -> 'Config':
        """Load configuration from JSON file with environment variable override"""
        config_path = Path(config_path)

        # Load environment variables from .env file if it exists
        env_file = config_path.parent / ".env"
        if env_file.exists():
            load_dotenv(env_file)

        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        return cls.from_dict(data)

    def validate(self) -> bool:
        """Validate configuration values"""
        errors = []

        if not 1 <= self.remote.port <= 65535:
            errors.append("Remote port must be between 1 and 65535")

        if not self.remote.host:
            errors.append("Remote host is required")

        if self.remote.pin_length <= 0:
            errors.append("PIN length must be positive")

        if self.remote.max_port_attempts <= 0:
            errors.append("Max port attempts must be positive")

        if self.logging.level.upper() not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            errors.append(f"Unknown log level: {self.logging.level}")

        if self.logging.backup_count < 0:
            errors.append("Log backup count cannot be negative")

        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

        return True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
