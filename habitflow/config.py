#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HabitFlow - Configuration
Centralized configuration loaded from environment variables

Version: 1.0.0
"""

import os
import sys
from pathlib import Path
from typing import Optional, Dict, Any
from dataclasses import dataclass
from enum import Enum

import pytz


class Environment(Enum):
    """Runtime environments"""
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


class LogLevel(Enum):
    """Logging levels"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class StorageConfig:
    """Persistence settings"""
    data_dir: Path
    file_suffix: str = ".json"


@dataclass
class AIConfig:
    """Text-generation service settings"""
    openai_api_key: Optional[str]
    openai_model: str = "gpt-4o-mini"
    openai_max_tokens: int = 300
    ai_enabled: bool = True
    request_timeout: int = 30


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == 'true'


class AppConfig:
    """Main configuration object"""

    def __init__(self):
        self.environment = Environment(os.getenv('ENVIRONMENT', 'development'))
        self._load_config()
        self._validate_config()

    def _load_config(self):
        """Read settings from the environment"""
        self.data_dir = Path(os.getenv('DATA_DIR', 'data'))
        self.log_dir = Path(os.getenv('LOG_DIR', 'logs'))

        self.storage = StorageConfig(data_dir=self.data_dir)

        self.ai = AIConfig(
            openai_api_key=os.getenv('OPENAI_API_KEY') or None,
            openai_model=os.getenv('OPENAI_MODEL', 'gpt-4o-mini'),
            openai_max_tokens=int(os.getenv('OPENAI_MAX_TOKENS', 300)),
            ai_enabled=_env_flag('AI_ENABLED', 'true'),
            request_timeout=int(os.getenv('AI_TIMEOUT', 30))
        )

        # Local calendar timezone; system local time when unset
        self.timezone = os.getenv('TIMEZONE') or None

        self.log_level = LogLevel(os.getenv('LOG_LEVEL', 'INFO'))
        self.log_to_file = _env_flag('LOG_TO_FILE', 'false')
        self.log_format = os.getenv(
            'LOG_FORMAT',
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
        )

    def _validate_config(self):
        """Validate the loaded settings"""
        errors = []

        if self.timezone and self.timezone not in pytz.all_timezones_set:
            errors.append(f"Unknown TIMEZONE: {self.timezone}")

        if self.ai.openai_max_tokens <= 0:
            errors.append("OPENAI_MAX_TOKENS must be positive")

        if self.ai.request_timeout <= 0:
            errors.append("AI_TIMEOUT must be positive")

        if errors:
            raise ValueError("Configuration errors:\n" + "\n".join(f"• {error}" for error in errors))

    def get_logging_config(self) -> Dict[str, Any]:
        """Build a logging.config.dictConfig dictionary"""
        handlers = ['console']
        if self.log_to_file:
            handlers.append('file')

        logging_config = {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'default': {
                    'format': self.log_format,
                    'datefmt': '%Y-%m-%d %H:%M:%S'
                }
            },
            'handlers': {
                'console': {
                    'class': 'logging.StreamHandler',
                    'level': self.log_level.value,
                    'formatter': 'default',
                    'stream': sys.stdout
                }
            },
            'loggers': {
                '': {
                    'level': self.log_level.value,
                    'handlers': handlers,
                    'propagate': False
                },
                'httpx': {
                    'level': 'WARNING',
                    'handlers': handlers,
                    'propagate': False
                },
                'openai': {
                    'level': 'WARNING',
                    'handlers': handlers,
                    'propagate': False
                }
            }
        }

        if self.log_to_file:
            logging_config['handlers']['file'] = {
                'class': 'logging.handlers.RotatingFileHandler',
                'level': self.log_level.value,
                'formatter': 'default',
                'filename': str(self.log_dir / f"habitflow_{self.environment.value}.log"),
                'maxBytes': 10485760,  # 10MB
                'backupCount': 5,
                'encoding': 'utf-8'
            }

        return logging_config

    def to_dict(self) -> Dict[str, Any]:
        return {
            'environment': self.environment.value,
            'data_dir': str(self.data_dir),
            'timezone': self.timezone,
            'ai_enabled': bool(self.ai.openai_api_key) and self.ai.ai_enabled,
            'openai_model': self.ai.openai_model,
            'log_level': self.log_level.value
        }


# Global configuration instance
config = AppConfig()

__all__ = [
    'config',
    'AppConfig',
    'Environment',
    'LogLevel',
    'StorageConfig',
    'AIConfig'
]
