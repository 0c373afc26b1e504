"""
Configuration Management Module
Handles loading and validation of environment variables and settings
"""

import os
from typing import Optional
from dataclasses import dataclass
from dotenv import load_dotenv


LOG_FORMATS = ("text", "json")


@dataclass
class ParserConfig:
    """Limits and worker settings for the normalization pipeline"""
    # 1 keeps every stage serial; >1 fans independent units out to threads
    max_workers: int = 1
    max_body_size: int = 10 * 1024 * 1024
    max_mime_parts: int = 100


@dataclass
class SystemConfig:
    """Configuration for system settings"""
    log_level: str = "INFO"
    log_format: str = "text"
    log_file: Optional[str] = None


class Config:
    """Main configuration class"""

    def __init__(self, env_file: str = ".env"):
        """
        Initialize configuration from environment file

        Args:
            env_file: Path to environment file (default: .env)
        """
        load_dotenv(env_file)

        self.parser = self._load_parser_config()
        self.system = self._load_system_config()

    def _load_parser_config(self) -> ParserConfig:
        """Load pipeline limits"""
        defaults = ParserConfig()
        return ParserConfig(
            max_workers=self._get_int("MAILNORM_MAX_WORKERS", defaults.max_workers),
            max_body_size=self._get_int("MAILNORM_MAX_BODY_SIZE", defaults.max_body_size),
            max_mime_parts=self._get_int("MAILNORM_MAX_MIME_PARTS", defaults.max_mime_parts),
        )

    def _load_system_config(self) -> SystemConfig:
        """Load system configuration"""
        return SystemConfig(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "text").strip().lower(),
            log_file=os.getenv("LOG_FILE") or None,
        )

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        """Convert environment variable to int, keeping the default when unset"""
        value = os.getenv(key)
        if value is None or not value.strip():
            return default
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"{key} must be an integer, got {value!r}")

    def validate(self) -> bool:
        """
        Validate configuration

        Returns:
            True if configuration is valid

        Raises:
            ValueError: If configuration is invalid
        """
        if self.parser.max_workers < 1:
            raise ValueError("MAILNORM_MAX_WORKERS must be at least 1")

        if self.parser.max_body_size < 1:
            raise ValueError("MAILNORM_MAX_BODY_SIZE must be positive")

        if self.parser.max_mime_parts < 1:
            raise ValueError("MAILNORM_MAX_MIME_PARTS must be positive")

        if self.system.log_format not in LOG_FORMATS:
            raise ValueError(
                f"Unknown LOG_FORMAT '{self.system.log_format}'; "
                f"expected one of {', '.join(LOG_FORMATS)}"
            )

        return True
