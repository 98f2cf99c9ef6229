"""
Configuration Management Module
Handles loading and validation of environment variables and settings
"""

import os
from dataclasses import dataclass
from dotenv import load_dotenv


VALID_LOG_FORMATS = ("text", "json")
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigurationError(ValueError):
    """Raised when configuration values are invalid"""


@dataclass
class DecoderConfig:
    """Configuration for the external MSG decoder"""
    module_name: str = "extract_msg"
    message_factory: str = "Message"


@dataclass
class OutputConfig:
    """Configuration for rendering and attachment export"""
    attachment_dir: str = "attachments"
    overwrite_attachments: bool = False
    color: bool = True


@dataclass
class SystemConfig:
    """Configuration for system settings"""
    log_level: str = "INFO"
    log_file: str = ""
    log_format: str = "text"


class Config:
    """Main configuration class"""

    def __init__(self, env_file: str = ".env"):
        """
        Initialize configuration from environment file

        Values already present in the process environment take precedence
        over the file.

        Args:
            env_file: Path to environment file (default: .env)
        """
        load_dotenv(env_file)

        self.decoder = self._load_decoder_config()
        self.output = self._load_output_config()
        self.system = self._load_system_config()

    def _load_decoder_config(self) -> DecoderConfig:
        """Load decoder configuration"""
        return DecoderConfig(
            module_name=os.getenv("MSG_DECODER_MODULE", "extract_msg").strip(),
            message_factory=os.getenv("MSG_DECODER_FACTORY", "Message").strip(),
        )

    def _load_output_config(self) -> OutputConfig:
        """Load output configuration"""
        return OutputConfig(
            attachment_dir=os.getenv("ATTACHMENT_OUTPUT_DIR", "attachments"),
            overwrite_attachments=self._get_bool("OVERWRITE_ATTACHMENTS", False),
            color=self._get_bool("COLOR_OUTPUT", True),
        )

    def _load_system_config(self) -> SystemConfig:
        """Load system configuration"""
        return SystemConfig(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE", ""),
            log_format=os.getenv("LOG_FORMAT", "text").strip().lower(),
        )

    @staticmethod
    def _get_bool(key: str, default: bool = False) -> bool:
        """Convert environment variable to boolean"""
        value = os.getenv(key, str(default)).lower()
        return value in ('true', '1', 'yes', 'on')

    def validate(self) -> bool:
        """
        Validate configuration

        Returns:
            True if configuration is valid

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if not self.decoder.module_name:
            raise ConfigurationError("MSG_DECODER_MODULE must not be empty")

        if not self.decoder.message_factory:
            raise ConfigurationError("MSG_DECODER_FACTORY must not be empty")

        if self.system.log_format not in VALID_LOG_FORMATS:
            raise ConfigurationError(
                f"Invalid LOG_FORMAT '{self.system.log_format}'; "
                f"expected one of {', '.join(VALID_LOG_FORMATS)}"
            )

        if str(self.system.log_level).upper() not in VALID_LOG_LEVELS:
            raise ConfigurationError(f"Invalid LOG_LEVEL '{self.system.log_level}'")

        return True
