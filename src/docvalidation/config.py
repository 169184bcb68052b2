"""Configuration management for docvalidation using Pydantic models."""

import json
import logging
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from .constants import CONFIG_FILE_NAME


class ParserBackend(str, Enum):
    """Markup parser backends."""
    HTML = "html"
    XHTML = "xhtml"


class LogLevel(str, Enum):
    """Logging levels."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"

    def to_logging_level(self) -> int:
        return {
            LogLevel.ERROR: logging.ERROR,
            LogLevel.WARN: logging.WARNING,
            LogLevel.INFO: logging.INFO,
            LogLevel.DEBUG: logging.DEBUG,
        }[self]


class ParserConfig(BaseModel):
    """Parser configuration section."""
    backend: ParserBackend = ParserBackend.HTML
    keep_comments: bool = Field(alias="keepComments", default=False)
    keep_whitespace: bool = Field(alias="keepWhitespace", default=False)

    model_config = ConfigDict(populate_by_name=True)


class MatchingConfig(BaseModel):
    """Matching configuration section."""
    collect_all: bool = Field(alias="collectAll", default=False)

    model_config = ConfigDict(populate_by_name=True)


class LoggingConfig(BaseModel):
    """Logging configuration section."""
    level: LogLevel = LogLevel.WARN


class DocValidationConfig(BaseModel):
    """Complete docvalidation configuration model."""
    parser: ParserConfig = Field(default_factory=ParserConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid")


def load_config(config_path: str | Path | None = None) -> DocValidationConfig:
    """Load configuration from file with fallback to defaults.

    Args:
        config_path: Optional path to configuration file. If None, searches
                    current directory and parents for .docvalidation.json

    Returns:
        DocValidationConfig: Loaded and validated configuration

    Raises:
        ValueError: If an explicit file is missing or the configuration is invalid
    """
    if config_path is None:
        config_path = find_config_file()
        if config_path is None:
            return create_default_config()
    else:
        config_path = Path(config_path)
        if not config_path.is_file():
            raise ValueError(f"Config file not found: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            config_data = json.load(f)
        return DocValidationConfig(**config_data)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file {config_path}: {e}") from e
    except Exception as e:
        raise ValueError(f"Failed to load config from {config_path}: {e}") from e


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find .docvalidation.json by searching up the directory tree.

    Args:
        start_dir: Directory to start search from (default: current directory)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = Path(start_dir).resolve()

    while True:
        config_file = current / CONFIG_FILE_NAME
        if config_file.exists():
            return config_file

        parent = current.parent
        if parent == current:  # Reached root directory
            break
        current = parent

    return None


def create_default_config() -> DocValidationConfig:
    """Create default configuration."""
    return DocValidationConfig()
