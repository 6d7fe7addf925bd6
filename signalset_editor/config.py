"""
Configuration management for the signalset editor.

This module provides centralized configuration management, supporting:
- Loading from a JSON config file
- Environment variable overrides (LOG_LEVEL, SIGNALSET_ALIGN_COLUMNS)
- Validation of all settings
- The single place where logging is configured (configure_logging)
"""

import os
import json
import logging
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any, List
from pathlib import Path

from signalset_editor.constants import USER_CONFIG_DIR_NAME, CONFIG_FILE_NAME
from signalset_editor.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

VALID_LOG_LEVELS = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'

_TRUE_STRINGS = {'1', 'true', 'yes', 'on'}
_FALSE_STRINGS = {'0', 'false', 'no', 'off'}


def _parse_bool(value: Any) -> Optional[bool]:
    """Interpret a config/env value as a boolean, or None if it is not one."""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    return None


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging once for the process.

    Args:
        level: Logging level name; defaults to the LOG_LEVEL environment
               variable, then 'INFO'
    """
    level_name = (level or os.environ.get('LOG_LEVEL') or 'INFO').upper()
    if level_name not in VALID_LOG_LEVELS:
        level_name = 'INFO'
    logging.basicConfig(level=getattr(logging, level_name), format=LOG_FORMAT)


@dataclass
class FormatSettings:
    """Canonical text rendering settings.

    Attributes:
        align_columns: Pad after signal ids and paths so columns line up
    """
    align_columns: bool = False

    def validate(self) -> List[str]:
        """Validate settings and return list of error messages (empty if valid)."""
        errors = []
        if not isinstance(self.align_columns, bool):
            errors.append("align_columns must be a boolean")
        return errors


@dataclass
class AppSettings:
    """Application-level configuration settings.

    Attributes:
        log_level: Logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR')
    """
    log_level: str = 'INFO'

    def validate(self) -> List[str]:
        """Validate settings and return list of error messages (empty if valid)."""
        errors = []
        if self.log_level.upper() not in VALID_LOG_LEVELS:
            errors.append(f"Log level must be one of {sorted(VALID_LOG_LEVELS)}")
        return errors


class ConfigManager:
    """Centralized configuration manager for the signalset editor.

    Settings are loaded with priority:
    1. JSON config file (highest priority)
    2. Environment variables
    3. Default values (lowest priority)

    Invalid values are logged and the previous value is kept. Configuration
    is read-only: the editor never writes a config file.

    Attributes:
        format_settings: Canonical text rendering configuration
        app_settings: Application-level configuration
        _config_file: Path to JSON config file (if loaded)
    """

    def __init__(self, config_file: Optional[str] = None):
        """Initialize ConfigManager.

        Args:
            config_file: Optional path to JSON config file. If None, will try
                         ~/.signalset_editor/config.json
        """
        self.format_settings = FormatSettings()
        self.app_settings = AppSettings()
        self._config_file: Optional[str] = None

        self._load_from_environment()
        if config_file:
            self._load_from_file(config_file)
        else:
            self._load_from_default_locations()

        errors = self.validate()
        if errors:
            logger.warning(f"Configuration validation errors: {errors}")

    @property
    def config_file(self) -> Optional[str]:
        return self._config_file

    def _load_from_environment(self) -> None:
        """Load configuration from environment variables."""
        log_level = os.environ.get('LOG_LEVEL')
        if log_level:
            self.app_settings.log_level = log_level.upper()

        align = os.environ.get('SIGNALSET_ALIGN_COLUMNS')
        if align:
            parsed = _parse_bool(align)
            if parsed is None:
                logger.warning(f"Invalid SIGNALSET_ALIGN_COLUMNS environment variable: {align}")
            else:
                self.format_settings.align_columns = parsed

    def _load_from_file(self, file_path: str) -> bool:
        """Load configuration from JSON file.

        Args:
            file_path: Path to JSON config file

        Returns:
            True if loaded successfully, False otherwise
        """
        if not os.path.exists(file_path):
            logger.debug(f"Config file not found: {file_path}")
            return False

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse config file {file_path}: {e}")
            return False
        except OSError as e:
            logger.error(f"Failed to read config file {file_path}: {e}", exc_info=True)
            return False

        if not isinstance(data, dict):
            logger.error(f"Config file {file_path} must contain a JSON object")
            return False

        format_data = self._section(data, 'format_settings', file_path)
        if 'align_columns' in format_data:
            parsed = _parse_bool(format_data['align_columns'])
            if parsed is None:
                logger.warning(f"Invalid align_columns in config: {format_data['align_columns']}")
            else:
                self.format_settings.align_columns = parsed

        app_data = self._section(data, 'app_settings', file_path)
        if 'log_level' in app_data:
            self.app_settings.log_level = str(app_data['log_level']).upper()

        self._config_file = file_path
        logger.info(f"Loaded configuration from {file_path}")
        return True

    @staticmethod
    def _section(data: Dict[str, Any], name: str, file_path: str) -> Dict[str, Any]:
        """Return a config file section, or {} if it is missing or not an object."""
        section = data.get(name)
        if section is None and name not in data:
            return {}
        if not isinstance(section, dict):
            logger.warning(f"Ignoring '{name}' in {file_path}: expected an object, got {type(section).__name__}")
            return {}
        return section

    def _load_from_default_locations(self) -> None:
        """Try loading from the user config location."""
        user_config_file = Path.home() / USER_CONFIG_DIR_NAME / CONFIG_FILE_NAME
        if user_config_file.exists():
            self._load_from_file(str(user_config_file))

    def validate(self) -> List[str]:
        """Validate all configuration settings.

        Returns:
            List of error messages (empty if all valid)
        """
        errors = []
        errors.extend(self.format_settings.validate())
        errors.extend(self.app_settings.validate())
        return errors

    def to_dict(self) -> Dict[str, Any]:
        """Return the effective configuration as a JSON-safe dict."""
        return {
            'format_settings': asdict(self.format_settings),
            'app_settings': asdict(self.app_settings),
        }

    def raise_if_invalid(self) -> None:
        """Raise ConfigurationError for the first invalid setting, if any."""
        if self.app_settings.log_level.upper() not in VALID_LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid log level: {self.app_settings.log_level}",
                setting_name='log_level', setting_value=self.app_settings.log_level,
                expected=f"one of {sorted(VALID_LOG_LEVELS)}")
        if not isinstance(self.format_settings.align_columns, bool):
            raise ConfigurationError(
                f"Invalid align_columns: {self.format_settings.align_columns!r}",
                setting_name='align_columns', setting_value=self.format_settings.align_columns,
                expected='a boolean')
