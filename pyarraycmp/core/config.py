"""Manages configuration for pyarraycmp.

This module is responsible for loading, managing, and saving the default
options used to build a `Comparator`. It aggregates settings from default
values, TOML files, and environment variables, providing a unified interface
for accessing them.
"""

import copy
import logging
import os
from pathlib import Path
from typing import Dict, Any, Optional

try:
    import tomllib  # Available in Python 3.11+
except ImportError:
    import tomli as tomllib  # Fallback for Python versions < 3.11

import tomli_w

from .errors import ConfigError

logger = logging.getLogger(__name__)

# The default path for the user-specific global configuration file.
USER_CONFIG_PATH = Path.home() / ".config" / "arraycmp" / "config.toml"

# The project-level configuration file, looked up in the working directory.
PROJECT_CONFIG_NAME = "arraycmp.toml"

_TRUE_STRINGS = ("true", "1", "yes", "on")

BOOLEAN_KEYS = ("whitespace_significant", "case_significant", "default_full")


def parse_bool(value: str) -> bool:
    """Reads a boolean from text such as "yes", "off" or "1"."""
    return value.strip().lower() in _TRUE_STRINGS


class Config:
    """Handles the configuration for pyarraycmp.

    This class loads configuration from multiple sources with a defined
    precedence:
    1.  Default values (lowest precedence).
    2.  Project-specific `arraycmp.toml` file.
    3.  User-level `~/.config/arraycmp/config.toml` file.
    4.  A custom configuration file specified at runtime.
    5.  Environment variables (highest precedence).

    Attributes:
        DEFAULT_CONFIG (Dict[str, Any]): A dictionary containing the default
            configuration values.
    """

    DEFAULT_CONFIG: Dict[str, Any] = {
        "separator": "\x07",
        "whitespace_significant": True,
        "case_significant": True,
        "default_full": False,
        "skip": {},  # Position -> flag; only truthy flags skip.
        "log_level": "WARNING",
    }

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """Initializes the configuration manager.

        Args:
            config_path (Optional[Path]): An optional path to a specific
                configuration file to load. If provided, it takes precedence
                over default file locations.
        """
        self.config = copy.deepcopy(self.DEFAULT_CONFIG)
        self._load_config(Path(config_path) if config_path else None)

    def _load_config(self, config_path: Optional[Path] = None) -> None:
        if config_path:
            self._load_file_config(config_path)
        else:
            self._load_default_configs()

        self._load_env_config()

    def _load_default_configs(self) -> None:
        """Loads configs from standard locations if they exist."""
        project_config = Path.cwd() / PROJECT_CONFIG_NAME
        if project_config.exists():
            self._load_file_config(project_config)

        if USER_CONFIG_PATH.exists():
            self._load_file_config(USER_CONFIG_PATH)

    def _merge_configs(self, base: Dict[str, Any], new: Dict[str, Any]) -> None:
        """Recursively merges a new config dict into a base dict.

        Args:
            base (Dict[str, Any]): The base configuration dictionary.
            new (Dict[str, Any]): The new configuration to merge in.
        """
        for key, value in new.items():
            if isinstance(value, dict) and key in base and isinstance(base[key], dict):
                self._merge_configs(base[key], value)
            else:
                base[key] = value

    def _load_file_config(self, config_path: Path) -> None:
        """Loads and merges configuration from a TOML file.

        An unreadable or malformed file is reported and skipped.

        Args:
            config_path (Path): The path to the TOML configuration file.
        """
        try:
            with open(config_path, "rb") as f:
                file_config = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning(f"Could not load config from {config_path}: {e}")
            return
        logger.debug(f"Loaded config from {config_path}")
        self._merge_configs(self.config, file_config)

    def _load_env_config(self) -> None:
        """Loads and merges configuration from environment variables."""
        env_mapping = {
            "ARRAYCMP_SEPARATOR": "separator",
            "ARRAYCMP_WHITESPACE_SIGNIFICANT": "whitespace_significant",
            "ARRAYCMP_CASE_SIGNIFICANT": "case_significant",
            "ARRAYCMP_DEFAULT_FULL": "default_full",
            "ARRAYCMP_SKIP": "skip",
            "ARRAYCMP_LOG_LEVEL": "log_level",
        }

        for env_var, config_key in env_mapping.items():
            value = os.getenv(env_var)
            if value is not None:
                self._set_from_string(config_key, value)

    def _set_from_string(self, key: str, value: str) -> None:
        """Sets a value that arrived as a string, casting it by key.

        Args:
            key (str): The top-level configuration key.
            value (str): The raw string value.
        """
        if key in BOOLEAN_KEYS:
            self.config[key] = parse_bool(value)
        elif key == "skip":
            positions = {}
            for item in value.split(","):
                item = item.strip()
                if not item:
                    continue
                if not item.isdigit():
                    logger.warning(f"Ignoring invalid skip position: {item!r}")
                    continue
                positions[item] = True
            self.config[key] = positions
        elif key == "log_level":
            self.config[key] = value.upper()
        else:
            self.config[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Retrieves a configuration value using a dot-separated key.

        Args:
            key (str): The dot-separated key (e.g., "skip.3").
            default (Any): The default value to return if the key is not found.

        Returns:
            Any: The configuration value or the default.
        """
        keys = key.split('.')
        value = self.config
        try:
            for k in keys:
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any) -> None:
        """Sets a configuration value in memory.

        Args:
            key (str): The dot-separated key (e.g., "case_significant").
            value (Any): The value to set.
        """
        keys = key.split('.')
        target_config = self.config
        for k in keys[:-1]:
            target_config = target_config.setdefault(k, {})
        target_config[keys[-1]] = value

    def get_bool(self, key: str, default: bool) -> bool:
        """Retrieves a boolean option.

        Raises:
            ConfigError: If the stored value is not a boolean.
        """
        value = self.get(key, default)
        if not isinstance(value, bool):
            raise ConfigError(f"'{key}' must be a boolean, got {value!r}")
        return value

    def get_str(self, key: str, default: str) -> str:
        """Retrieves a string option.

        Raises:
            ConfigError: If the stored value is not a string.
        """
        value = self.get(key, default)
        if not isinstance(value, str):
            raise ConfigError(f"'{key}' must be a string, got {value!r}")
        return value

    def skip_positions(self) -> Dict[int, Any]:
        """Returns the configured skip table keyed by integer position.

        TOML table keys are always strings, so they are converted here.

        Raises:
            ConfigError: If the skip table is not a table or has a key that
                is not a non-negative integer.
        """
        raw = self.get("skip") or {}
        if not isinstance(raw, dict):
            raise ConfigError(f"'skip' must be a table of positions, got {type(raw).__name__}")

        positions = {}
        for key, flag in raw.items():
            try:
                position = int(key)
            except (TypeError, ValueError):
                raise ConfigError(f"Invalid skip position: {key!r}") from None
            if position < 0:
                raise ConfigError(f"Invalid skip position: {key!r}")
            positions[position] = flag
        return positions

    def _get_user_config(self) -> Dict[str, Any]:
        """Loads and returns the contents of the user config file.

        Returns:
            Dict[str, Any]: The user configuration dictionary, or an empty
            dict if the file doesn't exist or fails to parse.
        """
        if not USER_CONFIG_PATH.exists():
            return {}
        try:
            with open(USER_CONFIG_PATH, "rb") as f:
                return tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning(f"Ignoring unreadable user config {USER_CONFIG_PATH}: {e}")
            return {}

    def save_user_config(self) -> None:
        """Saves the current configuration to the user config file.

        Only settings that differ from the defaults are written, on top of
        whatever the user file already holds.

        Raises:
            ConfigError: If the configuration file cannot be written.
        """
        user_config = self._get_user_config()

        for key, value in self.config.items():
            if key not in self.DEFAULT_CONFIG or value != self.DEFAULT_CONFIG[key]:
                user_config[key] = value

        try:
            USER_CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
            with open(USER_CONFIG_PATH, "wb") as f:
                tomli_w.dump(user_config, f)
        except (OSError, TypeError) as e:
            raise ConfigError(f"Failed to save configuration to {USER_CONFIG_PATH}: {e}") from e
        logger.info(f"Saved configuration to {USER_CONFIG_PATH}")

    def reset_user_config(self) -> bool:
        """Deletes the user config file.

        Returns:
            bool: True if a file was removed, False if there was none.
        """
        if not USER_CONFIG_PATH.exists():
            return False
        USER_CONFIG_PATH.unlink()
        return True

    def __str__(self) -> str:
        return f"Config({self.config})"
