"""Handles loading configuration from YAML files."""

import copy
import logging
import os
from typing import Optional

import yaml

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    'output_dir': '.',
    'temp_dir_name': '.temp',
    'max_workers': 4,
    'paragraph_char_threshold': 500,
    'output_extension': '.md',
    'log_dir': 'logs',
    'log_file': 'ytscribe.log',
    'yt_dlp_options': {},
}

# Keys that must hold positive integers
_POSITIVE_INT_KEYS = ('max_workers', 'paragraph_char_threshold')


class ConfigLoader:
    """Loads configuration settings from a YAML file, merged over defaults."""

    def load_config(self, config_path: str) -> dict:
        """
        Loads configuration from the specified YAML file path.

        Args:
            config_path: The path to the YAML configuration file.

        Returns:
            A dictionary containing the loaded configuration settings.

        Raises:
            FileNotFoundError: If the configuration file does not exist.
            ConfigurationError: If the file cannot be parsed as YAML or
                              if there are other reading errors.
        """
        logger.info(f"Attempting to load configuration from: {config_path}")
        if not os.path.exists(config_path):
            logger.error(f"Configuration file not found at path: {config_path}")
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        if not os.path.isfile(config_path):
            logger.error(f"Configuration path is not a file: {config_path}")
            raise ConfigurationError(f"Configuration path is not a file: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Error parsing YAML configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Invalid YAML format in {config_path}: {e}") from e
        except OSError as e:
            logger.error(f"Error reading configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Could not read configuration file {config_path}: {e}") from e

        if config is None:
            # An empty file is a valid "use the defaults" config
            config = {}
        if not isinstance(config, dict):
            logger.error(f"Configuration file {config_path} did not load as a dictionary (root object).")
            raise ConfigurationError(f"Invalid YAML structure in {config_path}. Root must be a mapping (dictionary).")
        logger.info(f"Configuration loaded successfully from {config_path}")
        return config

    def load_with_defaults(self, config_path: Optional[str] = None) -> dict:
        """
        Returns DEFAULT_CONFIG overlaid with the file at config_path, if any.

        Raises:
            FileNotFoundError: If config_path is given but does not exist.
            ConfigurationError: If the file is invalid or a value fails validation.
        """
        config = copy.deepcopy(DEFAULT_CONFIG)
        if config_path:
            config.update(self.load_config(config_path))
        else:
            logger.info("No configuration file given. Using built-in defaults.")
        validate_config(config)
        return config


def validate_config(config: dict) -> None:
    """Raises ConfigurationError if a known key holds an unusable value."""
    for key in _POSITIVE_INT_KEYS:
        value = config.get(key)
        # bool is an int subclass; "max_workers: true" is a typo, not a count
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ConfigurationError(f"Configuration key '{key}' must be a positive integer, got {value!r}.")
    if not isinstance(config.get('yt_dlp_options'), dict):
        raise ConfigurationError("Configuration key 'yt_dlp_options' must be a mapping.")
    extension = config.get('output_extension')
    if not isinstance(extension, str) or not extension.startswith('.'):
        raise ConfigurationError(f"Configuration key 'output_extension' must start with '.', got {extension!r}.")
