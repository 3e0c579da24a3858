"""
Configuration loader for Bouncer.
Loads window patterns (and optionally a timeout) from a YAML file.

Accepted YAML structures, either a plain list of patterns:
- xterm
- Firefox

or a mapping:
patterns:
  - xterm
  - Firefox
timeout: 30            # optional, seconds, default: 60

A file that is neither (the plain format with one pattern per line) is read
line by line, blank lines skipped.
"""
import logging
import os
from typing import Optional

import yaml

DEFAULT_CONFIG_NAME = ".bouncerc"
MAX_TIMEOUT = 2 ** 32 - 1


class ConfigValidationError(Exception):
    """Exception raised when configuration validation fails."""


def default_config_path() -> Optional[str]:
    """Return ~/.bouncerc, or None when $HOME is not set."""
    home = os.environ.get("HOME")
    if not home:
        return None
    return os.path.join(home, DEFAULT_CONFIG_NAME)


class ConfigLoader:
    """Load and validate Bouncer configuration from a YAML file."""

    def __init__(self, config_path):
        """
        Initialize the configuration loader.

        :param config_path: Path to the YAML configuration file
        """
        self.config_path = config_path
        self.config = None
        self.patterns = []
        self.timeout = None
        self.logger = logging.getLogger(__name__)

    def load(self):
        """
        Load and parse the YAML configuration file.

        :raises ConfigValidationError: If configuration is invalid
        :raises FileNotFoundError: If config file doesn't exist
        """
        if not os.path.exists(self.config_path):
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        with open(self.config_path, 'r') as f:
            text = f.read()

        try:
            self.config = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigValidationError(f"Invalid YAML in {self.config_path}: {e}") from e

        if self.config is None:
            raise ConfigValidationError("Configuration file is empty")

        self.logger.debug("Reading patterns")

        if isinstance(self.config, list):
            self._validate_patterns(self.config)
        elif isinstance(self.config, dict):
            self._validate_mapping()
        else:
            # plain ~/.bouncerc: one pattern per line
            self.patterns = [line for line in text.splitlines() if line.strip()]

        for pattern in self.patterns:
            self.logger.debug(f"  {pattern}")

        return self.patterns

    def _validate_mapping(self):
        """Validate the mapping form of the configuration."""
        if 'patterns' not in self.config:
            raise ConfigValidationError("Configuration must contain 'patterns' section")

        self._validate_patterns(self.config['patterns'])

        if 'timeout' in self.config:
            timeout = self.config['timeout']
            if isinstance(timeout, bool) or not isinstance(timeout, int) or timeout < 0 or timeout > MAX_TIMEOUT:
                raise ConfigValidationError(f"timeout must be an integer between 0 and {MAX_TIMEOUT}")
            self.timeout = timeout

    def _validate_patterns(self, patterns):
        """Validate the list of patterns."""
        if not isinstance(patterns, list):
            raise ConfigValidationError("'patterns' must be a list")

        for index, pattern in enumerate(patterns, start=1):
            if not isinstance(pattern, str):
                raise ConfigValidationError(f"Pattern {index} must be a string, got {type(pattern).__name__}")

        self.patterns = list(patterns)
