"""
parmatch Configuration

Loads configuration from a YAML file and environment variables.
Command-line options are applied on top with ``override()``.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from parmatch.errors import ConfigError

logger = logging.getLogger(__name__)


# Default configuration file locations (checked in order)
CONFIG_SEARCH_PATHS = [
    Path(".parmatch.yaml"),
    Path.home() / ".parmatch" / "config.yaml",
]


DEFAULT_CONFIG = {
    # Suppress "too many parameters" and "named parameter missing" warnings
    "verbose": False,
    # Check every identifier naming a known module, not just statement starts
    "aggressive": False,

    # File discovery
    "extensions": [".v", ".sv", ".vh", ".svh", ".ver"],
    "exclude_globs": [],
    "exclude_regexes": [],

    # text | json
    "output_format": "text",
}

OUTPUT_FORMATS = ("text", "json")

TRUTHY = {"1", "true", "yes", "on"}


def _as_bool(value: str) -> bool:
    return value.strip().lower() in TRUTHY


class ParmatchConfig:
    """Configuration for a parmatch run."""

    def __init__(self, config_path: Optional[Path] = None, use_env: bool = True):
        self._config: Dict[str, Any] = {
            k: list(v) if isinstance(v, list) else v for k, v in DEFAULT_CONFIG.items()
        }
        self._config_path: Optional[Path] = None

        # Load from file if found
        self._load_config(config_path)

        # Override with environment variables
        if use_env:
            self._apply_env_overrides()

        self._validate()

    def _load_config(self, explicit_path: Optional[Path] = None) -> None:
        """Load configuration from YAML file."""
        if explicit_path is not None and not explicit_path.exists():
            raise ConfigError("config file not found", explicit_path)
        search_paths = [explicit_path] if explicit_path else CONFIG_SEARCH_PATHS

        for config_path in search_paths:
            if config_path and config_path.exists():
                try:
                    with open(config_path, 'r', encoding='utf-8') as f:
                        user_config = yaml.safe_load(f) or {}
                except (OSError, yaml.YAMLError) as e:
                    raise ConfigError(f"unable to load config: {e}", config_path) from e
                if not isinstance(user_config, dict):
                    raise ConfigError("top level must be a mapping", config_path)
                for key in sorted(set(user_config) - set(DEFAULT_CONFIG)):
                    logger.warning("%s: ignoring unknown config key '%s'", config_path, key)
                    del user_config[key]
                self._config.update(user_config)
                self._config_path = config_path
                logger.debug("Loaded config from %s", config_path)
                return

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides."""
        if "PARMATCH_VERBOSE" in os.environ:
            self._config["verbose"] = _as_bool(os.environ["PARMATCH_VERBOSE"])
        if "PARMATCH_AGGRESSIVE" in os.environ:
            self._config["aggressive"] = _as_bool(os.environ["PARMATCH_AGGRESSIVE"])
        if "PARMATCH_EXTENSIONS" in os.environ:
            self._config["extensions"] = [
                e.strip() for e in os.environ["PARMATCH_EXTENSIONS"].split(",") if e.strip()
            ]

    def _validate(self) -> None:
        source = self._config_path
        for key in ("verbose", "aggressive"):
            if not isinstance(self._config[key], bool):
                raise ConfigError(f"'{key}' must be true or false", source)
        for key in ("extensions", "exclude_globs", "exclude_regexes"):
            value = self._config[key]
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigError(f"'{key}' must be a list of strings", source)
        if self._config["output_format"] not in OUTPUT_FORMATS:
            raise ConfigError(
                f"'output_format' must be one of {', '.join(OUTPUT_FORMATS)}", source)
        self._patterns = []
        for pattern in self._config["exclude_regexes"]:
            try:
                self._patterns.append(re.compile(pattern))
            except re.error as e:
                raise ConfigError(f"bad exclude regex '{pattern}': {e}", source) from e

    def override(self, **options: Any) -> "ParmatchConfig":
        """Apply command-line options. None values leave the setting alone."""
        for key, value in options.items():
            if key not in DEFAULT_CONFIG:
                raise ConfigError(f"unknown option '{key}'")
            if value is not None:
                self._config[key] = value
        self._validate()
        return self

    @property
    def config_path(self) -> Optional[Path]:
        """Path to loaded config file, or None if using defaults."""
        return self._config_path

    @property
    def verbose(self) -> bool:
        return self._config["verbose"]

    @property
    def aggressive(self) -> bool:
        return self._config["aggressive"]

    @property
    def extensions(self) -> Tuple[str, ...]:
        """Lower-cased file suffixes, each with a leading dot."""
        return tuple(
            (e if e.startswith(".") else f".{e}").lower() for e in self._config["extensions"]
        )

    @property
    def exclude_globs(self) -> List[str]:
        return list(self._config["exclude_globs"])

    @property
    def exclude_regexes(self) -> List[re.Pattern]:
        return list(self._patterns)

    @property
    def output_format(self) -> str:
        return self._config["output_format"]
