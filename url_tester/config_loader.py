"""Loading and environment selection for TOML test configurations."""

import logging
import tomllib
from collections.abc import Mapping
from pathlib import Path

from pydantic import ValidationError

from url_tester.models.config import Environment, TesterConfig

log = logging.getLogger(__name__)


class ConfigError(Exception):
    """Base class for configuration failures that abort the run."""


class ConfigReadError(ConfigError):
    """Raised when the configuration file cannot be read."""


class ConfigParseError(ConfigError):
    """Raised when the configuration content is not valid."""


class EnvironmentNotFoundError(ConfigError):
    """Raised when a requested environment is not in the configuration."""


def load_config(config_path: Path) -> TesterConfig:
    """Load and validate a TOML configuration file.

    Args:
        config_path: Path to the TOML file

    Returns:
        Validated configuration

    Raises:
        ConfigReadError: If the file cannot be read
        ConfigParseError: If the file is not valid TOML or fails validation

    """
    try:
        content = config_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigReadError(f"Cannot read config file {config_path}: {e}") from e

    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML in {config_path}: {e}") from e

    try:
        config = TesterConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigParseError(f"Invalid config schema in {config_path}: {e}") from e

    log.debug(
        "Loaded %d environment(s) and %d path(s) from %s",
        len(config.environments),
        len(config.paths),
        config_path,
    )
    return config


def select_environments(
    config: TesterConfig, env_name: str | None = None
) -> Mapping[str, Environment]:
    """Pick the environments to probe.

    Args:
        config: Loaded configuration
        env_name: Restrict the run to this environment; ``None`` runs all

    Raises:
        EnvironmentNotFoundError: If ``env_name`` is not configured

    """
    if env_name is None:
        log.info("Running tests for ALL environments found in config.")
        return config.environments

    if env_name not in config.environments:
        available = list(config.environments)
        raise EnvironmentNotFoundError(
            f"Environment '{env_name}' not found. Available environments: {available}"
        )

    log.info("Running tests for specific environment: %s", env_name)
    return {env_name: config.environments[env_name]}
