"""Loading scenario configurations from YAML files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from fair_split.library.config.models import ScenarioConfig
from fair_split.library.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def load_scenario_config(config_path: str | Path) -> ScenarioConfig:
    """
    Load and validate a scenario configuration file.

    Parameters
    ----------
    config_path : str | Path
        Path to a YAML file with ``resource``, ``capacity`` and optionally
        ``name``, ``unit``, ``approaches``, ``solver`` and ``charts``

    Returns
    -------
    ScenarioConfig
        The validated configuration

    Raises
    ------
    ConfigurationError
        If the file does not exist, is not a YAML mapping, or fails validation
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigurationError(f"Scenario configuration not found: {config_path}")

    logger.info("Loading scenario from %s", config_path)
    with open(config_path) as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Could not parse scenario configuration {config_path}: {e}"
            ) from e

    if not isinstance(raw, dict):
        raise ConfigurationError(
            f"Scenario configuration {config_path} must be a mapping, "
            f"got {type(raw).__name__}"
        )

    return scenario_from_dict(raw)


def scenario_from_dict(raw: dict[str, Any]) -> ScenarioConfig:
    """
    Validate a scenario given as a plain dictionary.

    Keys may use kebab-case (``image-format``) or snake_case.

    Raises
    ------
    ConfigurationError
        If the dictionary fails validation
    """
    try:
        return ScenarioConfig.model_validate(_snake_keys(raw))
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid scenario configuration:\n{e}") from e


def _snake_keys(raw: dict[str, Any]) -> dict[str, Any]:
    """Convert kebab-case keys to snake_case, leaving agent names untouched."""
    converted = {}
    for key, value in raw.items():
        new_key = key.replace("-", "_") if isinstance(key, str) else key
        if new_key in ("solver", "charts") and isinstance(value, dict):
            value = {k.replace("-", "_"): v for k, v in value.items()}
        converted[new_key] = value
    return converted
