"""
Settings Loader

Reads engine constants from config/simulation.yaml, falling back to the
built-in defaults when no file is present.
"""

from __future__ import annotations

from pathlib import Path

import yaml
from loguru import logger

from simulation.models import SimulationSettings

DEFAULT_CONFIG_PATH = Path("config/simulation.yaml")


def load_settings(config_path: str | Path | None = None) -> SimulationSettings:
    """
    Load simulation settings.

    Args:
        config_path: Path to a YAML settings file. Defaults to
            config/simulation.yaml

    Returns:
        Validated SimulationSettings
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        logger.warning(f"Simulation config not found at {config_path}, using defaults")
        return SimulationSettings()

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    return SimulationSettings.model_validate(data.get("simulation", data))
