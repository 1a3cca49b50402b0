"""Scenario configuration models and loading for fair-split."""

from fair_split.library.config.loader import load_scenario_config, scenario_from_dict
from fair_split.library.config.models import ChartConfig, ScenarioConfig, SolverConfig

__all__ = [
    "ChartConfig",
    "ScenarioConfig",
    "SolverConfig",
    "load_scenario_config",
    "scenario_from_dict",
]
