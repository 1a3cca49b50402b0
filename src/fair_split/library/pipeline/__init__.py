"""Scenario pipeline for fair-split."""

from .runner import AllocationRunner, ScenarioRun

__all__ = ["AllocationRunner", "ScenarioRun"]
