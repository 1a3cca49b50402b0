"""Pydantic models for scenario configuration validation."""

from __future__ import annotations

import math
from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator

from fair_split.library.allocations.registry import get_allocation_functions
from fair_split.library.error_messages import format_error, suggest_similar
from fair_split.library.exceptions import ConfigurationError


class SolverConfig(BaseModel):
    """Settings for the convex solver used by the optimization approaches."""

    timeout_seconds: float | None = Field(
        None, description="Wall-clock limit per solve, no limit when omitted"
    )
    max_iterations: int = Field(1000, description="Iteration cap per solve")
    tolerance: float = Field(1e-10, description="Convergence tolerance")

    @field_validator("timeout_seconds", "tolerance")
    @classmethod
    def validate_positive(cls, v: float | None) -> float | None:
        """Validate that limits are strictly positive."""
        if v is not None and not v > 0:
            raise ConfigurationError(f"Solver limits must be positive, got {v}.")
        return v

    @field_validator("max_iterations")
    @classmethod
    def validate_iterations(cls, v: int) -> int:
        """Validate that at least one iteration is allowed."""
        if v < 1:
            raise ConfigurationError(f"max_iterations must be at least 1, got {v}.")
        return v


class ChartConfig(BaseModel):
    """Settings for the used/unused capacity charts."""

    enabled: bool = Field(True, description="Render one chart per approach")
    output_dir: Path = Field(
        Path("output/figures"), description="Directory charts are written to"
    )
    image_format: str = Field("svg", description="Image format passed to matplotlib")
    width_inches: float = Field(4.0, description="Figure width")
    height_inches: float = Field(3.0, description="Figure height")
    y_max: float | None = Field(
        None, description="Upper y-axis limit, largest capacity when omitted"
    )

    @field_validator("width_inches", "height_inches")
    @classmethod
    def validate_size(cls, v: float) -> float:
        """Validate that figure dimensions are positive."""
        if not v > 0:
            raise ConfigurationError(f"Figure dimensions must be positive, got {v}.")
        return v

    @field_validator("image_format")
    @classmethod
    def normalise_format(cls, v: str) -> str:
        """Strip a leading dot so '.png' and 'png' are equivalent."""
        return v.lstrip(".").lower()


class ScenarioConfig(BaseModel):
    """A named resource, capacities and the approaches to compare on them."""

    name: str = Field("scenario", description="Scenario name")
    resource: float = Field(..., description="Total quantity to distribute")
    unit: str = Field("", description="Unit of resource and capacities (display only)")
    capacity: dict[str | int, float] = Field(
        ..., description="Capacity per agent, keyed by name or small integer"
    )
    approaches: list[str] = Field(
        default_factory=lambda: list(get_allocation_functions()),
        description="Approaches to run, in order",
    )
    solver: SolverConfig = Field(default_factory=SolverConfig)
    charts: ChartConfig = Field(default_factory=ChartConfig)

    @field_validator("resource")
    @classmethod
    def validate_resource(cls, v: float) -> float:
        """Validate that the resource is finite and non-negative."""
        if not math.isfinite(v) or v < 0:
            raise ConfigurationError(
                format_error(
                    "negative_values",
                    value_type="resource",
                    entries=f"resource={v}",
                )
            )
        return v

    @field_validator("capacity")
    @classmethod
    def validate_capacity(
        cls, v: dict[str | int, float]
    ) -> dict[str | int, float]:
        """Validate agent name types and that capacities are finite and non-negative."""
        kinds = sorted({type(agent).__name__ for agent in v})
        if len(kinds) > 1:
            raise ConfigurationError(
                "Agent names must be all strings or all integers, got a mix of "
                f"{', '.join(kinds)}. Quote integer names to use strings."
            )
        bad = {agent: cap for agent, cap in v.items() if not math.isfinite(cap) or cap < 0}
        if bad:
            raise ConfigurationError(
                format_error(
                    "negative_values",
                    value_type="capacity",
                    entries=", ".join(f"{a}={c}" for a, c in bad.items()),
                )
            )
        return v

    @field_validator("approaches", mode="before")
    @classmethod
    def coerce_null_approach(cls, v):
        """Map YAML's ``null`` (parsed as None) back to the approach name."""
        if isinstance(v, list):
            return ["null" if item is None else item for item in v]
        return v

    @field_validator("approaches")
    @classmethod
    def validate_approaches(cls, v: list[str]) -> list[str]:
        """Validate that every approach is registered."""
        valid_options = list(get_allocation_functions())
        for approach in v:
            if approach not in valid_options:
                suggestion = suggest_similar(approach, valid_options)
                raise ConfigurationError(
                    f"Allocation approach '{approach}' not recognized.\n\n"
                    f"{suggestion}\n\n"
                    f"Available approaches: {', '.join(valid_options)}"
                )
        return v

    @model_validator(mode="after")
    def validate_agents(self) -> ScenarioConfig:
        """Validate that the scenario has at least one agent."""
        if not self.capacity:
            raise ConfigurationError(
                f"Scenario '{self.name}' lists no capacities. "
                "Add at least one agent, e.g. capacity: {Alan: 250}"
            )
        return self
