"""Schema validation for solver configuration files."""

from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator


class SolverProperties(BaseModel):
    """User-defined solver parameters."""

    algorithm: Literal["gip"] = Field(default="gip", description="Solution algorithm")
    pruning_method: Literal["standard", "accelerated"] = Field(
        default="accelerated", description="Pruning method used by incremental pruning"
    )
    lp_solver: Literal["scipy", "pulp"] = Field(default="scipy", description="LP backend")

    epsilon: float = Field(default=1e-6, ge=0, description="Vectors are kept if their LP gain d > epsilon")
    value_function_tolerance: float = Field(default=1e-4, gt=0, description="Allowed Bellman error")
    accelerated_lp_threshold: int = Field(
        default=200, ge=0, description="Row generation is only used if |U| > threshold (0 disables it)"
    )
    accelerated_lp_tolerance: float = Field(
        default=1e-4, gt=0, description="Row generation stops when belief and objective change less than this"
    )
    coefficient_threshold: float = Field(
        default=1e-9, ge=0, description="LP coefficients with smaller absolute value are set to zero"
    )
    fixed_stages: Optional[int] = Field(
        default=None, ge=2, description="Fixed number of stages (None runs until convergence)"
    )
    time_limit: float = Field(default=1000.0, gt=0, description="Time limit in seconds")

    dump_policy_graph: bool = Field(default=True, description="Write a policy graph after convergence")
    dump_action_labels: bool = Field(default=False, description="Write action labels rather than ids")
    output_dir: str = Field(default="output", description="Output directory")
    domain_dir: str = Field(default="domains", description="Directory containing model files")

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def validate_tolerances(self):
        """The witness threshold must be far below the convergence tolerance."""
        if self.epsilon >= self.value_function_tolerance:
            raise ValueError("epsilon must be smaller than value_function_tolerance")
        return self


def load_solver_properties(path: str) -> SolverProperties:
    """Load and validate solver properties from a YAML file."""
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Solver config file not found: {path}")

    with open(config_path, "r") as f:
        data = yaml.safe_load(f) or {}

    return SolverProperties(**data)
