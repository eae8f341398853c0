"""Schema validation and loading of YAML model files."""

from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.pomdp.schema import POMDP
from src.utils.logging_utils import get_logger

logger = get_logger(__name__)


class POMDPFile(BaseModel):
    """Schema for POMDP model files."""

    name: Optional[str] = Field(default=None, description="Instance name (defaults to the file stem)")
    discount: float = Field(..., gt=0, le=1, description="Discount factor")
    states: List[str] = Field(..., min_length=1, description="State labels")
    actions: List[str] = Field(..., min_length=1, description="Action labels")
    observations: List[str] = Field(..., min_length=1, description="Observation labels")
    start: Optional[List[float]] = Field(default=None, description="Initial belief (uniform if omitted)")
    transitions: Dict[str, List[List[float]]] = Field(..., description="Per action |S|x|S| matrix P(s'|s,a)")
    observation_probabilities: Dict[str, List[List[float]]] = Field(
        ..., description="Per action |S|x|O| matrix P(o|s',a)"
    )
    rewards: Dict[str, List[float]] = Field(..., description="Per action reward vector R(s,a) over states")

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def validate_actions_covered(self):
        """Every action needs a transition matrix, an observation matrix and rewards."""
        for table_name in ("transitions", "observation_probabilities", "rewards"):
            table = getattr(self, table_name)
            missing = [a for a in self.actions if a not in table]
            if missing:
                raise ValueError(f"{table_name} is missing actions: {missing}")
            unknown = [a for a in table if a not in self.actions]
            if unknown:
                raise ValueError(f"{table_name} refers to unknown actions: {unknown}")
        return self

    def to_pomdp(self, default_name: str = "pomdp") -> POMDP:
        T = np.array([self.transitions[a] for a in self.actions], dtype=float)
        Z = np.array([self.observation_probabilities[a] for a in self.actions], dtype=float)
        R = np.array([self.rewards[a] for a in self.actions], dtype=float).T

        return POMDP(
            S=list(self.states),
            A=list(self.actions),
            O=list(self.observations),
            T=T,
            Z=Z,
            R=R,
            gamma=self.discount,
            b0=None if self.start is None else np.array(self.start, dtype=float),
            name=self.name or default_name,
        )


def load_pomdp(path: str) -> POMDP:
    """Load and validate a POMDP from a YAML file."""
    model_path = Path(path)
    if not model_path.exists():
        raise FileNotFoundError(f"Model file not found: {path}")

    with open(model_path, "r") as f:
        data = yaml.safe_load(f)

    pomdp = POMDPFile(**data).to_pomdp(default_name=model_path.stem)
    logger.info(
        f"Loaded {pomdp.name}: {pomdp.num_states} states, {pomdp.num_actions} actions, "
        f"{pomdp.num_observations} observations, discount {pomdp.gamma}"
    )
    return pomdp
