"""
Belief points and belief state updates for POMDP.
"""

from typing import TYPE_CHECKING, List, Optional
import numpy as np

from src.utils.logging_utils import get_logger

if TYPE_CHECKING:
    from src.pomdp.schema import POMDP

logger = get_logger(__name__)


class BeliefPoint:
    """
    A point of the belief simplex.

    Two belief points are equal when their action-observation histories are
    equal; the history is only used to deduplicate sampled beliefs.
    """

    def __init__(self, belief, history: Optional[List[int]] = None):
        self.belief = np.asarray(belief, dtype=float)
        self.history: List[int] = list(history) if history else []
        self._ao_probs: Optional[np.ndarray] = None  # _ao_probs[a, o] = P(o | b, a)

    def get_belief(self, s: Optional[int] = None):
        if s is None:
            return self.belief
        if not 0 <= s < len(self.belief):
            raise ValueError(f"State index {s} out of range")
        return float(self.belief[s])

    def add_to_history(self, i: int) -> None:
        self.history.append(i)

    def get_history_copy(self) -> List[int]:
        return list(self.history)

    def has_action_observation_probabilities(self) -> bool:
        return self._ao_probs is not None

    def set_action_observation_probabilities(self, ao_probs: np.ndarray) -> None:
        if self._ao_probs is not None:
            raise ValueError("Action-observation probabilities are already initialized")
        self._ao_probs = np.asarray(ao_probs, dtype=float)

    def get_action_observation_probability(self, a: int, o: int) -> float:
        if self._ao_probs is None:
            raise ValueError("Action-observation probabilities have not been computed")
        return float(self._ao_probs[a, o])

    def __hash__(self):
        return hash(tuple(self.history))

    def __eq__(self, other):
        if not isinstance(other, BeliefPoint):
            return NotImplemented
        return self.history == other.history

    def __repr__(self):
        return "<BP(" + ",".join(f"{p:g}" for p in self.belief) + ")>"


def belief_update(
    pomdp: "POMDP",
    belief: np.ndarray,
    action: int,
    observation: int,
) -> np.ndarray:
    """
    Update belief state: b' ∝ Z[a][:,o] * (T[a].T @ b)

    Args:
        pomdp: POMDP model
        belief: Current belief vector (|S|,)
        action: Action index
        observation: Observation index

    Returns:
        Updated belief vector (normalized)
    """
    if not 0 <= action < pomdp.num_actions:
        raise ValueError(f"Action {action} not in POMDP actions")

    if not 0 <= observation < pomdp.num_observations:
        raise ValueError(f"Observation {observation} not in POMDP observations")

    # First: predict next belief: T[a].T @ b
    predicted_belief = pomdp.T[action].T @ belief

    # Second: update with observation: Z[a][:,o] * predicted_belief
    obs_likelihood = pomdp.Z[action][:, observation]

    new_belief = obs_likelihood * predicted_belief

    # Normalize
    norm = new_belief.sum()
    if norm < 1e-10:
        logger.warning("Belief update resulted in near-zero probability, using uniform")
        return np.ones(pomdp.num_states) / pomdp.num_states

    new_belief = new_belief / norm

    # Ensure non-negativity
    new_belief = np.maximum(new_belief, 0.0)
    new_belief = new_belief / new_belief.sum()

    return new_belief
