"""
POMDP schema definitions.
"""

from dataclasses import dataclass, field
from typing import List, Optional
import numpy as np

from src.pomdp.belief import BeliefPoint
from src.utils.data_validation import validate_belief, validate_stochastic_rows


@dataclass
class POMDP:
    """
    Partially Observable Markov Decision Process with index-based lookups.

    Attributes:
        S: List of state labels
        A: List of action labels
        O: List of observation labels
        T: Transition probabilities T[a, s, s'] = P(s' | s, a)
        Z: Observation probabilities Z[a, s', o] = P(o | s', a)
        R: Immediate rewards R[s, a]
        gamma: Discount factor
        b0: Initial belief (uniform if omitted)
        name: Instance name, used to name output files
    """
    S: List[str]
    A: List[str]
    O: List[str]
    T: np.ndarray
    Z: np.ndarray
    R: np.ndarray
    gamma: float = 0.95
    b0: Optional[np.ndarray] = None
    name: str = "pomdp"
    min_reward: float = field(init=False)

    def __post_init__(self):
        """Validate POMDP structure."""
        n_states = len(self.S)
        n_actions = len(self.A)
        n_obs = len(self.O)

        self.T = np.asarray(self.T, dtype=float)
        self.Z = np.asarray(self.Z, dtype=float)
        self.R = np.asarray(self.R, dtype=float)

        if self.T.shape != (n_actions, n_states, n_states):
            raise ValueError(
                f"T has shape {self.T.shape}, expected ({n_actions}, {n_states}, {n_states})"
            )
        validate_stochastic_rows(self.T, "T")

        if self.Z.shape != (n_actions, n_states, n_obs):
            raise ValueError(
                f"Z has shape {self.Z.shape}, expected ({n_actions}, {n_states}, {n_obs})"
            )
        validate_stochastic_rows(self.Z, "Z")

        if self.R.shape != (n_states, n_actions):
            raise ValueError(
                f"R has shape {self.R.shape}, expected ({n_states}, {n_actions})"
            )

        if not 0.0 < self.gamma <= 1.0:
            raise ValueError(f"Discount factor must be in (0, 1], got {self.gamma}")

        if self.b0 is None:
            self.b0 = np.ones(n_states) / n_states
        else:
            self.b0 = np.asarray(self.b0, dtype=float)
            validate_belief(self.b0, n_states)

        self.min_reward = float(self.R.min())

    @property
    def num_states(self) -> int:
        return len(self.S)

    @property
    def num_actions(self) -> int:
        return len(self.A)

    @property
    def num_observations(self) -> int:
        return len(self.O)

    @property
    def discount_factor(self) -> float:
        return self.gamma

    def _check_index(self, value: int, upper: int, kind: str) -> None:
        if not 0 <= value < upper:
            raise ValueError(f"{kind} index {value} out of range [0, {upper})")

    def get_reward(self, s: int, a: int) -> float:
        self._check_index(s, self.num_states, "State")
        self._check_index(a, self.num_actions, "Action")
        return float(self.R[s, a])

    def get_transition_probability(self, s: int, a: int, s_next: int) -> float:
        self._check_index(s, self.num_states, "State")
        self._check_index(a, self.num_actions, "Action")
        self._check_index(s_next, self.num_states, "State")
        return float(self.T[a, s, s_next])

    def get_observation_probability(self, a: int, s_next: int, o: int) -> float:
        self._check_index(a, self.num_actions, "Action")
        self._check_index(s_next, self.num_states, "State")
        self._check_index(o, self.num_observations, "Observation")
        return float(self.Z[a, s_next, o])

    def get_action_label(self, a: int) -> str:
        self._check_index(a, self.num_actions, "Action")
        return self.A[a]

    def get_action_index(self, label: str) -> int:
        """Map an action label (or a stringified integer id) to its index."""
        if label in self.A:
            return self.A.index(label)
        try:
            a = int(label)
        except ValueError:
            raise ValueError(f"Unknown action label {label!r}") from None
        self._check_index(a, self.num_actions, "Action")
        return a

    def observation_possible(self, a: int, o: int) -> bool:
        """True if observation o can follow action a from at least one state."""
        return bool(np.any(self.Z[a, :, o] > 0.0))

    def get_initial_belief(self) -> BeliefPoint:
        return BeliefPoint(self.b0.copy())

    def prepare_belief(self, b: BeliefPoint) -> None:
        """Fill the P(o | b, a) cache of a belief point (at most once)."""
        if b.has_action_observation_probabilities():
            return

        # predicted[a, s'] = sum_s T[a, s, s'] b[s]
        predicted = np.einsum("ast,s->at", self.T, b.belief)
        ao_probs = np.einsum("at,ato->ao", predicted, self.Z)
        b.set_action_observation_probabilities(ao_probs)

    def update_belief(self, b: BeliefPoint, a: int, o: int) -> BeliefPoint:
        """
        Bayesian belief update after executing a and observing o.

        Raises:
            ValueError: If o cannot be observed after executing a in b
        """
        self._check_index(a, self.num_actions, "Action")
        self._check_index(o, self.num_observations, "Observation")

        self.prepare_belief(b)

        nc = b.get_action_observation_probability(a, o)
        if nc <= 0.0:
            raise ValueError(f"Observation {o} cannot be observed when executing action {a} in {b}")

        predicted = self.T[a].T @ b.belief
        new_belief = predicted * (self.Z[a, :, o] / nc)

        return BeliefPoint(new_belief)
