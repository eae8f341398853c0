"""
Witness-point linear programs used by incremental pruning.

For a vector w and a competitor set U every backend solves

    maximize    d
    subject to  sum_s b[s] = 1,  0 <= b[s] <= 1
                sum_s (w[s] - u[s]) b[s] - d >= 0    for every u in U

A belief b with d > epsilon is a witness: w improves on every member of U
at b. Backends only implement ``_solve_region_lp``; the witness decisions
and the row-generation variant live here.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from src.solver.alpha_vector import AlphaVector
from src.utils.logging_utils import get_logger

logger = get_logger(__name__)


@dataclass
class LPSolution:
    """Optimal point of a witness LP."""
    belief: np.ndarray
    d: float
    objective: float


class LPModel(ABC):
    """Abstract witness-point oracle."""

    name = "LP"

    def __init__(
        self,
        epsilon: float = 1e-6,
        accelerated_lp_threshold: int = 200,
        accelerated_lp_tolerance: float = 1e-4,
        coefficient_threshold: float = 1e-9,
    ):
        self.epsilon = epsilon
        self.accelerated_lp_threshold = accelerated_lp_threshold
        self.accelerated_lp_tolerance = accelerated_lp_tolerance
        self.coefficient_threshold = coefficient_threshold

    def set_epsilon(self, epsilon: float) -> None:
        self.epsilon = epsilon

    def set_accelerated_lp_threshold(self, threshold: int) -> None:
        self.accelerated_lp_threshold = threshold

    def set_accelerated_lp_tolerance(self, tolerance: float) -> None:
        self.accelerated_lp_tolerance = tolerance

    def set_coefficient_threshold(self, threshold: float) -> None:
        self.coefficient_threshold = threshold

    def init(self) -> None:
        """Prepare the backend session."""

    def close(self) -> None:
        """Release the backend session."""

    def get_name(self) -> str:
        return self.name

    @abstractmethod
    def _solve_region_lp(self, coefficients: np.ndarray, d_coefficient: float) -> Optional[LPSolution]:
        """
        Solve the witness LP for constraint rows ``coefficients @ b + d_coefficient * d >= 0``.

        Args:
            coefficients: (k, |S|) matrix of snapped (w - u) rows
            d_coefficient: snapped coefficient of d in every row

        Returns:
            The optimal solution, or None if the backend did not reach optimality
        """

    def _get_coefficients(self, c):
        # every LP coefficient goes through here
        c = np.asarray(c, dtype=float)
        return np.where(np.abs(c) < self.coefficient_threshold, 0.0, c)

    def _solve_against(self, w: AlphaVector, U: Sequence[AlphaVector]) -> Optional[LPSolution]:
        n_states = len(w)
        u_matrix = np.array([u.entries for u in U], dtype=float)
        if u_matrix.shape != (len(U), n_states):
            raise ValueError(f"Competitor vectors must all have length {n_states}")

        coefficients = self._get_coefficients(w.entries[None, :] - u_matrix)
        d_coefficient = float(self._get_coefficients(-1.0))
        return self._solve_region_lp(coefficients, d_coefficient)

    @staticmethod
    def _corner_belief(n_states: int) -> np.ndarray:
        b = np.zeros(n_states)
        b[0] = 1.0
        return b

    def find_region_point(self, w: AlphaVector, U: Sequence[AlphaVector]) -> Optional[np.ndarray]:
        """
        Find a belief where w improves on every vector of U by more than epsilon.

        Returns:
            The witness belief, or None if w is dominated by U
        """
        # if U is empty, then any b is a witness point
        if len(U) == 0:
            return self._corner_belief(len(w))

        solution = self._solve_against(w, U)
        if solution is None:
            return None

        if solution.d > self.epsilon and solution.objective > self.epsilon:
            return solution.belief
        return None

    def find_region_point_accelerated(self, w: AlphaVector, U: Sequence[AlphaVector]) -> Optional[np.ndarray]:
        """
        Same decision as ``find_region_point``, computed by adding the
        constraints of U one at a time (Benders-style row generation) when U
        is larger than the accelerated LP threshold.
        """
        n_states = len(w)

        if len(U) == 0:
            return self._corner_belief(n_states)

        if len(U) <= self.accelerated_lp_threshold or self.accelerated_lp_threshold == 0:
            return self.find_region_point(w, U)

        k = self._select_constraint_vector(U, w, self._corner_belief(n_states))
        added = np.zeros(len(U), dtype=bool)
        added[k] = True
        constraints = [U[k]]

        current_max = np.inf
        last_b = np.zeros(n_states)
        solution = None

        while True:
            solution = self._solve_against(w, constraints)
            if solution is None:
                return None

            b = solution.belief
            belief_diff = float(np.abs(last_b - b).sum())
            last_b = b

            objective_change = abs(current_max - solution.objective)
            current_max = min(solution.objective, current_max)

            if (belief_diff < self.accelerated_lp_tolerance
                    and objective_change < self.accelerated_lp_tolerance) or len(constraints) == len(U):
                break

            # the relaxation already shows w is dominated
            if current_max <= self.epsilon:
                break

            k = self._select_constraint_vector(U, w, b)
            if added[k]:
                break
            added[k] = True
            constraints.append(U[k])

        logger.debug(f"Accelerated LP used {len(constraints)} of {len(U)} constraints")

        if current_max > self.epsilon:
            return solution.belief
        return None

    @staticmethod
    def _select_constraint_vector(U: Sequence[AlphaVector], w: AlphaVector, b: np.ndarray) -> int:
        """Index of the member of U minimizing (w - u) . b."""
        u_matrix = np.array([u.entries for u in U], dtype=float)
        values = (w.entries[None, :] - u_matrix) @ b
        return int(np.argmin(values))

    def get_max_value_diff(self, w: AlphaVector, U: Sequence[AlphaVector]) -> float:
        """Maximum gain over the simplex obtained by adding w to U."""
        if len(U) == 0:
            raise ValueError("get_max_value_diff requires a non-empty competitor set")

        solution = self._solve_against(w, U)
        if solution is None:
            return 0.0

        if solution.d > self.epsilon:
            return solution.d
        return 0.0
