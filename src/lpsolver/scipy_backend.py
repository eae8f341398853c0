"""Witness LPs solved with SciPy's HiGHS interface."""

from typing import Optional

import numpy as np
from scipy.optimize import linprog

from src.lpsolver.base import LPModel, LPSolution
from src.utils.logging_utils import get_logger

logger = get_logger(__name__)


class LPScipy(LPModel):
    name = "SciPy HiGHS"

    def __init__(self, *args, method: str = "highs", **kwargs):
        super().__init__(*args, **kwargs)
        self.method = method

    def _solve_region_lp(self, coefficients: np.ndarray, d_coefficient: float) -> Optional[LPSolution]:
        n_constraints, n_states = coefficients.shape

        # variables: b_0 .. b_{n-1}, d; linprog minimizes so the objective is -d
        c = np.zeros(n_states + 1)
        c[n_states] = -1.0

        # coefficients @ b + d_coefficient * d >= 0  <=>  -(...) <= 0
        A_ub = -np.hstack([coefficients, np.full((n_constraints, 1), d_coefficient)])
        b_ub = np.zeros(n_constraints)

        A_eq = np.ones((1, n_states + 1))
        A_eq[0, n_states] = 0.0
        b_eq = np.array([1.0])

        bounds = [(0.0, 1.0)] * n_states + [(None, None)]

        res = linprog(c, A_ub=A_ub, b_ub=b_ub, A_eq=A_eq, b_eq=b_eq, bounds=bounds, method=self.method)

        if res.status != 0:
            logger.debug(f"linprog did not reach optimality: status {res.status}, {res.message}")
            return None

        return LPSolution(
            belief=np.asarray(res.x[:n_states], dtype=float),
            d=float(res.x[n_states]),
            objective=float(-res.fun),
        )
