"""Witness LPs solved with PuLP and its bundled CBC solver."""

from typing import Optional

import numpy as np
import pulp

from src.lpsolver.base import LPModel, LPSolution
from src.utils.logging_utils import get_logger

logger = get_logger(__name__)


class LPPulp(LPModel):
    name = "PuLP CBC"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._solver = None

    def init(self) -> None:
        self._solver = pulp.PULP_CBC_CMD(msg=0)

    def close(self) -> None:
        self._solver = None

    def _solve_region_lp(self, coefficients: np.ndarray, d_coefficient: float) -> Optional[LPSolution]:
        if self._solver is None:
            self.init()

        n_states = coefficients.shape[1]
        problem = pulp.LpProblem("WitnessRegion", pulp.LpMaximize)

        # --- Decision Variables ----
        b_vars = [
            pulp.LpVariable(f"b_{i}", lowBound=0, upBound=1, cat=pulp.LpContinuous)
            for i in range(n_states)
        ]
        d_var = pulp.LpVariable("d", lowBound=None, upBound=None, cat=pulp.LpContinuous)

        # --- Objective Function ----
        problem += d_var, "maximize d"

        # --- The constraints ---
        problem += pulp.lpSum(b_vars) == 1, "BeliefSum"

        for j, row in enumerate(coefficients):
            expr = pulp.lpSum(float(row[i]) * b_vars[i] for i in range(n_states) if row[i] != 0.0)
            problem += expr + d_coefficient * d_var >= 0, f"Vector_{j}"

        try:
            status = problem.solve(self._solver)
        except pulp.PulpSolverError as exc:
            logger.debug(f"CBC failed: {exc}")
            return None

        if status != pulp.LpStatusOptimal:
            logger.debug(f"CBC did not reach optimality: {pulp.LpStatus[status]}")
            return None

        belief = np.array([v.varValue or 0.0 for v in b_vars], dtype=float)
        d = float(d_var.varValue or 0.0)
        objective = float(pulp.value(problem.objective))

        return LPSolution(belief=belief, d=d, objective=objective)
