"""
Witness-point LP oracles with interchangeable numeric backends.
"""

from src.lpsolver.base import LPModel, LPSolution
from src.lpsolver.scipy_backend import LPScipy
from src.lpsolver.pulp_backend import LPPulp

LP_BACKENDS = {
    "scipy": LPScipy,
    "pulp": LPPulp,
}


def create_lp_model(
    name: str,
    epsilon: float = 1e-6,
    accelerated_lp_threshold: int = 200,
    accelerated_lp_tolerance: float = 1e-4,
    coefficient_threshold: float = 1e-9,
) -> LPModel:
    """Instantiate, configure and initialize the LP backend called ``name``."""
    if name not in LP_BACKENDS:
        raise ValueError(f"Unexpected LP solver {name!r}, expected one of {sorted(LP_BACKENDS)}")

    lp = LP_BACKENDS[name]()
    lp.set_epsilon(epsilon)
    lp.set_accelerated_lp_threshold(accelerated_lp_threshold)
    lp.set_accelerated_lp_tolerance(accelerated_lp_tolerance)
    lp.set_coefficient_threshold(coefficient_threshold)
    lp.init()
    return lp


__all__ = [
    "LPModel",
    "LPSolution",
    "LPScipy",
    "LPPulp",
    "LP_BACKENDS",
    "create_lp_model",
]
