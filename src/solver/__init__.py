"""
Exact POMDP solver.
"""

from src.solver.alpha_vector import AlphaVector
from src.solver.vector_sets import VectorSetCollection
from src.solver.properties import SolverProperties, load_solver_properties
from src.solver.base import Solver
from src.solver.exact import SolverExact

__all__ = [
    "AlphaVector",
    "VectorSetCollection",
    "SolverProperties",
    "load_solver_properties",
    "Solver",
    "SolverExact",
]
