"""
Solver interface.
"""

from abc import ABC, abstractmethod
from typing import List

from src.pomdp.schema import POMDP
from src.solver.alpha_vector import AlphaVector


class Solver(ABC):
    """Computes a value function for a POMDP."""

    @abstractmethod
    def get_type(self) -> str:
        pass

    @abstractmethod
    def get_total_solve_time(self) -> float:
        """Running time of the last call to ``solve``, in seconds."""

    @abstractmethod
    def solve(self, pomdp: POMDP) -> List[AlphaVector]:
        pass

    @abstractmethod
    def get_expected_value(self) -> float:
        """Value of the initial belief under the last computed value function."""
