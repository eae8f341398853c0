"""
Utility modules for the POMDP solver.
"""

from .logging_utils import setup_logger, get_logger, set_level
from .data_validation import validate_stochastic_rows, validate_belief, validate_policy_graph

__all__ = [
    "setup_logger",
    "get_logger",
    "set_level",
    "validate_stochastic_rows",
    "validate_belief",
    "validate_policy_graph",
]
