"""
Incremental pruning strategies.
"""

from typing import TYPE_CHECKING, Optional

from src.pruning.base import PruneMethod
from src.pruning.standard import PruneStandard
from src.pruning.accelerated import PruneAccelerated
from src.pruning.policy_graph import PrunePolicyGraph

if TYPE_CHECKING:
    from src.lpsolver.base import LPModel

PRUNE_METHODS = {
    "standard": PruneStandard,
    "accelerated": PruneAccelerated,
    "policy_graph": PrunePolicyGraph,
}


def create_prune_method(name: str, lp: Optional["LPModel"] = None) -> PruneMethod:
    """Instantiate the pruning strategy called ``name`` using oracle ``lp``."""
    if name not in PRUNE_METHODS:
        raise ValueError(f"Unexpected pruning method {name!r}, expected one of {sorted(PRUNE_METHODS)}")
    return PRUNE_METHODS[name](lp)


__all__ = [
    "PruneMethod",
    "PruneStandard",
    "PruneAccelerated",
    "PrunePolicyGraph",
    "PRUNE_METHODS",
    "create_prune_method",
]
