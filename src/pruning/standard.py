"""
Algorithm: Generalized Incremental Pruning (GIP)
Reference: Cassandra, Littman and Zhang (1997)
"""

from typing import List

from src.pruning.base import PruneMethod
from src.solver.alpha_vector import AlphaVector, cross_sum
from src.solver.vector_sets import VectorSetCollection


class PruneStandard(PruneMethod):
    name = "Generalized incremental pruning"

    def cross_sum(self, vsc: VectorSetCollection) -> List[AlphaVector]:
        if len(vsc) == 0:
            raise ValueError("Cannot compute the cross sum of an empty collection")

        # first prune individual vector sets before computing the cross sum
        pruned = self.prune_vector_set_collection(vsc)

        result = pruned[0]
        for i in range(1, len(pruned)):
            result = self.prune(cross_sum(result, pruned[i]))

        return result
