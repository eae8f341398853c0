"""
Algorithm: Incremental pruning with policy graph tracing
Reference: Cassandra, Littman and Zhang (1997)
"""

from typing import List

from src.pruning.base import PruneMethod
from src.solver.alpha_vector import AlphaVector, cross_sum_policy_graph, obs_sources_of
from src.solver.vector_sets import VectorSetCollection


class PrunePolicyGraph(PruneMethod):
    name = "Incremental pruning with policy graph tracing"

    def cross_sum(self, vsc: VectorSetCollection) -> List[AlphaVector]:
        if len(vsc) == 0:
            raise ValueError("Cannot compute the cross sum of an empty collection")

        # first prune individual vector sets before computing the cross sum
        pruned = self.prune_vector_set_collection(vsc)
        n_observations = len(pruned)

        if n_observations == 1:
            result = []
            for av in pruned[0]:
                traced = av.copy()
                traced.obs_source = obs_sources_of(av, n_observations)
                result.append(traced)
            return result

        # successors of observation 0 and 1 are set by the first cross sum
        result = self.prune(cross_sum_policy_graph(pruned[0], pruned[1], n_observations))

        for i in range(2, n_observations):
            result = self.prune(cross_sum_policy_graph(result, pruned[i], n_observations))

        return result
