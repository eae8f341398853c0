"""
Algorithm: Generalized Incremental Pruning (GIP) with accelerated pruning
Reference: Cassandra, Littman and Zhang (1997); Walraven and Spaan (2017)

After a cross-sum U (+) W a candidate z = U[i] + W[j] only has to be tested
against the vectors that differ from z in a single term. Either

    D'  = {U[i] + W[j'] : j' != j}  plus the members of D sharing W[j]
    D'' = {U[i'] + W[j] : i' != i}  plus the members of D sharing U[i]

can replace D in the witness LP, and the smaller of D, D' and D'' is used.
"""

from typing import List, Optional, Sequence

import numpy as np

from src.pruning.base import PruneMethod
from src.solver.alpha_vector import (
    AlphaVector,
    cross_sum,
    cross_sum_restricted,
    get_best_vector_index,
)
from src.solver.vector_sets import VectorSetCollection
from src.utils.logging_utils import get_logger

logger = get_logger(__name__)


class PruneAccelerated(PruneMethod):
    name = "Generalized incremental pruning with accelerated pruning"

    def _find_witness(self, w: AlphaVector, D: List[AlphaVector]) -> Optional[np.ndarray]:
        return self._require_lp().find_region_point_accelerated(w, D)

    def cross_sum(self, vsc: VectorSetCollection) -> List[AlphaVector]:
        if len(vsc) == 0:
            raise ValueError("Cannot compute the cross sum of an empty collection")

        pruned = self.prune_vector_set_collection(vsc)

        result = pruned[0]
        for i in range(1, len(pruned)):
            U = result
            W = pruned[i]
            result = self.prune_after_cross_sum(cross_sum(U, W), U, W)

        return result

    def prune_after_cross_sum(
        self,
        vectors: Sequence[AlphaVector],
        U: Sequence[AlphaVector],
        W: Sequence[AlphaVector],
    ) -> List[AlphaVector]:
        """Prune the cross-sum of U and W, exploiting how each vector was built."""
        lp = self._require_lp()
        Q = list(vectors)
        D: List[AlphaVector] = []
        reduced_tests = 0

        while Q:
            z = Q[0]

            if z.is_pointwise_dominated(D):
                Q.pop(0)
                continue

            u_origin = z.origin_u
            w_origin = z.origin_w

            # sizes of the potential D' and D'' sets
            d1_members = [av for av in D if av.origin_u != u_origin and av.origin_w == w_origin]
            d2_members = [av for av in D if av.origin_w != w_origin and av.origin_u == u_origin]
            d1_count = (len(W) - 1) + len(d1_members)
            d2_count = (len(U) - 1) + len(d2_members)

            if d1_count < len(D) and d1_count < d2_count:
                competitors = cross_sum_restricted(U[u_origin], W, w_origin) + d1_members
                reduced_tests += 1
            elif d2_count < len(D) and d2_count < d1_count:
                competitors = cross_sum_restricted(W[w_origin], U, u_origin) + d2_members
                reduced_tests += 1
            else:
                competitors = D

            b = lp.find_region_point_accelerated(z, competitors)

            if b is None:
                Q.pop(0)
            else:
                best = get_best_vector_index(b, Q)
                D.append(Q.pop(best))

        logger.debug(
            f"Pruned cross sum {len(U)}x{len(W)} to {len(D)} vectors, "
            f"{reduced_tests} witness tests on reduced sets"
        )
        return D
