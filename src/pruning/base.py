"""
Common contract of the incremental pruning strategies.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable, List, Optional, Sequence

import numpy as np

from src.solver.alpha_vector import AlphaVector, get_best_vector_index
from src.solver.vector_sets import VectorSetCollection

if TYPE_CHECKING:
    from src.lpsolver.base import LPModel

WitnessFn = Callable[[AlphaVector, List[AlphaVector]], Optional[np.ndarray]]


class PruneMethod(ABC):
    """
    Incremental pruning strategy (Cassandra, Littman and Zhang, 1997).

    Subclasses decide how the per-observation sets of one action are
    cross-summed and which LP query certifies a witness point.
    """

    name = "Pruning method"

    def __init__(self, lp: Optional["LPModel"] = None):
        self.lp = lp

    def set_lp_model(self, lp: "LPModel") -> None:
        self.lp = lp

    def get_name(self) -> str:
        return self.name

    @abstractmethod
    def cross_sum(self, vsc: VectorSetCollection) -> List[AlphaVector]:
        """Pruned cross-sum of all vector sets in ``vsc``."""

    def merge_sets(self, set_list: Sequence[Sequence[AlphaVector]]) -> List[AlphaVector]:
        """Union of several vector sets, pruned."""
        merged = [av for vector_set in set_list for av in vector_set]
        return self.prune(merged)

    def prune(self, vectors: Sequence[AlphaVector]) -> List[AlphaVector]:
        """Remove vectors that do not contribute to the upper surface of ``vectors``."""
        return self._prune_with(vectors, self._find_witness)

    def _find_witness(self, w: AlphaVector, D: List[AlphaVector]) -> Optional[np.ndarray]:
        return self._require_lp().find_region_point(w, D)

    def _require_lp(self) -> "LPModel":
        if self.lp is None:
            raise ValueError(f"{self.name}: no LP model configured")
        return self.lp

    @staticmethod
    def _prune_with(vectors: Sequence[AlphaVector], find_witness: WitnessFn) -> List[AlphaVector]:
        W = list(vectors)
        D: List[AlphaVector] = []

        while W:
            w = W[0]

            if w.is_pointwise_dominated(D):
                W.pop(0)
                continue

            b = find_witness(w, D)
            if b is None:
                W.pop(0)
                continue

            # keep the best vector at the witness, which is not necessarily w
            best = get_best_vector_index(b, W)
            D.append(W.pop(best))

        return D

    def prune_vector_set_collection(self, vsc: VectorSetCollection) -> VectorSetCollection:
        """Prune every set of the collection individually."""
        return vsc.map(self.prune)
