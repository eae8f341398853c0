"""
Ordered collection of alpha-vector sets, one set per observation.
"""

from typing import Callable, Iterator, List, Optional, Sequence

from src.solver.alpha_vector import AlphaVector


class VectorSetCollection:
    """Vector sets of a single action, indexed by observation."""

    def __init__(self, sets: Optional[Sequence[Sequence[AlphaVector]]] = None):
        self._sets: List[List[AlphaVector]] = [list(s) for s in sets] if sets else []

    def add_vector_set(self, vector_set: Sequence[AlphaVector]) -> None:
        self._sets.append(list(vector_set))

    def get_vector_set(self, i: int) -> List[AlphaVector]:
        if not 0 <= i < len(self._sets):
            raise ValueError(f"Vector set index {i} out of range [0, {len(self._sets)})")
        return self._sets[i]

    def map(self, fn: Callable[[List[AlphaVector]], List[AlphaVector]]) -> "VectorSetCollection":
        """Return a new collection with ``fn`` applied to every set."""
        return VectorSetCollection([fn(s) for s in self._sets])

    def size(self) -> int:
        return len(self._sets)

    def __len__(self) -> int:
        return len(self._sets)

    def __getitem__(self, i: int) -> List[AlphaVector]:
        return self.get_vector_set(i)

    def __iter__(self) -> Iterator[List[AlphaVector]]:
        return iter(self._sets)
