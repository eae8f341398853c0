"""
Alpha-vectors and the vector-set algebra used by incremental pruning.

An alpha-vector is a linear function V(b) = sum_s entries[s] * b[s] over the
belief simplex, tagged with the action it prescribes. Provenance fields are
plain integer indices into caller-owned lists:

- ``origin_u`` / ``origin_w``: positions of the two terms a cross-sum vector
  was built from
- ``index`` / ``obs``: vector of the previous stage and observation a
  back-projected vector belongs to
- ``obs_source``: per observation, the vector to follow after observing it
  (policy graph bookkeeping)
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np


@dataclass(eq=False)
class AlphaVector:
    entries: np.ndarray
    action: int = -1
    origin_u: int = -1
    origin_w: int = -1
    index: int = -1
    obs: int = -1
    obs_source: Optional[np.ndarray] = None

    def __post_init__(self):
        self.entries = np.asarray(self.entries, dtype=float)

    def __len__(self) -> int:
        return len(self.entries)

    def size(self) -> int:
        return len(self.entries)

    def get_entry(self, s: int) -> float:
        return float(self.entries[s])

    def copy(self) -> "AlphaVector":
        return AlphaVector(
            entries=self.entries.copy(),
            action=self.action,
            origin_u=self.origin_u,
            origin_w=self.origin_w,
            index=self.index,
            obs=self.obs,
            obs_source=None if self.obs_source is None else self.obs_source.copy(),
        )

    def is_pointwise_dominated(self, vectors: Sequence["AlphaVector"]) -> bool:
        """
        True if a single vector of ``vectors`` is at least as large as this
        vector in every state. Cheap sufficient test run before the LP.
        """
        if len(vectors) == 0:
            return False
        matrix = _as_matrix(vectors, len(self.entries))
        return bool(np.any(np.all(matrix >= self.entries, axis=1)))

    def __repr__(self):
        return f"AlphaVector(action={self.action}, entries={np.array2string(self.entries, precision=4)})"


def _as_matrix(vectors: Sequence[AlphaVector], n_states: int) -> np.ndarray:
    matrix = np.array([v.entries for v in vectors], dtype=float)
    if matrix.ndim != 2 or matrix.shape[1] != n_states:
        raise ValueError(f"Vector set does not consist of vectors of length {n_states}")
    return matrix


def dot_product(vector, belief) -> float:
    entries = vector.entries if isinstance(vector, AlphaVector) else np.asarray(vector, dtype=float)
    b = np.asarray(belief, dtype=float)
    if entries.shape != b.shape:
        raise ValueError(f"Dimension mismatch: vector {entries.shape} and belief {b.shape}")
    return float(entries @ b)


def sum_vectors(a: AlphaVector, b: AlphaVector) -> AlphaVector:
    """Elementwise sum; the action of ``a`` is kept."""
    if len(a) != len(b):
        raise ValueError(f"Cannot add vectors of length {len(a)} and {len(b)}")
    return AlphaVector(a.entries + b.entries, action=a.action)


def cross_sum(U: Sequence[AlphaVector], W: Sequence[AlphaVector]) -> List[AlphaVector]:
    """Cartesian sum of two vector sets, |U| * |W| vectors."""
    result = []
    for i, u in enumerate(U):
        for j, w in enumerate(W):
            av = sum_vectors(u, w)
            av.origin_u = i
            av.origin_w = j
            result.append(av)
    return result


def cross_sum_restricted(u: AlphaVector, W: Sequence[AlphaVector], exclude_index: int) -> List[AlphaVector]:
    """Sum of ``u`` with every member of ``W`` except ``W[exclude_index]``."""
    result = []
    for j, w in enumerate(W):
        if j == exclude_index:
            continue
        av = sum_vectors(u, w)
        av.origin_w = j
        result.append(av)
    return result


def obs_sources_of(vector: AlphaVector, n_observations: int) -> np.ndarray:
    """
    Observation successors recorded on a vector. A back-projected vector
    that has no ``obs_source`` yet contributes ``index`` for its own ``obs``.
    """
    if vector.obs_source is not None:
        return vector.obs_source.copy()

    sources = np.full(n_observations, -1, dtype=int)
    if vector.obs >= 0:
        sources[vector.obs] = vector.index
    return sources


def cross_sum_policy_graph(
    U: Sequence[AlphaVector],
    W: Sequence[AlphaVector],
    n_observations: int,
) -> List[AlphaVector]:
    """Cross-sum that also merges the observation successors of both terms."""
    result = []
    for i, u in enumerate(U):
        u_sources = obs_sources_of(u, n_observations)
        for j, w in enumerate(W):
            w_sources = obs_sources_of(w, n_observations)
            av = sum_vectors(u, w)
            av.origin_u = i
            av.origin_w = j
            av.obs_source = np.where(w_sources >= 0, w_sources, u_sources)
            result.append(av)
    return result


def get_best_vector_index(belief, vectors: Sequence[AlphaVector]) -> int:
    """Index of the vector maximizing the dot product with ``belief``, first one on ties."""
    if len(vectors) == 0:
        raise ValueError("Cannot select the best vector of an empty set")
    b = np.asarray(belief, dtype=float)
    values = _as_matrix(vectors, len(b)) @ b
    return int(np.argmax(values))


def get_value(belief, vectors: Sequence[AlphaVector]) -> float:
    b = np.asarray(belief, dtype=float)
    return dot_product(vectors[get_best_vector_index(b, vectors)], b)
