"""
Tests for alpha-vector algebra and vector set collections.
"""

import numpy as np
import pytest

from src.solver.alpha_vector import (
    AlphaVector,
    cross_sum,
    cross_sum_policy_graph,
    cross_sum_restricted,
    dot_product,
    get_best_vector_index,
    get_value,
    obs_sources_of,
    sum_vectors,
)
from src.solver.vector_sets import VectorSetCollection


def test_dot_product():
    av = AlphaVector([1.0, 2.0, 3.0])
    assert dot_product(av, [0.2, 0.3, 0.5]) == pytest.approx(0.2 + 0.6 + 1.5)


def test_dot_product_dimension_mismatch():
    with pytest.raises(ValueError):
        dot_product(AlphaVector([1.0, 2.0]), [1.0, 0.0, 0.0])


def test_sum_vectors_keeps_first_action():
    a = AlphaVector([1.0, 2.0], action=3)
    b = AlphaVector([0.5, -1.0], action=1)
    s = sum_vectors(a, b)
    np.testing.assert_allclose(s.entries, [1.5, 1.0])
    assert s.action == 3


def test_sum_vectors_length_mismatch():
    with pytest.raises(ValueError):
        sum_vectors(AlphaVector([1.0]), AlphaVector([1.0, 2.0]))


def test_cross_sum_size_and_origins():
    U = [AlphaVector([1.0, 0.0]), AlphaVector([0.0, 1.0]), AlphaVector([0.5, 0.5])]
    W = [AlphaVector([10.0, 0.0]), AlphaVector([0.0, 10.0])]

    result = cross_sum(U, W)

    assert len(result) == len(U) * len(W)
    for av in result:
        expected = U[av.origin_u].entries + W[av.origin_w].entries
        np.testing.assert_allclose(av.entries, expected)

    # U is the outer loop
    assert [(av.origin_u, av.origin_w) for av in result[:2]] == [(0, 0), (0, 1)]


def test_cross_sum_restricted_skips_excluded_index():
    u = AlphaVector([1.0, 1.0])
    W = [AlphaVector([0.0, 0.0]), AlphaVector([1.0, 0.0]), AlphaVector([0.0, 1.0])]

    result = cross_sum_restricted(u, W, exclude_index=1)

    assert len(result) == 2
    assert [av.origin_w for av in result] == [0, 2]
    np.testing.assert_allclose(result[1].entries, [1.0, 2.0])


def test_pointwise_domination():
    z = AlphaVector([1.0, 1.0])
    assert z.is_pointwise_dominated([AlphaVector([1.0, 2.0])])
    assert z.is_pointwise_dominated([AlphaVector([1.0, 1.0])])
    assert not z.is_pointwise_dominated([AlphaVector([2.0, 0.0]), AlphaVector([0.0, 2.0])])
    assert not z.is_pointwise_dominated([])


def test_best_vector_index_first_on_ties():
    vectors = [AlphaVector([1.0, 0.0]), AlphaVector([0.0, 1.0]), AlphaVector([1.0, 0.0])]
    assert get_best_vector_index([1.0, 0.0], vectors) == 0
    assert get_best_vector_index([0.0, 1.0], vectors) == 1
    # at b = (0.5, 0.5) all three vectors tie
    assert get_best_vector_index([0.5, 0.5], vectors) == 0


def test_best_vector_index_empty_set():
    with pytest.raises(ValueError):
        get_best_vector_index([1.0], [])


def test_get_value():
    vectors = [AlphaVector([3.0, 0.0]), AlphaVector([0.0, 2.0])]
    assert get_value([0.25, 0.75], vectors) == pytest.approx(1.5)


def test_obs_sources_of_back_projected_vector():
    av = AlphaVector([0.0, 0.0], index=4, obs=1)
    np.testing.assert_array_equal(obs_sources_of(av, 3), [-1, 4, -1])


def test_cross_sum_policy_graph_merges_successors():
    U = [AlphaVector([1.0, 0.0], action=0, index=2, obs=0)]
    W = [AlphaVector([0.0, 1.0], action=0, index=5, obs=1), AlphaVector([0.5, 0.5], action=0, index=7, obs=1)]

    result = cross_sum_policy_graph(U, W, n_observations=2)

    assert len(result) == 2
    np.testing.assert_array_equal(result[0].obs_source, [2, 5])
    np.testing.assert_array_equal(result[1].obs_source, [2, 7])


def test_copy_is_independent():
    av = AlphaVector([1.0, 2.0], action=1, obs_source=np.array([0, 1]))
    copied = av.copy()
    copied.entries[0] = 99.0
    copied.obs_source[0] = 5

    assert av.entries[0] == 1.0
    assert av.obs_source[0] == 0
    assert copied.action == 1


def test_vector_set_collection():
    vsc = VectorSetCollection()
    vsc.add_vector_set([AlphaVector([1.0])])
    vsc.add_vector_set([AlphaVector([2.0]), AlphaVector([3.0])])

    assert len(vsc) == 2
    assert vsc.size() == 2
    assert len(vsc[1]) == 2

    doubled = vsc.map(lambda s: s + s)
    assert [len(s) for s in doubled] == [2, 4]
    # the source collection is left untouched
    assert [len(s) for s in vsc] == [1, 2]

    with pytest.raises(ValueError):
        vsc.get_vector_set(2)
