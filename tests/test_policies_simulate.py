"""
Tests for policies, controllers and policy simulation.
"""

import networkx as nx
import numpy as np
import pytest

from src.pomdp import (
    POMDP,
    BeliefPoint,
    PolicyFSC,
    PolicySimulator,
    PolicyVector,
    policy_graph_from_vectors,
    rollout,
)
from src.solver.alpha_vector import AlphaVector
from src.solver.output import dump_policy_graph, dump_value_function
from src.utils.data_validation import validate_policy_graph


@pytest.fixture
def pomdp():
    """Static states revealed by a noiseless sensor, reward 1 for naming the state."""
    return POMDP(
        S=["s0", "s1"],
        A=["a0", "a1"],
        O=["o0", "o1"],
        T=np.array([np.eye(2), np.eye(2)]),
        Z=np.array([np.eye(2), np.eye(2)]),
        R=np.array([[1.0, 0.0], [0.0, 1.0]]),
        gamma=0.5,
    )


@pytest.fixture
def optimal_vectors():
    return [
        AlphaVector([2.0, 1.0], action=0, obs_source=np.array([0, 1])),
        AlphaVector([1.0, 2.0], action=1, obs_source=np.array([0, 1])),
    ]


def test_vector_policy_selects_best_vector(optimal_vectors):
    policy = PolicyVector(optimal_vectors)

    assert policy.get_action(BeliefPoint([0.9, 0.1])) == 0
    assert policy.get_action(BeliefPoint([0.1, 0.9])) == 1
    # ties go to the first vector
    assert policy.get_action(BeliefPoint([0.5, 0.5])) == 0


def test_vector_policy_needs_vectors():
    with pytest.raises(ValueError):
        PolicyVector([])


def test_fsc_follows_graph():
    fsc = PolicyFSC(1, [0, 1, 0], [[1, 2], [0, None], [2, 2]])

    assert fsc.get_action(None) == 1
    fsc.update(1, 0)
    assert fsc.current_node == 0
    fsc.update(0, 1)
    assert fsc.get_action(None) == 0
    assert fsc.current_node == 2

    fsc.reset()
    assert fsc.current_node == 1

    with pytest.raises(ValueError):
        fsc.update(1, 1)


def test_fsc_rejects_invalid_initial_node():
    with pytest.raises(ValueError):
        PolicyFSC(3, [0, 1], [[0, 0], [1, 1]])


def test_fsc_to_graph():
    fsc = PolicyFSC(0, [0, 1], [[0, 1], [1, 1]])
    graph = fsc.to_graph()

    assert isinstance(graph, nx.DiGraph)
    assert graph.nodes[0]["initial"]
    assert graph[0][1]["observations"] == [1]
    assert graph[1][1]["observations"] == [0, 1]
    assert validate_policy_graph(graph, n_observations=2)


def test_validate_policy_graph_rejects_bad_graphs():
    graph = nx.DiGraph()
    graph.add_node(0, action=0)
    graph.add_node(1, action=1)
    graph.add_edge(0, 1, observations=[0])
    graph.add_edge(0, 0, observations=[0])

    with pytest.raises(ValueError):
        validate_policy_graph(graph, n_observations=2)

    graph = nx.DiGraph()
    graph.add_node(0, action=0)
    graph.add_edge(0, 0, observations=[3])
    with pytest.raises(ValueError):
        validate_policy_graph(graph, n_observations=2)

    graph = nx.DiGraph()
    graph.add_node(0)
    with pytest.raises(ValueError):
        validate_policy_graph(graph, n_observations=2)


def test_fsc_from_files(tmp_path, pomdp, optimal_vectors):
    dump_value_function(pomdp, optimal_vectors, str(tmp_path / "model.alpha"))
    dump_policy_graph(pomdp, optimal_vectors, str(tmp_path / "model.pg"))

    fsc = PolicyFSC.create_fsc(pomdp, str(tmp_path / "model.alpha"), str(tmp_path / "model.pg"))

    assert fsc.num_nodes == 2
    assert fsc.initial_node == 0
    assert fsc.next_nodes == [[0, 1], [0, 1]]


def test_fsc_from_files_size_mismatch(tmp_path, pomdp, optimal_vectors):
    dump_value_function(pomdp, optimal_vectors[:1], str(tmp_path / "model.alpha"))
    dump_policy_graph(pomdp, optimal_vectors, str(tmp_path / "model.pg"))

    with pytest.raises(ValueError):
        PolicyFSC.create_fsc(pomdp, str(tmp_path / "model.alpha"), str(tmp_path / "model.pg"))


def test_fsc_from_vectors(pomdp, optimal_vectors):
    fsc = PolicyFSC.from_vectors(pomdp, optimal_vectors)

    assert fsc.actions == [0, 1]
    assert policy_graph_from_vectors(pomdp, optimal_vectors) == [[0, 1], [0, 1]]


def test_rollout_records_history(pomdp, optimal_vectors):
    result = rollout(pomdp, PolicyVector(optimal_vectors), horizon=6, true_state=1,
                     rng=np.random.default_rng(0))

    assert len(result["action_history"]) == 6
    assert len(result["belief_history"]) == 7
    assert result["state_history"] == [1] * 7
    assert result["observation_history"] == [1] * 6
    # the first action is a guess at the uniform belief, afterwards the state is known
    assert result["action_history"] == [0, 1, 1, 1, 1, 1]
    assert result["total_reward"] == 5.0
    assert result["discounted_reward"] == pytest.approx(sum(0.5 ** t for t in range(1, 6)))


def test_simulator_matches_expected_value(pomdp, optimal_vectors):
    simulator = PolicySimulator(pomdp, PolicyVector(optimal_vectors), np.random.default_rng(1))

    with pytest.raises(RuntimeError):
        simulator.get_mean_discounted_value()

    value = simulator.run(runs=400, steps=30)

    # V(b0) = 0.5 * 2 + 0.5 * 1
    assert value == pytest.approx(1.5, abs=0.1)
    assert simulator.get_mean_discounted_value() == value


def test_simulator_controller_and_vectors_agree(pomdp, optimal_vectors):
    vector_value = PolicySimulator(pomdp, PolicyVector(optimal_vectors), np.random.default_rng(5)).run(200, 20)
    graph_value = PolicySimulator(pomdp, PolicyFSC.from_vectors(pomdp, optimal_vectors),
                                  np.random.default_rng(5)).run(200, 20)

    assert vector_value == pytest.approx(graph_value)


def test_simulator_rejects_empty_runs(pomdp, optimal_vectors):
    with pytest.raises(ValueError):
        PolicySimulator(pomdp, PolicyVector(optimal_vectors)).run(0, 10)
