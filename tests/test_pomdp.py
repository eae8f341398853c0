"""
Tests for POMDP module.
"""

import pytest
import numpy as np
from pathlib import Path

import yaml
from pydantic import ValidationError

from src.pomdp import (
    POMDP,
    BeliefPoint,
    POMDPFile,
    PolicyFSC,
    belief_update,
    export_dot_policy_graph,
    load_pomdp,
)

DOMAIN_DIR = Path(__file__).parent.parent / "domains"


def make_sensor_pomdp():
    """Two states observed through a noisy sensor."""
    return POMDP(
        S=["healthy", "failed"],
        A=["ignore", "repair"],
        O=["obs1", "obs2"],
        T=np.array([
            [[0.9, 0.1], [0.1, 0.9]],
            [[1.0, 0.0], [1.0, 0.0]],
        ]),
        Z=np.array([
            [[0.8, 0.2], [0.2, 0.8]],
            [[0.9, 0.1], [0.3, 0.7]],
        ]),
        R=np.array([[10.0, 5.0], [-100.0, -50.0]]),
        gamma=0.95,
    )


def test_belief_update_normalized():
    """Test that belief update returns normalized distribution."""
    pomdp = make_sensor_pomdp()
    belief = np.array([0.7, 0.3])

    new_belief = belief_update(pomdp, belief, 0, 0)

    assert np.isclose(new_belief.sum(), 1.0), "Belief should be normalized"
    assert np.all(new_belief >= 0), "Belief should be non-negative"
    assert len(new_belief) == len(pomdp.S), "Belief should have correct length"


def test_belief_update_matches_bayes_rule():
    """Test the posterior against a hand computation."""
    pomdp = make_sensor_pomdp()
    belief = np.array([0.7, 0.3])

    predicted = np.array([0.7 * 0.9 + 0.3 * 0.1, 0.7 * 0.1 + 0.3 * 0.9])
    expected = predicted * np.array([0.8, 0.2])
    expected /= expected.sum()

    np.testing.assert_allclose(belief_update(pomdp, belief, 0, 0), expected)

    bp = pomdp.update_belief(BeliefPoint(belief), 0, 0)
    np.testing.assert_allclose(bp.get_belief(), expected)


def test_belief_update_impossible_observation():
    """Impossible observations fall back to uniform or raise, depending on the entry point."""
    pomdp = POMDP(
        S=["s0", "s1"],
        A=["a"],
        O=["o0", "o1"],
        T=np.array([np.eye(2)]),
        Z=np.array([[[1.0, 0.0], [1.0, 0.0]]]),
        R=np.zeros((2, 1)),
    )

    np.testing.assert_allclose(belief_update(pomdp, np.array([0.3, 0.7]), 0, 1), [0.5, 0.5])

    with pytest.raises(ValueError):
        pomdp.update_belief(BeliefPoint([0.3, 0.7]), 0, 1)


def test_belief_update_invalid_indices():
    pomdp = make_sensor_pomdp()
    with pytest.raises(ValueError):
        belief_update(pomdp, np.array([0.5, 0.5]), 2, 0)
    with pytest.raises(ValueError):
        pomdp.update_belief(BeliefPoint([0.5, 0.5]), 0, 5)


def test_action_observation_probabilities_cached_once():
    pomdp = make_sensor_pomdp()
    b = BeliefPoint([0.5, 0.5])

    pomdp.prepare_belief(b)
    # P(obs1 | b, ignore) = 0.5 * 0.8 + 0.5 * 0.2
    assert b.get_action_observation_probability(0, 0) == pytest.approx(0.5)

    # a second preparation is a no-op, a second explicit set is an error
    pomdp.prepare_belief(b)
    with pytest.raises(ValueError):
        b.set_action_observation_probabilities(np.zeros((2, 2)))


def test_belief_point_history_equality():
    a = BeliefPoint([0.5, 0.5], history=[0, 1])
    b = BeliefPoint([0.2, 0.8], history=[0, 1])
    c = BeliefPoint([0.5, 0.5])

    assert a == b
    assert hash(a) == hash(b)
    assert a != c

    c.add_to_history(3)
    copied = c.get_history_copy()
    copied.append(4)
    assert c.history == [3]


def test_pomdp_rejects_non_stochastic_transitions():
    with pytest.raises(ValueError):
        POMDP(
            S=["s0", "s1"],
            A=["a"],
            O=["o"],
            T=np.array([[[0.5, 0.4], [0.0, 1.0]]]),
            Z=np.ones((1, 2, 1)),
            R=np.zeros((2, 1)),
        )


def test_pomdp_rejects_wrong_shapes():
    with pytest.raises(ValueError):
        POMDP(
            S=["s0", "s1"],
            A=["a"],
            O=["o"],
            T=np.array([np.eye(2)]),
            Z=np.ones((1, 2, 1)),
            R=np.zeros((1, 2)),
        )


def test_pomdp_rejects_invalid_discount():
    with pytest.raises(ValueError):
        POMDP(
            S=["s"],
            A=["a"],
            O=["o"],
            T=np.ones((1, 1, 1)),
            Z=np.ones((1, 1, 1)),
            R=np.zeros((1, 1)),
            gamma=1.5,
        )


def test_pomdp_lookups():
    pomdp = make_sensor_pomdp()

    assert pomdp.num_states == 2
    assert pomdp.num_actions == 2
    assert pomdp.num_observations == 2
    assert pomdp.discount_factor == 0.95
    assert pomdp.min_reward == -100.0
    assert pomdp.get_reward(1, 0) == -100.0
    assert pomdp.get_transition_probability(0, 1, 0) == 1.0
    assert pomdp.get_observation_probability(1, 1, 1) == 0.7
    assert pomdp.get_action_label(1) == "repair"
    assert pomdp.get_action_index("repair") == 1
    assert pomdp.get_action_index("0") == 0
    np.testing.assert_allclose(pomdp.get_initial_belief().get_belief(), [0.5, 0.5])

    with pytest.raises(ValueError):
        pomdp.get_reward(2, 0)
    with pytest.raises(ValueError):
        pomdp.get_action_index("replace")


def test_load_tiger():
    """Test loading the bundled tiger model."""
    pomdp = load_pomdp(str(DOMAIN_DIR / "tiger.yaml"))

    assert pomdp.name == "tiger"
    assert pomdp.A == ["listen", "open-left", "open-right"]
    assert pomdp.gamma == 0.95
    assert pomdp.get_reward(0, 1) == -100.0
    assert pomdp.get_reward(1, 1) == 10.0
    assert pomdp.get_observation_probability(0, 0, 0) == 0.85


def test_loader_defaults_name_and_start(tmp_path):
    data = yaml.safe_load((DOMAIN_DIR / "identity.yaml").read_text())
    del data["name"]
    path = tmp_path / "static.yaml"
    path.write_text(yaml.safe_dump(data))

    pomdp = load_pomdp(str(path))

    assert pomdp.name == "static"
    np.testing.assert_allclose(pomdp.b0, [0.5, 0.5])


def test_loader_rejects_missing_action():
    data = yaml.safe_load((DOMAIN_DIR / "tiger.yaml").read_text())
    del data["rewards"]["listen"]

    with pytest.raises(ValidationError):
        POMDPFile(**data)


def test_loader_rejects_unknown_field():
    data = yaml.safe_load((DOMAIN_DIR / "tiger.yaml").read_text())
    data["horizon"] = 10

    with pytest.raises(ValidationError):
        POMDPFile(**data)


def test_loader_missing_file():
    with pytest.raises(FileNotFoundError):
        load_pomdp("does/not/exist.yaml")


def test_dot_export_creates_file(tmp_path):
    """Test that dot export creates a file containing 'digraph'."""
    pomdp = make_sensor_pomdp()
    fsc = PolicyFSC(0, [0, 1], [[0, 1], [0, 0]])

    out_file = tmp_path / "graphs" / "policy.dot"
    export_dot_policy_graph(fsc, str(out_file), pomdp)

    content = out_file.read_text()
    assert "digraph" in content, "File should contain 'digraph'"
    assert 'n0 [label="0: ignore", shape=doublecircle]' in content
    assert 'n1 -> n0 [label="obs1, obs2"]' in content
