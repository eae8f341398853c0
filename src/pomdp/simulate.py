"""
POMDP simulation and rollouts.
"""

from typing import Any, Dict, Optional

import numpy as np

from src.config import Config
from src.pomdp.belief import BeliefPoint, belief_update
from src.pomdp.policies import Policy
from src.pomdp.schema import POMDP
from src.utils.logging_utils import get_logger

logger = get_logger(__name__)


def rollout(
    pomdp: POMDP,
    policy: Policy,
    horizon: int = 25,
    start_belief: Optional[np.ndarray] = None,
    true_state: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> Dict[str, Any]:
    """
    Simulate a single POMDP rollout.

    Args:
        pomdp: POMDP model
        policy: Policy to execute (reset before the first step)
        horizon: Number of steps to simulate
        start_belief: Initial belief vector (defaults to the model's b0)
        true_state: True hidden state index (if None, sample from belief)
        rng: Random number generator

    Returns:
        Dict with keys:
            - total_reward: Cumulative undiscounted reward
            - discounted_reward: Cumulative discounted reward
            - belief_history: List of belief vectors
            - action_history: List of action indices
            - observation_history: List of observation indices
            - state_history: List of true state indices
            - reward_history: List of step rewards
    """
    if rng is None:
        rng = np.random.default_rng(Config.DEFAULT_RANDOM_SEED)

    belief = pomdp.b0.copy() if start_belief is None else np.asarray(start_belief, dtype=float).copy()
    if true_state is None:
        true_state = int(rng.choice(pomdp.num_states, p=belief))

    policy.reset()

    belief_history = [belief.copy()]
    action_history = []
    observation_history = []
    state_history = [true_state]
    reward_history = []
    total_reward = 0.0
    discounted_reward = 0.0

    state = true_state

    for step in range(horizon):
        action = policy.get_action(BeliefPoint(belief))
        action_history.append(action)

        reward = pomdp.get_reward(state, action)
        reward_history.append(reward)
        total_reward += reward
        discounted_reward += pomdp.gamma ** step * reward

        # Sample next state from T[a][s, :]
        next_state = int(rng.choice(pomdp.num_states, p=pomdp.T[action, state, :]))
        state_history.append(next_state)

        # Sample observation from Z[a][s', :]
        observation = int(rng.choice(pomdp.num_observations, p=pomdp.Z[action, next_state, :]))
        observation_history.append(observation)

        policy.update(action, observation)

        belief = belief_update(pomdp, belief, action, observation)
        belief_history.append(belief.copy())

        state = next_state

    return {
        "total_reward": total_reward,
        "discounted_reward": discounted_reward,
        "belief_history": belief_history,
        "action_history": action_history,
        "observation_history": observation_history,
        "state_history": state_history,
        "reward_history": reward_history,
    }


class PolicySimulator:
    """
    Estimates the expected discounted value of a policy by Monte Carlo
    simulation from the initial belief of the model.
    """

    def __init__(self, pomdp: POMDP, policy: Policy, rng: Optional[np.random.Generator] = None):
        self.pomdp = pomdp
        self.policy = policy
        self.rng = rng if rng is not None else np.random.default_rng(Config.DEFAULT_RANDOM_SEED)
        self.mean_discounted_value: Optional[float] = None

    def run(self, runs: int, steps: int) -> float:
        """Simulate ``runs`` episodes of ``steps`` steps and return the mean discounted value."""
        if runs <= 0 or steps <= 0:
            raise ValueError("runs and steps must be positive")

        pomdp = self.pomdp
        total_value = 0.0

        for run in range(runs):
            if run > 0 and run % 5000 == 0:
                logger.info(f"Simulated {run} of {runs} runs")

            b = pomdp.get_initial_belief()
            state = int(self.rng.choice(pomdp.num_states, p=b.get_belief()))
            self.policy.reset()

            run_value = 0.0
            for step in range(steps):
                action = self.policy.get_action(b)
                run_value += pomdp.gamma ** step * pomdp.get_reward(state, action)

                next_state = int(self.rng.choice(pomdp.num_states, p=pomdp.T[action, state, :]))
                observation = int(self.rng.choice(pomdp.num_observations, p=pomdp.Z[action, next_state, :]))

                self.policy.update(action, observation)
                b = pomdp.update_belief(b, action, observation)
                state = next_state

            total_value += run_value

        self.mean_discounted_value = total_value / runs
        return self.mean_discounted_value

    def get_mean_discounted_value(self) -> float:
        if self.mean_discounted_value is None:
            raise RuntimeError("Call run() before requesting the mean discounted value")
        return self.mean_discounted_value
