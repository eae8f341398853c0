#!/usr/bin/env python3
"""
Estimate the value of a solved policy by simulation, both greedily from the
value function and by executing the policy graph as a controller.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np

from src.config import Config
from src.pomdp import PolicyFSC, PolicySimulator, PolicyVector, export_dot_policy_graph, load_pomdp
from src.utils.logging_utils import get_logger

logger = get_logger(__name__)


def simulate_policy(
    model_file: str,
    output_dir: str,
    runs: int = 1000,
    steps: int = 100,
    seed: int = Config.DEFAULT_RANDOM_SEED,
    dot_file: Optional[str] = None,
) -> Dict[str, float]:
    """
    Simulate the vector policy and, if a policy graph exists, the controller.

    Args:
        model_file: Model YAML file that was solved
        output_dir: Directory holding ``<name>.alpha`` and ``<name>.pg``
        runs: Number of simulated episodes
        steps: Steps per episode
        seed: Random seed
        dot_file: Optional destination of a DOT rendering of the controller

    Returns:
        Dict mapping policy type to its mean discounted value
    """
    pomdp = load_pomdp(model_file)
    alpha_file = Path(output_dir) / f"{pomdp.name}.alpha"
    pg_file = Path(output_dir) / f"{pomdp.name}.pg"

    results = {}

    policy_vector = PolicyVector.from_file(str(alpha_file), pomdp)
    sim_vector = PolicySimulator(pomdp, policy_vector, np.random.default_rng(seed))
    results["vector"] = sim_vector.run(runs, steps)

    if pg_file.exists():
        fsc = PolicyFSC.create_fsc(pomdp, str(alpha_file), str(pg_file))
        sim_graph = PolicySimulator(pomdp, fsc, np.random.default_rng(seed + 1))
        results["graph"] = sim_graph.run(runs, steps)

        if dot_file:
            export_dot_policy_graph(fsc, dot_file, pomdp)
    else:
        logger.warning(f"No policy graph found at {pg_file}, only simulating the vector policy")

    for policy_type, value in results.items():
        logger.info(f"Expected value {policy_type}: {value:.6f}")

    return results


def main(argv: Optional[List[str]] = None) -> int:
    """Main entrypoint for policy simulation."""
    parser = argparse.ArgumentParser(description="Simulate a solved POMDP policy")
    parser.add_argument("model", type=str, help="Model YAML file")
    parser.add_argument("--output-dir", type=str, default=str(Config.OUTPUT_DIR),
                        help="Directory containing the solver output")
    parser.add_argument("--runs", type=int, default=1000, help="Number of simulated episodes")
    parser.add_argument("--steps", type=int, default=100, help="Steps per episode")
    parser.add_argument("--seed", type=int, default=Config.DEFAULT_RANDOM_SEED, help="Random seed")
    parser.add_argument("--dot", type=str, default=None, help="Write the policy graph as a DOT file")
    args = parser.parse_args(argv)

    results = simulate_policy(args.model, args.output_dir, args.runs, args.steps, args.seed, args.dot)

    print("\n=== Mean discounted value ===")
    for policy_type, value in results.items():
        print(f"{policy_type}: {value:.6f}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
