#!/usr/bin/env python3
"""
Solve a POMDP model file exactly and write its value function and policy graph.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional, Tuple

import pandas as pd

from src.config import Config
from src.lpsolver import create_lp_model
from src.pomdp import load_pomdp
from src.pruning import create_prune_method
from src.solver import AlphaVector, SolverExact, SolverProperties, load_solver_properties
from src.utils.logging_utils import get_logger, set_level

logger = get_logger(__name__)


def resolve_model_path(model: str, domain_dir: str) -> Path:
    """Model files are looked up as given, then inside the domain directory."""
    path = Path(model)
    if path.exists():
        return path

    for candidate in (Path(domain_dir) / model, Path(domain_dir) / f"{model}.yaml"):
        if candidate.exists():
            return candidate

    raise FileNotFoundError(f"Model {model!r} not found (also looked in {domain_dir})")


def solve_pomdp(model: str, properties: SolverProperties) -> Tuple[List[AlphaVector], pd.DataFrame]:
    """
    Solve a model with the configured pruning method and LP backend.

    Args:
        model: Model file, or model name inside ``properties.domain_dir``
        properties: Solver parameters

    Returns:
        Tuple of (final vector set, per-stage summary)
    """
    pomdp = load_pomdp(str(resolve_model_path(model, properties.domain_dir)))

    lp = create_lp_model(
        properties.lp_solver,
        epsilon=properties.epsilon,
        accelerated_lp_threshold=properties.accelerated_lp_threshold,
        accelerated_lp_tolerance=properties.accelerated_lp_tolerance,
        coefficient_threshold=properties.coefficient_threshold,
    )
    pm = create_prune_method(properties.pruning_method, lp)

    try:
        solver = SolverExact(properties, lp, pm)
        vectors = solver.solve(pomdp)
    finally:
        lp.close()

    summary_df = solver.get_stage_summary()
    summary_path = Path(properties.output_dir) / f"{pomdp.name}.stages.csv"
    summary_df.to_csv(summary_path, index=False)

    logger.info(f"Expected value: {solver.get_expected_value():.6f}")
    logger.info(f"Running time: {solver.get_total_solve_time():.3f} sec")
    logger.info(f"Stage summary: {summary_path}")

    return vectors, summary_df


def main(argv: Optional[List[str]] = None) -> int:
    """Main entrypoint for the exact solver."""
    parser = argparse.ArgumentParser(description="Solve a POMDP using generalized incremental pruning")
    parser.add_argument("model", type=str,
                        help="Model YAML file, or its name inside the domain directory")
    parser.add_argument("--config", type=str, default=None,
                        help="Solver configuration YAML (defaults to SOLVER_CONFIG if present)")
    parser.add_argument("--pruning-method", choices=["standard", "accelerated"], default=None,
                        help="Override the pruning method")
    parser.add_argument("--lp-solver", choices=["scipy", "pulp"], default=None,
                        help="Override the LP backend")
    parser.add_argument("--fixed-stages", type=int, default=None,
                        help="Run a fixed number of stages")
    parser.add_argument("--output-dir", type=str, default=None,
                        help="Override the output directory")
    parser.add_argument("--log-level", type=str, default=None,
                        help="Logging level (DEBUG, INFO, ...)")
    args = parser.parse_args(argv)

    if args.log_level:
        set_level(args.log_level)

    config_path = Path(args.config) if args.config else Config.SOLVER_CONFIG
    if args.config or config_path.exists():
        properties = load_solver_properties(str(config_path))
    else:
        properties = SolverProperties(output_dir=str(Config.OUTPUT_DIR), domain_dir=str(Config.DOMAIN_DIR))

    overrides = {
        "pruning_method": args.pruning_method,
        "lp_solver": args.lp_solver,
        "fixed_stages": args.fixed_stages,
        "output_dir": args.output_dir,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if overrides:
        properties = SolverProperties(**{**properties.model_dump(), **overrides})

    Path(properties.output_dir).mkdir(parents=True, exist_ok=True)

    vectors, summary_df = solve_pomdp(args.model, properties)

    print("\n=== Stages ===")
    print(summary_df.to_string(index=False))
    print(f"\nFinal value function: {len(vectors)} vectors")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
