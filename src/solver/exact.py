"""
Exact value iteration for POMDPs using generalized incremental pruning.

Each dynamic programming stage back-projects the current value function
through every (action, observation) pair, cross-sums the per-observation
sets of each action and merges the per-action results:

    g[k][a][o](s) = sum_s' P(o | a, s') P(s' | s, a) V[k](s')
    G_a^o         = { R_a / |O| + gamma * g[k][a][o] : k }
    G_a           = prune(G_a^0 (+) ... (+) G_a^{|O|-1})
    V'            = prune(union_a G_a)
"""

import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

import numpy as np
import pandas as pd

from src.pomdp.schema import POMDP
from src.pruning.base import PruneMethod
from src.pruning.policy_graph import PrunePolicyGraph
from src.solver.alpha_vector import AlphaVector, get_value
from src.solver.base import Solver
from src.solver.output import dump_policy_graph, dump_value_function
from src.solver.properties import SolverProperties
from src.solver.vector_sets import VectorSetCollection
from src.utils.logging_utils import get_logger

if TYPE_CHECKING:
    from src.lpsolver.base import LPModel

logger = get_logger(__name__)


@dataclass
class StageRecord:
    """Statistics of one completed dynamic programming stage."""
    stage: int
    n_vectors: int
    bellman_difference: float
    elapsed: float
    value_b0: float


class SolverExact(Solver):
    """
    Solve POMDPs exactly with (accelerated) generalized incremental pruning.

    Args:
        properties: Solver parameters
        lp: Initialized witness-point oracle
        pm: Pruning strategy used for every regular stage
    """

    def __init__(self, properties: SolverProperties, lp: "LPModel", pm: PruneMethod):
        self.properties = properties
        self.lp = lp
        self.pm = pm
        self.pm.set_lp_model(lp)

        self.pomdp: Optional[POMDP] = None
        self.V0: List[AlphaVector] = []
        self.stage_history: List[StageRecord] = []
        self.total_solve_time = 0.0
        self.expected_value = float("nan")

    def get_type(self) -> str:
        return "exact"

    def get_total_solve_time(self) -> float:
        return self.total_solve_time

    def get_expected_value(self) -> float:
        return self.expected_value

    def _output_file(self, suffix: str) -> str:
        return str(Path(self.properties.output_dir) / f"{self.pomdp.name}.{suffix}")

    def _dump_stage(self, V: List[AlphaVector], stage: int) -> None:
        dump_value_function(
            self.pomdp, V, self._output_file(f"alpha{stage}"), self.properties.dump_action_labels
        )

    def _record_stage(self, stage: int, V: List[AlphaVector], bellman_difference: float, elapsed: float) -> None:
        value_b0 = get_value(self.pomdp.b0, V)
        self.stage_history.append(StageRecord(stage, len(V), bellman_difference, elapsed, value_b0))
        logger.info(
            f"Stage {stage}: {len(V)} vectors, diff {bellman_difference:.6g}, "
            f"time elapsed {elapsed:.3f} sec"
        )

    def solve(self, pomdp: POMDP) -> List[AlphaVector]:
        """
        Run dynamic programming stages until the Bellman difference drops
        below the value function tolerance, the fixed number of stages is
        reached or the time limit is exceeded.

        Returns:
            The final vector set; its ``obs_source`` fields form a policy
            graph if ``dump_policy_graph`` is enabled
        """
        self.pomdp = pomdp
        self.stage_history = []
        self.total_solve_time = 0.0

        start_time = time.perf_counter()
        fixed_stages = self.properties.fixed_stages

        # V_0 holds the immediate reward vector of each action
        self.V0 = [AlphaVector(pomdp.R[:, a].copy(), action=a) for a in range(pomdp.num_actions)]

        V = self.V0
        bellman_difference = np.inf
        stage = 1

        logger.info(f"Solving {pomdp.name} using {self.pm.get_name()} ({self.lp.get_name()})")
        self._dump_stage(V, stage)
        self._record_stage(stage, V, bellman_difference, time.perf_counter() - start_time)

        while True:
            stage += 1
            V_next = self.get_next_v(V)

            if fixed_stages is None:
                bellman_difference = min(bellman_difference, self.get_bellman_difference(V, V_next))

            V = V_next
            elapsed = time.perf_counter() - start_time
            self._record_stage(stage, V, bellman_difference, elapsed)
            self._dump_stage(V, stage)

            if fixed_stages is not None and stage >= fixed_stages:
                break
            if bellman_difference < self.properties.value_function_tolerance:
                break
            if elapsed > self.properties.time_limit:
                logger.warning(f"Time limit of {self.properties.time_limit} sec exceeded after stage {stage}")
                break

        if self.properties.dump_policy_graph:
            # one more stage with policy graph bookkeeping
            regular_pm = self.pm
            self.pm = PrunePolicyGraph(self.lp)
            try:
                stage += 1
                V_next = self.get_next_v(V)
                bellman_difference = min(bellman_difference, self.get_bellman_difference(V, V_next))
                relink_policy_graph(V_next, V)
                V = V_next
            finally:
                self.pm = regular_pm

            self._record_stage(stage, V, bellman_difference, time.perf_counter() - start_time)
            self._dump_stage(V, stage)

        self.total_solve_time = time.perf_counter() - start_time
        self.expected_value = get_value(pomdp.b0, V)

        dump_value_function(pomdp, V, self._output_file("alpha"), self.properties.dump_action_labels)
        if self.properties.dump_policy_graph:
            dump_policy_graph(pomdp, V, self._output_file("pg"), self.properties.dump_action_labels)

        logger.info(
            f"Finished after {stage} stages in {self.total_solve_time:.3f} sec, "
            f"{len(V)} vectors, expected value {self.expected_value:.6f}"
        )
        return V

    def get_next_v(self, V: List[AlphaVector]) -> List[AlphaVector]:
        """Compute the value function of the next stage."""
        pomdp = self.pomdp
        n_observations = pomdp.num_observations
        V_matrix = np.array([av.entries for av in V])

        G = []
        for a in range(pomdp.num_actions):
            immediate = self.V0[a].entries / n_observations
            vsc = VectorSetCollection()

            for o in range(n_observations):
                # g[s, k] = sum_s' T[a, s, s'] Z[a, s', o] V[k, s']
                g = (pomdp.T[a] * pomdp.Z[a, :, o][None, :]) @ V_matrix.T

                vector_set = []
                for k in range(len(V)):
                    entries = immediate + pomdp.gamma * g[:, k]
                    vector_set.append(AlphaVector(entries, action=a, index=k, obs=o))
                vsc.add_vector_set(vector_set)

            G.append(self.pm.cross_sum(vsc))

        return self.pm.merge_sets(G)

    def get_bellman_difference(self, V_old: List[AlphaVector], V_new: List[AlphaVector]) -> float:
        """Largest value gain between two successive value functions."""
        max_diff = -np.inf

        for av in V_new:
            max_diff = max(max_diff, self.lp.get_max_value_diff(av, V_old))

        # with negative rewards the value function can also decrease
        if self.pomdp.min_reward < 0.0:
            for av in V_old:
                max_diff = max(max_diff, self.lp.get_max_value_diff(av, V_new))

        return max_diff

    def get_stage_summary(self) -> pd.DataFrame:
        """One row per completed stage."""
        return pd.DataFrame(
            [vars(record) for record in self.stage_history],
            columns=["stage", "n_vectors", "bellman_difference", "elapsed", "value_b0"],
        )


def relink_policy_graph(V_final: List[AlphaVector], V_previous: List[AlphaVector]) -> None:
    """
    Rewrite ``obs_source`` indices, which refer to ``V_previous``, into
    indices of ``V_final``. Each previous vector is mapped to the final
    vector closest to it in max-norm (first one on ties).
    """
    final_matrix = np.array([av.entries for av in V_final])
    mapping = np.empty(len(V_previous), dtype=int)

    for k, av in enumerate(V_previous):
        distances = np.abs(final_matrix - av.entries[None, :]).max(axis=1)
        mapping[k] = int(np.argmin(distances))

    for av in V_final:
        if av.obs_source is None:
            continue
        av.obs_source = np.where(av.obs_source >= 0, mapping[np.maximum(av.obs_source, 0)], -1)
