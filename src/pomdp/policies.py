"""
Policies executable by the simulator.

A policy maps the current belief to an action and may keep internal state
(the current node of a finite-state controller) that is advanced after
every executed action and received observation.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

import networkx as nx
import numpy as np

from src.pomdp.belief import BeliefPoint
from src.pomdp.schema import POMDP
from src.solver.alpha_vector import AlphaVector, get_best_vector_index
from src.solver.output import read_policy_graph, read_value_function
from src.utils.data_validation import validate_policy_graph
from src.utils.logging_utils import get_logger

logger = get_logger(__name__)


class Policy(ABC):
    """Interface of a policy used during simulation."""

    @abstractmethod
    def get_action(self, b: BeliefPoint) -> int:
        """Action to execute in belief ``b``."""

    def update(self, a: int, o: int) -> None:
        """Advance internal state after executing a and observing o."""

    def reset(self) -> None:
        """Return to the initial internal state."""


class PolicyVector(Policy):
    """Greedy policy with respect to a set of alpha-vectors."""

    def __init__(self, vectors: Sequence[AlphaVector]):
        if len(vectors) == 0:
            raise ValueError("A vector policy needs at least one vector")
        self.vectors = list(vectors)

    def get_action(self, b: BeliefPoint) -> int:
        return self.vectors[get_best_vector_index(b.get_belief(), self.vectors)].action

    @classmethod
    def from_file(cls, vector_file: str, pomdp: Optional[POMDP] = None) -> "PolicyVector":
        return cls(read_value_function(vector_file, pomdp))


class PolicyFSC(Policy):
    """
    Finite-state controller read from a policy graph.

    The belief passed to ``get_action`` is ignored; the action is determined
    by the current node, which moves along the graph on every update.

    Args:
        initial_node: Node to start in
        actions: Action of every node
        next_nodes: next_nodes[n][o] is the successor of node n after
            observation o, or None if o cannot be observed there
    """

    def __init__(self, initial_node: int, actions: Sequence[int], next_nodes: Sequence[Sequence[Optional[int]]]):
        self.num_nodes = len(actions)
        if not 0 <= initial_node < self.num_nodes:
            raise ValueError(f"Initial node {initial_node} out of range [0, {self.num_nodes})")

        self.initial_node = initial_node
        self.actions = list(actions)
        self.next_nodes = [list(row) for row in next_nodes]
        self.current_node = initial_node

    def get_action(self, b: BeliefPoint) -> int:
        return self.actions[self.current_node]

    def update(self, a: int, o: int) -> None:
        next_node = self.next_nodes[self.current_node][o]
        if next_node is None:
            raise ValueError(f"Observation {o} is not possible in node {self.current_node}")
        if not 0 <= next_node < self.num_nodes:
            raise ValueError(f"Successor node {next_node} out of range [0, {self.num_nodes})")
        self.current_node = next_node

    def reset(self) -> None:
        self.current_node = self.initial_node

    def to_graph(self, pomdp: Optional[POMDP] = None) -> nx.DiGraph:
        """
        Directed graph with one node per controller node.

        Nodes carry ``action`` (and ``label`` if a model is given); an edge
        n -> m carries the list of observations leading from n to m.
        """
        graph = nx.DiGraph()

        for n, action in enumerate(self.actions):
            attrs = {"action": action, "initial": n == self.initial_node}
            if pomdp is not None:
                attrs["label"] = pomdp.get_action_label(action)
            graph.add_node(n, **attrs)

        for n, row in enumerate(self.next_nodes):
            for o, m in enumerate(row):
                if m is None:
                    continue
                if graph.has_edge(n, m):
                    graph[n][m]["observations"].append(o)
                else:
                    graph.add_edge(n, m, observations=[o])

        return graph

    @classmethod
    def create_fsc(cls, pomdp: POMDP, vector_file: str, policy_graph_file: str) -> "PolicyFSC":
        """Build a controller from the value-function and policy-graph files of a solve."""
        vectors = read_value_function(vector_file, pomdp)
        actions, next_nodes = read_policy_graph(policy_graph_file, pomdp)

        if len(actions) != len(vectors):
            raise ValueError(
                f"Policy graph has {len(actions)} nodes but the value function has {len(vectors)} vectors"
            )

        initial_node = get_best_vector_index(pomdp.b0, vectors)
        fsc = cls(initial_node, actions, next_nodes)
        validate_policy_graph(fsc.to_graph(), pomdp.num_observations)

        logger.info(f"Loaded controller with {fsc.num_nodes} nodes, initial node {initial_node}")
        return fsc

    @classmethod
    def from_vectors(cls, pomdp: POMDP, vectors: Sequence[AlphaVector]) -> "PolicyFSC":
        """Build a controller directly from vectors carrying ``obs_source``."""
        return cls(
            get_best_vector_index(pomdp.b0, vectors),
            [av.action for av in vectors],
            policy_graph_from_vectors(pomdp, vectors),
        )


def policy_graph_from_vectors(pomdp: POMDP, vectors: Sequence[AlphaVector]) -> List[List[Optional[int]]]:
    """Successor table of a traced vector set, None for impossible observations."""
    next_nodes = []
    for i, av in enumerate(vectors):
        if av.obs_source is None:
            raise ValueError(f"Vector {i} carries no policy graph successors")
        next_nodes.append([
            int(node) if pomdp.observation_possible(av.action, o) else None
            for o, node in enumerate(np.asarray(av.obs_source))
        ])
    return next_nodes
