"""
Data validation utilities for model arrays and policy graphs.
"""

from typing import Optional, Sequence
import numpy as np
import networkx as nx
from src.utils.logging_utils import get_logger

logger = get_logger(__name__)


def validate_stochastic_rows(
    matrix: np.ndarray,
    label: str,
    atol: float = 1e-6,
) -> bool:
    """
    Validate that every row of a matrix is a probability distribution.

    Args:
        matrix: Array whose last axis holds distributions
        label: Name used in error messages
        atol: Tolerance on the row sums

    Returns:
        True if validation passes, raises ValueError otherwise

    Raises:
        ValueError: If an entry is negative or a row does not sum to 1
    """
    if np.any(matrix < 0):
        raise ValueError(f"{label} contains negative probabilities")

    if not np.allclose(matrix.sum(axis=-1), 1.0, atol=atol):
        raise ValueError(f"{label} rows do not sum to 1")

    logger.debug(f"Stochastic validation passed for {label}: shape {matrix.shape}")
    return True


def validate_belief(belief: Sequence[float], n_states: int, atol: float = 1e-6) -> bool:
    """Validate that ``belief`` is a point of the simplex over ``n_states`` states."""
    b = np.asarray(belief, dtype=float)
    if b.shape != (n_states,):
        raise ValueError(f"Belief has shape {b.shape}, expected ({n_states},)")
    validate_stochastic_rows(b, "belief", atol=atol)
    return True


def validate_policy_graph(
    graph: nx.DiGraph,
    n_observations: int,
    required_nodes: Optional[Sequence[int]] = None,
) -> bool:
    """
    Validate a finite-state controller graph.

    Nodes carry an ``action`` attribute; edges carry the list of observations
    (``observations``) that lead from one node to the next.

    Args:
        graph: NetworkX directed graph to validate
        n_observations: Number of observations of the model
        required_nodes: Node ids that must be present

    Returns:
        True if validation passes, raises ValueError otherwise

    Raises:
        ValueError: If a node lacks an action, an observation is out of range,
            or an observation leads to more than one successor
    """
    if not isinstance(graph, nx.DiGraph):
        raise ValueError("Input must be a NetworkX DiGraph")

    for node, data in graph.nodes(data=True):
        if data.get("action", -1) < 0:
            raise ValueError(f"Node {node} has no action")

        seen = set()
        for _, _, edge in graph.out_edges(node, data=True):
            for o in edge.get("observations", []):
                if not 0 <= o < n_observations:
                    raise ValueError(f"Node {node} has out-of-range observation {o}")
                if o in seen:
                    raise ValueError(f"Node {node} has two successors for observation {o}")
                seen.add(o)

    if required_nodes:
        missing = set(required_nodes) - set(graph.nodes())
        if missing:
            raise ValueError(f"Missing required nodes: {missing}")

    logger.debug(f"Policy graph validation passed: {len(graph.nodes())} nodes, {len(graph.edges())} edges")
    return True
