"""
Value-function and policy-graph files.

Value-function file, per vector::

    <action>
    <entry_0> <entry_1> ... <entry_{|S|-1}>
    <blank line>

Policy-graph file, per vector::

    <index> <action> <next_0> ... <next_{|O|-1}>

where ``next_o`` is ``-`` if observation o cannot follow the action.
"""

from pathlib import Path
from typing import List, Optional, Sequence

from src.pomdp.schema import POMDP
from src.solver.alpha_vector import AlphaVector
from src.utils.logging_utils import get_logger

logger = get_logger(__name__)


def _format_entry(x: float) -> str:
    # 17 significant digits round-trip IEEE 754 doubles
    return f"{x:.17g}"


def _action_string(pomdp: POMDP, action: int, use_action_labels: bool) -> str:
    return pomdp.get_action_label(action) if use_action_labels else str(action)


def dump_value_function(
    pomdp: POMDP,
    vectors: Sequence[AlphaVector],
    output_file: str,
    use_action_labels: bool = False,
) -> None:
    """
    Write a value function to a file.

    Args:
        pomdp: POMDP model (used for action labels)
        vectors: Vector set representing the value function
        output_file: Destination path
        use_action_labels: Write action labels instead of integer ids
    """
    path = Path(output_file)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        for av in vectors:
            f.write(_action_string(pomdp, av.action, use_action_labels) + "\n")
            f.write(" ".join(_format_entry(x) for x in av.entries) + "\n")
            f.write("\n")

    logger.debug(f"Wrote {len(vectors)} vectors to {path}")


def dump_policy_graph(
    pomdp: POMDP,
    vectors: Sequence[AlphaVector],
    output_file: str,
    use_action_labels: bool = False,
) -> None:
    """
    Write a policy graph to a file.

    Args:
        pomdp: POMDP model
        vectors: Final vector set carrying ``obs_source`` successors
        output_file: Destination path
        use_action_labels: Write action labels instead of integer ids
    """
    path = Path(output_file)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        for i, av in enumerate(vectors):
            if av.obs_source is None:
                raise ValueError(f"Vector {i} carries no policy graph successors")

            nodes = []
            for o, node in enumerate(av.obs_source):
                nodes.append(str(int(node)) if pomdp.observation_possible(av.action, o) else "-")

            action = _action_string(pomdp, av.action, use_action_labels)
            f.write(f"{i} {action} {' '.join(nodes)}\n")

    logger.debug(f"Wrote policy graph with {len(vectors)} nodes to {path}")


def read_value_function(input_file: str, pomdp: Optional[POMDP] = None) -> List[AlphaVector]:
    """
    Read a value function written by ``dump_value_function``.

    Action labels are mapped back to ids through ``pomdp``; without a model
    the action lines must hold integer ids.
    """
    path = Path(input_file)
    if not path.exists():
        raise FileNotFoundError(f"Value function file not found: {input_file}")

    lines = [line.strip() for line in path.read_text().splitlines()]
    lines = [line for line in lines if line]
    if len(lines) % 2 != 0:
        raise ValueError(f"Malformed value function file {input_file}: odd number of non-empty lines")

    vectors = []
    for action_line, entries_line in zip(lines[0::2], lines[1::2]):
        action = pomdp.get_action_index(action_line) if pomdp is not None else int(action_line)
        entries = [float(x) for x in entries_line.split()]
        vectors.append(AlphaVector(entries, action=action))

    return vectors


def read_policy_graph(input_file: str, pomdp: Optional[POMDP] = None):
    """
    Read a policy graph written by ``dump_policy_graph``.

    Returns:
        Tuple (actions, next_nodes) where ``next_nodes[i][o]`` is None for
        impossible observations
    """
    path = Path(input_file)
    if not path.exists():
        raise FileNotFoundError(f"Policy graph file not found: {input_file}")

    actions: List[int] = []
    next_nodes: List[List[Optional[int]]] = []

    for expected, line in enumerate(l for l in path.read_text().splitlines() if l.strip()):
        parts = line.split()
        node_id = int(parts[0])
        if node_id != expected:
            raise ValueError(f"Policy graph node {node_id} found where node {expected} was expected")

        actions.append(pomdp.get_action_index(parts[1]) if pomdp is not None else int(parts[1]))
        next_nodes.append([None if p == "-" else int(p) for p in parts[2:]])

    return actions, next_nodes
