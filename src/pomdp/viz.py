"""
Visualization utilities for POMDP policies (DOT graph export).
"""

from pathlib import Path
from typing import Optional

from src.pomdp.policies import PolicyFSC
from src.pomdp.schema import POMDP
from src.utils.logging_utils import get_logger

logger = get_logger(__name__)


def _escape(label: str) -> str:
    return label.replace('"', '\\"')


def export_dot_policy_graph(
    fsc: PolicyFSC,
    out_file: str,
    pomdp: Optional[POMDP] = None,
    max_label_length: int = 20,
) -> None:
    """
    Export a finite-state controller as a DOT graph.

    Nodes are labeled with their action, edges with the observations that
    lead to the successor node. The initial node is drawn with a double
    circle.

    Args:
        fsc: Controller to export
        out_file: Output .dot file
        pomdp: POMDP model, used for action and observation labels
        max_label_length: Observation labels longer than this are truncated
    """
    out_path = Path(out_file)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    graph = fsc.to_graph(pomdp)

    with open(out_path, "w") as f:
        f.write("digraph policy_graph {\n")
        f.write("  rankdir=LR;\n")
        f.write("  node [shape=circle];\n\n")

        for node, data in graph.nodes(data=True):
            label = _escape(data.get("label", str(data["action"])))
            shape = "doublecircle" if data["initial"] else "circle"
            f.write(f'  n{node} [label="{node}: {label}", shape={shape}];\n')

        f.write("\n")

        for src_node, dst_node, data in graph.edges(data=True):
            if pomdp is not None:
                names = [_escape(pomdp.O[o]) for o in data["observations"]]
            else:
                names = [str(o) for o in data["observations"]]
            # Truncate observation names if too long
            names = [n[:max_label_length] + "..." if len(n) > max_label_length else n for n in names]
            f.write(f'  n{src_node} -> n{dst_node} [label="{", ".join(names)}"];\n')

        f.write("}\n")

    logger.info(f"Exported policy graph with {graph.number_of_nodes()} nodes to {out_path}")
