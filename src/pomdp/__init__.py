"""
POMDP models, belief updates, policies and simulation.
"""

from src.pomdp.belief import BeliefPoint, belief_update
from src.pomdp.schema import POMDP
from src.pomdp.loader import POMDPFile, load_pomdp
from src.pomdp.policies import Policy, PolicyVector, PolicyFSC, policy_graph_from_vectors
from src.pomdp.simulate import rollout, PolicySimulator
from src.pomdp.viz import export_dot_policy_graph

__all__ = [
    "BeliefPoint",
    "belief_update",
    "POMDP",
    "POMDPFile",
    "load_pomdp",
    "Policy",
    "PolicyVector",
    "PolicyFSC",
    "policy_graph_from_vectors",
    "rollout",
    "PolicySimulator",
    "export_dot_policy_graph",
]
