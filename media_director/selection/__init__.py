"""
Selection module: layered model-selection policy over the capability registry.
"""

from .schemas import ChainEntry, Delegation, SelectionPolicies, SelectionStep, VideoBranch
from .engine import SelectionEngine, load_policies, resolve_chain

__all__ = [
    "ChainEntry",
    "Delegation",
    "SelectionPolicies",
    "SelectionStep",
    "VideoBranch",
    "SelectionEngine",
    "load_policies",
    "resolve_chain",
]
