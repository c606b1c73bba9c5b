"""
Capabilities module: the static catalog of generation back-ends.

This module provides:
- Endpoint descriptors loaded from definitions/endpoints.yaml
- Derived strengths, limitations, best uses and efficiency tiers
- Registry shared read-only by every session
"""

from .schemas import (
    EfficiencyTier,
    InputAsset,
    MediaCategory,
    ModelCapability,
)

from .registry import CapabilityRegistry, get_capability_registry

__all__ = [
    "EfficiencyTier",
    "InputAsset",
    "MediaCategory",
    "ModelCapability",
    "CapabilityRegistry",
    "get_capability_registry",
]
