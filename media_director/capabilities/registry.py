"""
Capability Registry - loads endpoint descriptors and derives their metadata.
"""

import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from .schemas import (
    CapabilitySummary,
    DerivationRules,
    EndpointDescriptor,
    MediaCategory,
    ModelCapability,
)

logger = logging.getLogger(__name__)

DEFINITIONS_DIR = Path(__file__).parent / "definitions"


def _dedupe(items: list[str]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for item in items:
        seen.setdefault(item, None)
    return tuple(seen)


def derive_capability(descriptor: EndpointDescriptor, rules: DerivationRules) -> ModelCapability:
    """Apply category and id-marker rules to a raw descriptor."""
    strengths: list[str] = []
    limitations: list[str] = []
    best_for: list[str] = []

    base = rules.categories.get(descriptor.category)
    if base:
        strengths.extend(base.strengths)
        limitations.extend(base.limitations)
        best_for.extend(base.best_for)

    endpoint_id = descriptor.id.lower()
    for marker in rules.markers:
        if marker.marker in endpoint_id:
            strengths.extend(marker.strengths)
            limitations.extend(marker.limitations)
            best_for.extend(marker.best_for)

    efficiency = rules.default_efficiency
    for rule in rules.efficiency:
        if any(m in endpoint_id for m in rule.markers):
            efficiency = rule.tier
            break

    return ModelCapability(
        id=descriptor.id,
        category=descriptor.category,
        label=descriptor.label,
        description=descriptor.description,
        strengths=_dedupe(strengths),
        limitations=_dedupe(limitations),
        best_for=_dedupe(best_for),
        efficiency=efficiency,
        accepts_input_assets=frozenset(descriptor.accepted_input_assets),
    )


class CapabilityRegistry:
    """Read-only catalog of generation back-ends, keyed by endpoint id.

    Loaded once; the loaded capabilities are frozen and can be shared
    across sessions without locking.
    """

    def __init__(
        self,
        definitions_dir: Optional[Path] = None,
        descriptors: Optional[list[dict]] = None,
    ):
        self.definitions_dir = definitions_dir or DEFINITIONS_DIR
        self._inline_descriptors = descriptors
        self._capabilities: dict[str, ModelCapability] = {}
        self._rules = DerivationRules()
        self._load_all()

    def _load_rules(self) -> None:
        rules_file = self.definitions_dir / "derivation.yaml"
        if not rules_file.exists():
            logger.warning(f"Derivation rules not found: {rules_file}")
            return
        with open(rules_file) as f:
            data = yaml.safe_load(f) or {}
        self._rules = DerivationRules(**data)

    def _raw_descriptors(self) -> list:
        if self._inline_descriptors is not None:
            return list(self._inline_descriptors)
        endpoints_file = self.definitions_dir / "endpoints.yaml"
        if not endpoints_file.exists():
            logger.warning(f"Endpoints file not found: {endpoints_file}")
            return []
        with open(endpoints_file) as f:
            data = yaml.safe_load(f) or {}
        return data.get("endpoints", [])

    def _load_all(self) -> None:
        self._load_rules()
        capabilities: dict[str, ModelCapability] = {}
        for index, raw in enumerate(self._raw_descriptors()):
            if not isinstance(raw, dict) or not raw.get("id"):
                logger.warning(f"Skipping endpoint descriptor {index}: missing id")
                continue
            try:
                descriptor = EndpointDescriptor(**raw)
            except ValidationError as e:
                logger.warning(f"Skipping malformed endpoint descriptor '{raw.get('id')}': {e}")
                continue
            capability = derive_capability(descriptor, self._rules)
            capabilities[capability.id] = capability
            logger.debug(f"Loaded capability: {capability.id} ({capability.efficiency.value})")

        # Swap in one step so concurrent readers never see a partial catalog
        self._capabilities = capabilities
        logger.info(f"Loaded {len(capabilities)} generation capabilities")

    def reload(self) -> None:
        """Reload all definitions from disk; readers keep the old catalog until the swap."""
        self._load_all()

    def get(self, capability_id: str) -> Optional[ModelCapability]:
        return self._capabilities.get(capability_id)

    def capabilities_for(self, category: Optional[MediaCategory | str] = None) -> list[ModelCapability]:
        """All capabilities, or those of one category, in catalog order."""
        if category is None:
            return list(self._capabilities.values())
        value = category.value if isinstance(category, MediaCategory) else str(category)
        return [c for c in self._capabilities.values() if c.category.value == value]

    def ids(self) -> list[str]:
        return list(self._capabilities.keys())

    def snapshot(self) -> dict[str, ModelCapability]:
        """Copy of the id -> capability mapping for a single selection call."""
        return dict(self._capabilities)

    def list_summaries(self, category: Optional[str] = None) -> list[CapabilitySummary]:
        return [
            CapabilitySummary(
                id=c.id,
                category=c.category,
                label=c.label,
                efficiency=c.efficiency,
                accepts_input_assets=sorted(c.accepts_input_assets, key=lambda a: a.value),
                best_for_summary=list(c.best_for[:3]),
            )
            for c in self.capabilities_for(category)
        ]

    def count(self) -> int:
        return len(self._capabilities)


# Global registry instance
_registry: Optional[CapabilityRegistry] = None


def get_capability_registry() -> CapabilityRegistry:
    """Get the global capability registry instance."""
    global _registry
    if _registry is None:
        _registry = CapabilityRegistry()
    return _registry
