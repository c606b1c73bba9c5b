"""
Pydantic schemas for generation back-end capabilities.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class MediaCategory(str, Enum):
    """Output media a generation back-end produces."""
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    VOICE = "voice"
    TEXT = "text"


class InputAsset(str, Enum):
    """Reference assets a back-end can consume alongside the prompt."""
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"


# Kind of asset each output category produces.
PRODUCED_ASSET = {
    MediaCategory.IMAGE: InputAsset.IMAGE,
    MediaCategory.VIDEO: InputAsset.VIDEO,
    MediaCategory.AUDIO: InputAsset.AUDIO,
    MediaCategory.VOICE: InputAsset.AUDIO,
}


class EfficiencyTier(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class EndpointDescriptor(BaseModel):
    """Raw catalog entry, before metadata derivation."""
    id: str = Field(..., min_length=1, description="Provider endpoint id")
    category: MediaCategory = Field(..., description="Output category")
    label: str = Field(..., description="Human-readable name")
    description: str = Field("", description="What the endpoint does")
    accepted_input_assets: list[InputAsset] = Field(
        default_factory=list,
        description="Reference assets the endpoint accepts",
    )


class ModelCapability(BaseModel):
    """A registered back-end plus its derived metadata. Immutable."""
    model_config = ConfigDict(frozen=True)

    id: str
    category: MediaCategory
    label: str
    description: str = ""
    strengths: tuple[str, ...] = ()
    limitations: tuple[str, ...] = ()
    best_for: tuple[str, ...] = ()
    efficiency: EfficiencyTier = EfficiencyTier.LOW
    accepts_input_assets: frozenset[InputAsset] = frozenset()

    def accepts(self, asset: InputAsset) -> bool:
        return asset in self.accepts_input_assets

    def has_strength(self, fragment: str) -> bool:
        """Case-insensitive check for a strength containing ``fragment``."""
        needle = fragment.lower()
        return any(needle in s.lower() for s in self.strengths)


class CategoryDerivation(BaseModel):
    strengths: list[str] = Field(default_factory=list)
    limitations: list[str] = Field(default_factory=list)
    best_for: list[str] = Field(default_factory=list)


class MarkerDerivation(CategoryDerivation):
    marker: str = Field(..., description="Substring of the endpoint id")


class EfficiencyRule(BaseModel):
    tier: EfficiencyTier
    markers: list[str]


class DerivationRules(BaseModel):
    """Substring rules that turn descriptors into capabilities."""
    categories: dict[MediaCategory, CategoryDerivation] = Field(default_factory=dict)
    markers: list[MarkerDerivation] = Field(default_factory=list)
    efficiency: list[EfficiencyRule] = Field(default_factory=list)
    default_efficiency: EfficiencyTier = EfficiencyTier.LOW


class CapabilitySummary(BaseModel):
    """Summary of a capability for list endpoints."""
    id: str
    category: MediaCategory
    label: str
    efficiency: EfficiencyTier
    accepts_input_assets: list[InputAsset]
    best_for_summary: list[str] = Field(..., description="First 3 best_for items")
    notes: Optional[str] = None
