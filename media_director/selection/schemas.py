"""
Pydantic schemas for model selection: delegations and fallback policies.
"""

import uuid
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field

from media_director.capabilities.schemas import InputAsset
from media_director.intent.schemas import ActionSubtype, IntentCategory


class SelectionStep(str, Enum):
    """Which step of the priority policy chose the model."""
    EXPLICIT_OVERRIDE = "explicit_override"
    ACTION_SUBTYPE = "action_subtype"
    USER_PREFERENCE = "user_preference"
    CATEGORY_POLICY = "category_policy"
    WORKFLOW_DEFAULT = "workflow_default"


class Delegation(BaseModel):
    """The decision to invoke one capability with one parameter set."""
    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    model_id: str = Field(..., description="Capability id present in the registry")
    reason: str = Field(..., description="Human-readable explanation of the choice")
    confidence: float = Field(..., ge=0.0, le=1.0)
    estimated_time: str
    parameters: dict[str, Any] = Field(default_factory=dict)
    intent_category: IntentCategory
    selection_step: SelectionStep = SelectionStep.CATEGORY_POLICY
    generation_id: Optional[str] = Field(None, description="Content-filter audit id of the final prompt")


class ChainEntry(BaseModel):
    """One rung of a ranked fallback chain.

    ``id_contains`` matches endpoint ids by substring, ``strength`` matches
    advertised strengths; ``any`` is the generic default that takes the first
    capability still eligible.
    """
    id_contains: Optional[str] = None
    strength: Optional[str] = None
    exclude: list[str] = Field(default_factory=list)
    text_only: bool = Field(False, description="Only capabilities that take no input asset")
    any: bool = False


class SubtypeRoute(BaseModel):
    subtype: ActionSubtype
    category: IntentCategory
    preference_key: str = Field(..., description="Preference map key consulted inside the subtype")
    compatible: list[str] = Field(..., description="Capability ids allowed for this subtype, in rank order")


class ImagePolicy(BaseModel):
    character_terms: list[str]
    variation_terms: list[str]
    character_chain: list[ChainEntry]
    variation_chain: list[ChainEntry]
    quality_chain: list[ChainEntry]


class VideoPolicy(BaseModel):
    multi_angle_terms: list[str]
    image_to_video_multi_angle_chain: list[ChainEntry]
    image_to_video_chain: list[ChainEntry]
    text_to_video_multi_angle_chain: list[ChainEntry]
    text_to_video_chain: list[ChainEntry]


class SelectionPolicies(BaseModel):
    """Everything in definitions/policies.yaml."""
    override_stop_words: list[str] = Field(default_factory=list)
    generic_id_segments: list[str] = Field(default_factory=list)
    subtype_routes: list[SubtypeRoute] = Field(default_factory=list)
    image: ImagePolicy
    video: VideoPolicy
    voice_chain: list[ChainEntry] = Field(default_factory=list)
    default_chain: list[ChainEntry] = Field(default_factory=lambda: [ChainEntry(any=True)])
    workflow_default_model: str = "fal-ai/flux-pro/v1.1-ultra"
    estimated_times: dict[str, dict[str, str]] = Field(default_factory=dict)


class VideoBranch(str, Enum):
    IMAGE_TO_VIDEO = "image_to_video"
    TEXT_TO_VIDEO = "text_to_video"

    @property
    def required_asset(self) -> Optional[InputAsset]:
        return InputAsset.IMAGE if self == VideoBranch.IMAGE_TO_VIDEO else None
