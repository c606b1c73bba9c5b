"""
Pydantic schemas for classified user intents and keyword tables.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class IntentCategory(str, Enum):
    """What a user turn is asking for."""
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    VOICE = "voice"
    TEXT = "text"
    ANALYSIS = "analysis"
    CLARIFICATION = "clarification"


class ActionSubtype(str, Enum):
    """Operation requested on an attached image."""
    STYLE_TRANSFER = "style-transfer"
    EDIT = "edit"
    ANIMATE = "animate"
    CONTEXT_SWAP = "context-swap"
    FRAME_EXTRACT = "frame-extract"


GENERATIVE_CATEGORIES = frozenset({
    IntentCategory.IMAGE,
    IntentCategory.VIDEO,
    IntentCategory.AUDIO,
    IntentCategory.VOICE,
    IntentCategory.TEXT,
})


class Intent(BaseModel):
    """The classifier's judgment about one user turn. Never mutated."""
    model_config = ConfigDict(frozen=True)

    category: IntentCategory
    confidence: float = Field(..., ge=0.0, le=1.0)
    keywords: tuple[str, ...] = ()
    raw_context: str = Field("", description="The trimmed user text")
    requires_generation: bool = False
    attached_image_ref: Optional[str] = None
    action_subtype: Optional[ActionSubtype] = None
    matched_rule: Optional[str] = Field(None, description="Name of the rule that produced this intent")


class MatchMode(str, Enum):
    WORD = "word"
    PREFIX = "prefix"


class KeywordTable(BaseModel):
    match: MatchMode = MatchMode.PREFIX
    terms: list[str]


class SubtypeEntry(BaseModel):
    table: str
    subtype: ActionSubtype


class ContentTypeEntry(BaseModel):
    table: str
    category: IntentCategory
    confidence: float = Field(..., ge=0.0, le=1.0)


class KeywordDefinitions(BaseModel):
    """Everything in definitions/keywords.yaml."""
    tables: dict[str, KeywordTable]
    subtype_order: list[SubtypeEntry] = Field(default_factory=list)
    generation_content_order: list[ContentTypeEntry] = Field(default_factory=list)
    keyword_report_tables: list[str] = Field(default_factory=list)
