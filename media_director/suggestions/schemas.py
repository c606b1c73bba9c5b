"""
Pydantic schemas for interactive cinematic suggestions.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, model_validator


class SuggestionKind(str, Enum):
    SHOT_TYPE = "shot-type"
    LIGHTING = "lighting"
    MOVEMENT = "movement"
    WORKFLOW = "workflow"
    GENRE = "genre"
    EMOTION = "emotion"
    KEYWORD = "keyword"


class CinematicSuggestion(BaseModel):
    id: str
    name: str
    category: SuggestionKind
    description: str = ""
    prompt_enhancement: Optional[str] = None
    workflow_trigger: Optional[str] = Field(None, description="Workflow template name")
    compatible_modes: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _one_effect(self) -> "CinematicSuggestion":
        if bool(self.prompt_enhancement) == bool(self.workflow_trigger):
            raise ValueError(f"Suggestion '{self.id}' needs exactly one of prompt_enhancement or workflow_trigger")
        return self


class SuggestionCatalog(BaseModel):
    """Everything in definitions/suggestions.yaml."""
    suggestions: list[CinematicSuggestion] = Field(default_factory=list)


class SuggestionAction(str, Enum):
    PROMPT_MODIFICATION = "prompt-modification"
    WORKFLOW_TRIGGER = "workflow-trigger"
    ERROR = "error"


class SuggestionResult(BaseModel):
    success: bool
    action: SuggestionAction
    suggestion_id: Optional[str] = None
    modified_prompt: Optional[str] = None
    workflow_template: Optional[str] = None
    error: Optional[str] = None
    message: str
