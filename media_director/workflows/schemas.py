"""
Pydantic schemas for multi-step workflows and their templates.
"""

import uuid
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field

from media_director.capabilities.schemas import MediaCategory

SINGLE_TEMPLATE = "single"


class WorkflowStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    FAILED = "failed"


# Template definitions (definitions/templates.yaml)

class TemplateTrigger(BaseModel):
    """Trigger family: every ``all_of`` term and at least one ``any_of`` term."""
    template: str
    all_of: list[str] = Field(default_factory=list)
    any_of: list[str] = Field(default_factory=list)


class BaseDescription(BaseModel):
    terms: list[str]
    description: str


class TemplateStep(BaseModel):
    id: str
    description: str
    suffix: Optional[str] = Field(None, description="Descriptor appended to the shared base description")


class NextAction(BaseModel):
    id: str
    label: str
    description: str
    type: str


class WorkflowTemplate(BaseModel):
    name: str
    description: str
    steps: list[TemplateStep] = Field(..., min_length=1)
    next_actions: list[NextAction] = Field(default_factory=list)


class TemplateCatalog(BaseModel):
    """Everything in definitions/templates.yaml."""
    triggers: list[TemplateTrigger] = Field(default_factory=list)
    base_descriptions: list[BaseDescription] = Field(default_factory=list)
    default_base_description: str
    templates: dict[str, WorkflowTemplate]


# Runtime workflows

class WorkflowStep(BaseModel):
    id: str
    description: str = ""
    category: MediaCategory
    prompt: str
    model_id: str
    parameters: dict[str, Any] = Field(default_factory=dict)
    status: WorkflowStatus = WorkflowStatus.PENDING
    result_ref: Optional[str] = None
    error: Optional[str] = None
    generation_id: Optional[str] = Field(None, description="Content-filter audit id of the step prompt")


class Workflow(BaseModel):
    """An ordered multi-step generation plan expanded from one request."""
    id: str = Field(default_factory=lambda: f"workflow-{uuid.uuid4().hex[:12]}")
    template: str
    name: str
    description: str = ""
    steps: list[WorkflowStep]
    status: WorkflowStatus = WorkflowStatus.PENDING
    current_step_index: int = 0
    failed_step_id: Optional[str] = None
    error: Optional[str] = None
    next_actions: list[NextAction] = Field(default_factory=list)

    @property
    def is_multi_step(self) -> bool:
        return self.template != SINGLE_TEMPLATE

    def completed_results(self) -> list[str]:
        return [s.result_ref for s in self.steps if s.status == WorkflowStatus.COMPLETED and s.result_ref]
