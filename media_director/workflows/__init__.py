"""Workflow Orchestrator: template expansion and sequential execution."""

from media_director.workflows.schemas import (
    SINGLE_TEMPLATE,
    NextAction,
    TemplateCatalog,
    Workflow,
    WorkflowStatus,
    WorkflowStep,
    WorkflowTemplate,
)
from media_director.workflows.orchestrator import WorkflowOrchestrator, load_templates
from media_director.workflows.executor import execute

__all__ = [
    "SINGLE_TEMPLATE",
    "NextAction",
    "TemplateCatalog",
    "Workflow",
    "WorkflowStatus",
    "WorkflowStep",
    "WorkflowTemplate",
    "WorkflowOrchestrator",
    "load_templates",
    "execute",
]
