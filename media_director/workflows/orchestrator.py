"""
Workflow Orchestrator.

Expands one request into an ordered list of generation steps. The template
is chosen by trigger-phrase family; every multi-step template appends fixed
descriptor suffixes to a shared base description. All steps share one model,
resolved once through the selection engine.
"""

import logging
import random
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from media_director.augmentation.pipeline import AugmentationPipeline
from media_director.augmentation.tables import load_table
from media_director.errors import UnknownEntryError
from media_director.intent.keywords import contains_term
from media_director.intent.schemas import Intent
from media_director.selection.engine import SelectionEngine
from media_director.workflows.schemas import (
    SINGLE_TEMPLATE,
    TemplateCatalog,
    Workflow,
    WorkflowStep,
    WorkflowTemplate,
)

if TYPE_CHECKING:
    from media_director.session.schemas import ConversationState

logger = logging.getLogger(__name__)

DEFINITIONS_DIR = Path(__file__).parent / "definitions"


def load_templates(definitions_dir: Optional[Path] = None) -> TemplateCatalog:
    catalog = load_table("templates.yaml", TemplateCatalog, definitions_dir or DEFINITIONS_DIR)
    if SINGLE_TEMPLATE not in catalog.templates:
        raise ValueError(f"Workflow templates must define '{SINGLE_TEMPLATE}'")
    unknown = [t.template for t in catalog.triggers if t.template not in catalog.templates]
    if unknown:
        raise ValueError(f"Triggers reference undefined templates: {unknown}")
    logger.info(f"Loaded {len(catalog.templates)} workflow templates, {len(catalog.triggers)} triggers")
    return catalog


class WorkflowOrchestrator:
    def __init__(
        self,
        engine: SelectionEngine,
        pipeline: AugmentationPipeline,
        catalog: Optional[TemplateCatalog] = None,
        definitions_dir: Optional[Path] = None,
    ):
        self.engine = engine
        self.pipeline = pipeline
        self.catalog = catalog or load_templates(definitions_dir)

    def template_names(self) -> list[str]:
        return list(self.catalog.templates)

    def get_template(self, name: str) -> WorkflowTemplate:
        template = self.catalog.templates.get(name)
        if template is None:
            raise UnknownEntryError(f"Unknown workflow template '{name}'")
        return template

    def detect_template(self, prompt: str) -> str:
        """Name of the first template whose trigger family matches ``prompt``."""
        for trigger in self.catalog.triggers:
            if trigger.all_of and not all(contains_term(prompt, [term]) for term in trigger.all_of):
                continue
            if trigger.any_of and not contains_term(prompt, trigger.any_of):
                continue
            return trigger.template
        return SINGLE_TEMPLATE

    def base_description(self, prompt: str) -> str:
        for entry in self.catalog.base_descriptions:
            if contains_term(prompt, entry.terms):
                return entry.description
        return self.catalog.default_base_description

    def step_prompts(self, prompt: str, template_name: str) -> list[tuple[str, str, str]]:
        """(step id, description, prompt) for each step of a template."""
        template = self.get_template(template_name)
        if template_name == SINGLE_TEMPLATE:
            return [(step.id, step.description, prompt) for step in template.steps]
        base = self.base_description(prompt)
        return [
            (step.id, step.description, f"{base}, {step.suffix}" if step.suffix else base)
            for step in template.steps
        ]

    async def expand(
        self,
        prompt: str,
        intent: Intent,
        state: "ConversationState",
        *,
        rng: random.Random,
        template: Optional[str] = None,
    ) -> Workflow:
        """Build a pending workflow for ``prompt``.

        ``template`` forces a template by name; otherwise it is detected
        from the prompt.
        """
        name = template or self.detect_template(prompt)
        definition = self.get_template(name)
        delegation = self.engine.select_for_workflow(intent, state)
        capability = self.engine.registry.get(delegation.model_id)
        if capability is None:
            raise UnknownEntryError(f"Capability '{delegation.model_id}' not in registry")

        steps = []
        for step_id, description, step_prompt in self.step_prompts(prompt, name):
            parameters, report = await self.pipeline.build_parameters(
                intent, capability, state, rng=rng, prompt=step_prompt
            )
            steps.append(WorkflowStep(
                id=step_id,
                description=description,
                category=capability.category,
                prompt=step_prompt,
                model_id=capability.id,
                parameters=parameters,
                generation_id=report.generation_id,
            ))

        workflow = Workflow(
            template=name,
            name=definition.name,
            description=definition.description,
            steps=steps,
            next_actions=list(definition.next_actions),
        )
        logger.info(
            f"[{state.session_id}] Expanded '{name}' workflow {workflow.id}: "
            f"{len(steps)} step(s) on {capability.id}"
        )
        return workflow
