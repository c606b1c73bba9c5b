"""Decision core - the entry points callers use.

A turn runs classification, selection, augmentation and (for multi-step
requests) workflow expansion, strictly in that order, against the
session's ConversationState. The state is loaded from the injected store
at turn start and written back after every change. Nothing is sent to a
generation provider until the session authorizes it.
"""

import logging
import random
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from media_director.augmentation.audit import ContentFilterLog
from media_director.augmentation.directors import DirectorRegistry, get_director_registry
from media_director.augmentation.pipeline import AugmentationPipeline
from media_director.augmentation.schemas import AugmentationReport, ContentFilterStats
from media_director.augmentation.style_extraction import StyleExtractor, VocabularyStyleExtractor
from media_director.capabilities.registry import CapabilityRegistry, get_capability_registry
from media_director.capabilities.schemas import InputAsset
from media_director.config import Settings
from media_director.errors import (
    GenerationNotAuthorizedError,
    ProviderError,
    SelectionError,
    UnknownEntryError,
)
from media_director.intent.classifier import IntentClassifier
from media_director.intent.schemas import Intent, IntentCategory
from media_director.llm.advisory import AdvisoryService
from media_director.llm.backends import AnthropicAdvisoryBackend
from media_director.providers.base import GenerationProvider, run_to_completion
from media_director.selection.engine import SelectionEngine
from media_director.selection.schemas import Delegation
from media_director.session.schemas import PREFERENCE_NONE, ConversationState
from media_director.session.store import InMemorySessionStore, SessionGate, SessionStore
from media_director.suggestions.registry import SuggestionRegistry, get_suggestion_registry
from media_director.suggestions.schemas import CinematicSuggestion, SuggestionAction, SuggestionResult
from media_director.workflows.executor import execute
from media_director.workflows.orchestrator import WorkflowOrchestrator
from media_director.workflows.schemas import SINGLE_TEMPLATE, Workflow, WorkflowStatus

logger = logging.getLogger(__name__)

# Categories a multi-step template can expand.
WORKFLOW_CATEGORIES = {IntentCategory.IMAGE, IntentCategory.VIDEO}


class Attachment(BaseModel):
    """A reference asset sent with a turn."""
    kind: InputAsset = InputAsset.IMAGE
    ref: str = Field(..., min_length=1, description="URL or handle of the asset")


class NoSuitableModel(BaseModel):
    kind: Literal["no_suitable_model"] = "no_suitable_model"
    category: str
    registry_snapshot: list[str] = Field(default_factory=list)


class TurnResult(BaseModel):
    """Everything one turn produced."""
    response: str
    delegation: Optional[Delegation] = None
    workflow: Optional[Workflow] = None
    intent: Intent
    report: Optional[AugmentationReport] = None
    suggestions: list[CinematicSuggestion] = Field(default_factory=list)
    error: Optional[NoSuitableModel] = None


class SuggestionOutcome(BaseModel):
    result: SuggestionResult
    workflow: Optional[Workflow] = None


class ExecutionResult(BaseModel):
    """Outcome of submitting a session's pending work."""
    completed: list[Delegation] = Field(default_factory=list)
    failed: list[Delegation] = Field(default_factory=list)
    errors: dict[str, str] = Field(default_factory=dict, description="Delegation id -> provider error")
    workflow: Optional[Workflow] = None


def build_advisory(settings: Settings) -> AdvisoryService:
    """Advisory service for ``settings``; without a key or when disabled it only has fallbacks."""
    if not settings.advisory_enabled or not settings.anthropic_api_key:
        return AdvisoryService(timeout=settings.advisory_timeout)
    backend = AnthropicAdvisoryBackend(
        api_key=settings.anthropic_api_key,
        model_id=settings.advisory_model,
        timeout=settings.advisory_timeout,
    )
    return AdvisoryService(backend=backend, timeout=settings.advisory_timeout)


class DecisionCore:
    """Session-aware front of the classifier, selection engine, pipeline and orchestrator."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        store: Optional[SessionStore] = None,
        registry: Optional[CapabilityRegistry] = None,
        directors: Optional[DirectorRegistry] = None,
        classifier: Optional[IntentClassifier] = None,
        advisory: Optional[AdvisoryService] = None,
        style_extractor: Optional[StyleExtractor] = None,
        suggestions: Optional[SuggestionRegistry] = None,
        provider: Optional[GenerationProvider] = None,
        audit_log: Optional[ContentFilterLog] = None,
        seed: Optional[int] = None,
    ):
        self.settings = settings or Settings()
        self.store = store or InMemorySessionStore()
        self.gate = SessionGate()
        self.registry = registry or get_capability_registry()
        self.directors = directors or get_director_registry()
        self.classifier = classifier or IntentClassifier()
        self.advisory = advisory or build_advisory(self.settings)
        self.suggestions = suggestions or get_suggestion_registry()
        self.provider = provider
        self.audit_log = audit_log or ContentFilterLog()
        self.rng = random.Random(seed if seed is not None else self.settings.seed)

        self.engine = SelectionEngine(registry=self.registry)
        self.pipeline = AugmentationPipeline(
            advisory=self.advisory if self.advisory.enabled else None,
            directors=self.directors,
            audit_log=self.audit_log,
            style_extractor=style_extractor or VocabularyStyleExtractor(),
            style_timeout=self.settings.advisory_timeout,
        )
        self.orchestrator = WorkflowOrchestrator(self.engine, self.pipeline)

    # Session plumbing

    def get_state(self, session_id: str) -> ConversationState:
        state = self.store.load(session_id)
        if state is None:
            state = ConversationState(session_id=session_id)
            logger.info(f"[{session_id}] New session")
        return state

    def _save(self, state: ConversationState) -> ConversationState:
        self.store.save(state)
        return state

    # Turns

    async def process_turn(
        self,
        session_id: str,
        text: str,
        attachments: Optional[list[Attachment]] = None,
        forced_category: Optional[IntentCategory | str] = None,
    ) -> TurnResult:
        """Classify, select, augment and (when triggered) expand one user turn.

        Raises:
            SessionBusyError: another turn of this session is in flight
        """
        async with self.gate.hold(session_id):
            state = self.get_state(session_id)
            image_ref = next((a.ref for a in attachments or [] if a.kind == InputAsset.IMAGE), None)

            intent = self.classifier.classify(
                text,
                forced_category=forced_category,
                has_attached_image=image_ref is not None,
                attached_image_ref=image_ref,
            )
            if self.advisory.enabled and intent.requires_generation and forced_category is None:
                intent = await self.advisory.rescore(text, intent)
            state.remember_turn(text)

            if not intent.requires_generation:
                response = await self.advisory.reply(text, intent, state)
                self._save(state)
                return TurnResult(response=response, intent=intent)

            state.open_intent(intent)
            state.pending_action_subtype = intent.action_subtype

            result = await self._plan(text, intent, state)
            result.suggestions = self.suggestions.compatible_with(intent.category.value)
            self._save(state)
            return result

    async def _plan(self, text: str, intent: Intent, state: ConversationState) -> TurnResult:
        template = self.orchestrator.detect_template(text)
        if template != SINGLE_TEMPLATE and intent.category in WORKFLOW_CATEGORIES:
            if state.is_disabled(intent.category.value):
                return TurnResult(response=self._disabled_response(intent), intent=intent)
            workflow = await self.orchestrator.expand(text, intent, state, rng=self.rng, template=template)
            state.pending_workflow = workflow
            return TurnResult(response=self._workflow_response(workflow), workflow=workflow, intent=intent)

        try:
            delegation = self.engine.select_or_raise(intent, state)
        except SelectionError as e:
            return TurnResult(
                response=f"No suitable model is available for {e.category} generation right now.",
                intent=intent,
                error=NoSuitableModel(category=e.category, registry_snapshot=e.registry_snapshot),
            )
        if delegation is None:
            return TurnResult(response=self._disabled_response(intent), intent=intent)

        capability = self.registry.get(delegation.model_id)
        params, report = await self.pipeline.build_parameters(intent, capability, state, rng=self.rng)
        delegation = delegation.model_copy(update={"parameters": params, "generation_id": report.generation_id})
        state.pending_delegations.append(delegation)
        return TurnResult(
            response=self._delegation_response(delegation, capability.label),
            delegation=delegation,
            intent=intent,
            report=report,
        )

    def _disabled_response(self, intent: Intent) -> str:
        return (
            f"{intent.category.value.capitalize()} generation is turned off in your preferences. "
            "Choose a model for it to turn it back on."
        )

    def _delegation_response(self, delegation: Delegation, label: str) -> str:
        return (
            f"I'll use {label}. {delegation.reason}. "
            f"Estimated time: {delegation.estimated_time}. Authorize to start generating."
        )

    def _workflow_response(self, workflow: Workflow) -> str:
        lines = [f"I've planned the \"{workflow.name}\" workflow ({len(workflow.steps)} steps):"]
        lines.extend(f"{i}. {step.description}" for i, step in enumerate(workflow.steps, start=1))
        lines.append("Authorize to start generating.")
        return "\n".join(lines)

    # Authorization gate

    async def authorize(self, session_id: str) -> ConversationState:
        """Open the generation gate for the session's pending work."""
        async with self.gate.hold(session_id):
            state = self.get_state(session_id)
            state.generation_authorized = True
            logger.info(
                f"[{session_id}] Generation authorized: {len(state.pending_delegations)} delegation(s), "
                f"workflow={'yes' if state.pending_workflow else 'no'}"
            )
            return self._save(state)

    async def reset(self, session_id: str) -> ConversationState:
        """Close the open intent, drop pending work and revoke authorization."""
        async with self.gate.hold(session_id):
            state = self.get_state(session_id)
            state.reset()
            logger.info(f"[{session_id}] Session reset")
            return self._save(state)

    async def execute_pending(self, session_id: str) -> ExecutionResult:
        """Submit authorized pending delegations, then the pending workflow.

        Raises:
            GenerationNotAuthorizedError: the session has not authorized generation
            ProviderError: no generation provider is configured
        """
        async with self.gate.hold(session_id):
            state = self.get_state(session_id)
            if not state.generation_authorized:
                raise GenerationNotAuthorizedError(session_id)
            if self.provider is None:
                raise ProviderError("No generation provider configured")

            outcome = ExecutionResult()
            for delegation in list(state.pending_delegations):
                try:
                    status = await run_to_completion(
                        self.provider,
                        delegation.model_id,
                        delegation.parameters,
                        timeout=self.settings.provider_timeout,
                    )
                except ProviderError as e:
                    logger.error(f"[{session_id}] Delegation {delegation.id} on {delegation.model_id} failed: {e}")
                    state.reject_delegation(delegation.id)
                    outcome.failed.append(delegation)
                    outcome.errors[delegation.id] = str(e)
                    self._mark(delegation.generation_id, success=False)
                    continue
                state.complete_delegation(delegation.id, status.result_ref)
                outcome.completed.append(delegation)
                self._mark(delegation.generation_id, success=True)

            if state.pending_workflow is not None:
                outcome.workflow = await execute(
                    state.pending_workflow,
                    self.provider,
                    state,
                    audit_log=self.audit_log,
                    timeout=self.settings.provider_timeout,
                )
                state.pending_workflow = None
                if outcome.workflow.status == WorkflowStatus.COMPLETED:
                    # The request is fully served; last_produced_asset_ref survives the reset
                    state.reset()

            state.generation_authorized = False
            self._save(state)
            return outcome

    def _mark(self, generation_id: Optional[str], success: bool) -> None:
        if generation_id:
            self.audit_log.mark_result(generation_id, success)

    # Preferences and director mode

    async def set_preferences(self, session_id: str, preferences: dict[str, Optional[str]]) -> ConversationState:
        """Update per-category model preferences.

        Values are a capability id, ``"none"`` (generation off) or None
        (automatic selection).

        Raises:
            ValueError: unknown preference key
            UnknownEntryError: unknown capability id
        """
        async with self.gate.hold(session_id):
            state = self.get_state(session_id)
            for key, value in preferences.items():
                if value not in (None, PREFERENCE_NONE) and self.registry.get(value) is None:
                    raise UnknownEntryError(f"Capability '{value}' not found")
                state.set_preference(key, value)
            logger.info(f"[{session_id}] Preferences updated: {preferences}")
            return self._save(state)

    async def set_active_director(self, session_id: str, name: str) -> ConversationState:
        async with self.gate.hold(session_id):
            profile = self.directors.get(name)
            if profile is None:
                raise UnknownEntryError(f"Director '{name}' not found")
            state = self.get_state(session_id)
            state.active_director = profile.name
            state.director_mode_enabled = True
            logger.info(f"[{session_id}] Director mode on: {profile.name}")
            return self._save(state)

    async def disable_director(self, session_id: str) -> ConversationState:
        async with self.gate.hold(session_id):
            state = self.get_state(session_id)
            state.director_mode_enabled = False
            state.active_director = None
            return self._save(state)

    # Suggestions

    async def apply_suggestion(
        self,
        session_id: str,
        name: str,
        prompt: Optional[str] = None,
        category: Optional[str] = None,
    ) -> SuggestionOutcome:
        """Apply a cinematic suggestion to a prompt (default: the open intent's request).

        Workflow suggestions expand into a pending workflow.
        """
        async with self.gate.hold(session_id):
            state = self.get_state(session_id)
            current = state.current_intent
            prompt = prompt if prompt is not None else (current.raw_context if current else "")
            category = category or (current.category.value if current else IntentCategory.IMAGE.value)

            result = self.suggestions.apply(name, prompt, category)
            if not result.success or result.action != SuggestionAction.WORKFLOW_TRIGGER:
                return SuggestionOutcome(result=result)

            intent = current if current is not None and current.category.value == category else Intent(
                category=IntentCategory(category),
                confidence=0.9,
                raw_context=prompt,
                requires_generation=True,
            )
            workflow = await self.orchestrator.expand(
                prompt, intent, state, rng=self.rng, template=result.workflow_template
            )
            state.pending_workflow = workflow
            self._save(state)
            return SuggestionOutcome(result=result, workflow=workflow)

    # Diagnostics

    def content_filter_stats(self) -> ContentFilterStats:
        return self.audit_log.stats()

    def describe(self) -> dict[str, Any]:
        return {
            "capabilities": self.registry.count(),
            "directors": self.directors.count(),
            "suggestions": len(self.suggestions.list_all()),
            "workflow_templates": self.orchestrator.template_names(),
            "advisory_enabled": self.advisory.enabled,
            "provider": type(self.provider).__name__ if self.provider else None,
        }
