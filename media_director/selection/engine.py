"""Selection Engine - picks the capability for an intent.

Priority policy, evaluated top-down; the first step that resolves a
capability wins:

1. Explicit override ("using X", "with X", a literal model name)
2. Action-subtype routing for operations on an attached image
3. Category policy: stored preference, then ranked fallback chains

If nothing resolves for a generative category the failure is logged with
the registry snapshot and no delegation is produced.
"""

import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING, Optional

import yaml

from media_director.capabilities.registry import CapabilityRegistry, get_capability_registry
from media_director.capabilities.schemas import InputAsset, MediaCategory, ModelCapability
from media_director.errors import SelectionError
from media_director.intent.keywords import compile_term, contains_term
from media_director.intent.schemas import GENERATIVE_CATEGORIES, ActionSubtype, Intent, IntentCategory
from media_director.intent.schemas import MatchMode
from media_director.selection.schemas import (
    ChainEntry,
    Delegation,
    SelectionPolicies,
    SelectionStep,
    SubtypeRoute,
    VideoBranch,
)

if TYPE_CHECKING:
    from media_director.session.schemas import ConversationState

logger = logging.getLogger(__name__)

DEFINITIONS_DIR = Path(__file__).parent / "definitions"

_OVERRIDE_RE = re.compile(
    r"\b(?:using|with|via|on|through)\s+([a-z0-9][a-z0-9.\-]*)(?:\s+([a-z0-9][a-z0-9.\-]*))?"
)

PREFERENCE_NONE = "none"


def load_policies(policies_file: Optional[Path] = None) -> SelectionPolicies:
    path = policies_file or DEFINITIONS_DIR / "policies.yaml"
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    policies = SelectionPolicies(**data)
    logger.info(
        f"Loaded selection policies: {len(policies.subtype_routes)} subtype routes, "
        f"{len(policies.image.quality_chain)}-step image quality chain"
    )
    return policies


def resolve_chain(chain: list[ChainEntry], candidates: list[ModelCapability]) -> Optional[ModelCapability]:
    """First capability matched by the highest-ranked chain entry."""
    for entry in chain:
        for capability in candidates:
            endpoint_id = capability.id.lower()
            if entry.text_only and capability.accepts_input_assets:
                continue
            if any(marker in endpoint_id for marker in entry.exclude):
                continue
            if entry.any:
                return capability
            if entry.id_contains and entry.id_contains in endpoint_id:
                return capability
            if entry.strength and capability.has_strength(entry.strength):
                return capability
    return None


class SelectionEngine:
    """Resolves intents to delegations against a capability registry."""

    def __init__(
        self,
        registry: Optional[CapabilityRegistry] = None,
        policies: Optional[SelectionPolicies] = None,
    ):
        self.registry = registry or get_capability_registry()
        self.policies = policies or load_policies()
        self._stop_words = {w.lower() for w in self.policies.override_stop_words}
        self._generic_segments = {s.lower() for s in self.policies.generic_id_segments}

    # Public API

    def select_model(self, intent: Intent, state: "ConversationState") -> Optional[Delegation]:
        """Delegation for ``intent``, or None when nothing should or can be generated."""
        try:
            return self.select_or_raise(intent, state)
        except SelectionError:
            return None

    def select_or_raise(self, intent: Intent, state: "ConversationState") -> Optional[Delegation]:
        """Like select_model, but a hard selection failure raises SelectionError."""
        if not intent.requires_generation:
            return None
        if intent.category not in GENERATIVE_CATEGORIES:
            logger.info(f"No generation target for {intent.category.value} intent")
            return None
        if state.is_disabled(intent.category.value):
            logger.info(f"Generation disabled by preference for {intent.category.value}")
            return None

        snapshot = self.registry.snapshot()
        capability, step, reason = self._resolve(intent, state, snapshot)
        if capability is None:
            logger.error(
                f"No capability resolved for {intent.category.value} intent "
                f"(rule={intent.matched_rule}, context={intent.raw_context!r}); "
                f"registry snapshot: {sorted(snapshot)}"
            )
            raise SelectionError(intent.category.value, sorted(snapshot))

        delegation = self._delegation(intent, capability, step, reason)
        logger.info(
            f"Selected {capability.id} for {intent.category.value} via {step.value}: {reason}"
        )
        return delegation

    def select_for_workflow(self, intent: Intent, state: "ConversationState") -> Delegation:
        """Model shared by every workflow step, with a fixed general-purpose default."""
        try:
            delegation = self.select_or_raise(intent, state)
        except SelectionError:
            delegation = None
        if delegation is not None:
            return delegation

        default = self.registry.get(self.policies.workflow_default_model)
        if default is None:
            raise SelectionError(intent.category.value, self.registry.ids())
        logger.info(f"Workflow falling back to default model {default.id}")
        return self._delegation(
            intent,
            default,
            SelectionStep.WORKFLOW_DEFAULT,
            f"Using the default {default.label} for this workflow",
        )

    def estimate_time(self, capability: ModelCapability, category: IntentCategory) -> str:
        tier = self.policies.estimated_times.get(capability.efficiency.value, {})
        key = "image" if category == IntentCategory.IMAGE else "other"
        return tier.get(key, "unknown")

    # Policy steps

    def _resolve(
        self,
        intent: Intent,
        state: "ConversationState",
        snapshot: dict[str, ModelCapability],
    ) -> tuple[Optional[ModelCapability], SelectionStep, str]:
        category = MediaCategory(intent.category.value)
        in_category = [c for c in snapshot.values() if c.category == category]

        explicit = self.explicit_override(intent.raw_context, in_category, list(snapshot.values()))
        if explicit is not None:
            return (
                explicit,
                SelectionStep.EXPLICIT_OVERRIDE,
                f"Using {explicit.label} as requested for {category.value} generation",
            )

        subtype = intent.action_subtype or state.pending_action_subtype
        if subtype is not None:
            routed = self.route_subtype(subtype, state, snapshot, category=intent.category)
            if routed is not None:
                return (
                    routed,
                    SelectionStep.ACTION_SUBTYPE,
                    f"Routing {subtype.value} request to {routed.label}",
                )

        preferred_id = state.preference_for(category.value)
        if preferred_id and preferred_id != PREFERENCE_NONE:
            preferred = snapshot.get(preferred_id)
            if preferred is not None and preferred.category == category:
                return (
                    preferred,
                    SelectionStep.USER_PREFERENCE,
                    f"Using your preferred {preferred.label} for {category.value} generation",
                )
            logger.warning(f"Preferred model '{preferred_id}' not usable for {category.value}")

        chosen = self.category_policy(intent, state, in_category)
        if chosen is None:
            return None, SelectionStep.CATEGORY_POLICY, ""
        strengths = ", ".join(chosen.strengths[:2]) or "general capabilities"
        return (
            chosen,
            SelectionStep.CATEGORY_POLICY,
            f"Selected {chosen.label} for {category.value} generation based on "
            f"efficiency ({chosen.efficiency.value}) and capabilities ({strengths})",
        )

    def explicit_override(
        self,
        text: str,
        in_category: list[ModelCapability],
        everything: list[ModelCapability],
    ) -> Optional[ModelCapability]:
        """Capability the user named explicitly, preferring the intent's category.

        Inside the category a name may be part of a label or id; outside it
        the name must equal a whole label or id segment.
        """
        lowered = text.lower()
        for candidates, exact in ((in_category, False), (everything, True)):
            for match in _OVERRIDE_RE.finditer(lowered):
                first = match.group(1).strip(".-")
                second = (match.group(2) or "").strip(".-")
                names = [f"{first} {second}"] if second else []
                names.append(first)
                for name in names:
                    found = self._resolve_name(name, candidates, exact=exact)
                    if found is not None:
                        logger.debug(f"Explicit model reference '{name}' resolved to {found.id}")
                        return found
            literal = self._literal_mention(lowered, candidates)
            if literal is not None:
                return literal
        return None

    def _resolve_name(
        self, name: str, candidates: list[ModelCapability], exact: bool = False
    ) -> Optional[ModelCapability]:
        if len(name) <= 2 or name in self._stop_words:
            return None
        for capability in candidates:
            label = capability.label.lower()
            endpoint_id = capability.id.lower()
            if exact:
                segments = set(endpoint_id.split("/")) - self._generic_segments
                if name == label or name in segments:
                    return capability
            elif name in label or name in endpoint_id:
                return capability
        return None

    def _literal_mention(self, lowered: str, candidates: list[ModelCapability]) -> Optional[ModelCapability]:
        for capability in candidates:
            tokens = [capability.label.lower()]
            tokens.extend(
                segment for segment in capability.id.lower().split("/")
                if len(segment) > 2 and segment not in self._generic_segments
            )
            for token in tokens:
                if compile_term(token, MatchMode.WORD).search(lowered):
                    return capability
        return None

    def route_subtype(
        self,
        subtype: ActionSubtype,
        state: "ConversationState",
        snapshot: dict[str, ModelCapability],
        category: Optional[IntentCategory] = None,
    ) -> Optional[ModelCapability]:
        route = self._route_for(subtype)
        if route is None:
            return None
        if category is not None and route.category != category:
            logger.debug(f"Ignoring {subtype.value} route for a {category.value} intent")
            return None
        preferred = state.preference_for(route.preference_key)
        if preferred and preferred in route.compatible and preferred in snapshot:
            return snapshot[preferred]
        for capability_id in route.compatible:
            if capability_id in snapshot:
                return snapshot[capability_id]
        logger.warning(f"No registered capability for {subtype.value} route")
        return None

    def _route_for(self, subtype: ActionSubtype) -> Optional[SubtypeRoute]:
        for route in self.policies.subtype_routes:
            if route.subtype == subtype:
                return route
        return None

    def category_policy(
        self,
        intent: Intent,
        state: "ConversationState",
        candidates: list[ModelCapability],
    ) -> Optional[ModelCapability]:
        if intent.category == IntentCategory.IMAGE:
            policy = self.policies.image
            if contains_term(intent.raw_context, policy.character_terms):
                return resolve_chain(policy.character_chain, candidates)
            if contains_term(intent.raw_context, policy.variation_terms):
                return resolve_chain(policy.variation_chain, candidates)
            return resolve_chain(policy.quality_chain, candidates)

        if intent.category == IntentCategory.VIDEO:
            return self._video_policy(intent, state, candidates)

        if intent.category == IntentCategory.VOICE:
            return resolve_chain(self.policies.voice_chain, candidates)

        return resolve_chain(self.policies.default_chain, candidates)

    def video_branch(self, intent: Intent, state: "ConversationState") -> VideoBranch:
        if intent.attached_image_ref or state.last_asset_ref(InputAsset.IMAGE):
            return VideoBranch.IMAGE_TO_VIDEO
        return VideoBranch.TEXT_TO_VIDEO

    def _video_policy(
        self,
        intent: Intent,
        state: "ConversationState",
        candidates: list[ModelCapability],
    ) -> Optional[ModelCapability]:
        policy = self.policies.video
        branch = self.video_branch(intent, state)
        multi_angle = contains_term(intent.raw_context, policy.multi_angle_terms)

        if branch == VideoBranch.IMAGE_TO_VIDEO:
            eligible = [c for c in candidates if c.accepts(InputAsset.IMAGE)]
            chain = policy.image_to_video_multi_angle_chain if multi_angle else policy.image_to_video_chain
        else:
            eligible = candidates
            chain = policy.text_to_video_multi_angle_chain if multi_angle else policy.text_to_video_chain

        logger.debug(
            f"Video policy: branch={branch.value}, multi_angle={multi_angle}, "
            f"{len(eligible)} eligible capabilities"
        )
        return resolve_chain(chain, eligible)

    def _delegation(
        self,
        intent: Intent,
        capability: ModelCapability,
        step: SelectionStep,
        reason: str,
    ) -> Delegation:
        return Delegation(
            model_id=capability.id,
            reason=reason,
            confidence=intent.confidence,
            estimated_time=self.estimate_time(capability, intent.category),
            intent_category=intent.category,
            selection_step=step,
        )
