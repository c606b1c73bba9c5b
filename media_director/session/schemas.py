"""
Pydantic schemas for per-session conversation state.
"""

import logging
from typing import Optional
from pydantic import BaseModel, Field

from media_director.capabilities.schemas import PRODUCED_ASSET, InputAsset, MediaCategory
from media_director.intent.schemas import ActionSubtype, Intent
from media_director.selection.schemas import Delegation
from media_director.workflows.schemas import Workflow

logger = logging.getLogger(__name__)

# Sentinel preference value: generation disabled for the category.
PREFERENCE_NONE = "none"

USER_CONTEXT_LIMIT = 20
SEED_HISTORY_LIMIT = 50

# Accepted spellings for preference keys.
PREFERENCE_ALIASES = {
    "image": "image",
    "video": "video",
    "audio": "audio",
    "music": "audio",
    "voice": "voice",
    "voiceover": "voice",
    "text": "text",
    "image_edit": "image_edit",
    "imageedit": "image_edit",
    "image-edit": "image_edit",
}


def normalize_preference_key(key: str) -> str:
    normalized = PREFERENCE_ALIASES.get(key.strip().lower())
    if normalized is None:
        raise ValueError(f"Unknown preference key '{key}'")
    return normalized


class ConversationState(BaseModel):
    """Mutable context for one session.

    Passed explicitly into every core call and persisted through a
    SessionStore between turns.
    """
    session_id: str
    current_intent: Optional[Intent] = None
    pending_delegations: list[Delegation] = Field(default_factory=list)
    completed_delegations: list[Delegation] = Field(default_factory=list)
    user_context: list[str] = Field(default_factory=list)
    per_category_preference: dict[str, Optional[str]] = Field(default_factory=dict)
    last_produced_asset_ref: Optional[str] = None
    last_produced_asset_kind: Optional[InputAsset] = None
    generation_authorized: bool = False
    pending_action_subtype: Optional[ActionSubtype] = None
    active_director: Optional[str] = None
    director_mode_enabled: bool = False
    seed_history: list[int] = Field(default_factory=list)
    pending_workflow: Optional[Workflow] = None

    def reset(self) -> None:
        """Close the open intent and drop pending work."""
        self.pending_delegations = []
        self.pending_workflow = None
        self.current_intent = None
        self.generation_authorized = False
        self.pending_action_subtype = None

    def remember_turn(self, text: str) -> None:
        self.user_context.append(text)
        if len(self.user_context) > USER_CONTEXT_LIMIT:
            self.user_context = self.user_context[-USER_CONTEXT_LIMIT:]

    def open_intent(self, intent: Intent) -> None:
        """Make ``intent`` the single open intent, replacing any earlier one."""
        if self.current_intent is not None and self.pending_delegations:
            logger.info(
                f"[{self.session_id}] Replacing open {self.current_intent.category.value} intent "
                f"with {len(self.pending_delegations)} pending delegation(s)"
            )
            self.pending_delegations = []
            self.pending_workflow = None
            self.generation_authorized = False
        self.current_intent = intent
        self.pending_action_subtype = None

    def set_preference(self, key: str, value: Optional[str]) -> None:
        self.per_category_preference[normalize_preference_key(key)] = value

    def preference_for(self, key: str) -> Optional[str]:
        return self.per_category_preference.get(normalize_preference_key(key))

    def is_disabled(self, key: str) -> bool:
        return self.preference_for(key) == PREFERENCE_NONE

    def record_seed(self, seed: int) -> None:
        self.seed_history.append(seed)
        if len(self.seed_history) > SEED_HISTORY_LIMIT:
            self.seed_history = self.seed_history[-SEED_HISTORY_LIMIT:]

    def complete_delegation(self, delegation_id: str, asset_ref: Optional[str] = None) -> Optional[Delegation]:
        """Move a pending delegation to the completed list."""
        for index, delegation in enumerate(self.pending_delegations):
            if delegation.id == delegation_id:
                done = self.pending_delegations.pop(index)
                self.completed_delegations.append(done)
                if asset_ref:
                    self.record_asset(asset_ref, MediaCategory(done.intent_category.value))
                return done
        return None

    def record_asset(self, asset_ref: str, category: MediaCategory) -> None:
        """Remember the latest generated asset and the kind of media it is."""
        self.last_produced_asset_ref = asset_ref
        self.last_produced_asset_kind = PRODUCED_ASSET.get(category)

    def last_asset_ref(self, kind: InputAsset) -> Optional[str]:
        """The last generated asset, only if it is of ``kind``."""
        if self.last_produced_asset_kind == kind:
            return self.last_produced_asset_ref
        return None

    def reject_delegation(self, delegation_id: str) -> Optional[Delegation]:
        for index, delegation in enumerate(self.pending_delegations):
            if delegation.id == delegation_id:
                return self.pending_delegations.pop(index)
        return None
