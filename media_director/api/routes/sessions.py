"""Session API routes: turns, the authorization gate, preferences and director mode."""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from media_director.api.deps import get_core
from media_director.core import Attachment, ExecutionResult, SuggestionOutcome, TurnResult
from media_director.errors import (
    GenerationNotAuthorizedError,
    ProviderError,
    SessionBusyError,
    UnknownEntryError,
)
from media_director.intent.schemas import IntentCategory
from media_director.session.schemas import ConversationState

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])


class TurnRequest(BaseModel):
    text: str = Field(..., description="The user's message")
    attachments: list[Attachment] = Field(default_factory=list)
    forced_category: Optional[IntentCategory] = Field(None, description="Skip classification and use this category")


class PreferencesRequest(BaseModel):
    preferences: dict[str, Optional[str]] = Field(
        ..., description="Category -> capability id, 'none' to disable, or null for automatic"
    )


class DirectorRequest(BaseModel):
    name: Optional[str] = Field(None, description="Director name; null turns director mode off")


class SuggestionRequest(BaseModel):
    prompt: Optional[str] = None
    category: Optional[str] = None


def _busy(e: SessionBusyError) -> HTTPException:
    return HTTPException(status_code=409, detail=str(e))


@router.get("/{session_id}", response_model=ConversationState)
async def get_session(session_id: str) -> ConversationState:
    """Get the current conversation state of a session."""
    return get_core().get_state(session_id)


@router.post("/{session_id}/turns", response_model=TurnResult)
async def process_turn(session_id: str, request: TurnRequest) -> TurnResult:
    """Process one user turn."""
    try:
        return await get_core().process_turn(
            session_id,
            request.text,
            attachments=request.attachments,
            forced_category=request.forced_category,
        )
    except SessionBusyError as e:
        raise _busy(e)


@router.post("/{session_id}/authorize", response_model=ConversationState)
async def authorize(session_id: str) -> ConversationState:
    """Authorize the session's pending generations."""
    try:
        return await get_core().authorize(session_id)
    except SessionBusyError as e:
        raise _busy(e)


@router.post("/{session_id}/reset", response_model=ConversationState)
async def reset(session_id: str) -> ConversationState:
    """Drop pending work and revoke authorization."""
    try:
        return await get_core().reset(session_id)
    except SessionBusyError as e:
        raise _busy(e)


@router.post("/{session_id}/execute", response_model=ExecutionResult)
async def execute_pending(session_id: str) -> ExecutionResult:
    """Submit the session's authorized pending work to the generation provider."""
    try:
        return await get_core().execute_pending(session_id)
    except SessionBusyError as e:
        raise _busy(e)
    except GenerationNotAuthorizedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ProviderError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.put("/{session_id}/preferences", response_model=ConversationState)
async def set_preferences(session_id: str, request: PreferencesRequest) -> ConversationState:
    """Set per-category model preferences."""
    try:
        return await get_core().set_preferences(session_id, request.preferences)
    except SessionBusyError as e:
        raise _busy(e)
    except UnknownEntryError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.put("/{session_id}/director", response_model=ConversationState)
async def set_director(session_id: str, request: DirectorRequest) -> ConversationState:
    """Turn director mode on with the named director, or off."""
    core = get_core()
    try:
        if request.name is None:
            return await core.disable_director(session_id)
        return await core.set_active_director(session_id, request.name)
    except SessionBusyError as e:
        raise _busy(e)
    except UnknownEntryError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/{session_id}/suggestions/{name}", response_model=SuggestionOutcome)
async def apply_suggestion(session_id: str, name: str, request: Optional[SuggestionRequest] = None) -> SuggestionOutcome:
    """Apply an interactive cinematic suggestion."""
    request = request or SuggestionRequest()
    try:
        outcome = await get_core().apply_suggestion(session_id, name, prompt=request.prompt, category=request.category)
    except SessionBusyError as e:
        raise _busy(e)
    if not outcome.result.success:
        status = 404 if outcome.result.suggestion_id is None else 422
        raise HTTPException(status_code=status, detail=outcome.result.error)
    return outcome
