"""Advisory service - optional language-model assistance for the core.

Three operations, each a single attempt bounded by a timeout:
- rescore: adjust an intent's confidence and add keywords
- rewrite: improve a generation prompt
- reply: conversational text for non-generation turns

Any failure, timeout or answer that does not match the expected shape is
logged and discarded; the deterministic result stands.
"""

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from media_director.errors import AdvisoryError
from media_director.intent.schemas import Intent, IntentCategory
from media_director.llm.backends import AdvisoryBackend
from media_director.llm.client import parse_llm_json_response

if TYPE_CHECKING:
    from media_director.session.schemas import ConversationState

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 8.0
MAX_EXTRA_KEYWORDS = 10


class RescoreAnswer(BaseModel):
    """Expected JSON shape of a re-scoring answer."""
    model_config = ConfigDict(extra="forbid")

    confidence: float
    keywords: list[str] = Field(default_factory=list)


class RewriteAnswer(BaseModel):
    """Expected JSON shape of a prompt rewrite."""
    model_config = ConfigDict(extra="forbid")

    prompt: str = Field(..., min_length=1)


RESCORE_SYSTEM_PROMPT = """You review intent classifications for a media generation assistant.
Given the user's message and the classified category, answer ONLY with a JSON object:
{"confidence": <number between 0 and 1>, "keywords": [<up to 10 salient terms from the message>]}
Do not change the category. Do not add any other fields."""

REWRITE_SYSTEM_PROMPT = """You improve prompts for {category} generation models.
Keep the user's subject, setting and intent. Add concrete visual or sonic detail.
Answer ONLY with a JSON object: {{"prompt": "<improved prompt>"}}"""

REPLY_SYSTEM_PROMPT = """You are the conversational voice of a creative media assistant that
can generate images, videos, music and voiceovers. Answer briefly and helpfully.
When it fits, suggest something the user could create."""

GREETING_REPLY = (
    "Hello! I'm your creative assistant. I can generate images, videos, music and "
    "voiceovers. What would you like to make today?"
)
QUESTION_REPLY = (
    "Good question. I can't look that up right now, but I can help you turn an idea "
    "into an image, a video, music or a voiceover. Tell me what you have in mind."
)
ANALYSIS_REPLY = (
    "I can review your request, but detailed analysis isn't available right now. "
    "Describe what you'd like to create and I'll pick the best model for it."
)
CLARIFICATION_REPLY = (
    "I'm not sure what you'd like to create yet. Try something like "
    "\"generate an image of a lighthouse at sunset\" or \"make a short video of waves\"."
)


def fallback_reply(intent: Intent) -> str:
    """Fixed reply used when no backend is available or the call fails."""
    if intent.matched_rule == "greeting":
        return GREETING_REPLY
    if intent.matched_rule == "question":
        return QUESTION_REPLY
    if intent.category == IntentCategory.ANALYSIS:
        return ANALYSIS_REPLY
    return CLARIFICATION_REPLY


class AdvisoryService:
    """Wraps an AdvisoryBackend with timeouts, validation and fallbacks."""

    def __init__(self, backend: Optional[AdvisoryBackend] = None, timeout: float = DEFAULT_TIMEOUT):
        self.backend = backend
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return self.backend is not None

    async def _complete(self, system_prompt: str, user_prompt: str, label: str) -> Optional[str]:
        if self.backend is None:
            return None
        try:
            return await asyncio.wait_for(self.backend.complete(system_prompt, user_prompt), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"[{label}] Advisory call timed out after {self.timeout}s")
        except AdvisoryError as e:
            logger.warning(f"[{label}] Advisory call failed: {e}")
        except Exception as e:
            logger.warning(f"[{label}] Advisory call raised {type(e).__name__}: {e}")
        return None

    async def rescore(self, text: str, intent: Intent) -> Intent:
        """Intent with advisory confidence and extra keywords, or ``intent`` unchanged."""
        raw = await self._complete(
            RESCORE_SYSTEM_PROMPT,
            f"Message: {text}\nCategory: {intent.category.value}\nCurrent confidence: {intent.confidence}",
            "rescore",
        )
        if raw is None:
            return intent
        try:
            answer = RescoreAnswer.model_validate(parse_llm_json_response(raw))
        except (json.JSONDecodeError, ValueError, ValidationError) as e:
            logger.warning(f"[rescore] Discarding malformed advisory answer: {e}")
            return intent

        confidence = max(0.0, min(1.0, answer.confidence))
        extra = [k for k in answer.keywords[:MAX_EXTRA_KEYWORDS] if k and k not in intent.keywords]
        logger.info(
            f"[rescore] {intent.category.value} confidence {intent.confidence} -> {confidence}, "
            f"+{len(extra)} keyword(s)"
        )
        return intent.model_copy(update={"confidence": confidence, "keywords": intent.keywords + tuple(extra)})

    async def rewrite(self, prompt: str, category: str) -> str:
        """Improved prompt, or ``prompt`` unchanged."""
        raw = await self._complete(REWRITE_SYSTEM_PROMPT.format(category=category), prompt, "rewrite")
        if raw is None:
            return prompt
        try:
            answer = RewriteAnswer.model_validate(parse_llm_json_response(raw))
        except (json.JSONDecodeError, ValueError, ValidationError) as e:
            logger.warning(f"[rewrite] Discarding malformed advisory answer: {e}")
            return prompt
        rewritten = answer.prompt.strip()
        return rewritten or prompt

    async def reply(self, text: str, intent: Intent, state: Optional["ConversationState"] = None) -> str:
        """Conversational answer for a non-generation turn."""
        context = ""
        if state is not None and state.user_context:
            context = "Earlier messages:\n" + "\n".join(state.user_context[-5:]) + "\n\n"
        raw = await self._complete(REPLY_SYSTEM_PROMPT, f"{context}Message: {text}", "reply")
        if raw is None or not raw.strip():
            return fallback_reply(intent)
        return raw.strip()
