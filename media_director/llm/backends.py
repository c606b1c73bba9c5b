"""Advisory backend abstraction.

The decision core only needs one call shape: a system prompt and a user
prompt in, plain text out. Timeouts and fallbacks are handled by the
AdvisoryService that wraps a backend.
"""

import logging
import time
from typing import Optional, Protocol, runtime_checkable

import anthropic

from media_director.config import DEFAULT_ADVISORY_MODEL
from media_director.errors import AdvisoryError
from media_director.llm.client import get_anthropic_client

logger = logging.getLogger(__name__)

MAX_OUTPUT_TOKENS = 1024


@runtime_checkable
class AdvisoryBackend(Protocol):
    """Protocol for advisory language-model backends."""

    async def complete(self, system_prompt: str, user_prompt: str) -> str: ...


class AnthropicAdvisoryBackend:
    """Anthropic Claude backend for short advisory calls."""

    def __init__(
        self,
        api_key: str,
        model_id: str = DEFAULT_ADVISORY_MODEL,
        timeout: float = 8.0,
        client: Optional[anthropic.AsyncAnthropic] = None,
    ):
        self.model_id = model_id
        self._client = client or get_anthropic_client(api_key, timeout)
        if self._client is None:
            raise AdvisoryError("Anthropic advisory backend needs an API key")

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        start_time = time.time()
        try:
            response = await self._client.messages.create(
                model=self.model_id,
                max_tokens=MAX_OUTPUT_TOKENS,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
            )
        except anthropic.APIError as e:
            raise AdvisoryError(f"{self.model_id} call failed: {e}") from e

        raw_text = "".join(block.text for block in response.content if getattr(block, "type", "") == "text")
        duration_ms = int((time.time() - start_time) * 1000)
        if not raw_text.strip():
            raise AdvisoryError(f"Empty response from {self.model_id}")

        logger.info(
            f"Advisory call completed: {response.usage.input_tokens}+"
            f"{response.usage.output_tokens} tokens, {duration_ms}ms"
        )
        return raw_text.strip()
