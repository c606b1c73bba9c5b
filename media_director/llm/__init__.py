"""Advisory language-model utilities.

Provides the Anthropic client helpers, the backend protocol and the
AdvisoryService used for re-scoring, prompt rewrites and replies.
"""

from media_director.llm.client import get_anthropic_client, parse_llm_json_response
from media_director.llm.backends import AdvisoryBackend, AnthropicAdvisoryBackend
from media_director.llm.advisory import AdvisoryService, fallback_reply

__all__ = [
    "get_anthropic_client",
    "parse_llm_json_response",
    "AdvisoryBackend",
    "AnthropicAdvisoryBackend",
    "AdvisoryService",
    "fallback_reply",
]
