"""Shared Anthropic client helpers for the advisory service."""

import json
import logging
from typing import Optional

import anthropic
import httpx

logger = logging.getLogger(__name__)


def get_anthropic_client(api_key: Optional[str], timeout: float) -> Optional[anthropic.AsyncAnthropic]:
    """Async Anthropic client, or None when no API key is configured."""
    if not api_key:
        return None
    return anthropic.AsyncAnthropic(
        api_key=api_key,
        timeout=httpx.Timeout(timeout, connect=min(timeout, 5.0)),
        max_retries=0,
    )


def parse_llm_json_response(raw_text: str) -> dict:
    """Parse JSON from LLM response, handling markdown code fences.

    LLMs sometimes wrap JSON in ```json ... ``` fences despite being
    told not to. This function strips those fences before parsing.

    Raises:
        json.JSONDecodeError: If the text cannot be parsed as JSON
        ValueError: If the JSON is not an object
    """
    content = raw_text.strip()

    # Strip leading markdown fence (```json or ```)
    if content.startswith("```"):
        content = content.split("\n", 1)[1] if "\n" in content else content[3:]

    # Strip trailing fence
    if content.endswith("```"):
        content = content.rsplit("```", 1)[0]

    parsed = json.loads(content.strip())
    if not isinstance(parsed, dict):
        raise ValueError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed
