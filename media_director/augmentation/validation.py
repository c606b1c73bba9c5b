"""Length and consistency validation of prompts.

Corrections are applied silently and reported as warnings:
- conflicting descriptor pairs keep the first occurring term
- emphasis weights ``(term:w)`` are clamped to [0.1, 2.0]
- prompts are cut to the category's length ceiling at a word boundary
"""

import logging
import re

from media_director.augmentation.schemas import ValidationOutcome

logger = logging.getLogger(__name__)

IMAGE_PROMPT_CEILING = 1000
DEFAULT_PROMPT_CEILING = 500

WEIGHT_MIN = 0.1
WEIGHT_MAX = 2.0

CONFLICTING_PAIRS = [
    ("warm", "cool"),
    ("bright", "dark"),
    ("colorful", "monochrome"),
    ("sharp", "blurry"),
    ("realistic", "artistic"),
]

_EMPHASIS_RE = re.compile(r"\(([^():]+):\s*(-?\d+(?:\.\d+)?)\)")


def clamp_weight(weight: float) -> float:
    return max(WEIGHT_MIN, min(WEIGHT_MAX, weight))


def format_weight(weight: float) -> str:
    return f"{round(weight, 2):g}"


def _word(term: str) -> re.Pattern:
    return re.compile(rf"\b{re.escape(term)}\b", re.IGNORECASE)


def tidy_prompt(prompt: str) -> str:
    """Collapse whitespace and the empty list slots left by removals."""
    cleaned = re.sub(r"\s+", " ", prompt)
    cleaned = re.sub(r"\s+([,.])", r"\1", cleaned)
    cleaned = re.sub(r",(\s*,)+", ",", cleaned)
    return cleaned.strip().strip(",").strip()


def prompt_ceiling(category: str) -> int:
    return IMAGE_PROMPT_CEILING if category == "image" else DEFAULT_PROMPT_CEILING


def resolve_conflicts(prompt: str, warnings: list[str]) -> str:
    for first, second in CONFLICTING_PAIRS:
        first_match = _word(first).search(prompt)
        second_match = _word(second).search(prompt)
        if not first_match or not second_match:
            continue
        if first_match.start() < second_match.start():
            kept, dropped = first, second
        else:
            kept, dropped = second, first
        prompt = tidy_prompt(_word(dropped).sub("", prompt))
        warnings.append(f"Removed conflicting term '{dropped}' (conflicts with '{kept}')")
    return prompt


def clamp_emphasis(prompt: str, warnings: list[str]) -> str:
    def _clamp(match: re.Match) -> str:
        term, raw = match.group(1), float(match.group(2))
        weight = clamp_weight(raw)
        if weight != raw:
            warnings.append(f"Clamped weight for '{term.strip()}' from {format_weight(raw)} to {format_weight(weight)}")
        return f"({term}:{format_weight(weight)})"

    return _EMPHASIS_RE.sub(_clamp, prompt)


def enforce_ceiling(prompt: str, category: str, warnings: list[str]) -> str:
    ceiling = prompt_ceiling(category)
    if len(prompt) <= ceiling:
        return prompt
    cut = prompt[:ceiling]
    if " " in cut:
        cut = cut.rsplit(" ", 1)[0]
    cut = cut.rstrip(" ,")
    warnings.append(f"Prompt shortened from {len(prompt)} to {len(cut)} characters ({category} limit {ceiling})")
    return cut


def validate_prompt(prompt: str, category: str) -> ValidationOutcome:
    """Apply all corrections to ``prompt`` for a generation in ``category``."""
    warnings: list[str] = []
    corrected = resolve_conflicts(prompt, warnings)
    corrected = clamp_emphasis(corrected, warnings)
    corrected = enforce_ceiling(corrected, category, warnings)
    if warnings:
        logger.info(f"Prompt validation applied {len(warnings)} correction(s)")
    return ValidationOutcome(prompt=corrected, warnings=warnings)
