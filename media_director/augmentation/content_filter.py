"""Content-policy substitution.

Rewrites terms that providers reject into neutral cinematic vocabulary.
Never fails: an empty table leaves the prompt untouched.
"""

import logging
import re
from pathlib import Path
from typing import Optional

from media_director.augmentation.schemas import ContentFilterTable, FilteredTerm
from media_director.augmentation.tables import load_table
from media_director.augmentation.validation import tidy_prompt

logger = logging.getLogger(__name__)


class ContentFilter:
    """Ordered term substitutions followed by regex fallbacks."""

    def __init__(self, table: Optional[ContentFilterTable] = None, definitions_dir: Optional[Path] = None):
        self.table = table or load_table("content_filters.yaml", ContentFilterTable, definitions_dir)
        self._terms = [
            (re.compile(rf"\b{re.escape(entry.term)}\b", re.IGNORECASE), entry)
            for entry in self.table.substitutions
        ]
        self._fallbacks = []
        for fallback in self.table.fallbacks:
            try:
                self._fallbacks.append((re.compile(fallback.pattern, re.IGNORECASE), fallback))
            except re.error as e:
                logger.error(f"Skipping invalid content-filter pattern {fallback.pattern!r}: {e}")

    def apply(self, prompt: str) -> tuple[str, list[FilteredTerm]]:
        """Return the filtered prompt and every substitution made."""
        filtered: list[FilteredTerm] = []
        result = prompt

        for pattern, entry in self._terms:
            for match in pattern.finditer(result):
                filtered.append(FilteredTerm(original=match.group(0), replacement=entry.replacement, reason=entry.reason))
            result = pattern.sub(entry.replacement, result)

        for pattern, fallback in self._fallbacks:
            for match in pattern.finditer(result):
                filtered.append(FilteredTerm(original=match.group(0), replacement=fallback.replacement, reason=fallback.reason))
            result = pattern.sub(fallback.replacement, result)

        if filtered:
            result = tidy_prompt(result)
            logger.info(
                f"Content filter replaced {len(filtered)} term(s): "
                f"{', '.join(sorted({t.original.lower() for t in filtered}))}"
            )
        return result, filtered


# Global filter instance
_filter: Optional[ContentFilter] = None


def get_content_filter() -> ContentFilter:
    """Get the global content filter instance."""
    global _filter
    if _filter is None:
        _filter = ContentFilter()
    return _filter
