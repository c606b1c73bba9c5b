"""Reference-image style extraction.

The bundled extractor reads style vocabulary out of whatever text describes
the reference (a caption, or the words in its URL). Any richer extractor
can be dropped in through the StyleExtractor protocol.
"""

import logging
import re
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable
from urllib.parse import unquote, urlparse

from media_director.augmentation.schemas import ExtractedStyle, StyleVocabulary
from media_director.augmentation.tables import load_table
from media_director.intent.keywords import contains_term

logger = logging.getLogger(__name__)

MAX_CONFIDENCE = 0.9


@runtime_checkable
class StyleExtractor(Protocol):
    async def extract_style(self, image_ref: str, caption: Optional[str] = None) -> ExtractedStyle: ...


def describe_reference(image_ref: str, caption: Optional[str] = None) -> str:
    """Searchable text for a reference: the caption plus the words of its path."""
    parts = [caption or ""]
    if image_ref and not image_ref.startswith("data:"):
        path = unquote(urlparse(image_ref).path or image_ref)
        parts.append(re.sub(r"[/_\-.+]+", " ", path))
    return " ".join(p for p in parts if p).strip()


class VocabularyStyleExtractor:
    def __init__(self, vocabulary: Optional[StyleVocabulary] = None, definitions_dir: Optional[Path] = None):
        self.vocabulary = vocabulary or load_table("style_vocabulary.yaml", StyleVocabulary, definitions_dir)

    def match_director(self, terms: list[str]) -> str:
        for candidate in self.vocabulary.director_matches:
            if any(contains_term(term, [indicator]) for term in terms for indicator in candidate.indicators):
                return candidate.director
        return self.vocabulary.default_director

    async def extract_style(self, image_ref: str, caption: Optional[str] = None) -> ExtractedStyle:
        text = describe_reference(image_ref, caption)
        vocab = self.vocabulary
        found = {
            "lighting": [t for t in vocab.lighting if contains_term(text, [t])],
            "composition": [t for t in vocab.composition if contains_term(text, [t])],
            "color_palette": [t for t in vocab.color_palette if contains_term(text, [t])],
            "mood": [t for t in vocab.mood if contains_term(text, [t])],
            "techniques": [t for t in vocab.techniques if contains_term(text, [t])],
        }
        total = sum(len(terms) for terms in found.values())
        if total == 0:
            fallback = vocab.fallback
            logger.debug(f"No style vocabulary in reference {image_ref[:60]!r}, using defaults")
            return ExtractedStyle(
                lighting=fallback.lighting,
                composition=fallback.composition,
                color_palette=fallback.color_palette,
                mood=fallback.mood,
                techniques=fallback.techniques,
                matched_director=vocab.default_director,
                confidence=fallback.confidence,
            )

        all_terms = [term for terms in found.values() for term in terms]
        style = ExtractedStyle(
            **found,
            matched_director=self.match_director(all_terms),
            confidence=min(MAX_CONFIDENCE, 0.5 + 0.1 * total),
        )
        logger.info(f"Extracted {total} style term(s) from reference, closest to {style.matched_director}")
        return style
