"""
Augmentation module: prompt enhancement passes and the tables behind them.

This module provides:
- Director profiles and style fusion
- Length and consistency validation
- Structured cinematic breakdown
- Content-policy substitution with an audit log
- Seed, negative-prompt and voice selection
- The pipeline that chains them into provider parameters
"""

from .schemas import (
    AugmentationReport,
    DirectorProfile,
    ExtractedStyle,
    FilteredTerm,
    PromptBreakdown,
    StyleFusionResult,
)
from .audit import ContentFilterLog
from .breakdown import StructuredBreakdown, serialize_breakdown
from .content_filter import ContentFilter, get_content_filter
from .directors import DirectorRegistry, get_director_registry
from .fusion import StyleFusion
from .pipeline import AugmentationPipeline, parse_aspect_ratio
from .seeds import NegativePromptTable, SeedSelector
from .style_extraction import StyleExtractor, VocabularyStyleExtractor
from .validation import clamp_weight, validate_prompt
from .voices import VoiceCatalog

__all__ = [
    "AugmentationReport",
    "DirectorProfile",
    "ExtractedStyle",
    "FilteredTerm",
    "PromptBreakdown",
    "StyleFusionResult",
    "ContentFilterLog",
    "StructuredBreakdown",
    "serialize_breakdown",
    "ContentFilter",
    "get_content_filter",
    "DirectorRegistry",
    "get_director_registry",
    "StyleFusion",
    "AugmentationPipeline",
    "parse_aspect_ratio",
    "NegativePromptTable",
    "SeedSelector",
    "StyleExtractor",
    "VocabularyStyleExtractor",
    "clamp_weight",
    "validate_prompt",
    "VoiceCatalog",
]
