"""Interactive cinematic suggestions."""

from media_director.suggestions.schemas import (
    CinematicSuggestion,
    SuggestionAction,
    SuggestionKind,
    SuggestionResult,
)
from media_director.suggestions.registry import (
    SuggestionRegistry,
    apply_suggestion,
    get_suggestion_registry,
)

__all__ = [
    "CinematicSuggestion",
    "SuggestionAction",
    "SuggestionKind",
    "SuggestionResult",
    "SuggestionRegistry",
    "apply_suggestion",
    "get_suggestion_registry",
]
