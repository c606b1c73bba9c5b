"""
Suggestion Registry - loads cinematic suggestions and applies them to prompts.
"""

import logging
from pathlib import Path
from typing import Optional

import yaml

from .schemas import CinematicSuggestion, SuggestionAction, SuggestionCatalog, SuggestionResult

logger = logging.getLogger(__name__)

DEFINITIONS_DIR = Path(__file__).parent / "definitions"

# Prompts shorter than this are replaced by the enhancement instead of extended.
MIN_PROMPT_LENGTH = 10


class SuggestionRegistry:
    """Registry of cinematic suggestions, keyed by lower-cased name and id."""

    def __init__(self, definitions_dir: Optional[Path] = None):
        self.definitions_dir = definitions_dir or DEFINITIONS_DIR
        self._suggestions: dict[str, CinematicSuggestion] = {}
        self._loaded = False

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self._load_all()

    def _load_all(self) -> None:
        path = self.definitions_dir / "suggestions.yaml"
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        catalog = SuggestionCatalog(**data)
        self._suggestions = {s.id: s for s in catalog.suggestions}
        self._loaded = True
        logger.info(f"Loaded {len(self._suggestions)} cinematic suggestions")

    def reload(self) -> None:
        self._suggestions = {}
        self._loaded = False
        self._ensure_loaded()

    def get(self, name: str) -> Optional[CinematicSuggestion]:
        """Look up by id ("low-angle-shot") or display name ("low-angle shot")."""
        self._ensure_loaded()
        key = name.strip().lower()
        if key in self._suggestions:
            return self._suggestions[key]
        for suggestion in self._suggestions.values():
            if suggestion.name.lower() == key or suggestion.id.replace("-", " ") == key.replace("-", " "):
                return suggestion
        return None

    def list_all(self) -> list[CinematicSuggestion]:
        self._ensure_loaded()
        return list(self._suggestions.values())

    def compatible_with(self, category: str) -> list[CinematicSuggestion]:
        self._ensure_loaded()
        return [s for s in self._suggestions.values() if category in s.compatible_modes]

    def apply(self, name: str, prompt: str, category: str) -> SuggestionResult:
        """Modified prompt or workflow template for a suggestion, or an error result."""
        suggestion = self.get(name)
        if suggestion is None:
            logger.warning(f"No suggestion named '{name}'")
            return SuggestionResult(
                success=False,
                action=SuggestionAction.ERROR,
                error=f"Unknown suggestion: {name}",
                message=f"I don't recognize the suggestion \"{name}\". Please try a different option.",
            )

        if category not in suggestion.compatible_modes:
            logger.warning(f"Suggestion '{suggestion.id}' is not compatible with {category}")
            return SuggestionResult(
                success=False,
                action=SuggestionAction.ERROR,
                suggestion_id=suggestion.id,
                error=f"Suggestion \"{suggestion.name}\" is not compatible with {category} generation",
                message=(
                    f"The \"{suggestion.name}\" suggestion is not available for {category} generation. "
                    "Try switching to a compatible mode."
                ),
            )

        if suggestion.workflow_trigger:
            return SuggestionResult(
                success=True,
                action=SuggestionAction.WORKFLOW_TRIGGER,
                suggestion_id=suggestion.id,
                workflow_template=suggestion.workflow_trigger,
                message=f"Starting the \"{suggestion.name}\" workflow.",
            )

        stripped = prompt.strip()
        if len(stripped) < MIN_PROMPT_LENGTH:
            modified = suggestion.prompt_enhancement
        else:
            modified = f"{stripped}, {suggestion.prompt_enhancement}"
        logger.info(f"Applied suggestion '{suggestion.id}' to {category} prompt")
        return SuggestionResult(
            success=True,
            action=SuggestionAction.PROMPT_MODIFICATION,
            suggestion_id=suggestion.id,
            modified_prompt=modified,
            message=f"Enhanced your prompt with \"{suggestion.name}\".",
        )


# Global registry instance
_registry: Optional[SuggestionRegistry] = None


def get_suggestion_registry() -> SuggestionRegistry:
    """Get the global suggestion registry instance."""
    global _registry
    if _registry is None:
        _registry = SuggestionRegistry()
    return _registry


def apply_suggestion(name: str, prompt: str, category: str) -> SuggestionResult:
    return get_suggestion_registry().apply(name, prompt, category)
