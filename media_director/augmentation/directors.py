"""
Director Registry - loads director style profiles from YAML.

Profiles are static catalog entries; which director is active lives in the
per-session ConversationState, not here.
"""

import logging
from pathlib import Path
from typing import Optional

from media_director.augmentation.schemas import (
    DirectorCatalog,
    DirectorProfile,
    DirectorSummary,
    WeatherVocabulary,
)
from media_director.augmentation.tables import load_table

logger = logging.getLogger(__name__)


class DirectorRegistry:
    """Registry of director profiles, keyed by display name."""

    def __init__(self, definitions_dir: Optional[Path] = None):
        self.definitions_dir = definitions_dir
        self._profiles: dict[str, DirectorProfile] = {}
        self._weather = WeatherVocabulary()
        self._loaded = False

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self._load_all()

    def _load_all(self) -> None:
        catalog = load_table("directors.yaml", DirectorCatalog, self.definitions_dir)
        self._profiles = {}
        for profile in catalog.directors:
            if profile.name in self._profiles:
                logger.warning(f"Duplicate director profile '{profile.name}' ignored")
                continue
            self._profiles[profile.name] = profile
        self._weather = catalog.weather
        self._loaded = True
        logger.info(f"Loaded {len(self._profiles)} director profiles")

    def reload(self) -> None:
        self._loaded = False
        self._load_all()

    @property
    def weather(self) -> WeatherVocabulary:
        self._ensure_loaded()
        return self._weather

    def get(self, name: str) -> Optional[DirectorProfile]:
        """Profile by name; matching ignores case."""
        self._ensure_loaded()
        profile = self._profiles.get(name)
        if profile is not None:
            return profile
        lowered = name.strip().lower()
        for key, candidate in self._profiles.items():
            if key.lower() == lowered:
                return candidate
        return None

    def list_names(self) -> list[str]:
        self._ensure_loaded()
        return list(self._profiles)

    def list_all(self) -> list[DirectorProfile]:
        self._ensure_loaded()
        return list(self._profiles.values())

    def by_genre(self, genre: Optional[str] = None) -> list[DirectorProfile]:
        """Directors working in ``genre``; no genre (or "All") returns everyone."""
        self._ensure_loaded()
        if not genre or genre.lower() == "all":
            return list(self._profiles.values())
        wanted = genre.lower()
        return [p for p in self._profiles.values() if wanted in (g.lower() for g in p.genres)]

    def genres(self) -> list[str]:
        self._ensure_loaded()
        found = {genre for profile in self._profiles.values() for genre in profile.genres}
        return sorted(found)

    def describe(self, name: str) -> str:
        """One-line style summary, empty for unknown directors."""
        profile = self.get(name)
        if profile is None:
            return ""
        elements = (
            profile.visual_keywords[:2]
            + profile.composition_style[:1]
            + profile.lighting[:1]
        )
        return f"{profile.name} style: {', '.join(elements)}"

    def list_summaries(self, genre: Optional[str] = None) -> list[DirectorSummary]:
        return [
            DirectorSummary(name=p.name, genres=p.genres, description=self.describe(p.name))
            for p in self.by_genre(genre)
        ]

    def count(self) -> int:
        self._ensure_loaded()
        return len(self._profiles)


# Global registry instance
_registry: Optional[DirectorRegistry] = None


def get_director_registry() -> DirectorRegistry:
    """Get the global director registry instance."""
    global _registry
    if _registry is None:
        _registry = DirectorRegistry()
    return _registry
