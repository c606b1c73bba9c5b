"""Seed selection and negative prompts."""

import logging
import random
from pathlib import Path
from typing import Optional

from media_director.augmentation.schemas import NegativePrompts, SeedChoice, SeedLibrary
from media_director.augmentation.tables import load_table
from media_director.intent.keywords import contains_term

logger = logging.getLogger(__name__)


class SeedSelector:
    """Picks curated seeds from the pool matching a prompt's style."""

    def __init__(self, library: Optional[SeedLibrary] = None, definitions_dir: Optional[Path] = None):
        self.library = library or load_table("seeds.yaml", SeedLibrary, definitions_dir)

    def detect_style(self, prompt: str) -> str:
        for detection in self.library.detection:
            if contains_term(prompt, detection.terms):
                return detection.style
        return self.library.default_style

    def styles(self) -> list[str]:
        return list(self.library.pools)

    def select(self, prompt: str, rng: random.Random, style: Optional[str] = None) -> SeedChoice:
        chosen_style = style or self.detect_style(prompt)
        pool = self.library.pools.get(chosen_style)
        if not pool:
            logger.warning(f"No seed pool for style '{chosen_style}', using {self.library.default_style}")
            chosen_style = self.library.default_style
            pool = self.library.pools[chosen_style]
        seed = rng.choice(pool)
        logger.debug(f"Seed {seed.id} ({seed.description}) for style {chosen_style}")
        return SeedChoice(seed=seed.id, description=seed.description, style=chosen_style)


class NegativePromptTable:
    def __init__(self, prompts: Optional[NegativePrompts] = None, definitions_dir: Optional[Path] = None):
        self.prompts = prompts or load_table("negative_prompts.yaml", NegativePrompts, definitions_dir)

    def for_category(self, category: str) -> str:
        """Video gets motion artifacts; every other category the image variant."""
        extra = self.prompts.video if category == "video" else self.prompts.image
        return ", ".join(self.prompts.base + extra)
