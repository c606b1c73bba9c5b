"""Director style fusion.

Appends one element each from the active director's visual keywords,
composition, lighting and colour palette, then the director's command
phrase. Visual keywords and lighting carry emphasis weights.
"""

import logging
import random
from typing import Optional

from media_director.augmentation.schemas import (
    DirectorProfile,
    ExtractedStyle,
    StyleFusionResult,
    WeatherVocabulary,
)
from media_director.augmentation.validation import clamp_weight, format_weight
from media_director.intent.keywords import contains_term

logger = logging.getLogger(__name__)

VISUAL_KEYWORD_WEIGHT = 1.3
LIGHTING_WEIGHT = 1.2
COMPOSITION_WEIGHT = 1.0

# Terms taken from each list of an extracted reference style.
REFERENCE_TERMS_PER_LIST = 2


class StyleFusion:
    def __init__(
        self,
        weather: Optional[WeatherVocabulary] = None,
        visual_weight: float = VISUAL_KEYWORD_WEIGHT,
        lighting_weight: float = LIGHTING_WEIGHT,
    ):
        self.weather = weather or WeatherVocabulary()
        self.visual_weight = clamp_weight(visual_weight)
        self.lighting_weight = clamp_weight(lighting_weight)

    def mentions_weather(self, prompt: str) -> bool:
        return contains_term(prompt, self.weather.mentions)

    def _candidates(self, elements: list[str], allow_weather: bool) -> list[str]:
        if allow_weather:
            return list(elements)
        return [
            element for element in elements
            if not any(marker in element.lower() for marker in self.weather.markers)
        ]

    @staticmethod
    def _pick(candidates: list[str], rng: random.Random) -> Optional[str]:
        if not candidates:
            return None
        return rng.sample(candidates, 1)[0]

    def fuse(
        self,
        prompt: str,
        director: DirectorProfile,
        rng: random.Random,
        reference: Optional[ExtractedStyle] = None,
    ) -> StyleFusionResult:
        allow_weather = self.mentions_weather(prompt)

        visual = self._pick(self._candidates(director.visual_keywords, allow_weather), rng)
        composition = self._pick(self._candidates(director.composition_style, allow_weather), rng)
        lighting = self._pick(self._candidates(director.lighting, allow_weather), rng)
        color = self._pick(self._candidates(director.color_palette, allow_weather), rng)

        parts = [prompt]
        weightings: dict[str, float] = {}
        if visual:
            parts.append(f"({visual}:{format_weight(self.visual_weight)})")
            weightings[visual] = self.visual_weight
        if composition:
            parts.append(composition)
            weightings[composition] = COMPOSITION_WEIGHT
        if lighting:
            parts.append(f"({lighting}:{format_weight(self.lighting_weight)})")
            weightings[lighting] = self.lighting_weight
        if color:
            parts.append(color)

        if reference is not None:
            lowered = prompt.lower()
            for terms in (reference.lighting, reference.composition, reference.color_palette):
                for term in terms[:REFERENCE_TERMS_PER_LIST]:
                    if term.lower() not in lowered and term not in parts:
                        parts.append(term)

        if director.command_phrase:
            parts.append(director.command_phrase)

        instructions = []
        if director.camera_motion:
            instructions.append(director.camera_motion[0])
        if director.setting_tropes:
            instructions.append(director.setting_tropes[0])

        enhanced = ", ".join(part.strip() for part in parts if part.strip())
        logger.info(
            f"Fused {director.name} style: +{len(enhanced) - len(prompt)} chars, "
            f"weather elements {'kept' if allow_weather else 'filtered'}"
        )
        return StyleFusionResult(
            enhanced_prompt=enhanced,
            applied_style_name=director.name,
            weightings={term: clamp_weight(weight) for term, weight in weightings.items()},
            cinematic_instructions=instructions,
        )
