"""Structured cinematic breakdown of complex prompts.

A prompt with enough narrative, environmental or character-interaction
indicators (or simply a long one) is decomposed into shot, lens, subject,
scene, action, cinematography, text and style sections, then serialized
back into one natural-language prompt. Location and time-of-day phrases
found in the prompt are carried over verbatim.
"""

import logging
import random
import re
from pathlib import Path
from typing import Optional

from media_director.augmentation.schemas import (
    ActionSection,
    BreakdownVocabulary,
    CinematographySection,
    DirectorProfile,
    LensSection,
    PromptBreakdown,
    SceneSection,
    ShotSection,
    SubjectSection,
)
from media_director.augmentation.tables import load_table
from media_director.intent.keywords import contains_term

logger = logging.getLogger(__name__)

SUBJECT_LIMIT = 100


def _alternation(terms: list[str]) -> str:
    return "|".join(re.escape(t) for t in sorted(terms, key=len, reverse=True))


class StructuredBreakdown:
    def __init__(self, vocabulary: Optional[BreakdownVocabulary] = None, definitions_dir: Optional[Path] = None):
        self.vocabulary = vocabulary or load_table("breakdown.yaml", BreakdownVocabulary, definitions_dir)
        times = _alternation(self.vocabulary.time_words)
        preps = _alternation(self.vocabulary.location_prepositions)
        self._time_re = re.compile(rf"\b(?:at|during|in|by)\s+(?:the\s+)?({times})\b", re.IGNORECASE)
        self._time_clause_re = re.compile(rf"\s+(?:at|during|in|by)\s+(?:the\s+)?(?:{times})\b.*$", re.IGNORECASE)
        self._time_start_re = re.compile(rf"^(?:the\s+)?(?:{times})\b", re.IGNORECASE)
        self._location_re = re.compile(rf"\b(?:{preps})\s+([^,.;]+)", re.IGNORECASE)

    # Trigger

    def indicators_in(self, prompt: str) -> list[str]:
        indicators = self.vocabulary.indicators
        found = []
        for term in dict.fromkeys(indicators.narrative + indicators.environmental + indicators.character):
            if contains_term(prompt, [term]):
                found.append(term)
        return found

    def should_apply(self, prompt: str) -> bool:
        count = len(self.indicators_in(prompt))
        apply = count >= self.vocabulary.min_indicators or len(prompt) > self.vocabulary.min_length
        logger.debug(f"Breakdown decision: {count} indicators, {len(prompt)} chars, apply={apply}")
        return apply

    # Extraction

    def lift_time_of_day(self, prompt: str) -> Optional[str]:
        match = self._time_re.search(prompt)
        return match.group(1) if match else None

    def lift_location(self, prompt: str) -> Optional[str]:
        for match in self._location_re.finditer(prompt):
            candidate = match.group(1).strip()
            if self._time_start_re.match(candidate):
                continue
            candidate = self._time_clause_re.sub("", candidate).strip()
            if candidate:
                return candidate
        return None

    def analyze(self, prompt: str) -> dict[str, bool]:
        return {flag: contains_term(prompt, terms) for flag, terms in self.vocabulary.analysis.items()}

    # Construction

    def build(
        self,
        prompt: str,
        rng: random.Random,
        director: Optional[DirectorProfile] = None,
    ) -> PromptBreakdown:
        flags = self.analyze(prompt)
        person = flags.get("person", False)
        landscape = flags.get("landscape", False)
        indoor = flags.get("indoor", False)
        outdoor = flags.get("outdoor", False)
        emotion = flags.get("emotion", False)
        styled = flags.get("style", False)
        close_up = flags.get("close_up", False)
        wide = flags.get("wide_shot", False)

        def has(*terms: str) -> bool:
            return contains_term(prompt, list(terms))

        if person:
            if close_up:
                composition = "Close-up shot centered on subject with intimate framing"
            elif wide:
                composition = "Medium shot centered on subject with balanced framing"
            else:
                composition = "Portrait shot centered on subject with natural framing"
        elif landscape:
            composition = "Wide establishing shot with expansive framing"
        else:
            composition = "Medium shot centered on main element with balanced composition"

        if emotion and has("dramatic"):
            camera = "ISO 800, f/2.8, 1/60s"
        elif outdoor and not indoor:
            camera = "ISO 200, f/4, 1/125s"
        else:
            camera = "ISO 400, f/2.8, 1/60s"

        if close_up:
            optics = "Prime lens 50mm, clean optics"
        elif wide:
            optics = "Wide angle 24mm, natural distortion"
        else:
            optics = "Standard lens 35mm, slight vignette"

        if person:
            depth = "Shallow focus on subject, background softly blurred"
        elif landscape:
            depth = "Deep focus throughout"
        else:
            depth = "Medium depth with selective focus"

        segments = [s.strip() for s in prompt.split(",") if s.strip()]
        description = segments[0] if segments else prompt.strip()
        if len(description) > SUBJECT_LIMIT:
            description = description[:SUBJECT_LIMIT] + "..."

        lifted_location = self.lift_location(prompt)
        lifted_time = self.lift_time_of_day(prompt)

        if lifted_location:
            location = lifted_location
        elif indoor:
            location = "Indoor environment as specified"
        elif outdoor:
            location = "Outdoor environment as specified"
        else:
            location = "Environment as specified in prompt"

        if lifted_time:
            time_of_day = lifted_time
        elif flags.get("lighting", False):
            if has("sunset", "golden"):
                time_of_day = "Golden hour lighting"
            elif has("night", "dark"):
                time_of_day = "Night time with artificial lighting"
            else:
                time_of_day = "Natural daylight"
        else:
            time_of_day = "Natural lighting conditions"

        if emotion:
            if has("moody", "dramatic"):
                environment = "Atmospheric environment with moody lighting"
            elif has("bright", "happy"):
                environment = "Bright, open environment with natural light"
            else:
                environment = "Balanced environment with natural lighting"
        else:
            environment = "Natural environment with appropriate lighting"

        action = "Subject positioned naturally as described in prompt"
        for keyword in self.vocabulary.actions:
            if has(keyword):
                action = f"{keyword.capitalize()} action as described"
                break

        if indoor:
            props = "Contextual interior elements"
        elif outdoor:
            props = "Environmental details and natural elements"
        else:
            props = ""

        if director and director.lighting and self.vocabulary.lighting_techniques:
            lighting = f"{rng.choice(director.lighting)}, {rng.choice(self.vocabulary.lighting_techniques)}"
        else:
            lighting = "Natural lighting with professional enhancement"

        if emotion:
            if has("dramatic"):
                tone = "Dramatic and intense"
            elif has("calm"):
                tone = "Peaceful and serene"
            else:
                tone = "Natural and balanced"
        else:
            tone = "Professional and cinematic"

        if styled and has("vintage"):
            palette = "Warm, muted tones with vintage color grading"
        elif styled and has("modern"):
            palette = "Contemporary color palette with clean tones"
        elif styled:
            palette = "Natural color palette with professional grading"
        else:
            palette = "Natural color palette with cinematic enhancement"

        if director:
            aesthetic = f"{director.name} style with {tone.lower()} vibe, professional color grading"
        else:
            aesthetic = f"Contemporary cinematic with {tone.lower()} vibe, professional finish"

        return PromptBreakdown(
            shot=ShotSection(
                composition=composition,
                camera_settings=camera,
                film_grain="Moderate" if styled and has("vintage") else "Subtle",
            ),
            lens=LensSection(optics=optics, artifacts="None", depth_of_field=depth),
            subject=SubjectSection(
                description=description,
                details=", ".join(segments[1:]),
                wardrobe="Contemporary casual attire" if person else "",
                grooming="Natural appearance" if person else "",
            ),
            scene=SceneSection(location=location, time_of_day=time_of_day, environment=environment),
            action=ActionSection(
                action=action,
                props=props,
                physics=f"Stable environment with {'controlled' if indoor else 'natural'} lighting casting soft shadows",
            ),
            cinematography=CinematographySection(lighting=lighting, tone=tone, color_palette=palette),
            visual_aesthetic=aesthetic,
            lifted_location=lifted_location,
            lifted_time_of_day=lifted_time,
        )


def serialize_breakdown(breakdown: PromptBreakdown) -> str:
    """Flatten a breakdown into a single prompt, subject first."""
    subject = breakdown.subject
    subject_parts = [subject.description, subject.details, subject.wardrobe, subject.grooming]
    scene = breakdown.scene
    act = breakdown.action
    shot = breakdown.shot
    lens = breakdown.lens
    cine = breakdown.cinematography
    text = breakdown.text_elements

    if text.visible_text == "None":
        text_sentence = "No visible text"
    else:
        text_sentence = f"Visible text: {text.visible_text}, {text.typography} typography, {text.placement.lower()}"

    sentences = [
        ", ".join(p for p in subject_parts if p),
        f"Location: {scene.location}, time of day: {scene.time_of_day}, {scene.environment[0].lower()}{scene.environment[1:]}",
        ", ".join(p for p in [act.action, act.props, act.physics] if p),
        f"{shot.composition}, {shot.camera_settings}, {shot.film_grain.lower()} film grain",
        f"{lens.optics}, {lens.depth_of_field.lower()}",
        f"{cine.lighting}, {cine.tone.lower()} tone, {cine.color_palette[0].lower()}{cine.color_palette[1:]}",
        text_sentence,
        breakdown.visual_aesthetic,
    ]
    return ". ".join(s.rstrip(".") for s in sentences if s) + "."
