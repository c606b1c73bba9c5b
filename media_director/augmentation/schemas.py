"""
Pydantic schemas for prompt augmentation.

Covers the YAML-backed tables (directors, content filters, seeds, negative
prompts, voices, breakdown and style vocabularies), the structured
breakdown, and the report returned next to the final parameter map.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


# Directors and style fusion

class DirectorProfile(BaseModel):
    """A director's visual signature, used by style fusion."""
    model_config = ConfigDict(frozen=True)

    name: str
    genres: list[str] = Field(default_factory=list)
    visual_keywords: list[str] = Field(default_factory=list)
    composition_style: list[str] = Field(default_factory=list)
    camera_motion: list[str] = Field(default_factory=list)
    lighting: list[str] = Field(default_factory=list)
    color_palette: list[str] = Field(default_factory=list)
    setting_tropes: list[str] = Field(default_factory=list)
    command_phrase: str = ""


class WeatherVocabulary(BaseModel):
    mentions: list[str] = Field(default_factory=list, description="Prompt terms that count as mentioning weather")
    markers: list[str] = Field(default_factory=list, description="Substrings that make a style element weather-related")


class DirectorCatalog(BaseModel):
    """Everything in definitions/directors.yaml."""
    weather: WeatherVocabulary = Field(default_factory=WeatherVocabulary)
    directors: list[DirectorProfile] = Field(default_factory=list)


class DirectorSummary(BaseModel):
    name: str
    genres: list[str]
    description: str


class StyleFusionResult(BaseModel):
    enhanced_prompt: str
    applied_style_name: str = "none"
    weightings: dict[str, float] = Field(default_factory=dict)
    cinematic_instructions: list[str] = Field(default_factory=list)


# Reference-image style extraction

class ExtractedStyle(BaseModel):
    lighting: list[str] = Field(default_factory=list)
    composition: list[str] = Field(default_factory=list)
    color_palette: list[str] = Field(default_factory=list)
    mood: list[str] = Field(default_factory=list)
    techniques: list[str] = Field(default_factory=list)
    matched_director: Optional[str] = None
    confidence: float = Field(0.5, ge=0.0, le=1.0)


class DirectorMatch(BaseModel):
    director: str
    indicators: list[str]


class StyleFallback(BaseModel):
    lighting: list[str] = Field(default_factory=list)
    composition: list[str] = Field(default_factory=list)
    color_palette: list[str] = Field(default_factory=list)
    mood: list[str] = Field(default_factory=list)
    techniques: list[str] = Field(default_factory=list)
    confidence: float = 0.5


class StyleVocabulary(BaseModel):
    """Everything in definitions/style_vocabulary.yaml."""
    lighting: list[str] = Field(default_factory=list)
    composition: list[str] = Field(default_factory=list)
    color_palette: list[str] = Field(default_factory=list)
    mood: list[str] = Field(default_factory=list)
    techniques: list[str] = Field(default_factory=list)
    director_matches: list[DirectorMatch] = Field(default_factory=list)
    default_director: str = "Denis Villeneuve"
    fallback: StyleFallback = Field(default_factory=StyleFallback)


# Content filtering

class FilteredTerm(BaseModel):
    """One content-policy substitution."""
    original: str
    replacement: str
    reason: str


class Substitution(BaseModel):
    term: str
    replacement: str
    reason: str


class FallbackPattern(BaseModel):
    pattern: str = Field(..., description="Case-insensitive regular expression")
    replacement: str
    reason: str


class ContentFilterTable(BaseModel):
    """Everything in definitions/content_filters.yaml."""
    substitutions: list[Substitution] = Field(default_factory=list)
    fallbacks: list[FallbackPattern] = Field(default_factory=list)


class ContentFilterEntry(BaseModel):
    """One audited prompt submission."""
    timestamp: datetime
    original_prompt: str
    filtered_prompt: str
    filtered_terms: list[FilteredTerm] = Field(default_factory=list)
    model_id: str
    success: bool = True
    generation_id: str


class TermCount(BaseModel):
    term: str
    count: int


class ContentFilterStats(BaseModel):
    total_generations: int
    successful_generations: int
    failed_generations: int
    success_rate: float = Field(..., description="Percentage of successful generations, 0-100")
    most_filtered_terms: list[TermCount] = Field(default_factory=list)


# Seeds, negative prompts, voices

class CuratedSeed(BaseModel):
    id: int
    description: str
    tags: list[str] = Field(default_factory=list)


class StyleDetection(BaseModel):
    style: str
    terms: list[str]


class SeedLibrary(BaseModel):
    """Everything in definitions/seeds.yaml."""
    default_style: str = "cinematic"
    detection: list[StyleDetection] = Field(default_factory=list)
    pools: dict[str, list[CuratedSeed]]


class SeedChoice(BaseModel):
    seed: int
    description: str
    style: str


class NegativePrompts(BaseModel):
    """Everything in definitions/negative_prompts.yaml."""
    base: list[str]
    video: list[str] = Field(default_factory=list)
    image: list[str] = Field(default_factory=list)


class VoiceTable(BaseModel):
    """Everything in definitions/voices.yaml."""
    default_voice: str
    default_quality: str = "high"
    defaults: dict[str, str]
    settings: dict[str, float | bool] = Field(default_factory=dict)
    voices: dict[str, str] = Field(default_factory=dict)
    female_names: list[str] = Field(default_factory=list)


# Structured breakdown

class BreakdownIndicators(BaseModel):
    narrative: list[str] = Field(default_factory=list)
    environmental: list[str] = Field(default_factory=list)
    character: list[str] = Field(default_factory=list)


class BreakdownVocabulary(BaseModel):
    """Everything in definitions/breakdown.yaml."""
    min_indicators: int = 2
    min_length: int = 100
    indicators: BreakdownIndicators = Field(default_factory=BreakdownIndicators)
    analysis: dict[str, list[str]] = Field(default_factory=dict)
    actions: list[str] = Field(default_factory=list)
    location_prepositions: list[str] = Field(default_factory=list)
    time_words: list[str] = Field(default_factory=list)
    lighting_techniques: list[str] = Field(default_factory=list)


class ShotSection(BaseModel):
    composition: str
    camera_settings: str
    film_grain: str


class LensSection(BaseModel):
    optics: str
    artifacts: str
    depth_of_field: str


class SubjectSection(BaseModel):
    description: str
    details: str = ""
    wardrobe: str = ""
    grooming: str = ""


class SceneSection(BaseModel):
    location: str
    time_of_day: str
    environment: str


class ActionSection(BaseModel):
    action: str
    props: str = ""
    physics: str


class CinematographySection(BaseModel):
    lighting: str
    tone: str
    color_palette: str


class TextSection(BaseModel):
    visible_text: str = "None"
    typography: str = "Clean sans serif"
    placement: str = "Integrated naturally"


class PromptBreakdown(BaseModel):
    """A prompt decomposed into cinematic sections."""
    shot: ShotSection
    lens: LensSection
    subject: SubjectSection
    scene: SceneSection
    action: ActionSection
    cinematography: CinematographySection
    text_elements: TextSection = Field(default_factory=TextSection)
    visual_aesthetic: str
    lifted_location: Optional[str] = Field(None, description="Location phrase taken verbatim from the prompt")
    lifted_time_of_day: Optional[str] = Field(None, description="Time-of-day phrase taken verbatim from the prompt")


# Pipeline output

class ValidationOutcome(BaseModel):
    prompt: str
    warnings: list[str] = Field(default_factory=list)


class AugmentationReport(BaseModel):
    """What the augmentation passes did to one prompt."""
    original_prompt: str
    final_prompt: str = ""
    rewritten: bool = False
    warnings: list[str] = Field(default_factory=list)
    filtered_terms: list[FilteredTerm] = Field(default_factory=list)
    fusion: Optional[StyleFusionResult] = None
    extracted_style: Optional[ExtractedStyle] = None
    structured: bool = False
    seed_style: Optional[str] = None
    asset_ref: Optional[str] = None
    generation_id: Optional[str] = Field(None, description="Audit-log id of this submission")
