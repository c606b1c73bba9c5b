"""
Prompt Augmentation Pipeline.

Builds the final provider parameter map for one delegation. Passes run in
a fixed order and any of them may leave the prompt unchanged:

1. advisory rewrite (optional, network-bound)
2. length and consistency validation
3. director style fusion, when director mode is on
4. structured breakdown of complex prompts
5. content-policy substitution (audited)
6. negative prompt and seed
7. reference asset injection
"""

import asyncio
import logging
import random
import re
from typing import TYPE_CHECKING, Any, Optional

from media_director.augmentation.audit import ContentFilterLog
from media_director.augmentation.breakdown import StructuredBreakdown, serialize_breakdown
from media_director.augmentation.content_filter import ContentFilter
from media_director.augmentation.directors import DirectorRegistry, get_director_registry
from media_director.augmentation.fusion import StyleFusion
from media_director.augmentation.schemas import AugmentationReport, DirectorProfile, ExtractedStyle
from media_director.augmentation.seeds import NegativePromptTable, SeedSelector
from media_director.augmentation.style_extraction import StyleExtractor
from media_director.augmentation.validation import enforce_ceiling, tidy_prompt, validate_prompt
from media_director.augmentation.voices import VoiceCatalog
from media_director.capabilities.schemas import InputAsset, MediaCategory, ModelCapability
from media_director.intent.schemas import Intent

if TYPE_CHECKING:
    from media_director.llm.advisory import AdvisoryService
    from media_director.session.schemas import ConversationState

logger = logging.getLogger(__name__)

ASPECT_RATIOS = ("1:1", "3:4", "4:3", "16:9", "9:16")
DEFAULT_ASPECT_RATIO = "16:9"

_ASPECT_RE = re.compile(r"\baspect\s*ratio\s*[:=]?\s*(\d{1,2})\s*[:x/]\s*(\d{1,2})\b", re.IGNORECASE)

# Categories whose prompts describe a picture; fusion and breakdown only apply there.
VISUAL_CATEGORIES = {MediaCategory.IMAGE, MediaCategory.VIDEO}

STYLE_EXTRACTION_TIMEOUT = 5.0


def parse_aspect_ratio(prompt: str) -> tuple[str, Optional[str], str]:
    """Return (aspect_ratio, warning, prompt without the hint)."""
    match = _ASPECT_RE.search(prompt)
    if not match:
        return DEFAULT_ASPECT_RATIO, None, prompt
    requested = f"{match.group(1)}:{match.group(2)}"
    stripped = tidy_prompt(prompt[:match.start()] + prompt[match.end():])
    if requested not in ASPECT_RATIOS:
        return DEFAULT_ASPECT_RATIO, f"Unsupported aspect ratio {requested}, using {DEFAULT_ASPECT_RATIO}", stripped
    return requested, None, stripped


class AugmentationPipeline:
    """Turns (prompt, intent, capability, state) into provider parameters."""

    def __init__(
        self,
        advisory: Optional["AdvisoryService"] = None,
        directors: Optional[DirectorRegistry] = None,
        content_filter: Optional[ContentFilter] = None,
        audit_log: Optional[ContentFilterLog] = None,
        breakdown: Optional[StructuredBreakdown] = None,
        seeds: Optional[SeedSelector] = None,
        negative_prompts: Optional[NegativePromptTable] = None,
        voices: Optional[VoiceCatalog] = None,
        style_extractor: Optional[StyleExtractor] = None,
        style_timeout: float = STYLE_EXTRACTION_TIMEOUT,
    ):
        self.advisory = advisory
        self.directors = directors or get_director_registry()
        self.fusion = StyleFusion(weather=self.directors.weather)
        self.content_filter = content_filter or ContentFilter()
        self.audit_log = audit_log or ContentFilterLog()
        self.breakdown = breakdown or StructuredBreakdown()
        self.seeds = seeds or SeedSelector()
        self.negative_prompts = negative_prompts or NegativePromptTable()
        self.voices = voices or VoiceCatalog()
        self.style_extractor = style_extractor
        self.style_timeout = style_timeout

    def _active_director(self, state: "ConversationState", report: AugmentationReport) -> Optional[DirectorProfile]:
        if not state.director_mode_enabled or not state.active_director:
            return None
        profile = self.directors.get(state.active_director)
        if profile is None:
            report.warnings.append(f"Director '{state.active_director}' not found, style fusion skipped")
            logger.warning(f"[{state.session_id}] Active director '{state.active_director}' not in catalog")
        return profile

    async def _reference_style(self, asset_ref: Optional[str]) -> Optional[ExtractedStyle]:
        if asset_ref is None or self.style_extractor is None:
            return None
        try:
            return await asyncio.wait_for(self.style_extractor.extract_style(asset_ref), timeout=self.style_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Style extraction timed out after {self.style_timeout}s")
        except Exception as e:
            logger.warning(f"Style extraction failed: {e}")
        return None

    async def build_parameters(
        self,
        intent: Intent,
        capability: ModelCapability,
        state: "ConversationState",
        *,
        rng: random.Random,
        prompt: Optional[str] = None,
        asset_ref: Optional[str] = None,
    ) -> tuple[dict[str, Any], AugmentationReport]:
        """Final parameter map and the report of what each pass did."""
        source = prompt if prompt is not None else intent.raw_context
        category = capability.category
        report = AugmentationReport(original_prompt=source)

        aspect_ratio, aspect_warning, working = parse_aspect_ratio(source)
        if aspect_warning:
            report.warnings.append(aspect_warning)

        # 1. advisory rewrite
        if self.advisory is not None:
            rewritten = await self.advisory.rewrite(working, category.value)
            if rewritten and rewritten.strip() and rewritten != working:
                working = rewritten.strip()
                report.rewritten = True

        # 2. validation
        outcome = validate_prompt(working, category.value)
        working = outcome.prompt
        report.warnings.extend(outcome.warnings)

        reference = asset_ref or intent.attached_image_ref or state.last_asset_ref(InputAsset.IMAGE)
        director = self._active_director(state, report) if category in VISUAL_CATEGORIES else None

        # 3. director fusion
        if director is not None:
            report.extracted_style = await self._reference_style(reference)
            report.fusion = self.fusion.fuse(working, director, rng, reference=report.extracted_style)
            working = report.fusion.enhanced_prompt

        # 4. structured breakdown
        if category in VISUAL_CATEGORIES and self.breakdown.should_apply(working):
            breakdown = self.breakdown.build(working, rng, director=director)
            working = serialize_breakdown(breakdown)
            report.structured = True

        if director is not None or report.structured:
            working = enforce_ceiling(working, category.value, report.warnings)

        # 5. content policy
        filtered, terms = self.content_filter.apply(working)
        report.filtered_terms = terms
        entry = self.audit_log.record(
            original_prompt=working,
            filtered_prompt=filtered,
            filtered_terms=terms,
            model_id=capability.id,
        )
        report.generation_id = entry.generation_id
        working = filtered

        # 6. negative prompt and seed
        choice = self.seeds.select(source, rng)
        state.record_seed(choice.seed)
        report.seed_style = choice.style

        params: dict[str, Any] = {
            "prompt": working,
            "aspect_ratio": aspect_ratio,
            "negative_prompt": self.negative_prompts.for_category(category.value),
            "seed": choice.seed,
        }
        params.update(self._category_fields(category, working))

        # 7. asset reference
        if capability.accepts(InputAsset.IMAGE):
            if reference:
                params["image_url"] = reference
                report.asset_ref = reference
        elif capability.accepts(InputAsset.VIDEO):
            video_ref = asset_ref or state.last_asset_ref(InputAsset.VIDEO)
            if video_ref:
                params["video_url"] = video_ref
                report.asset_ref = video_ref

        report.final_prompt = working
        logger.info(
            f"[{state.session_id}] Built parameters for {capability.id}: "
            f"{len(report.warnings)} warning(s), {len(terms)} filtered term(s), "
            f"structured={report.structured}, seed={choice.seed} ({choice.style})"
        )
        return params, report

    def _category_fields(self, category: MediaCategory, prompt: str) -> dict[str, Any]:
        if category == MediaCategory.IMAGE:
            return {"num_images": 1, "output_format": "jpeg", "enable_safety_checker": True}
        if category == MediaCategory.VIDEO:
            return {"duration": "8s", "resolution": "720p"}
        if category == MediaCategory.AUDIO:
            return {"duration": 30}
        if category == MediaCategory.VOICE:
            return self.voices.parameters(prompt)
        return {}
