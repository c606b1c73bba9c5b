"""Tests for the prompt augmentation pipeline."""

import asyncio

from conftest import FakeAdvisoryBackend
from media_director.augmentation import AugmentationPipeline, ContentFilterLog, parse_aspect_ratio
from media_director.capabilities.schemas import MediaCategory
from media_director.intent.schemas import Intent, IntentCategory
from media_director.llm.advisory import AdvisoryService

PHOTO = "https://cdn.test/photo.png"


def _intent(text, category=IntentCategory.IMAGE, image=None):
    return Intent(
        category=category,
        confidence=0.9,
        raw_context=text,
        requires_generation=True,
        attached_image_ref=image,
    )


def _build(pipeline, registry, state, rng, text, capability_id="fal-ai/imagen4/preview", **kwargs):
    category = registry.get(capability_id).category
    intent = _intent(text, category=IntentCategory(category.value), image=kwargs.pop("image", None))
    return asyncio.run(
        pipeline.build_parameters(intent, registry.get(capability_id), state, rng=rng, **kwargs)
    )


def test_simple_prompt(pipeline, registry, state, rng):
    params, report = _build(pipeline, registry, state, rng, "a lighthouse at sunset")

    assert params["prompt"] == "a lighthouse at sunset"
    assert params["aspect_ratio"] == "16:9"
    assert params["seed"] in {555, 888, 1111, 2222, 3333}
    assert "jpeg artifacts" in params["negative_prompt"]
    assert params["num_images"] == 1
    assert "image_url" not in params
    assert report.structured is False
    assert report.seed_style == "landscape"
    assert report.generation_id
    assert state.seed_history == [params["seed"]]


def test_parse_aspect_ratio():
    assert parse_aspect_ratio("a cat, aspect ratio 9:16") == ("9:16", None, "a cat")
    ratio, warning, prompt = parse_aspect_ratio("a cat aspect ratio 21:9")
    assert ratio == "16:9"
    assert warning == "Unsupported aspect ratio 21:9, using 16:9"
    assert prompt == "a cat"
    assert parse_aspect_ratio("a cat") == ("16:9", None, "a cat")


def test_aspect_ratio_hint_is_applied(pipeline, registry, state, rng):
    params, report = _build(pipeline, registry, state, rng, "a tall tower, aspect ratio 9:16")
    assert params["aspect_ratio"] == "9:16"
    assert params["prompt"] == "a tall tower"
    assert report.warnings == []


def test_content_filter_is_applied_and_audited(registry, state, rng):
    audit = ContentFilterLog()
    pipeline = AugmentationPipeline(audit_log=audit)
    params, report = _build(pipeline, registry, state, rng, "a creepy house on a hill")

    assert params["prompt"] == "a moody house on a hill"
    assert [t.original for t in report.filtered_terms] == ["creepy"]
    entries = audit.entries()
    assert len(entries) == 1
    assert entries[0].generation_id == report.generation_id
    assert entries[0].model_id == "fal-ai/imagen4/preview"


def test_director_fusion_and_breakdown(pipeline, registry, state, rng):
    state.director_mode_enabled = True
    state.active_director = "Christopher Nolan"
    params, report = _build(pipeline, registry, state, rng, "a lighthouse at sunset")

    assert report.fusion is not None
    assert report.fusion.applied_style_name == "Christopher Nolan"
    # The fused prompt is long enough to be restructured.
    assert report.structured is True
    assert "Christopher Nolan style" in params["prompt"]
    assert len(params["prompt"]) <= 1000


def test_unknown_director_is_reported(pipeline, registry, state, rng):
    state.director_mode_enabled = True
    state.active_director = "Nobody"
    params, report = _build(pipeline, registry, state, rng, "a lighthouse at sunset")
    assert report.fusion is None
    assert "Director 'Nobody' not found, style fusion skipped" in report.warnings
    assert params["prompt"] == "a lighthouse at sunset"


def test_director_mode_skips_non_visual_categories(pipeline, registry, state, rng):
    state.director_mode_enabled = True
    state.active_director = "Christopher Nolan"
    params, report = _build(
        pipeline, registry, state, rng, "welcome to the show", capability_id="fal-ai/elevenlabs/tts/turbo-v2.5"
    )
    assert report.fusion is None
    assert params["prompt"] == "welcome to the show"


def test_voice_parameters(pipeline, registry, state, rng):
    params, _ = _build(
        pipeline, registry, state, rng, "Rachel reads the evening news", capability_id="fal-ai/elevenlabs/tts/turbo-v2.5"
    )
    assert params["voice"] == "Rachel"
    assert params["voice_id"] == "21m00Tcm4TlvDq8ikWAM"
    assert params["text"] == "Rachel reads the evening news"


def test_video_parameters(pipeline, registry, state, rng):
    params, _ = _build(
        pipeline, registry, state, rng, "waves crashing on rocks", capability_id="fal-ai/luma-dream-machine/ray-2"
    )
    assert params["duration"] == "8s"
    assert "motion blur" in params["negative_prompt"]


def test_reference_image_injected_when_accepted(pipeline, registry, state, rng):
    params, report = _build(
        pipeline, registry, state, rng, "the same hero in a desert", capability_id="fal-ai/ideogram/character", image=PHOTO
    )
    assert params["image_url"] == PHOTO
    assert report.asset_ref == PHOTO


def test_reference_image_skipped_when_not_accepted(pipeline, registry, state, rng):
    params, report = _build(pipeline, registry, state, rng, "a lighthouse at sunset", image=PHOTO)
    assert "image_url" not in params
    assert report.asset_ref is None


def test_last_produced_asset_is_used_as_reference(pipeline, registry, state, rng):
    state.record_asset("https://cdn.test/clip.mp4", MediaCategory.VIDEO)
    params, _ = _build(
        pipeline, registry, state, rng, "grab the last frame", capability_id="fal-ai/ffmpeg-api/extract-frame"
    )
    assert params["video_url"] == "https://cdn.test/clip.mp4"


def test_video_result_is_not_attached_as_image(pipeline, registry, state, rng):
    state.record_asset("https://cdn.test/clip.mp4", MediaCategory.VIDEO)
    params, report = _build(
        pipeline, registry, state, rng, "the same hero in a desert", capability_id="fal-ai/ideogram/character"
    )

    assert "image_url" not in params
    assert report.asset_ref is None


def test_last_image_result_is_attached_as_image(pipeline, registry, state, rng):
    state.record_asset(PHOTO, MediaCategory.IMAGE)
    params, report = _build(
        pipeline, registry, state, rng, "the same hero in a desert", capability_id="fal-ai/ideogram/character"
    )

    assert params["image_url"] == PHOTO
    assert report.asset_ref == PHOTO


def test_advisory_rewrite(registry, state, rng):
    backend = FakeAdvisoryBackend({"prompt": "a towering lighthouse glowing at sunset"})
    pipeline = AugmentationPipeline(advisory=AdvisoryService(backend=backend))
    params, report = _build(pipeline, registry, state, rng, "a lighthouse at sunset")

    assert report.rewritten is True
    assert params["prompt"] == "a towering lighthouse glowing at sunset"
    assert report.original_prompt == "a lighthouse at sunset"


def test_failed_advisory_rewrite_keeps_prompt(registry, state, rng):
    backend = FakeAdvisoryBackend("not json at all")
    pipeline = AugmentationPipeline(advisory=AdvisoryService(backend=backend))
    params, report = _build(pipeline, registry, state, rng, "a lighthouse at sunset")

    assert report.rewritten is False
    assert params["prompt"] == "a lighthouse at sunset"
