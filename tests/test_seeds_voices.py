"""Tests for seed selection, negative prompts and voice resolution."""

import random

from media_director.augmentation import NegativePromptTable, SeedSelector, VoiceCatalog


def test_seed_style_detection():
    seeds = SeedSelector()
    assert seeds.detect_style("a lighthouse at sunset") == "landscape"
    assert seeds.detect_style("portrait of a sailor") == "portrait"
    assert seeds.detect_style("a red apple") == "cinematic"


def test_seed_comes_from_detected_pool():
    seeds = SeedSelector()
    choice = seeds.select("a lighthouse at sunset", random.Random(5))
    assert choice.style == "landscape"
    assert choice.seed in {555, 888, 1111, 2222, 3333}


def test_unknown_style_falls_back_to_default_pool():
    seeds = SeedSelector()
    choice = seeds.select("anything", random.Random(5), style="baroque")
    assert choice.style == "cinematic"
    assert choice.seed in {42, 1337, 2024, 7777, 9999}


def test_seed_is_reproducible():
    seeds = SeedSelector()
    assert seeds.select("a forest", random.Random(9)) == seeds.select("a forest", random.Random(9))


def test_negative_prompts_per_category():
    table = NegativePromptTable()
    video = table.for_category("video")
    image = table.for_category("image")
    assert video.startswith("text, watermark")
    assert "motion blur" in video and "jpeg artifacts" not in video
    assert "jpeg artifacts" in image and "motion blur" not in image
    assert table.for_category("audio") == image


def test_voice_resolution():
    voices = VoiceCatalog()
    assert voices.resolve_id("Rachel") == ("21m00Tcm4TlvDq8ikWAM", False)
    assert voices.resolve_id("Somebody") == ("pNInz6obpgDQGcFmaJgB", True)


def test_voice_parameters_use_named_voice():
    params = VoiceCatalog().parameters("Rachel reads the evening news")
    assert params["voice"] == "Rachel"
    assert params["voice_id"] == "21m00Tcm4TlvDq8ikWAM"
    assert params["text"] == "Rachel reads the evening news"
    assert params["output_format"] == "mp3"
    assert params["voice_settings"]["similarity_boost"] == 0.75


def test_voice_parameters_default_voice():
    params = VoiceCatalog().parameters("welcome to the show")
    assert params["voice"] == "Dexter (English (US)/American)"
    assert params["voice_id"] == "pNInz6obpgDQGcFmaJgB"
