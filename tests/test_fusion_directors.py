"""Tests for director profiles and style fusion."""

import random

from media_director.augmentation import DirectorRegistry, StyleFusion
from media_director.augmentation.schemas import DirectorProfile, ExtractedStyle, WeatherVocabulary


def test_director_catalog():
    directors = DirectorRegistry()
    assert directors.count() == 21
    assert directors.get("christopher nolan").name == "Christopher Nolan"
    assert directors.get("Nobody") is None
    assert "Thriller" in directors.genres()


def test_by_genre():
    directors = DirectorRegistry()
    thrillers = directors.by_genre("thriller")
    assert any(p.name == "Christopher Nolan" for p in thrillers)
    assert len(directors.by_genre("All")) == directors.count()
    assert directors.by_genre("Opera") == []


def test_describe():
    directors = DirectorRegistry()
    assert directors.describe("Christopher Nolan").startswith("Christopher Nolan style: realistic, gritty realism")
    assert directors.describe("Nobody") == ""


def test_fusion_appends_one_element_per_list_and_command_phrase():
    directors = DirectorRegistry()
    nolan = directors.get("Christopher Nolan")
    fusion = StyleFusion(weather=directors.weather)

    result = fusion.fuse("a city street", nolan, random.Random(3))

    assert result.enhanced_prompt.startswith("a city street, ")
    assert result.enhanced_prompt.endswith(nolan.command_phrase)
    assert result.applied_style_name == "Christopher Nolan"
    assert result.cinematic_instructions == ["hand-held camera work", "urban settings"]
    assert any(f"({kw}:1.3)" in result.enhanced_prompt for kw in nolan.visual_keywords)
    assert any(f"({light}:1.2)" in result.enhanced_prompt for light in nolan.lighting)
    assert all(0.1 <= w <= 2.0 for w in result.weightings.values())


def test_fusion_is_reproducible_with_same_seed():
    directors = DirectorRegistry()
    nolan = directors.get("Christopher Nolan")
    fusion = StyleFusion(weather=directors.weather)
    first = fusion.fuse("a city street", nolan, random.Random(11))
    second = fusion.fuse("a city street", nolan, random.Random(11))
    assert first.enhanced_prompt == second.enhanced_prompt


def test_weather_elements_need_a_weather_prompt():
    profile = DirectorProfile(
        name="Test Director",
        visual_keywords=["rain-soaked streets"],
        composition_style=["symmetry"],
        lighting=["foggy glow"],
        color_palette=["teal"],
    )
    fusion = StyleFusion(weather=WeatherVocabulary(mentions=["rain"], markers=["rain", "fog"]))

    dry = fusion.fuse("a quiet street", profile, random.Random(1))
    assert dry.enhanced_prompt == "a quiet street, symmetry, teal"

    wet = fusion.fuse("a rainy street", profile, random.Random(1))
    assert "(rain-soaked streets:1.3)" in wet.enhanced_prompt
    assert "(foggy glow:1.2)" in wet.enhanced_prompt


def test_catalog_weather_elements_are_filtered():
    directors = DirectorRegistry()
    kurosawa = directors.get("Akira Kurosawa")
    fusion = StyleFusion(weather=directors.weather)
    for seed in range(30):
        result = fusion.fuse("samurai on a hill", kurosawa, random.Random(seed))
        assert "dramatic weather" not in result.enhanced_prompt


def test_reference_style_terms_are_added():
    profile = DirectorProfile(name="Plain", command_phrase="shot on film")
    reference = ExtractedStyle(lighting=["window light"], color_palette=["muted tones"])
    result = StyleFusion().fuse("a kitchen", profile, random.Random(0), reference=reference)
    assert result.enhanced_prompt == "a kitchen, window light, muted tones, shot on film"


def test_weights_are_clamped_at_construction():
    fusion = StyleFusion(visual_weight=9.0, lighting_weight=0.0)
    assert fusion.visual_weight == 2.0
    assert fusion.lighting_weight == 0.1
