"""Tests for the structured cinematic breakdown."""

import random

from media_director.augmentation import StructuredBreakdown, serialize_breakdown

STORY_PROMPT = "a lone character walking in an abandoned warehouse at midnight, story of loss"


def test_trigger_needs_indicators_or_length():
    breakdown = StructuredBreakdown()
    assert breakdown.should_apply(STORY_PROMPT) is True
    assert breakdown.should_apply("a red apple") is False
    assert breakdown.should_apply("a red apple on a table " * 6) is True


def test_location_and_time_are_lifted_verbatim():
    breakdown = StructuredBreakdown()
    assert breakdown.lift_location(STORY_PROMPT) == "an abandoned warehouse"
    assert breakdown.lift_time_of_day(STORY_PROMPT) == "midnight"


def test_build_and_serialize():
    breakdown = StructuredBreakdown()
    result = breakdown.build(STORY_PROMPT, random.Random(0))

    assert result.scene.location == "an abandoned warehouse"
    assert result.scene.time_of_day == "midnight"
    assert result.subject.description == "a lone character walking in an abandoned warehouse at midnight"
    assert result.action.action == "Walking action as described"

    text = serialize_breakdown(result)
    assert text.startswith("a lone character walking")
    assert "Location: an abandoned warehouse, time of day: midnight" in text
    assert "No visible text" in text
    assert text.endswith(".")


def test_director_shapes_lighting_and_aesthetic():
    from media_director.augmentation import DirectorRegistry

    nolan = DirectorRegistry().get("Christopher Nolan")
    result = StructuredBreakdown().build(STORY_PROMPT, random.Random(0), director=nolan)
    assert result.visual_aesthetic.startswith("Christopher Nolan style")
    assert result.cinematography.lighting.split(", ")[0] in nolan.lighting


def test_fallbacks_without_location():
    result = StructuredBreakdown().build("portrait of an old sailor, dramatic mood", random.Random(0))
    assert result.lifted_location is None
    assert result.scene.location == "Environment as specified in prompt"
    assert result.shot.composition.startswith("Close-up shot")
