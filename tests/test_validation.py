"""Tests for prompt validation corrections."""

from media_director.augmentation.validation import (
    IMAGE_PROMPT_CEILING,
    DEFAULT_PROMPT_CEILING,
    clamp_weight,
    tidy_prompt,
    validate_prompt,
)


def test_clamps_emphasis_weight_above_range():
    outcome = validate_prompt("a lantern, (glow:3.5)", "image")
    assert outcome.prompt == "a lantern, (glow:2)"
    assert outcome.warnings == ["Clamped weight for 'glow' from 3.5 to 2"]


def test_clamps_emphasis_weight_below_range():
    outcome = validate_prompt("(mist:0.01) over the lake", "image")
    assert outcome.prompt.startswith("(mist:0.1)")


def test_weights_in_range_are_untouched():
    outcome = validate_prompt("(glow:1.3), (shadow:0.8)", "image")
    assert outcome.prompt == "(glow:1.3), (shadow:0.8)"
    assert outcome.warnings == []


def test_conflicting_terms_keep_first():
    outcome = validate_prompt("warm sunset with cool shadows", "image")
    assert outcome.prompt == "warm sunset with shadows"
    assert outcome.warnings == ["Removed conflicting term 'cool' (conflicts with 'warm')"]


def test_conflict_removal_keeps_earlier_term_when_reversed():
    outcome = validate_prompt("dark alley, bright neon sign", "image")
    assert "dark" in outcome.prompt
    assert "bright" not in outcome.prompt


def test_image_ceiling():
    prompt = "lighthouse " * 150
    outcome = validate_prompt(prompt, "image")
    assert len(outcome.prompt) <= IMAGE_PROMPT_CEILING
    assert not outcome.prompt.endswith(" ")
    assert "shortened" in outcome.warnings[0]


def test_other_categories_use_smaller_ceiling():
    prompt = "waves " * 120
    outcome = validate_prompt(prompt, "video")
    assert len(outcome.prompt) <= DEFAULT_PROMPT_CEILING
    assert outcome.prompt.endswith("waves")


def test_clean_prompt_passes_through():
    outcome = validate_prompt("a lighthouse at sunset", "image")
    assert outcome.prompt == "a lighthouse at sunset"
    assert outcome.warnings == []


def test_clamp_weight_bounds():
    assert clamp_weight(5) == 2.0
    assert clamp_weight(-1) == 0.1
    assert clamp_weight(1.2) == 1.2


def test_tidy_prompt_removes_empty_slots():
    assert tidy_prompt("a,  , b ,c,") == "a, b,c"
