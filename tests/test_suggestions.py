"""Tests for interactive cinematic suggestions."""

import pytest

from media_director.suggestions import SuggestionAction, SuggestionRegistry
from media_director.suggestions.schemas import CinematicSuggestion


@pytest.fixture(scope="module")
def suggestions():
    return SuggestionRegistry()


def test_catalog(suggestions):
    assert len(suggestions.list_all()) == 8
    assert suggestions.get("low-angle-shot").name == "Low-Angle Shot"
    assert suggestions.get("Low-Angle Shot").id == "low-angle-shot"
    assert suggestions.get("dutch angle").id == "dutch-angle"
    assert suggestions.get("nope") is None


def test_compatible_with(suggestions):
    video = {s.id for s in suggestions.compatible_with("video")}
    image = {s.id for s in suggestions.compatible_with("image")}
    assert "tracking-shot" in video
    assert "tracking-shot" not in image
    assert suggestions.compatible_with("audio") == []


def test_prompt_enhancement(suggestions):
    result = suggestions.apply("low-angle shot", "a knight on a castle wall", "image")
    assert result.success
    assert result.action == SuggestionAction.PROMPT_MODIFICATION
    assert result.modified_prompt == "a knight on a castle wall, low angle shot, dramatic perspective, looking up"


def test_short_prompt_is_replaced(suggestions):
    result = suggestions.apply("close-up", "  hero ", "video")
    assert result.modified_prompt == "extreme close-up, intimate detail, facial expression"


def test_workflow_trigger(suggestions):
    result = suggestions.apply("Multiple Angles", "my character", "image")
    assert result.success
    assert result.action == SuggestionAction.WORKFLOW_TRIGGER
    assert result.workflow_template == "angles"
    assert result.modified_prompt is None


def test_unknown_and_incompatible(suggestions):
    unknown = suggestions.apply("jump cut", "a street", "video")
    assert unknown.success is False
    assert unknown.action == SuggestionAction.ERROR
    assert unknown.suggestion_id is None
    assert unknown.error == "Unknown suggestion: jump cut"

    incompatible = suggestions.apply("tracking-shot", "a street at night", "image")
    assert incompatible.success is False
    assert incompatible.suggestion_id == "tracking-shot"


def test_suggestion_needs_exactly_one_effect():
    with pytest.raises(ValueError):
        CinematicSuggestion(id="x", name="X", category="keyword")
    with pytest.raises(ValueError):
        CinematicSuggestion(
            id="x", name="X", category="keyword", prompt_enhancement="a", workflow_trigger="angles"
        )
