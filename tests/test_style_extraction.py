"""Tests for reference-image style extraction."""

import asyncio

import pytest

from media_director.augmentation import StyleExtractor, VocabularyStyleExtractor
from media_director.augmentation.style_extraction import describe_reference


def test_describe_reference_uses_url_path_words():
    text = describe_reference("https://cdn.test/atmospheric_window-light_muted-tones.jpg")
    assert "window light" in text
    assert "muted tones" in text
    assert describe_reference("data:image/png;base64,AAAA") == ""


def test_extracts_vocabulary_from_url():
    extractor = VocabularyStyleExtractor()
    style = asyncio.run(extractor.extract_style("https://cdn.test/atmospheric_window-light_muted-tones.jpg"))
    assert style.lighting == ["window light"]
    assert style.color_palette == ["muted tones"]
    assert style.mood == ["atmospheric"]
    assert style.matched_director == "Denis Villeneuve"
    assert style.confidence == pytest.approx(0.8)


def test_caption_matches_other_directors():
    extractor = VocabularyStyleExtractor()
    style = asyncio.run(extractor.extract_style("https://cdn.test/a.png", caption="controlled symmetrical frame"))
    assert style.composition == ["symmetrical"]
    assert style.mood == ["controlled"]
    assert style.matched_director == "David Fincher"


def test_unreadable_reference_uses_fallback():
    extractor = VocabularyStyleExtractor()
    style = asyncio.run(extractor.extract_style("data:image/png;base64,AAAA"))
    assert style.confidence == 0.5
    assert style.lighting == ["natural light"]
    assert style.matched_director == "Denis Villeneuve"


def test_protocol_conformance():
    assert isinstance(VocabularyStyleExtractor(), StyleExtractor)
