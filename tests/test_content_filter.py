"""Tests for content-policy substitution and its audit log."""

from datetime import datetime, timedelta, timezone

from media_director.augmentation import ContentFilter, ContentFilterLog
from media_director.augmentation.schemas import ContentFilterTable, FilteredTerm


def test_substitutes_horror_and_violence_terms():
    prompt, terms = ContentFilter().apply("a creepy house with blood on the walls")
    assert prompt == "a moody house with dramatic lighting on the walls"
    assert [t.original for t in terms] == ["creepy", "blood"]
    assert terms[0].reason == "horror content"
    assert terms[1].reason == "violence content"


def test_multi_word_names_are_replaced_whole():
    prompt, terms = ContentFilter().apply("Michael Myers in the kitchen")
    assert prompt == "mysterious figure in the kitchen"
    assert terms == [
        FilteredTerm(original="Michael Myers", replacement="mysterious figure", reason="copyrighted character")
    ]


def test_fallback_catches_plurals():
    prompt, terms = ContentFilter().apply("two guns on a table")
    assert prompt == "two prop on a table"
    assert terms[0].reason == "weapon content flag"


def test_word_boundaries_are_respected():
    prompt, terms = ContentFilter().apply("a dark corridor")
    assert prompt == "a low-light corridor"
    assert len(terms) == 1

    prompt, terms = ContentFilter().apply("light in the darkness")
    assert prompt == "light in the darkness"
    assert terms == []


def test_empty_table_is_a_no_op():
    content_filter = ContentFilter(table=ContentFilterTable())
    assert content_filter.apply("blood and guns") == ("blood and guns", [])


def test_invalid_fallback_pattern_is_skipped():
    table = ContentFilterTable(
        fallbacks=[
            {"pattern": "([unclosed", "replacement": "x", "reason": "broken"},
            {"pattern": r"\bgoblin\b", "replacement": "creature", "reason": "test"},
        ]
    )
    prompt, terms = ContentFilter(table=table).apply("a goblin")
    assert prompt == "a creature"
    assert len(terms) == 1


class FakeClock:
    def __init__(self):
        self.now = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        return self.now


def _term(original):
    return FilteredTerm(original=original, replacement="x", reason="test")


def test_stats_and_mark_result():
    log = ContentFilterLog()
    first = log.record("creepy house", "moody house", [_term("creepy")], model_id="fal-ai/imagen4/preview")
    log.record("creepy blood", "moody x", [_term("creepy"), _term("blood")], model_id="fal-ai/imagen4/preview")

    assert first.generation_id.startswith("gen_")
    assert log.mark_result(first.generation_id, False) is True
    assert log.mark_result("gen_missing", False) is False

    stats = log.stats()
    assert stats.total_generations == 2
    assert stats.successful_generations == 1
    assert stats.failed_generations == 1
    assert stats.success_rate == 50.0
    assert stats.most_filtered_terms[0].term == "creepy"
    assert stats.most_filtered_terms[0].count == 2


def test_empty_log_stats():
    stats = ContentFilterLog().stats()
    assert stats.total_generations == 0
    assert stats.success_rate == 0.0
    assert stats.most_filtered_terms == []


def test_entries_older_than_retention_are_pruned():
    clock = FakeClock()
    log = ContentFilterLog(clock=clock)
    log.record("old", "old", [], model_id="m")
    clock.now += timedelta(hours=23)
    log.record("recent", "recent", [], model_id="m")
    clock.now += timedelta(hours=2)

    entries = log.entries()
    assert [e.original_prompt for e in entries] == ["recent"]


def test_log_is_capped():
    log = ContentFilterLog(max_entries=3)
    for index in range(5):
        log.record(f"prompt {index}", f"prompt {index}", [], model_id="m")
    assert [e.original_prompt for e in log.entries()] == ["prompt 2", "prompt 3", "prompt 4"]
