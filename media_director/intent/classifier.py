"""Rule-ordered intent classification.

The classifier is an ordered list of rule records. Each record pairs a
predicate over the turn's signals with a builder for the resulting intent;
the first record whose predicate holds decides the intent. The order is
part of the contract (greetings before questions before generation verbs,
and so on), so it is exposed through ``rule_names()`` for tests.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .keywords import KeywordTables, get_keyword_tables
from .schemas import ActionSubtype, Intent, IntentCategory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TurnSignals:
    """Inputs a rule can look at."""

    text: str
    forced_category: Optional[IntentCategory]
    has_attached_image: bool
    tables: KeywordTables

    def has(self, table: str) -> bool:
        return self.tables.matches(table, self.text)


@dataclass(frozen=True)
class RuleOutcome:
    category: IntentCategory
    confidence: float
    requires_generation: bool
    action_subtype: Optional[ActionSubtype] = None


@dataclass(frozen=True)
class ClassificationRule:
    name: str
    predicate: Callable[[TurnSignals], bool]
    build: Callable[[TurnSignals], RuleOutcome]


def _detect_subtype(signals: TurnSignals) -> Optional[ActionSubtype]:
    for entry in signals.tables.definitions.subtype_order:
        if signals.has(entry.table):
            return entry.subtype
    return None


def _forced(signals: TurnSignals) -> RuleOutcome:
    return RuleOutcome(signals.forced_category, 0.95, True)


def _explicit_generation(signals: TurnSignals) -> RuleOutcome:
    for entry in signals.tables.definitions.generation_content_order:
        if signals.has(entry.table):
            return RuleOutcome(entry.category, entry.confidence, True)
    return RuleOutcome(IntentCategory.CLARIFICATION, 0.3, True)


def _image_action(signals: TurnSignals) -> RuleOutcome:
    subtype = _detect_subtype(signals)
    category = IntentCategory.VIDEO if subtype == ActionSubtype.ANIMATE else IntentCategory.IMAGE
    return RuleOutcome(category, 0.95, True, action_subtype=subtype)


def _descriptive(signals: TurnSignals) -> RuleOutcome:
    if signals.has("video"):
        return RuleOutcome(IntentCategory.VIDEO, 0.8, True)
    if signals.has("image") or signals.has("cinematic"):
        return RuleOutcome(IntentCategory.IMAGE, 0.8, True)
    if signals.has("audio"):
        return RuleOutcome(IntentCategory.AUDIO, 0.7, True)
    return RuleOutcome(IntentCategory.VOICE, 0.7, True)


def default_rules() -> list[ClassificationRule]:
    """The classification rules in priority order."""
    return [
        ClassificationRule(
            "forced_category",
            lambda s: s.forced_category is not None,
            _forced,
        ),
        ClassificationRule(
            "greeting",
            lambda s: s.has("greeting"),
            lambda s: RuleOutcome(IntentCategory.CLARIFICATION, 0.2, False),
        ),
        ClassificationRule(
            "question",
            lambda s: s.has("question"),
            lambda s: RuleOutcome(IntentCategory.ANALYSIS, 0.7, False),
        ),
        ClassificationRule(
            "generation_verb",
            lambda s: s.has("generation_verbs"),
            _explicit_generation,
        ),
        ClassificationRule(
            "image_action",
            lambda s: s.has_attached_image and s.has("image_action") and _detect_subtype(s) is not None,
            _image_action,
        ),
        ClassificationRule(
            "descriptive_content",
            lambda s: any(s.has(t) for t in ("video", "image", "cinematic", "audio", "voice")),
            _descriptive,
        ),
        ClassificationRule(
            "director_reference",
            lambda s: s.has("directed_by") or s.has("director_names"),
            lambda s: RuleOutcome(IntentCategory.IMAGE, 0.9, True),
        ),
        ClassificationRule(
            "cinematic_vocabulary",
            lambda s: s.has("cinematic"),
            lambda s: RuleOutcome(IntentCategory.IMAGE, 0.7, True),
        ),
        ClassificationRule(
            "analysis_verb",
            lambda s: s.has("analysis"),
            lambda s: RuleOutcome(IntentCategory.ANALYSIS, 0.8, False),
        ),
        ClassificationRule(
            "implicit_image",
            lambda s: bool(s.text.strip()),
            lambda s: RuleOutcome(IntentCategory.IMAGE, 0.6, True),
        ),
        ClassificationRule(
            "clarification",
            lambda s: True,
            lambda s: RuleOutcome(IntentCategory.CLARIFICATION, 0.3, False),
        ),
    ]


class IntentClassifier:
    """Maps a user turn to an Intent. Pure: no network, no session state."""

    def __init__(
        self,
        tables: Optional[KeywordTables] = None,
        rules: Optional[list[ClassificationRule]] = None,
    ):
        self.tables = tables or get_keyword_tables()
        self.rules = rules if rules is not None else default_rules()

    def rule_names(self) -> list[str]:
        return [rule.name for rule in self.rules]

    def extract_keywords(self, text: str) -> list[str]:
        keywords: list[str] = []
        for table in self.tables.definitions.keyword_report_tables:
            for term in self.tables.found(table, text):
                if term not in keywords:
                    keywords.append(term)
        return keywords

    def classify(
        self,
        text: str,
        forced_category: Optional[IntentCategory | str] = None,
        has_attached_image: bool = False,
        attached_image_ref: Optional[str] = None,
    ) -> Intent:
        if forced_category is not None and not isinstance(forced_category, IntentCategory):
            forced_category = IntentCategory(forced_category)

        signals = TurnSignals(
            text=text or "",
            forced_category=forced_category,
            has_attached_image=has_attached_image or attached_image_ref is not None,
            tables=self.tables,
        )

        for rule in self.rules:
            if rule.predicate(signals):
                outcome = rule.build(signals)
                break
        else:
            # The default rule list always ends in a catch-all.
            rule = None
            outcome = RuleOutcome(IntentCategory.CLARIFICATION, 0.3, False)

        intent = Intent(
            category=outcome.category,
            confidence=outcome.confidence,
            keywords=tuple(self.extract_keywords(signals.text)),
            raw_context=signals.text.strip(),
            requires_generation=outcome.requires_generation,
            attached_image_ref=attached_image_ref,
            action_subtype=outcome.action_subtype,
            matched_rule=rule.name if rule else None,
        )
        logger.info(
            f"Classified turn as {intent.category.value} "
            f"(confidence={intent.confidence}, rule={intent.matched_rule}, "
            f"generation={intent.requires_generation})"
        )
        return intent


def classify(
    text: str,
    forced_category: Optional[IntentCategory | str] = None,
    has_attached_image: bool = False,
    attached_image_ref: Optional[str] = None,
) -> Intent:
    """Classify with the global keyword tables."""
    return IntentClassifier().classify(
        text,
        forced_category=forced_category,
        has_attached_image=has_attached_image,
        attached_image_ref=attached_image_ref,
    )
