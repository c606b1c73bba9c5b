"""
Intent module: deterministic, rule-ordered classification of user turns.
"""

from .schemas import ActionSubtype, Intent, IntentCategory, GENERATIVE_CATEGORIES
from .keywords import KeywordTables, get_keyword_tables
from .classifier import ClassificationRule, IntentClassifier, classify, default_rules

__all__ = [
    "ActionSubtype",
    "Intent",
    "IntentCategory",
    "GENERATIVE_CATEGORIES",
    "KeywordTables",
    "get_keyword_tables",
    "ClassificationRule",
    "IntentClassifier",
    "classify",
    "default_rules",
]
