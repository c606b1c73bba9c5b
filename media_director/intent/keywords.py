"""Keyword tables - loads the classifier vocabulary and compiles matchers."""

import logging
import re
from pathlib import Path
from typing import Optional

import yaml

from .schemas import KeywordDefinitions, KeywordTable, MatchMode

logger = logging.getLogger(__name__)

DEFINITIONS_DIR = Path(__file__).parent / "definitions"


def compile_term(term: str, mode: MatchMode) -> re.Pattern:
    """Regex for one term; the start is always anchored at a word boundary."""
    pattern = r"(?<![a-z0-9])" + re.escape(term.lower())
    if mode == MatchMode.WORD:
        pattern += r"(?![a-z0-9])"
    return re.compile(pattern)


def contains_term(text: str, terms: list[str], mode: MatchMode = MatchMode.PREFIX) -> bool:
    """True if any of ``terms`` occurs in ``text`` under ``mode`` matching."""
    lowered = text.lower()
    return any(compile_term(term, mode).search(lowered) for term in terms)


class KeywordTables:
    """Named keyword tables with word-boundary aware matching."""

    def __init__(self, definitions_file: Optional[Path] = None):
        self.definitions_file = definitions_file or DEFINITIONS_DIR / "keywords.yaml"
        self._compiled: dict[str, list[tuple[str, re.Pattern]]] = {}
        self.definitions = KeywordDefinitions(tables={})
        self._load()

    def _load(self) -> None:
        with open(self.definitions_file, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        self.definitions = KeywordDefinitions(**data)
        for name, table in self.definitions.tables.items():
            self._compiled[name] = self._compile_table(table)
        logger.info(f"Loaded {len(self._compiled)} keyword tables")

    @staticmethod
    def _compile_table(table: KeywordTable) -> list[tuple[str, re.Pattern]]:
        return [(term, compile_term(term, table.match)) for term in table.terms]

    def has_table(self, name: str) -> bool:
        return name in self._compiled

    def table_names(self) -> list[str]:
        return list(self._compiled)

    def terms(self, name: str) -> list[str]:
        return [term for term, _ in self._compiled.get(name, [])]

    def matches(self, name: str, text: str) -> bool:
        """True if any term of table ``name`` occurs in ``text``."""
        lowered = text.lower()
        return any(p.search(lowered) for _, p in self._compiled.get(name, []))

    def found(self, name: str, text: str) -> list[str]:
        """Terms of table ``name`` that occur in ``text``, in table order."""
        lowered = text.lower()
        return [term for term, p in self._compiled.get(name, []) if p.search(lowered)]


# Global tables instance
_tables: Optional[KeywordTables] = None


def get_keyword_tables() -> KeywordTables:
    """Get the global keyword tables instance."""
    global _tables
    if _tables is None:
        _tables = KeywordTables()
    return _tables
