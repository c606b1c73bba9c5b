"""Tests that every shipped definitions file parses into its model."""

from pathlib import Path

import pytest
import yaml

from media_director.augmentation.schemas import (
    BreakdownVocabulary,
    ContentFilterTable,
    DirectorCatalog,
    NegativePrompts,
    SeedLibrary,
    StyleVocabulary,
    VoiceTable,
)
from media_director.augmentation.tables import load_table
from media_director.capabilities.schemas import DerivationRules, EndpointDescriptor
from media_director.intent.schemas import KeywordDefinitions
from media_director.selection.engine import load_policies
from media_director.selection.schemas import SelectionPolicies
from media_director.suggestions.schemas import SuggestionCatalog
from media_director.workflows.orchestrator import load_templates
from media_director.workflows.schemas import TemplateCatalog

PACKAGE_DIR = Path(__file__).parent.parent / "media_director"

MODELS = {
    "intent/definitions/keywords.yaml": KeywordDefinitions,
    "capabilities/definitions/derivation.yaml": DerivationRules,
    "selection/definitions/policies.yaml": SelectionPolicies,
    "suggestions/definitions/suggestions.yaml": SuggestionCatalog,
    "workflows/definitions/templates.yaml": TemplateCatalog,
    "augmentation/definitions/breakdown.yaml": BreakdownVocabulary,
    "augmentation/definitions/content_filters.yaml": ContentFilterTable,
    "augmentation/definitions/directors.yaml": DirectorCatalog,
    "augmentation/definitions/negative_prompts.yaml": NegativePrompts,
    "augmentation/definitions/seeds.yaml": SeedLibrary,
    "augmentation/definitions/style_vocabulary.yaml": StyleVocabulary,
    "augmentation/definitions/voices.yaml": VoiceTable,
}

ALL_FILES = sorted(p.relative_to(PACKAGE_DIR).as_posix() for p in PACKAGE_DIR.glob("*/definitions/*.yaml"))


def _read(relative):
    with open(PACKAGE_DIR / relative, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _bare_booleans(node, path="$"):
    """Paths of list items and mapping keys that YAML turned into booleans."""
    found = []
    if isinstance(node, dict):
        for key, value in node.items():
            if isinstance(key, bool):
                found.append(f"{path}.{key!r}")
            found.extend(_bare_booleans(value, f"{path}.{key}"))
    elif isinstance(node, list):
        for index, item in enumerate(node):
            if isinstance(item, bool):
                found.append(f"{path}[{index}]")
            found.extend(_bare_booleans(item, f"{path}[{index}]"))
    return found


def test_every_definitions_file_has_a_model():
    assert set(ALL_FILES) == set(MODELS) | {"capabilities/definitions/endpoints.yaml"}


@pytest.mark.parametrize("relative", sorted(MODELS))
def test_definitions_file_parses(relative):
    assert MODELS[relative](**_read(relative)) is not None


def test_endpoints_parse():
    endpoints = _read("capabilities/definitions/endpoints.yaml")["endpoints"]
    assert endpoints
    for raw in endpoints:
        EndpointDescriptor(**raw)


@pytest.mark.parametrize("relative", ALL_FILES)
def test_no_word_lists_hold_booleans(relative):
    assert _bare_booleans(_read(relative)) == []


def test_on_is_kept_as_a_word():
    policies = load_policies()
    assert "on" in policies.override_stop_words

    breakdown = load_table("breakdown.yaml", BreakdownVocabulary)
    assert "on" in breakdown.location_prepositions


def test_templates_load_through_validation():
    catalog = load_templates()
    assert catalog.templates
