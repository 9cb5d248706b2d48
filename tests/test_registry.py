"""Tests for the pattern registry."""

import tempfile
from pathlib import Path

import pytest

from coalesce.errors import RegistryFrozen, TransformationError
from coalesce.lal.patterns import LibraryPattern, PatternSemantics, TransformRule
from coalesce.lal.registry import (
    DIRECT_CONFIDENCE,
    SEMANTIC_CONFIDENCE,
    PatternRegistry,
    SuggestionType,
    default_registry,
)

PATTERN_YAML = """
name: get
library: axios
ecosystem: javascript
signature: axios.get(url)
semantics:
  intent: http_get_request
  category: networking
  behavior: Performs an HTTP GET request
transformations:
  python:
    target_library: httpx
    target_pattern: get
    template: "{{target}} = httpx.get({{url}})"
    imports: ["import httpx"]
"""


def _pattern(name="useQuery", library="react-query", ecosystem="javascript", intent="data_fetching"):
    return LibraryPattern(
        name=name,
        library=library,
        ecosystem=ecosystem,
        semantics=PatternSemantics(intent=intent),
    )


def test_default_registry_is_frozen_and_shared():
    registry = default_registry()
    assert registry.frozen
    assert registry is default_registry()
    assert registry.get("react", "useState") is not None
    assert len(registry) == len(registry.all_patterns())


def test_frozen_registry_rejects_writes():
    with pytest.raises(RegistryFrozen):
        default_registry().register(_pattern())
    with pytest.raises(RegistryFrozen):
        default_registry().register_from_yaml(PATTERN_YAML)


def test_register_replaces_same_key():
    registry = PatternRegistry()
    registry.register(_pattern(intent="one"))
    registry.register(_pattern(intent="two"))
    assert len(registry) == 1
    assert registry.get("react-query", "useQuery").semantics.intent == "two"


def test_get_unknown():
    registry = PatternRegistry.with_defaults()
    assert registry.get("react", "useMemo") is None
    assert registry.get("nope", "useState") is None
    assert registry.library_patterns("nope") == {}


def test_direct_rule_outranks_semantic_equivalent():
    suggestions = default_registry().suggest("react", "useState", "vue")
    assert [(s.suggestion_type, s.target_library, s.target_pattern) for s in suggestions] == [
        (SuggestionType.DIRECT_TRANSFORM, "vue", "ref"),
        (SuggestionType.SEMANTIC_EQUIVALENT, "vue", "ref"),
    ]
    assert suggestions[0].confidence == DIRECT_CONFIDENCE
    assert suggestions[1].confidence == SEMANTIC_CONFIDENCE
    assert suggestions[0].description == "Direct transformation to vue"


def test_semantic_equivalent_only():
    suggestions = default_registry().suggest("react", "useState", "svelte")
    types = [s.suggestion_type for s in suggestions]
    assert types == [SuggestionType.DIRECT_TRANSFORM, SuggestionType.SEMANTIC_EQUIVALENT]

    registry = PatternRegistry()
    registry.register(_pattern("useState", "react", intent="reactive_state_management"))
    registry.register(_pattern("ref", "vue", ecosystem="vue", intent="reactive_state_management"))
    (only,) = registry.suggest("react", "useState", "vue")
    assert only.suggestion_type is SuggestionType.SEMANTIC_EQUIVALENT
    assert only.description == "Semantic equivalent: ref"


def test_suggest_unknown_pattern():
    assert default_registry().suggest("react", "useMemo", "vue") == []


def test_suggestions_are_direct_or_semantic():
    registry = default_registry()
    produced = {
        s.suggestion_type
        for library, pattern in [("react", "useState"), ("requests", "get"), ("django", "Model")]
        for ecosystem in registry.target_ecosystems(library)
        for s in registry.suggest(library, pattern, ecosystem)
    }
    assert produced == set(SuggestionType)
    assert default_registry().suggest("react", "useState", "angular") == []


def test_find_equivalents():
    names = {p.qualified_name for p in default_registry().find_equivalents("reactive_state_management")}
    assert names == {"react:useState", "vue:ref", "svelte:writable"}
    assert default_registry().find_equivalents("no_such_intent") == []


def test_target_ecosystems():
    assert default_registry().target_ecosystems("react") == ["vue", "svelte", "angular", "vanilla"]
    assert default_registry().target_ecosystems("unknown") == []


def test_register_from_yaml_mapping():
    registry = PatternRegistry()
    (pattern,) = registry.register_from_yaml(PATTERN_YAML)
    assert pattern.qualified_name == "axios:get"
    rule = registry.get("axios", "get").transformations["python"]
    assert isinstance(rule, TransformRule)
    assert rule.imports == ["import httpx"]


def test_register_from_yaml_list_and_stream():
    registry = PatternRegistry()
    text = (
        "- {name: a, library: lib, ecosystem: x, semantics: {intent: i}}\n"
        "- {name: b, library: lib, ecosystem: x, semantics: {intent: i}}\n"
        "---\n"
        "name: c\nlibrary: lib\necosystem: x\nsemantics: {intent: j}\n"
    )
    patterns = registry.register_from_yaml(text)
    assert [p.name for p in patterns] == ["a", "b", "c"]
    assert [p.name for p in registry.find_equivalents("i")] == ["a", "b"]


def test_malformed_yaml():
    registry = PatternRegistry()
    with pytest.raises(TransformationError):
        registry.register_from_yaml("name: [unclosed\n")
    with pytest.raises(TransformationError):
        registry.register_from_yaml("name: a\nlibrary: lib\necosystem: x\n")
    with pytest.raises(TransformationError):
        registry.register_from_yaml("- just a string\n")
    assert len(registry) == 0


def test_register_from_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "axios.yaml"
        path.write_text(PATTERN_YAML)
        registry = PatternRegistry.with_defaults()
        registry.register_from_file(path)
        assert registry.get("axios", "get") is not None
        assert registry.get("react", "useState") is not None

        with pytest.raises(TransformationError):
            registry.register_from_file(Path(tmpdir) / "missing.yaml")


def test_pattern_dict_round_trip():
    original = default_registry().get("socket", "tcp_socket")
    assert LibraryPattern.from_dict(original.to_dict()) == original
