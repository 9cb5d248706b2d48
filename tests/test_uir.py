"""Tests for the UIR (Universal Intermediate Representation) models."""

import json

import pytest

from coalesce.errors import TransformationError, UnsupportedLanguage
from coalesce.uir import annotations as ann
from coalesce.uir.models import (
    ControlFlowKind,
    ExpressionKind,
    Language,
    LegacyPattern,
    LoopKind,
    Metadata,
    NodeKind,
    NodeType,
    SourceLocation,
    StatementKind,
    UIRNode,
)


def _tree() -> UIRNode:
    root = UIRNode(id="module", node_type=NodeType.module(), name="program")
    func = UIRNode(id="fn", node_type=NodeType.function(), name="add")
    func.add_child(UIRNode(id="a", node_type=NodeType.variable(), name="a"))
    func.add_child(
        UIRNode(id="ret", node_type=NodeType.statement(StatementKind.RETURN)).add_child(
            UIRNode(id="sum", node_type=NodeType.expression(ExpressionKind.ARITHMETIC))
        )
    )
    return root.add_child(func)


# --- NodeType ---


def test_node_type_rendering():
    assert str(NodeType.function()) == "Function"
    assert str(NodeType.statement(StatementKind.RETURN)) == "Statement(Return)"
    assert str(NodeType.loop_of(LoopKind.FOR)) == "ControlFlow(Loop(For))"
    assert str(NodeType.control_flow(ControlFlowKind.GOTO)) == "ControlFlow(Goto)"


def test_node_type_is_hashable_value():
    a = NodeType.expression(ExpressionKind.LITERAL)
    b = NodeType.expression(ExpressionKind.LITERAL)
    assert a == b
    assert len({a, b, NodeType.variable()}) == 2


def test_node_type_dict_round_trip():
    for node_type in (
        NodeType.module(),
        NodeType.interface(),
        NodeType.loop_of(LoopKind.DO_WHILE),
        NodeType.expression(ExpressionKind.COMPARISON),
    ):
        assert NodeType.from_dict(node_type.to_dict()) == node_type


# --- UIRNode ---


def test_empty_node_defaults():
    node = UIRNode(id="x", node_type=NodeType.variable())
    assert node.name is None
    assert node.children == []
    assert node.source_location is None
    assert node.metadata.source_language == Language.JAVASCRIPT
    assert node.metadata.annotations == {}


def test_builders_return_same_node():
    node = UIRNode(id="x", node_type=NodeType.module())
    meta = Metadata(source_language=Language.RUST)
    assert node.with_metadata(meta) is node
    assert node.add_child(UIRNode(id="y", node_type=NodeType.variable())) is node
    assert node.metadata.source_language == Language.RUST
    assert len(node.children) == 1


def test_walk_is_pre_order():
    root = _tree()
    assert [n.id for n in root.walk()] == ["module", "fn", "a", "ret", "sum"]
    assert root.count_nodes() == 5


def test_find_all():
    root = _tree()
    found = root.find_all(lambda n: n.node_type.kind is NodeKind.STATEMENT)
    assert [n.id for n in found] == ["ret"]


def test_dict_round_trip_is_json_compatible():
    root = _tree()
    root.metadata.annotations[ann.FIDELITY] = "full"
    root.children[0].metadata.legacy_patterns.append(
        LegacyPattern("goto", "goto done;", "Use a loop", False)
    )
    root.children[0].source_location = SourceLocation("a.c", 1, 3, 0, 1)

    data = json.loads(json.dumps(root.to_dict()))
    restored = UIRNode.from_dict(data)

    assert restored.to_dict() == root.to_dict()
    assert restored.children[0].metadata.legacy_patterns[0].original_construct == "goto done;"
    assert restored.children[0].source_location.file == "a.c"


def test_source_location_encloses():
    loc = SourceLocation(start_line=2, end_line=4, start_column=4, end_column=1)
    assert loc.encloses((2, 4), (4, 1))
    assert loc.encloses((3, 0), (3, 80))
    assert not loc.encloses((2, 3), (3, 0))
    assert not loc.encloses((3, 0), (4, 2))


# --- Language ---


def test_language_aliases():
    assert Language.from_name("js") == Language.JAVASCRIPT
    assert Language.from_name("C++") == Language.CPP
    assert Language.from_name("c#") == Language.CSHARP
    assert Language.from_name("vb") == Language.VISUAL_BASIC
    assert Language.from_name("python") == Language.PYTHON


def test_unknown_language_raises():
    with pytest.raises(UnsupportedLanguage):
        Language.from_name("brainfuck")


# --- Annotation protocol ---


def test_json_annotation_helpers():
    annotations = {ann.REQUIRED_IMPORTS: ann.encode_json(["import httpx"])}
    assert ann.required_imports(annotations) == ["import httpx"]
    assert ann.required_imports({}) == []
    assert ann.decode_json({"k": ["already", "decoded"]}, "k") == ["already", "decoded"]


def test_malformed_json_annotation():
    with pytest.raises(TransformationError):
        ann.decode_json({ann.LIBRARY_DEPENDENCY: "{not json"}, ann.LIBRARY_DEPENDENCY)


def test_requires_manual_implementation_flag():
    assert ann.requires_manual_implementation({ann.REQUIRES_MANUAL_IMPLEMENTATION: True})
    assert ann.requires_manual_implementation({ann.REQUIRES_MANUAL_IMPLEMENTATION: "true"})
    assert not ann.requires_manual_implementation({})
