"""Tests for the library transformer."""

import pytest

from coalesce.errors import TransformationError
from coalesce.lal.models import LibraryDependency, LibraryUsage, encode_dependencies
from coalesce.lal.registry import PatternRegistry, default_registry
from coalesce.lal.transformer import LibraryTransformer, default_ecosystem, render_template
from coalesce.uir import annotations as ann
from coalesce.uir.models import Language, NodeType, UIRNode


def _usage(pattern_name="useState", **parameters):
    return LibraryUsage(
        pattern_name=pattern_name,
        method_name="const [count, setCount] = useState(0)",
        parameters=parameters or {"state": "count", "setter": "setCount", "initial": "0"},
        semantic_intent="reactive_state_management",
    )


def _tree(*usages, library="react", ecosystem="javascript"):
    dep = LibraryDependency(name=library, ecosystem=ecosystem, usage_patterns=list(usages))
    node = UIRNode(id="decl", node_type=NodeType.variable(), name="count")
    node.metadata.annotations[ann.LIBRARY_DEPENDENCY] = dep.to_annotation()
    return UIRNode(id="root", node_type=NodeType.module()).add_child(node)


def _transformer(**kwargs):
    return LibraryTransformer(default_registry(), **kwargs)


def test_direct_rule_is_applied():
    result = _transformer().transform(_tree(_usage()), Language.JAVASCRIPT, "vue")
    annotations = result.children[0].metadata.annotations
    assert annotations[ann.GENERATED_CODE] == "const count = ref(0)"
    assert ann.required_imports(annotations) == ["import { ref } from 'vue'"]
    assert annotations[ann.TRANSFORMED_FROM] == "react:useState"
    assert annotations[ann.TRANSFORMED_TO] == "vue:ref"
    assert ann.REQUIRES_MANUAL_IMPLEMENTATION not in annotations


def test_input_tree_is_untouched():
    tree = _tree(_usage())
    before = tree.to_dict()
    result = _transformer().transform(tree, "javascript", "vue")
    assert result is not tree
    assert tree.to_dict() == before


def test_missing_rule_gets_fallback():
    result = _transformer().transform(_tree(_usage()), Language.JAVASCRIPT, "angular")
    annotations = result.children[0].metadata.annotations
    assert annotations[ann.FALLBACK_IMPLEMENTATION] == (
        "// TODO: Implement equivalent of react:useState\n"
        "// Original behavior: Creates reactive state that triggers re-renders"
    )
    assert annotations[ann.REQUIRES_MANUAL_IMPLEMENTATION] == "true"
    assert ann.GENERATED_CODE not in annotations


def test_unknown_pattern_gets_fallback_from_usage():
    usage = LibraryUsage("useMemo", "useMemo(fn, [])", semantic_intent="memoization")
    result = _transformer().transform(_tree(usage), Language.JAVASCRIPT, "vue")
    annotations = result.children[0].metadata.annotations
    assert "react:useMemo" in annotations[ann.FALLBACK_IMPLEMENTATION]
    assert "Original behavior: memoization" in annotations[ann.FALLBACK_IMPLEMENTATION]


def test_cleanup_code_and_default_ecosystem_override():
    usage = LibraryUsage(
        "tcp_socket",
        "fd = socket(AF_INET, SOCK_STREAM, 0)",
        {"var": "fd", "family": "AF_INET", "type": "SOCK_STREAM", "protocol": "0"},
        "tcp_socket_creation",
    )
    transformer = _transformer(default_ecosystems={"python": "python"})
    result = transformer.transform(_tree(usage, library="socket", ecosystem="c"), Language.PYTHON)
    annotations = result.children[0].metadata.annotations
    assert annotations[ann.GENERATED_CODE] == "fd = socket.socket(socket.AF_INET, socket.SOCK_STREAM)"
    assert annotations[ann.CLEANUP_CODE] == "fd.close()"
    assert ann.required_imports(annotations) == ["import socket"]


def test_usages_sharing_a_node_are_joined():
    first = _usage(state="a", setter="setA", initial="1")
    second = _usage(state="b", setter="setB", initial="2")
    result = _transformer().transform(_tree(first, second), Language.JAVASCRIPT, "vue")
    annotations = result.children[0].metadata.annotations
    assert annotations[ann.GENERATED_CODE] == "const a = ref(1)\nconst b = ref(2)"
    # Imports are deduplicated
    assert ann.required_imports(annotations) == ["import { ref } from 'vue'"]


def test_malformed_annotation_aborts_by_default():
    tree = _tree(_usage())
    tree.children[0].metadata.annotations[ann.LIBRARY_DEPENDENCY] = "{not json"
    with pytest.raises(TransformationError):
        _transformer().transform(tree, Language.JAVASCRIPT, "vue")


def test_malformed_annotation_isolated_on_request():
    tree = _tree(_usage())
    broken = UIRNode(id="broken", node_type=NodeType.variable())
    broken.metadata.annotations[ann.LIBRARY_DEPENDENCY] = '{"no_name": true}'
    tree.add_child(broken)

    result = _transformer(isolate_errors=True).transform(tree, Language.JAVASCRIPT, "vue")
    assert ann.TRANSFORMATION_ERROR in result.children[1].metadata.annotations
    assert result.children[0].metadata.annotations[ann.GENERATED_CODE] == "const count = ref(0)"


def test_registry_without_patterns():
    result = LibraryTransformer(PatternRegistry()).transform(_tree(_usage()), "javascript", "vue")
    assert ann.requires_manual_implementation(result.children[0].metadata.annotations)


def test_default_ecosystem():
    assert default_ecosystem(Language.PYTHON) == "stdlib"
    assert default_ecosystem(Language.JAVASCRIPT) == "vanilla"
    assert default_ecosystem(Language.COBOL) == "stdlib"
    assert default_ecosystem(Language.PYTHON, {"python": "httpx"}) == "httpx"


def test_render_template_keeps_unknown_placeholders():
    assert render_template("{{a}}-{{b}}", {"a": "1"}) == "1-{{b}}"
    assert render_template("no placeholders", {"a": "1"}) == "no placeholders"


WRONG_SHAPES = [
    '{"name": "react", "usage_patterns": ["oops"]}',
    '{"name": "react", "usage_patterns": [{"pattern_name": "useState", "parameters": null}]}',
    '{"name": "react", "usage_patterns": [{"pattern_name": "useState", "parameters": ["count"]}]}',
    '{"name": "react", "usage_patterns": {"pattern_name": "useState"}}',
    '["not a dependency"]',
]


@pytest.mark.parametrize("payload", WRONG_SHAPES)
def test_wrong_annotation_shape_aborts(payload):
    tree = _tree(_usage())
    tree.children[0].metadata.annotations[ann.LIBRARY_DEPENDENCY] = payload
    with pytest.raises(TransformationError):
        _transformer().transform(tree, Language.JAVASCRIPT, "vue")


@pytest.mark.parametrize("payload", WRONG_SHAPES)
def test_wrong_annotation_shape_isolated(payload):
    tree = _tree(_usage())
    broken = UIRNode(id="broken", node_type=NodeType.variable())
    broken.metadata.annotations[ann.LIBRARY_DEPENDENCY] = payload
    tree.add_child(broken)

    result = _transformer(isolate_errors=True).transform(tree, Language.JAVASCRIPT, "vue")
    assert ann.TRANSFORMATION_ERROR in result.children[1].metadata.annotations
    assert result.children[0].metadata.annotations[ann.GENERATED_CODE] == "const count = ref(0)"


def test_several_libraries_on_one_node():
    node = UIRNode(id="decl", node_type=NodeType.variable())
    node.metadata.annotations[ann.LIBRARY_DEPENDENCY] = encode_dependencies(
        [
            LibraryDependency("react", "javascript", usage_patterns=[_usage()]),
            LibraryDependency("left-pad", "javascript", usage_patterns=[_usage("pad")]),
        ]
    )
    tree = UIRNode(id="root", node_type=NodeType.module()).add_child(node)

    annotations = _transformer().transform(tree, Language.JAVASCRIPT, "vue").children[0].metadata.annotations
    assert annotations[ann.GENERATED_CODE] == "const count = ref(0)"
    assert "left-pad:pad" in annotations[ann.FALLBACK_IMPLEMENTATION]
    assert ann.requires_manual_implementation(annotations)
