"""Tests for the back ends (Python emitter and UIR JSON dump)."""

import json
import tempfile
from pathlib import Path

import pytest

from coalesce.backends import create_generator, supported_targets
from coalesce.backends.python import PythonGenerator, collect_imports
from coalesce.backends.uir_json import UIRJsonGenerator
from coalesce.errors import GenerationError, LegacyPatternError, UnsupportedLanguage
from coalesce.frontends import create_parser
from coalesce.uir import annotations as ann
from coalesce.uir.models import (
    ControlFlowKind,
    Language,
    LegacyPattern,
    Metadata,
    NodeType,
    UIRNode,
)


def _module(*children, language=Language.PYTHON):
    root = UIRNode(id="root", node_type=NodeType.module(), metadata=Metadata(source_language=language))
    for child in children:
        root.add_child(child)
    return root


def _node(node_id, node_type, name=None, **annotations):
    node = UIRNode(id=node_id, node_type=node_type, name=name)
    node.metadata.annotations.update(annotations)
    return node


def _generate(source, language):
    return PythonGenerator().generate(create_parser(language).parse(source))


# --- Structure ---


def test_python_function_round_trips():
    code = _generate("def add(a, b=2):\n    return a + b\n", Language.PYTHON)
    assert code == "# Generated by Coalesce from python\n\ndef add(a, b=2):\n    return a + b\n"


def test_javascript_function_to_python():
    code = _generate("function add(a, b) { return a + b; }", Language.JAVASCRIPT)
    assert code.startswith("# Generated by Coalesce from javascript\n")
    assert "def add(a, b):\n    return a + b" in code


def test_if_else():
    code = _generate("if a:\n    x = 1\nelse:\n    x = 2\n", Language.PYTHON)
    assert "if a:\n    x = 1\nelse:\n    x = 2\n" in code


def test_loops():
    code = _generate("for item in items:\n    print(item)\nwhile ready:\n    break\n", Language.PYTHON)
    assert "for item in items:\n    print(item)" in code
    assert "while ready:\n    break" in code


def test_top_level_definitions_are_separated():
    code = _generate("x = 1\n\ndef f():\n    pass\n", Language.PYTHON)
    assert "x = 1\n\n\ndef f():" in code


def test_unrendered_construct_is_commented():
    node = _node("try", NodeType.control_flow(ControlFlowKind.TRY), **{ann.ORIGINAL_TEXT: "try { a(); }"})
    code = PythonGenerator().generate(_module(node))
    assert "# ControlFlow(Try):\n# try { a(); }" in code


def test_root_must_be_module():
    with pytest.raises(GenerationError):
        PythonGenerator().generate(UIRNode(id="f", node_type=NodeType.function()))


# --- Annotations ---


def test_generated_code_replaces_node_and_imports_are_collected():
    node = _node(
        "assign",
        NodeType.variable(),
        "response",
        **{
            ann.GENERATED_CODE: "response = httpx.get(url)",
            ann.REQUIRED_IMPORTS: ann.encode_json(["import httpx"]),
        },
    )
    code = PythonGenerator().generate(_module(node))
    assert code == (
        "# Generated by Coalesce from python\n\n"
        "import httpx\n\n"
        "response = httpx.get(url)\n"
    )


def test_setup_and_cleanup_surround_generated_code():
    node = _node(
        "sock",
        NodeType.variable(),
        "fd",
        **{
            ann.SETUP_CODE: "socket.setdefaulttimeout(5)",
            ann.GENERATED_CODE: "fd = socket.socket()",
            ann.CLEANUP_CODE: "fd.close()",
        },
    )
    code = PythonGenerator().generate(_module(node))
    assert "socket.setdefaulttimeout(5)\nfd = socket.socket()\nfd.close()\n" in code


def test_generated_class_header_keeps_body():
    field = _node("field", NodeType.variable(), "title", **{ann.GENERATED_CODE: "title = Column(String(200))"})
    model = _node(
        "model",
        NodeType.klass(),
        "Article",
        **{ann.GENERATED_CODE: "class Article(Base):\n    __tablename__ = 'articles'"},
    )
    model.add_child(field)
    code = PythonGenerator().generate(_module(model))
    assert (
        "class Article(Base):\n"
        "    __tablename__ = 'articles'\n"
        "    title = Column(String(200))\n"
    ) in code


def test_fallback_becomes_comments():
    node = _node(
        "call",
        NodeType.variable(),
        "response",
        **{
            ann.FALLBACK_IMPLEMENTATION: (
                "// TODO: Implement equivalent of requests:get\n"
                "// Original behavior: Performs a blocking HTTP GET request"
            ),
            ann.REQUIRES_MANUAL_IMPLEMENTATION: ann.MANUAL_FLAG,
        },
    )
    code = PythonGenerator().generate(_module(node))
    assert "# TODO: Implement equivalent of requests:get\n" in code
    assert "# Original behavior: Performs a blocking HTTP GET request\n" in code


def test_legacy_patterns_become_comments():
    goto = _node("goto", NodeType.control_flow(ControlFlowKind.GOTO))
    goto.metadata.legacy_patterns.append(
        LegacyPattern("goto", "goto done;", "Replace goto with structured control flow")
    )
    macro = _node("macro", NodeType.constant(), "SQUARE")
    macro.metadata.legacy_patterns.append(
        LegacyPattern("macro", "#define SQUARE(x) ((x) * (x))", None, True)
    )
    code = PythonGenerator().generate(_module(goto, macro, language=Language.C))
    assert "# LEGACY goto: Replace goto with structured control flow\n#   goto done;\n" in code
    assert "# LEGACY macro (preserved):\n#   #define SQUARE(x) ((x) * (x))\n" in code
    assert "SQUARE =" not in code


def test_malformed_imports_fail_generation():
    node = _node("x", NodeType.variable(), "x", **{ann.REQUIRED_IMPORTS: "[not json"})
    with pytest.raises(GenerationError):
        PythonGenerator().generate(_module(node))


def test_collect_imports_is_ordered_union():
    first = _node("a", NodeType.variable(), **{ann.REQUIRED_IMPORTS: ann.encode_json(["import a", "import b"])})
    second = _node("b", NodeType.variable(), **{ann.REQUIRED_IMPORTS: ann.encode_json(["import b", "import c"])})
    assert collect_imports(_module(first, second)) == ["import a", "import b", "import c"]


# --- Registry of back ends ---


def test_uir_json_dump():
    root = _module(_node("x", NodeType.variable(), "x"))
    data = json.loads(UIRJsonGenerator().generate(root))
    assert data["node_type"] == root.node_type.to_dict()
    assert data["children"][0]["name"] == "x"


def test_create_generator():
    assert isinstance(create_generator("python"), PythonGenerator)
    assert isinstance(create_generator(Language.PYTHON), PythonGenerator)
    assert isinstance(create_generator("UIR"), UIRJsonGenerator)
    assert supported_targets() == ["python", "uir"]
    with pytest.raises(UnsupportedLanguage):
        create_generator("rust")
    with pytest.raises(UnsupportedLanguage):
        create_generator("klingon")


def test_generate_file_creates_parents():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "out" / "mod.py"
        written = PythonGenerator().generate_file(_module(), path)
        assert written == path
        assert path.read_text() == "# Generated by Coalesce from python\n"


def test_legacy_comments_can_be_dropped():
    goto = _node("goto", NodeType.control_flow(ControlFlowKind.GOTO))
    goto.metadata.legacy_patterns.append(LegacyPattern("goto", "goto done;"))
    code = PythonGenerator(preserve_legacy=False).generate(_module(goto, language=Language.C))
    assert "LEGACY" not in code


def test_strict_legacy_refuses_to_drop_preserved_macros():
    macro = _node("macro", NodeType.constant(), "SQUARE")
    macro.metadata.legacy_patterns.append(
        LegacyPattern("macro", "#define SQUARE(x) ((x) * (x))", None, True)
    )
    root = _module(macro, language=Language.C)

    assert "LEGACY" not in PythonGenerator(preserve_legacy=False).generate(root)
    with pytest.raises(LegacyPatternError) as info:
        PythonGenerator(preserve_legacy=False, strict_legacy=True).generate(root)
    assert info.value.pattern == "#define SQUARE(x) ((x) * (x))"


def test_rewrites_on_the_module_follow_its_imports():
    root = create_parser(Language.PYTHON).parse("import requests\nprint(1)\n")
    root.metadata.annotations.update(
        {
            ann.GENERATED_CODE: "a = httpx.get(x)",
            ann.REQUIRED_IMPORTS: ann.encode_json(["import httpx"]),
            ann.FALLBACK_IMPLEMENTATION: "// TODO: Implement equivalent of requests:post",
            ann.REQUIRES_MANUAL_IMPLEMENTATION: ann.MANUAL_FLAG,
        }
    )
    code = PythonGenerator().generate(root)
    assert code.endswith(
        "import requests\n"
        "# TODO: Implement equivalent of requests:post\n"
        "a = httpx.get(x)\n"
        "print(1)\n"
    )
    assert "\nimport httpx\n" in code


def test_keyword_arguments_keep_their_names():
    code = _generate("title = models.CharField(max_length=200)\nsend(msg, retry=True, **opts)\n", Language.PYTHON)
    assert "models.CharField(max_length=200)" in code
    assert "send(msg, retry=True, **opts)\n" in code
