"""Tests for the dependency detector."""

import re

import pytest

from coalesce.errors import UnsupportedLanguage
from coalesce.lal.detector import DependencyDetector, DetectionPattern, UsageSignature
from coalesce.uir.models import Language

REACT_SOURCE = """import React, { useState, useEffect } from 'react';

function Counter() {
  const [count, setCount] = useState(0);
  useEffect(() => log(count), [count]);
}
"""


def test_detects_react_hooks():
    deps = DependencyDetector().detect(REACT_SOURCE, Language.JAVASCRIPT)
    assert len(deps) == 1

    react = deps[0]
    assert react.name == "react"
    assert react.ecosystem == "javascript"
    assert react.version is None
    assert react.import_path.startswith("import React, { useState, useEffect }")
    assert [u.pattern_name for u in react.usage_patterns] == ["useState", "useEffect"]


def test_usage_parameters_and_offsets():
    deps = DependencyDetector().detect(REACT_SOURCE, Language.JAVASCRIPT)
    state = deps[0].usage_patterns[0]
    assert state.parameters == {"state": "count", "setter": "setCount", "initial": "0"}
    assert state.semantic_intent == "reactive_state_management"
    assert state.method_name == "const [count, setCount] = useState(0)"

    start, end = state.source_location
    assert start == REACT_SOURCE.index("const [count")
    assert REACT_SOURCE[start:end] == state.method_name


def test_usage_without_import_is_ignored():
    source = "const [a, b] = useState(1);\n"
    assert DependencyDetector().detect(source, Language.JAVASCRIPT) == []


def test_import_without_usage_is_ignored():
    source = "import { useState } from 'react';\n"
    assert DependencyDetector().detect(source, Language.JAVASCRIPT) == []


def test_detects_requests_with_target():
    source = "import requests\n\nresponse = requests.get('https://example.com')\n"
    (dep,) = DependencyDetector().detect(source, Language.PYTHON)
    assert dep.name == "requests"
    (usage,) = dep.usage_patterns
    assert usage.pattern_name == "get"
    assert usage.parameters == {"target": "response", "url": "'https://example.com'"}


def test_detects_django_model_and_field():
    source = (
        "from django.db import models\n\n"
        "class Article(models.Model):\n"
        "    title = models.CharField(max_length=200)\n"
    )
    (dep,) = DependencyDetector().detect(source, Language.PYTHON)
    assert dep.name == "django"
    model, field = dep.usage_patterns
    assert model.parameters == {"name": "Article"}
    assert field.parameters == {"field": "title", "length": "200"}


def test_detects_c_socket():
    source = "#include <sys/socket.h>\n\nint main() { int fd = socket(AF_INET, SOCK_STREAM, 0); }\n"
    (dep,) = DependencyDetector().detect(source, Language.C)
    (usage,) = dep.usage_patterns
    assert usage.parameters == {
        "var": "fd",
        "family": "AF_INET",
        "type": "SOCK_STREAM",
        "protocol": "0",
    }


def test_offsets_are_utf8_bytes():
    source = "# café\nimport requests\nr = requests.get(url)\n"
    (dep,) = DependencyDetector().detect(source, Language.PYTHON)
    start, _ = dep.usage_patterns[0].source_location
    assert start == source.index("r = ") + 1
    assert source.encode("utf-8")[start:].startswith(b"r = requests.get")


def test_language_without_detection_set():
    with pytest.raises(UnsupportedLanguage):
        DependencyDetector().detect("fn main() {}", Language.RUST)


def test_custom_detection_pattern():
    detector = DependencyDetector(patterns={})
    detector.register(
        Language.GO,
        DetectionPattern(
            library="gin",
            ecosystem="go",
            import_regex=re.compile(r'"github\.com/gin-gonic/gin"'),
            usages=[UsageSignature("Default", re.compile(r"gin\.Default\(\)"), "http_router")],
        ),
    )
    source = 'import "github.com/gin-gonic/gin"\n\nr := gin.Default()\n'
    (dep,) = detector.detect(source, Language.GO)
    assert dep.name == "gin"
    assert dep.usage_patterns[0].semantic_intent == "http_router"
    assert detector.languages() == [Language.GO]
