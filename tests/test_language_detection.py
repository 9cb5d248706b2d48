"""Tests for front-end lookup and language detection."""

import pytest

from coalesce.errors import UnsupportedLanguage
from coalesce.frontends import create_parser, detect_language, supported_languages
from coalesce.frontends.javascript import JavaScriptFrontend
from coalesce.uir.models import Language


def test_create_parser_accepts_tags_and_aliases():
    assert isinstance(create_parser("javascript"), JavaScriptFrontend)
    assert isinstance(create_parser("js"), JavaScriptFrontend)
    assert create_parser(Language.GO).language == Language.GO


def test_create_parser_without_front_end():
    with pytest.raises(UnsupportedLanguage) as info:
        create_parser(Language.COBOL)
    assert "cobol" in str(info.value)
    with pytest.raises(UnsupportedLanguage):
        create_parser("fortran")


def test_supported_languages():
    languages = supported_languages()
    assert Language.PYTHON in languages
    assert Language.VISUAL_BASIC in languages
    assert Language.COBOL not in languages


def test_detect_by_extension():
    assert detect_language("", "main.rs") == Language.RUST
    assert detect_language("", "Program.CS") == Language.CSHARP
    assert detect_language("", "legacy.bas") == Language.VISUAL_BASIC


@pytest.mark.parametrize(
    "source, expected",
    [
        ("using System;\nclass A {}\n", Language.CSHARP),
        ("module Geo\nlet area r = r * r\n", Language.FSHARP),
        ("Sub Main()\nEnd Sub\n", Language.VISUAL_BASIC),
        ("fn main() { let mut x = 1; }\n", Language.RUST),
        ("package main\n\nfunc main() {}\n", Language.GO),
        ("class P {\npublic:\n    int x;\n};\n", Language.CPP),
        ("#include <stdio.h>\nint main() { return 0; }\n", Language.C),
        ("const x = 1;\n", Language.JAVASCRIPT),
        ("def f():\n    return 1\n", Language.PYTHON),
    ],
)
def test_detect_by_content(source, expected):
    assert detect_language(source) == expected


def test_unknown_extension_falls_back_to_content():
    assert detect_language("def f():\n    pass\n", "notes.txt") == Language.PYTHON


def test_default_is_javascript():
    assert detect_language("hello world") == Language.JAVASCRIPT
