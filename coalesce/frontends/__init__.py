"""Source text in, UIR out.

``create_parser`` maps a language tag to its front end. Tree-sitter front
ends give full-fidelity trees; the F# and Visual Basic front ends are
regex based and shallow.
"""

from __future__ import annotations

from pathlib import Path

from coalesce.errors import UnsupportedLanguage
from coalesce.frontends.base import Parser
from coalesce.frontends.c import CFrontend
from coalesce.frontends.cpp import CppFrontend
from coalesce.frontends.csharp import CSharpFrontend
from coalesce.frontends.fsharp import FSharpFrontend
from coalesce.frontends.go import GoFrontend
from coalesce.frontends.java import JavaFrontend
from coalesce.frontends.javascript import JavaScriptFrontend
from coalesce.frontends.python import PythonFrontend
from coalesce.frontends.rust import RustFrontend
from coalesce.frontends.typescript import TypeScriptFrontend
from coalesce.frontends.vb import VisualBasicFrontend
from coalesce.uir.models import Language
from coalesce.utils.file_scanner import classify_file

FRONTENDS: dict[Language, type[Parser]] = {
    Language.JAVASCRIPT: JavaScriptFrontend,
    Language.TYPESCRIPT: TypeScriptFrontend,
    Language.PYTHON: PythonFrontend,
    Language.RUST: RustFrontend,
    Language.GO: GoFrontend,
    Language.JAVA: JavaFrontend,
    Language.CSHARP: CSharpFrontend,
    Language.FSHARP: FSharpFrontend,
    Language.VISUAL_BASIC: VisualBasicFrontend,
    Language.C: CFrontend,
    Language.CPP: CppFrontend,
}


def create_parser(language: Language | str) -> Parser:
    """Front end for ``language``; raises UnsupportedLanguage if there is none."""
    if isinstance(language, str):
        language = Language.from_name(language)
    frontend = FRONTENDS.get(language)
    if frontend is None:
        raise UnsupportedLanguage(language)
    return frontend()


def supported_languages() -> list[Language]:
    return list(FRONTENDS)


def detect_language(source: str, filename: str | Path | None = None) -> Language:
    """Guess the language of ``source`` from its file name, then its content.

    Defaults to JavaScript when nothing matches.
    """
    if filename is not None:
        language = classify_file(Path(filename))
        if language is not None:
            return language

    def has(*needles: str) -> bool:
        return any(n in source for n in needles)

    if has("using System") or (has("namespace ") and has("class ") and has("public ")):
        return Language.CSHARP
    if has("let ") and has("=", "->") and has("module ", "type "):
        return Language.FSHARP
    if has("Sub ", "Function ", "End Sub", "End Function"):
        return Language.VISUAL_BASIC
    if has("fn ") and has("mut ", "impl ", "struct "):
        return Language.RUST
    if has("func ") and has("package ", "import "):
        return Language.GO
    if has("class ") and has("public:", "private:", "namespace "):
        return Language.CPP
    if has("#include", "int main"):
        return Language.C
    if has("function ", "const ", "let "):
        return Language.JAVASCRIPT
    if has("def ", "import "):
        return Language.PYTHON
    return Language.JAVASCRIPT


__all__ = [
    "FRONTENDS",
    "Parser",
    "create_parser",
    "detect_language",
    "supported_languages",
]
