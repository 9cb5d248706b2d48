"""Back ends: UIR in, target code out."""

from __future__ import annotations

from coalesce.backends.base import Generator
from coalesce.backends.python import PythonGenerator
from coalesce.backends.uir_json import UIRJsonGenerator
from coalesce.errors import UnsupportedLanguage
from coalesce.uir.models import Language

GENERATORS: dict[str, type[Generator]] = {
    Language.PYTHON.value: PythonGenerator,
    "uir": UIRJsonGenerator,
}


def create_generator(target: Language | str) -> Generator:
    """Generator for a target language tag, or ``"uir"`` for a JSON dump."""
    if isinstance(target, str) and target.strip().lower() in GENERATORS:
        key = target.strip().lower()
    else:
        language = Language.from_name(target) if isinstance(target, str) else target
        key = language.value
    generator_cls = GENERATORS.get(key)
    if generator_cls is None:
        raise UnsupportedLanguage(target)
    return generator_cls()


def supported_targets() -> list[str]:
    return list(GENERATORS)


__all__ = [
    "GENERATORS",
    "Generator",
    "PythonGenerator",
    "UIRJsonGenerator",
    "create_generator",
    "supported_targets",
]
