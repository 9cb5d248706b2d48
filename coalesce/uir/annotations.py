"""Annotation protocol — the string-keyed JSON map exchanged between components.

Front ends, the library abstraction layer and emitters evolve independently;
they communicate through ``Metadata.annotations``. The reserved keys below
and their value encodings are fixed so independently written components
interoperate:

- ``library_dependency``: JSON string of a serialized ``LibraryDependency``,
  or of a list of them when several libraries share one node
- ``library_pattern``, ``semantic_intent``: plain strings
- ``transformed_from``, ``transformed_to``: ``"library:pattern"`` strings
- ``generated_code``, ``setup_code``, ``cleanup_code``: code strings
- ``required_imports``: JSON string of a list of import lines
- ``fallback_implementation``: TODO comment text
- ``requires_manual_implementation``: the string ``"true"``
"""

from __future__ import annotations

import json
from typing import Any

from coalesce.errors import TransformationError

LIBRARY_DEPENDENCY = "library_dependency"
LIBRARY_PATTERN = "library_pattern"
SEMANTIC_INTENT = "semantic_intent"
TRANSFORMED_FROM = "transformed_from"
TRANSFORMED_TO = "transformed_to"
GENERATED_CODE = "generated_code"
REQUIRED_IMPORTS = "required_imports"
SETUP_CODE = "setup_code"
CLEANUP_CODE = "cleanup_code"
FALLBACK_IMPLEMENTATION = "fallback_implementation"
REQUIRES_MANUAL_IMPLEMENTATION = "requires_manual_implementation"

# Value written for ``requires_manual_implementation``; readers also accept ``True``
MANUAL_FLAG = "true"

RESERVED_KEYS = frozenset(
    {
        LIBRARY_DEPENDENCY,
        LIBRARY_PATTERN,
        SEMANTIC_INTENT,
        TRANSFORMED_FROM,
        TRANSFORMED_TO,
        GENERATED_CODE,
        REQUIRED_IMPORTS,
        SETUP_CODE,
        CLEANUP_CODE,
        FALLBACK_IMPLEMENTATION,
        REQUIRES_MANUAL_IMPLEMENTATION,
    }
)

# Informational keys written by front ends and the transformer
ORIGINAL_TEXT = "original_text"
PARSE_ERROR = "parse_error"
FIDELITY = "fidelity"
DECLARED_TYPE = "declared_type"
VALUE = "value"
TRANSFORMATION_ERROR = "transformation_error"
OPERATOR = "operator"
KEYWORD = "keyword"  # Keyword-argument name; "**" for unpacked mappings


def encode_json(value: Any) -> str:
    """Serialize a value for storage as a JSON-string annotation."""
    return json.dumps(value, sort_keys=True)


def decode_json(annotations: dict[str, Any], key: str) -> Any:
    """Decode a JSON-string annotation; returns None when the key is absent.

    Already-decoded values (dicts, lists) are passed through.
    """
    raw = annotations.get(key)
    if raw is None:
        return None
    if not isinstance(raw, str):
        return raw
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise TransformationError(f"Malformed '{key}' annotation: {exc}") from exc


def required_imports(annotations: dict[str, Any]) -> list[str]:
    value = decode_json(annotations, REQUIRED_IMPORTS)
    return list(value) if value else []


def requires_manual_implementation(annotations: dict[str, Any]) -> bool:
    value = annotations.get(REQUIRES_MANUAL_IMPLEMENTATION)
    return value is True or value == "true"
