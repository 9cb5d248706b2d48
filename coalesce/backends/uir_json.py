"""Dump the UIR tree itself as JSON, for inspection and interchange."""

from __future__ import annotations

import json

from coalesce.backends.base import Generator
from coalesce.errors import GenerationError
from coalesce.uir.models import UIRNode


class UIRJsonGenerator(Generator):
    def __init__(self, indent: int = 2):
        self.indent = indent

    def generate(self, uir: UIRNode) -> str:
        try:
            return json.dumps(uir.to_dict(), indent=self.indent) + "\n"
        except (TypeError, ValueError) as exc:
            raise GenerationError(f"UIR is not JSON-serializable: {exc}") from exc
