"""Back-end boundary — turns a (possibly transformed) UIR tree into target code."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from coalesce.errors import GenerationError
from coalesce.uir.models import Language, UIRNode

logger = logging.getLogger(__name__)


class Generator(ABC):
    """Base class for emitters.

    Emitters read the reserved annotations left by the library transformer
    (``generated_code``, ``required_imports``, ``fallback_implementation``,
    ...) and the node's legacy patterns; they never modify the tree.
    """

    target_language: Language | None = None
    # Emit legacy-pattern comments (``# LEGACY ...``) where the target allows comments
    preserve_legacy: bool = True
    # Raise LegacyPatternError instead of warning when a verbatim pattern is dropped
    strict_legacy: bool = False

    @abstractmethod
    def generate(self, uir: UIRNode) -> str:
        """Target source text for ``uir``. Raises GenerationError."""

    def generate_file(self, uir: UIRNode, path: str | Path) -> Path:
        """Write the generated code to ``path`` and return it."""
        path = Path(path)
        code = self.generate(uir)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(code)
        except OSError as exc:
            raise GenerationError(f"Cannot write {path}: {exc}") from exc
        logger.info("wrote %s (%d bytes)", path, len(code))
        return path
