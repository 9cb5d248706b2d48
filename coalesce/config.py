"""Project configuration stored as JSON in ``.coalesce/config.json``."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path

from coalesce.errors import CoalesceError
from coalesce.lal.registry import PatternRegistry, default_registry

logger = logging.getLogger(__name__)

CONFIG_DIR = ".coalesce"
CONFIG_FILE = "config.json"
CONFIG_VERSION = "1.0"


@dataclass
class ProjectConfig:
    project_name: str = ""
    version: str = CONFIG_VERSION
    source_languages: list[str] = field(default_factory=list)
    target_languages: list[str] = field(default_factory=list)
    preserve_legacy_patterns: bool = True
    pattern_files: list[str] = field(default_factory=list)
    default_ecosystems: dict[str, str] = field(default_factory=dict)

    @classmethod
    def path_for(cls, project_dir: str | Path) -> Path:
        return Path(project_dir) / CONFIG_DIR / CONFIG_FILE

    @classmethod
    def load(cls, project_dir: str | Path = ".") -> ProjectConfig | None:
        """Config of ``project_dir``, or None when it has not been initialized."""
        path = cls.path_for(project_dir)
        if not path.exists():
            return None
        try:
            with open(path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise CoalesceError(f"Cannot read {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise CoalesceError(f"{path} must contain a JSON object")

        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)

    def save(self, project_dir: str | Path = ".") -> Path:
        path = self.path_for(project_dir)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(asdict(self), f, indent=2)
        logger.info("saved project config to %s", path)
        return path

    def build_registry(self, project_dir: str | Path = ".") -> PatternRegistry:
        """Default patterns plus ``pattern_files`` (relative to ``project_dir``), frozen."""
        if not self.pattern_files:
            return default_registry()
        registry = PatternRegistry.with_defaults()
        for name in self.pattern_files:
            path = Path(name)
            if not path.is_absolute():
                path = Path(project_dir) / path
            registry.register_from_file(path)
        return registry.freeze()
