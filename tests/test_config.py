"""Tests for project configuration."""

import json
import tempfile
from pathlib import Path

import pytest

from coalesce.config import CONFIG_VERSION, ProjectConfig
from coalesce.errors import CoalesceError
from coalesce.lal.registry import default_registry

PATTERN_YAML = """
name: get
library: axios
ecosystem: javascript
semantics:
  intent: http_get_request
"""


def test_load_missing_returns_none():
    with tempfile.TemporaryDirectory() as tmpdir:
        assert ProjectConfig.load(tmpdir) is None


def test_save_and_load():
    with tempfile.TemporaryDirectory() as tmpdir:
        config = ProjectConfig(
            project_name="legacy-port",
            source_languages=["c"],
            target_languages=["python"],
            default_ecosystems={"python": "httpx"},
        )
        path = config.save(tmpdir)
        assert path == Path(tmpdir) / ".coalesce" / "config.json"

        loaded = ProjectConfig.load(tmpdir)
        assert loaded == config
        assert loaded.version == CONFIG_VERSION
        assert loaded.preserve_legacy_patterns is True


def test_unknown_keys_are_ignored():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = ProjectConfig.path_for(tmpdir)
        path.parent.mkdir()
        path.write_text(json.dumps({"project_name": "x", "future_option": 1}))
        assert ProjectConfig.load(tmpdir).project_name == "x"


def test_malformed_config():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = ProjectConfig.path_for(tmpdir)
        path.parent.mkdir()
        path.write_text("{not json")
        with pytest.raises(CoalesceError):
            ProjectConfig.load(tmpdir)

        path.write_text("[1, 2]")
        with pytest.raises(CoalesceError):
            ProjectConfig.load(tmpdir)


def test_registry_without_pattern_files_is_default():
    assert ProjectConfig().build_registry() is default_registry()


def test_registry_with_pattern_files():
    with tempfile.TemporaryDirectory() as tmpdir:
        (Path(tmpdir) / "axios.yaml").write_text(PATTERN_YAML)
        registry = ProjectConfig(pattern_files=["axios.yaml"]).build_registry(tmpdir)
        assert registry.frozen
        assert registry.get("axios", "get") is not None
        assert registry.get("react", "useState") is not None
