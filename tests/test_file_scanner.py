"""Tests for the file scanner utility."""

import tempfile
from pathlib import Path

from coalesce.uir.models import Language
from coalesce.utils.file_scanner import (
    SKIP_DIRS,
    classify_file,
    scan_project_files,
    summarize_languages,
)


def test_classify_known_extensions():
    assert classify_file(Path("foo.py")) == Language.PYTHON
    assert classify_file(Path("bar.jsx")) == Language.JAVASCRIPT
    assert classify_file(Path("baz.ts")) == Language.TYPESCRIPT
    assert classify_file(Path("qux.go")) == Language.GO
    assert classify_file(Path("main.rs")) == Language.RUST
    assert classify_file(Path("util.h")) == Language.C
    assert classify_file(Path("shape.hpp")) == Language.CPP
    assert classify_file(Path("Form1.vb")) == Language.VISUAL_BASIC


def test_classify_unknown_extension():
    assert classify_file(Path("readme.md")) is None
    assert classify_file(Path("data.csv")) is None
    assert classify_file(Path("image.png")) is None


def test_scan_finds_source_files():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        (root / "main.py").write_text("print('hello')")
        (root / "utils").mkdir()
        (root / "utils" / "helper.c").write_text("int help(void) { return 0; }")
        (root / "readme.md").write_text("# readme")

        files = scan_project_files(root)
        names = {f.name for f in files}
        assert "main.py" in names
        assert "helper.c" in names
        assert "readme.md" not in names


def test_scan_filters_by_language():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        (root / "a.py").write_text("pass")
        (root / "b.go").write_text("package b")
        (root / "c.rs").write_text("fn c() {}")

        files = scan_project_files(root, [Language.GO, Language.RUST])
        assert [f.name for f in files] == ["b.go", "c.rs"]


def test_scan_skips_excluded_dirs():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        (root / "src").mkdir()
        (root / "src" / "app.py").write_text("pass")
        (root / "node_modules").mkdir()
        (root / "node_modules" / "lib.js").write_text("pass")
        (root / ".coalesce").mkdir()
        (root / ".coalesce" / "patterns.py").write_text("pass")

        files = scan_project_files(root)
        paths_str = [str(f) for f in files]
        assert any("app.py" in p for p in paths_str)
        assert not any("node_modules" in p for p in paths_str)
        assert not any(".coalesce" in p for p in paths_str)


def test_summarize_languages():
    counts = summarize_languages([Path("a.py"), Path("b.py"), Path("c.go"), Path("d.txt")])
    assert counts[Language.PYTHON] == 2
    assert counts[Language.GO] == 1
    assert len(counts) == 2


def test_skip_dirs_contains_expected():
    assert ".git" in SKIP_DIRS
    assert "node_modules" in SKIP_DIRS
    assert "__pycache__" in SKIP_DIRS
