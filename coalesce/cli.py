"""Coalesce CLI — the main entry point for cross-language translation."""

import json
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from coalesce import __version__
from coalesce.errors import CoalesceError

console = Console()


def _fail(message: str):
    console.print(f"[red]Error:[/] {escape(message)}")
    raise click.exceptions.Exit(1)


def _read(path: str) -> str:
    try:
        return Path(path).read_text(errors="replace")
    except OSError as e:
        _fail(f"Cannot read {path}: {e}")


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Log pipeline progress")
def main(verbose: bool):
    """Coalesce — cross-language source translation.

    Parse source files into a universal intermediate representation,
    detect the library idioms they use, and rewrite both for another
    language and ecosystem.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
            force=True,
        )


# ── Translate ────────────────────────────────────────────────────────


@main.command()
@click.argument("source_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--from", "-f", "source_language", default=None, help="Source language (detected if omitted)")
@click.option("--to", "-t", "target_language", default="python", help="Target language")
@click.option("--ecosystem", "-e", default=None, help="Target library ecosystem")
@click.option("--output", "-o", default=None, help="Write generated code to this file")
@click.option("--project-dir", "-p", default=".", help="Directory holding .coalesce/config.json")
@click.option("--isolate-errors", is_flag=True, help="Record bad annotations and keep going")
def translate(
    source_file: str,
    source_language: str | None,
    target_language: str,
    ecosystem: str | None,
    output: str | None,
    project_dir: str,
    isolate_errors: bool,
):
    """Translate SOURCE_FILE into another language."""
    from coalesce.config import ProjectConfig
    from coalesce.translator import TranslationOutcome, Translator

    try:
        config = ProjectConfig.load(project_dir)
        registry = config.build_registry(project_dir) if config else None
    except CoalesceError as e:
        _fail(str(e))

    translator = Translator(
        registry=registry,
        isolate_errors=isolate_errors,
        default_ecosystems=config.default_ecosystems if config else None,
        preserve_legacy_patterns=config.preserve_legacy_patterns if config else True,
    )
    result = translator.translate(
        _read(source_file),
        source_language=source_language,
        target_language=target_language,
        target_ecosystem=ecosystem,
        filename=source_file,
    )

    if result.outcome is TranslationOutcome.FAILED:
        _fail(result.error or "translation failed")

    if result.code is not None:
        if output:
            Path(output).write_text(result.code)
            console.print(f"[green]Written to:[/] {output}")
        else:
            click.echo(result.code, nl=False)
    else:
        console.print(f"[yellow]No back end for {result.target_language.value}; use 'parse' to inspect the UIR.[/]")

    if result.manual_markers:
        console.print(f"\n[yellow]{len(result.manual_markers)} usage(s) need manual implementation:[/]")
        for marker in result.manual_markers:
            first = marker.comment.splitlines()[0] if marker.comment else marker.node_id
            console.print(f"  [yellow]![/] line {marker.line}: {escape(first)}")
    console.print(f"[bold]Outcome:[/] {result.outcome.value}")


# ── Parse ────────────────────────────────────────────────────────────


@main.command()
@click.argument("source_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--language", "-l", default=None, help="Source language (detected if omitted)")
@click.option("--format", "fmt", default="tree", type=click.Choice(["tree", "json"]))
def parse(source_file: str, language: str | None, fmt: str):
    """Parse SOURCE_FILE and show its UIR."""
    from coalesce.frontends import create_parser, detect_language

    try:
        lang = detect_language(_read(source_file), source_file) if language is None else language
        uir = create_parser(lang).parse_file(source_file)
    except CoalesceError as e:
        _fail(str(e))

    if fmt == "json":
        click.echo(json.dumps(uir.to_dict(), indent=2))
        return

    tree = Tree(_label(uir))
    _build_tree(tree, uir)
    console.print(tree)
    console.print(f"\n[dim]{uir.count_nodes()} nodes[/]")


def _label(node) -> str:
    name = f" [cyan]{escape(node.name)}[/]" if node.name else ""
    line = f" [dim]L{node.source_location.start_line}[/]" if node.source_location else ""
    return f"[bold]{node.node_type}[/]{name}{line}"


def _build_tree(branch: Tree, node):
    for child in node.children:
        _build_tree(branch.add(_label(child)), child)


# ── Library analysis ─────────────────────────────────────────────────


@main.command(name="analyze-libs")
@click.argument("source_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--language", "-l", default=None, help="Source language (detected if omitted)")
def analyze_libs(source_file: str, language: str | None):
    """Detect library idioms used by SOURCE_FILE."""
    from coalesce.frontends import detect_language
    from coalesce.lal.detector import DependencyDetector
    from coalesce.uir.models import Language

    source = _read(source_file)
    try:
        lang = Language.from_name(language) if language else detect_language(source, source_file)
        deps = DependencyDetector().detect(source, lang)
    except CoalesceError as e:
        _fail(str(e))

    if not deps:
        console.print("[yellow]No known library usages found.[/]")
        return

    table = Table(title=f"Library Usages ({sum(len(d.usage_patterns) for d in deps)} found)")
    table.add_column("Library", style="cyan")
    table.add_column("Pattern")
    table.add_column("Intent")
    table.add_column("Bytes", justify="right", style="dim")

    for dep in deps:
        for usage in dep.usage_patterns:
            start, end = usage.source_location
            table.add_row(dep.name, usage.pattern_name, usage.semantic_intent, f"{start}-{end}")

    console.print(table)


# ── Patterns ─────────────────────────────────────────────────────────


@main.group()
def patterns():
    """Inspect the library pattern registry."""


@patterns.command(name="list")
@click.option("--library", "-l", default=None, help="Only patterns of this library")
@click.option("--file", "pattern_files", multiple=True, help="Extra YAML pattern file")
def list_patterns(library: str | None, pattern_files: tuple):
    """List registered library patterns."""
    registry = _registry(pattern_files)
    items = registry.all_patterns()
    if library:
        items = [p for p in items if p.library == library]

    if not items:
        console.print("[yellow]No patterns registered.[/]")
        return

    table = Table(title=f"Patterns ({len(items)})")
    table.add_column("Pattern", style="cyan")
    table.add_column("Intent")
    table.add_column("Rewrites to", style="green")

    for pattern in items:
        table.add_row(
            pattern.qualified_name,
            pattern.semantics.intent,
            ", ".join(pattern.transformations) or "-",
        )

    console.print(table)


@patterns.command()
@click.argument("library")
@click.argument("pattern_name")
@click.argument("target_ecosystem")
def suggest(library: str, pattern_name: str, target_ecosystem: str):
    """Rank rewrites of LIBRARY:PATTERN_NAME for TARGET_ECOSYSTEM."""
    from coalesce.lal.registry import default_registry

    suggestions = default_registry().suggest(library, pattern_name, target_ecosystem)
    if not suggestions:
        console.print(f"[yellow]No suggestions for {library}:{pattern_name} -> {target_ecosystem}.[/]")
        return

    for s in suggestions:
        console.print(
            f"  [green]{s.confidence:.1f}[/] [cyan]{s.target_library}:{s.target_pattern}[/] "
            f"({s.suggestion_type.value}) {s.description}"
        )


@patterns.command()
@click.argument("library")
def ecosystems(library: str):
    """Ecosystems LIBRARY's idioms are known to port to."""
    from coalesce.lal.registry import default_registry

    targets = default_registry().target_ecosystems(library)
    if not targets:
        console.print(f"[yellow]No target ecosystems known for {library}.[/]")
        return
    console.print(Panel(", ".join(targets), title=f"{library} ports to"))


def _registry(pattern_files: tuple):
    from coalesce.lal.registry import PatternRegistry, default_registry

    if not pattern_files:
        return default_registry()
    registry = PatternRegistry.with_defaults()
    try:
        for path in pattern_files:
            registry.register_from_file(path)
    except CoalesceError as e:
        _fail(str(e))
    return registry.freeze()


# ── Scan ─────────────────────────────────────────────────────────────


@main.command()
@click.argument("project_path", type=click.Path(exists=True, file_okay=False))
@click.option("--language", "-l", "languages", multiple=True, help="Only these languages")
def scan(project_path: str, languages: tuple):
    """Find translatable source files under PROJECT_PATH."""
    from coalesce.uir.models import Language
    from coalesce.utils.file_scanner import scan_project_files, summarize_languages

    try:
        wanted = [Language.from_name(name) for name in languages] or None
    except CoalesceError as e:
        _fail(str(e))

    files = scan_project_files(project_path, languages=wanted)
    if not files:
        console.print("[yellow]No source files found.[/]")
        return

    table = Table(title=f"Source Files ({len(files)} found)")
    table.add_column("Language", style="cyan")
    table.add_column("Files", justify="right", style="green")

    for language, count in summarize_languages(files).most_common():
        table.add_row(language.value, str(count))

    console.print(table)


# ── Init ─────────────────────────────────────────────────────────────


@main.command()
@click.argument("project_path", default=".", type=click.Path(file_okay=False))
@click.option("--name", "-n", default=None, help="Project name (default: directory name)")
@click.option("--source", "-s", "sources", multiple=True, help="Source language")
@click.option("--target", "-t", "targets", multiple=True, help="Target language")
def init(project_path: str, name: str | None, sources: tuple, targets: tuple):
    """Create .coalesce/config.json in PROJECT_PATH."""
    from coalesce.config import ProjectConfig
    from coalesce.uir.models import Language

    if ProjectConfig.load(project_path) is not None:
        _fail(f"{ProjectConfig.path_for(project_path)} already exists")

    try:
        source_languages = [Language.from_name(s).value for s in sources]
        target_languages = [Language.from_name(t).value for t in targets]
    except CoalesceError as e:
        _fail(str(e))

    config = ProjectConfig(
        project_name=name or Path(project_path).resolve().name,
        source_languages=source_languages,
        target_languages=target_languages or [Language.PYTHON.value],
    )
    path = config.save(project_path)
    console.print(f"[green]Initialized Coalesce project:[/] {path}")


if __name__ == "__main__":
    main()
