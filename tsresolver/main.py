"""tsresolver CLI - resolve module references the way the type checker sees them."""
from pathlib import Path
from typing import List, Optional

import typer
from rich.table import Table
from rich.markup import escape

from tsresolver.config import get_config, __version__
from tsresolver.utils.safe_console import SafeConsole
from tsresolver.utils.logger import ResolutionTrace
from tsresolver.resolver.compiler_options import CompilerOptions, find_project, load_compiler_options
from tsresolver.resolver.declaration_locator import PackageManifestError
from tsresolver.resolver.graph_sync import GraphIndexSync, graph_summary, load_dependency_graph
from tsresolver.resolver.import_scanner import ImportScanner
from tsresolver.resolver.parser import LanguageParser
from tsresolver.resolver.service import ResolverService

app = typer.Typer(
    name="tsresolver",
    help="Resolve module references to TypeScript source and declaration files",
    add_completion=False
)
console = SafeConsole()

index_app = typer.Typer(name="index", help="Inspect bundler dependency maps")


def _fail(message: str) -> None:
    console.print(f"[bold red]Error:[/bold red] {escape(message)}")
    raise typer.Exit(1)


def _load_service(deps: Optional[str], project: Optional[str], trace: bool) -> ResolverService:
    """Build a ResolverService from CLI inputs, exiting on bad input files."""
    options = CompilerOptions()
    if project:
        try:
            options = load_compiler_options(project)
        except (FileNotFoundError, ValueError) as e:
            _fail(str(e))

    tracer = ResolutionTrace.to_console(console, enabled=trace or get_config().trace)
    service = ResolverService(options=options, trace=tracer)

    deps = deps or get_config().dependency_file
    if deps:
        try:
            graph = load_dependency_graph(deps)
        except (FileNotFoundError, ValueError) as e:
            _fail(str(e))
        GraphIndexSync(service.index).sync(graph)

    return service


def _scan_imports(file_path: Path) -> List[str]:
    parser = LanguageParser.from_file_extension(file_path)
    if parser is None:
        _fail(f"Cannot scan imports of {file_path}: unsupported file type")
    try:
        parsed = parser.parse_file(file_path)
    except OSError as e:
        _fail(f"Cannot read {file_path}: {e}")
    return ImportScanner().scan(parsed.root_node, parsed.source)


@app.command()
def resolve(
    containing_file: str = typer.Argument(..., help="File that imports the modules"),
    modules: Optional[List[str]] = typer.Argument(None, help="Module references (default: scanned from the file)"),
    deps: Optional[str] = typer.Option(None, "--deps", "-d", help="Bundler dependency map (JSON: {file: {module: path}})"),
    project: Optional[str] = typer.Option(None, "--project", "-p", help="tsconfig.json to read compiler options from"),
    trace: bool = typer.Option(False, "--trace", help="Print each resolution decision"),
):
    """Resolve the modules imported by a file."""
    file_path = Path(containing_file).resolve()

    if not modules:
        if not file_path.exists():
            _fail(f"Containing file does not exist: {file_path}")
        modules = _scan_imports(file_path)

    service = _load_service(deps, project, trace)

    try:
        results = service.resolve_module_names(modules, str(file_path))
    except PackageManifestError as e:
        _fail(str(e))

    table = Table(title=f"Module Resolution: {escape(str(file_path))}")
    table.add_column("Module", style="cyan")
    table.add_column("Resolved File", style="green", no_wrap=False)
    table.add_column("Extension / Reason", style="magenta")

    for module_name, result in zip(modules, results):
        if result.is_resolved:
            table.add_row(escape(module_name), escape(result.resolved_file_name), result.extension)
        else:
            table.add_row(escape(module_name), "[dim]-[/dim]", result.reason.value)

    console.print(table)
    resolved_count = sum(1 for r in results if r.is_resolved)
    console.print(f"\n[bold]{resolved_count}[/bold] of {len(results)} module(s) resolved")


@app.command()
def types(
    containing_file: str = typer.Argument(..., help="File holding the type-reference directives"),
    names: Optional[List[str]] = typer.Argument(None, help="Directive names (default: scanned from the file)"),
    project: Optional[str] = typer.Option(None, "--project", "-p", help="tsconfig.json to read compiler options from"),
    trace: bool = typer.Option(False, "--trace", help="Print each resolution decision"),
):
    """Resolve `/// <reference types=... />` directives."""
    file_path = Path(containing_file).resolve()

    if not names:
        if not file_path.exists():
            _fail(f"Containing file does not exist: {file_path}")
        names = ImportScanner.scan_type_directives(file_path.read_text(encoding='utf-8'))

    service = _load_service(None, project, trace)

    try:
        results = service.lookup_type_reference_directives(names, str(file_path))
    except PackageManifestError as e:
        _fail(str(e))

    table = Table(title=f"Type References: {escape(str(file_path))}")
    table.add_column("Directive", style="cyan")
    table.add_column("Resolved File", style="green", no_wrap=False)
    table.add_column("Primary", style="yellow")
    table.add_column("Failed Lookups", style="dim", no_wrap=False)

    for name, result in zip(names, results):
        failed = escape("\n".join(result.failed_lookup_locations)) or "-"
        if result.resolved:
            hit = result.resolved
            table.add_row(escape(name), escape(hit.resolved_file_name), "yes" if hit.primary else "no", failed)
        else:
            table.add_row(escape(name), "[red]unresolved[/red]", "-", failed)

    console.print(table)


@app.command("find-project")
def find_project_command(
    search_path: str = typer.Argument(".", help="File or directory to search upward from"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Project file name (default: tsconfig.json)"),
):
    """Find the nearest compiler project file."""
    file_name = name or get_config().project_file_name
    found = find_project(search_path, file_name)
    if found is None:
        _fail(f"No {file_name} found at or above {Path(search_path).resolve()}")
    console.print(str(found), markup=False, highlight=False)


@index_app.command("stats")
def index_stats(
    deps: str = typer.Option(..., "--deps", "-d", help="Bundler dependency map (JSON)"),
):
    """Show file and edge counts of a dependency map."""
    try:
        graph = load_dependency_graph(deps)
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))

    summary = graph_summary(graph)
    table = Table(title=f"Dependency Map: {escape(deps)}", show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right", style="green")
    table.add_row("Indexed Files", str(summary['files']))
    table.add_row("Graph Nodes", str(summary['targets']))
    table.add_row("Dependencies", str(summary['edges']))
    console.print(table)


app.add_typer(index_app)


def version_callback(value: bool):
    if value:
        console.print(f"tsresolver {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(False, "--version", callback=version_callback, is_eager=True, help="Show version and exit"),
):
    """tsresolver - module resolution for type checking bundled JavaScript/TypeScript projects."""
    pass


if __name__ == "__main__":
    app()
