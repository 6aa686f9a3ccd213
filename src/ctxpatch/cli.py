"""ctxpatch CLI - thread a context parameter through a Go call graph."""

import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from ctxpatch import __version__
from ctxpatch.analysis.ignore import IgnoreFilter
from ctxpatch.config import default_config, get_ignore_rules, load_config
from ctxpatch.errors import RefactorError
from ctxpatch.models.results import RefactorResult
from ctxpatch.output.json_writer import write_config, write_report
from ctxpatch.output.tree import build_graph_tree, build_patch_tree, display_tree
from ctxpatch.paths import ensure_ctxpatch_dir, find_config, get_config_path, get_report_path
from ctxpatch.refactor import Refactorer, RefactorSettings

app = typer.Typer(
    name="ctxpatch",
    help="Thread a context.Context parameter through the functions a Go entry point reaches",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"ctxpatch version {__version__}")
        raise typer.Exit()


def setup_logging(verbose: bool) -> None:
    """Route library warnings through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Thread a context.Context parameter through a Go call graph."""


def _load_config_data(config: Optional[Path]) -> dict:
    """Load an explicit config, a discovered one, or nothing."""
    if config is None:
        config = find_config(Path.cwd())
        if config is None:
            return {}
    elif not config.exists():
        console.print(f"[red]Config file not found:[/] {config}")
        raise typer.Exit(1)
    return load_config(config)


@app.command()
def run(
    entry_file: Path = typer.Argument(
        ...,
        help="Go source file containing the entry function",
    ),
    function: str = typer.Argument(
        ...,
        help="Name of the entry function, e.g. Handle",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file (default: .ctxpatch/config.json or ctxpatch.toml)",
    ),
    workspace_root: Optional[Path] = typer.Option(
        None,
        "--workspace-root",
        "-w",
        help="Directory import paths are resolved under (default: $GOPATH/src)",
    ),
    max_depth: Optional[int] = typer.Option(
        None,
        "--max-depth",
        min=1,
        help="Abort when the call graph gets deeper than this",
    ),
    mode: Optional[str] = typer.Option(
        None,
        "--mode",
        "-m",
        help="Patch file mode: append (default) or truncate",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Show the rewritten graph without writing patch files",
    ),
    report: Optional[Path] = typer.Option(
        None,
        "--report",
        "-r",
        help="Path for the JSON report (default: .ctxpatch/report.json)",
    ),
    show_ignored: bool = typer.Option(
        False,
        "--show-ignored",
        help="Include ignored calls in the graph view",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug diagnostics",
    ),
) -> None:
    """Discover the call graph, rewrite it, and write .patch files."""
    setup_logging(verbose)

    try:
        config_data = _load_config_data(config)
        settings = RefactorSettings.from_config(config_data)
        if workspace_root is not None:
            settings.workspace_root = workspace_root
        if max_depth is not None:
            settings.max_depth = max_depth
        if mode is not None:
            settings.patch_mode = mode
        refactorer = Refactorer(settings)
    except (RefactorError, ValueError) as e:
        console.print(f"[red]Error:[/] {e}")
        raise typer.Exit(1)

    entry_file = entry_file.resolve()
    console.print(Panel.fit("[bold blue]ctxpatch - Context Propagation[/]"))
    console.print(f"\n[dim]Entry:[/] {entry_file} [dim]function[/] {function}")
    console.print(f"[dim]Workspace root:[/] {settings.workspace_root}\n")

    started_at = datetime.now()
    start_time = time.time()

    # Phase 1: Discovery
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("Discovering call graph...", total=None)
            root = refactorer.discover(entry_file, function)
            progress.update(task, completed=True)
    except RefactorError as e:
        console.print(f"[red]Error:[/] {e}")
        raise typer.Exit(1)

    base = settings.workspace_root.resolve()
    display_tree(build_graph_tree(root, "Discovered call graph", base, show_ignored))

    # Phase 2: Rewrite
    rewrite_report = refactorer.rewrite(root)
    display_tree(build_graph_tree(root, "Rewritten call graph", base, show_ignored))

    if not rewrite_report.root_has_context:
        console.print(
            f"[yellow]![/] {root.decl.name} has no "
            f"[bold]{settings.context.variable}[/] in scope; "
            "add it by hand before applying the patches."
        )

    # Phase 3: Emit
    patch_files = []
    if dry_run:
        console.print("[yellow]Dry run:[/] no patch files written")
    else:
        patch_files = refactorer.emit(root)
        display_tree(build_patch_tree(patch_files, base))

    result = refactorer.result(
        root, function, rewrite_report, patch_files, started_at, start_time
    )
    _display_summary(result)

    if report is None:
        ensure_ctxpatch_dir(Path.cwd())
        report = get_report_path(Path.cwd())
    write_report(result, report)
    console.print(f"\n[green]Report saved to:[/] {report}")

    if result.failed_patches:
        raise typer.Exit(1)


@app.command()
def init(
    path: Path = typer.Argument(
        Path("."),
        help="Directory to create .ctxpatch/config.json in",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Path for config JSON output (default: .ctxpatch/config.json)",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite an existing config file",
    ),
) -> None:
    """Write a config file holding every default, including the ignore rules."""
    path = path.resolve()
    if output is None:
        ensure_ctxpatch_dir(path)
        output = get_config_path(path)

    if output.exists() and not force:
        console.print(f"[red]Config file already exists:[/] {output}")
        console.print("Use [bold]--force[/] to overwrite it.")
        raise typer.Exit(1)

    write_config(default_config(), output)
    console.print(f"[green]Configuration saved to:[/] {output}")


@app.command()
def rules(
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file (default: .ctxpatch/config.json or ctxpatch.toml)",
    ),
    check: Optional[str] = typer.Option(
        None,
        "--check",
        help="Call text to test against the rules, e.g. 'len(items)'",
    ),
) -> None:
    """Show the ignore rules, or which rule stops a given call."""
    try:
        ignore_filter = IgnoreFilter.from_config(get_ignore_rules(_load_config_data(config)))
    except RefactorError as e:
        console.print(f"[red]Error:[/] {e}")
        raise typer.Exit(1)

    if check is not None:
        rule = ignore_filter.match(check)
        if rule is None:
            console.print(f"[green]proceed[/] {check} [dim](no rule matches)[/]")
        else:
            console.print(
                f"[yellow]ignored[/] {check} [dim]by[/] {rule.description} "
                f"[dim]({rule.pattern.pattern})[/]"
            )
        return

    table = Table(title="Ignore rules (first match wins)")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Description", style="cyan")
    table.add_column("Pattern")
    for i, rule in enumerate(ignore_filter.rules, start=1):
        table.add_row(str(i), rule.description, rule.pattern.pattern)
    console.print(table)


def _display_summary(result: RefactorResult) -> None:
    """Display run summary."""
    summary = result.summary

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="cyan")
    table.add_column("Value")

    table.add_row("Declarations", str(summary.declarations))
    table.add_row("  rewritten", str(summary.rewritten_declarations))
    table.add_row("Call sites", str(summary.call_sites))
    table.add_row("  rewritten", str(summary.rewritten_calls))
    table.add_row("  ignored", str(summary.ignored_calls))
    table.add_row("  unresolved", str(summary.unresolved_calls))
    table.add_row("Max depth", str(summary.max_depth))
    table.add_row("Unresolved imports", str(len(result.unresolved_imports)))
    table.add_row("Patch files", str(len(result.patch_files)))
    if result.failed_patches:
        table.add_row("[red]  failed[/]", str(len(result.failed_patches)))

    console.print(Panel(table, title="[bold]Refactor Summary[/]", border_style="blue"))


if __name__ == "__main__":
    app()
