"""
CLI commands for content-sync.

Provides the ``content-sync`` command-line interface for one-shot and
watching synchronization runs, store inspection and project setup.
"""

import asyncio
import importlib
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Any, Dict, Mapping, Optional, Tuple

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from content_sync.config import ConfigurationLoader
from content_sync.loader import ContentLoader
from content_sync.models.config import LoaderSettings
from content_sync.models.results import SyncOutcome, SyncReport
from content_sync.storage import JsonFileContentStore
from content_sync.sync.errors import ConfigurationError
from content_sync.sync.watcher import WatchdogContentWatcher

console = Console()

EXIT_CONFIGURATION_ERROR = 1
EXIT_FILE_FAILURES = 3

# Optional collaborator hooks looked up next to the sync target
COLLABORATOR_NAMES = ("generate_id", "digester", "validator", "renderer")

OUTCOME_STYLES = {
    SyncOutcome.CREATED: "green",
    SyncOutcome.UPDATED: "green",
    SyncOutcome.RENAMED: "yellow",
    SyncOutcome.UNCHANGED: "dim",
    SyncOutcome.REMOVED: "yellow",
    SyncOutcome.SKIPPED: "dim",
    SyncOutcome.FAILED: "red",
}


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True
    )


def _load_settings(root: Optional[str], **overrides: Any) -> LoaderSettings:
    settings = ConfigurationLoader().load(Path(root) if root else Path.cwd())
    updates = {k: v for k, v in overrides.items() if v is not None}
    if updates:
        settings = settings.model_copy(update=updates)
    return settings


def _resolve_target(target: str, project_root: Path) -> Tuple[Mapping[Any, Any], Dict[str, Any]]:
    """
    Import ``package.module:attribute`` and return the module source plus any
    collaborator hooks defined in the same Python module.
    """
    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        raise click.BadParameter("Target must look like 'package.module:attribute'", param_hint="TARGET")

    root = str(project_root)
    if root not in sys.path:
        sys.path.insert(0, root)
    importlib.invalidate_caches()

    try:
        module: ModuleType = importlib.import_module(module_name)
    except ImportError as e:
        raise click.BadParameter(f"Cannot import {module_name}: {e}", param_hint="TARGET") from e

    if not hasattr(module, attr):
        raise click.BadParameter(f"{module_name} has no attribute {attr!r}", param_hint="TARGET")

    source = getattr(module, attr)
    if callable(source) and not isinstance(source, Mapping):
        source = source()
    if not isinstance(source, Mapping):
        raise click.BadParameter(f"{target} is not a module mapping", param_hint="TARGET")

    hooks = {
        name: getattr(module, name)
        for name in COLLABORATOR_NAMES
        if getattr(module, name, None) is not None
    }
    return source, hooks


def _print_report(report: SyncReport) -> None:
    table = Table(title="Content Sync")
    table.add_column("Entry", style="cyan", no_wrap=True)
    table.add_column("Id", style="white")
    table.add_column("Outcome", style="white")
    table.add_column("Details", style="dim")

    for result in sorted(report.results, key=lambda r: r.entry or str(r.path)):
        style = OUTCOME_STYLES.get(result.outcome, "white")
        details = ""
        if result.error is not None:
            details = result.error.message
        elif result.previous_id and result.previous_id != result.entry_id:
            details = f"was {result.previous_id}"
        table.add_row(
            result.entry or str(result.path),
            result.entry_id or "-",
            f"[{style}]{result.outcome.value}[/{style}]",
            details
        )

    console.print(table)

    for warning in report.warnings:
        console.print(f"[yellow]⚠️  {warning}[/yellow]")

    failed = len(report.failed)
    summary = f"{len(report.results)} files, {failed} failed"
    if report.base_dir:
        summary += f" (base: {report.base_dir})"
    console.print(f"[{'red' if failed else 'green'}]{summary}[/{'red' if failed else 'green'}]")


async def _run_sync(
    loader: ContentLoader,
    store: JsonFileContentStore,
    hooks: Dict[str, Any],
    watch: bool
) -> SyncReport:
    report = await loader.load(
        store,
        digester=hooks.get("digester"),
        validator=hooks.get("validator"),
        renderer=hooks.get("renderer")
    )
    _print_report(report)

    if watch and loader.engine is not None:
        async with loader:
            await loader.watch(WatchdogContentWatcher())
            console.print(f"[blue]👀 Watching {loader.base_dir} (Ctrl+C to stop)[/blue]")
            await asyncio.Event().wait()

    return report


@click.group()
@click.version_option(version="1.0.0", prog_name="content-sync")
def main():
    """
    Content Sync CLI.

    Synchronize structured content modules into a persistent content store.
    """
    pass


@main.command()
@click.argument('target')
@click.option('--root', type=click.Path(file_okay=False), help='Project root (default: current directory)')
@click.option('--base', help='Base directory for entry ids (default: inferred)')
@click.option('--store', 'store_path', type=click.Path(dir_okay=False), help='Store file (default: .content-sync/store.json)')
@click.option('--watch/--no-watch', default=None, help='Keep watching for changes after syncing')
@click.option('--concurrency', type=click.IntRange(min=0), help='Max files processed at once (0 = unbounded)')
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False))
def sync(
    target: str,
    root: Optional[str],
    base: Optional[str],
    store_path: Optional[str],
    watch: Optional[bool],
    concurrency: Optional[int],
    log_level: Optional[str]
):
    """Synchronize the module source TARGET (package.module:attribute)."""
    settings = _load_settings(
        root,
        base=base,
        store_path=Path(store_path) if store_path else None,
        watch=watch,
        max_concurrency=concurrency,
        log_level=log_level.upper() if log_level else None
    )
    _setup_logging(settings.log_level)

    modules, hooks = _resolve_target(target, settings.project_root)
    loader = ContentLoader(modules, generate_id=hooks.get("generate_id"), settings=settings)
    store = JsonFileContentStore(settings.resolved_store_path)

    try:
        report = asyncio.run(_run_sync(loader, store, hooks, settings.watch))
    except ConfigurationError as e:
        console.print(f"[red]❌ {e.message}[/red]")
        if e.hint:
            console.print(f"[yellow]💡 {e.hint}[/yellow]")
        sys.exit(EXIT_CONFIGURATION_ERROR)
    except KeyboardInterrupt:
        console.print("\n[blue]Stopped watching[/blue]")
        return

    if report.failed:
        sys.exit(EXIT_FILE_FAILURES)


@main.command()
@click.option('--root', type=click.Path(file_okay=False), help='Project root (default: current directory)')
@click.option('--store', 'store_path', type=click.Path(dir_okay=False), help='Store file (default: .content-sync/store.json)')
def status(root: Optional[str], store_path: Optional[str]):
    """List the records held in the content store."""
    settings = _load_settings(root, store_path=Path(store_path) if store_path else None)
    path = settings.resolved_store_path

    if not path.exists():
        console.print(f"[yellow]⚠️  No store at {path}. Run 'content-sync sync' first.[/yellow]")
        return

    records = asyncio.run(JsonFileContentStore(path).values())

    table = Table(title=f"Content Store ({path})")
    table.add_column("Id", style="cyan", no_wrap=True)
    table.add_column("File", style="white")
    table.add_column("Digest", style="dim")

    for record in sorted(records, key=lambda r: r.id):
        table.add_row(record.id, record.file_path or "-", (record.digest or "-")[:12])

    console.print(table)
    console.print(f"[green]{len(records)} records[/green]")


@main.command()
@click.option('--root', type=click.Path(file_okay=False), help='Project root (default: current directory)')
@click.option('--source-dir', help='Directory ./-relative module keys resolve from')
@click.option('--base', help='Explicit base directory for entry ids')
@click.option('--force', '-f', is_flag=True, help='Overwrite existing configuration')
def init(root: Optional[str], source_dir: Optional[str], base: Optional[str], force: bool):
    """Write a .content-sync/config.json for the project."""
    loader = ConfigurationLoader()
    settings = loader.load(Path(root) if root else Path.cwd())

    if settings.config_file.exists() and not force:
        console.print("[yellow]⚠️  Project already initialized. Use --force to overwrite.[/yellow]")
        return

    updates = {k: v for k, v in {"source_dir": source_dir, "base": base}.items() if v is not None}
    if updates:
        settings = settings.model_copy(update=updates)

    config_file = loader.save(settings)
    console.print(f"[green]✅ Created {config_file}[/green]")


if __name__ == "__main__":
    main()
