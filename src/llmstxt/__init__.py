#!/usr/bin/env python3
"""
llmstxt - install llms.txt documentation as skills for AI coding agents.

Skills are written once to ``.agents/skills/<slug>/`` and symlinked into
every agent that keeps its own skills directory:
- Claude Code (.claude/skills/)
- Cursor (.cursor/skills/)
- Windsurf, Cline, Roo Code
- OpenCode, Amp, Codex and Gemini CLI read .agents/skills/ directly

Usage:
    uv tool install llmstxt-cli
    llmstxt init
    llmstxt install stripe-docs
    llmstxt update
"""

import platform
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import typer
from rich.panel import Panel
from rich.table import Table

from llmstxt import ui
from llmstxt.agents import AGENTS, detect_installed_agents
from llmstxt.config import __version__, get_cache_dir
from llmstxt.context import sync_claude_md
from llmstxt.errors import RegistryError
from llmstxt.installer import (
    InitOptions,
    install_entries,
    is_present,
    print_summary,
    resolve_target_agents,
    run_init,
    update_installed,
)
from llmstxt.lockfile import get_entry, read_lockfile
from llmstxt.registry import PRIMARY_CATEGORIES, Registry, load_registry, parse_categories
from llmstxt.storage import uninstall_skill
from llmstxt.telemetry import track

console = ui.console
app = typer.Typer(
    name="llmstxt",
    help="Install llms.txt documentation into your AI coding agents",
    add_completion=False,
)

STALE_DAYS = 30


@app.callback(invoke_without_command=True)
def main_callback(ctx: typer.Context):
    """
    Install llms.txt documentation into your AI coding agents.
    """
    if ctx.invoked_subcommand is None:
        ui.show_banner(__version__)
        console.print(ctx.get_help())


# =============================================================================
# Helpers
# =============================================================================

def get_project_dir() -> Path:
    return Path.cwd()


def get_registry() -> Registry:
    """Load the registry or end the run with exit code 1."""
    try:
        with ui.spinner("Loading registry..."):
            registry = load_registry()
    except RegistryError as e:
        ui.error(f"Failed to load registry: {e}")
        raise typer.Exit(1)
    ui.dim(f"Registry loaded ({len(registry)} entries, {registry.source})")
    return registry


def age_in_days(timestamp: str) -> int:
    try:
        fetched = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except ValueError:
        return 0
    if fetched.tzinfo is None:
        fetched = fetched.replace(tzinfo=timezone.utc)
    return max((datetime.now(timezone.utc) - fetched).days, 0)


def format_age(days: int) -> str:
    if days == 0:
        return "today"
    if days == 1:
        return "1 day ago"
    return f"{days} days ago"


def format_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


def find_installed(project_dir: Path, name: str):
    """Find a lockfile entry by slug or case-insensitive name."""
    lowered = name.lower()
    for entry in read_lockfile(project_dir).entries.values():
        if entry.slug == name or entry.name.lower() == lowered:
            return entry
    return None


# =============================================================================
# Commands
# =============================================================================

@app.command()
def init(
    category: Optional[str] = typer.Option(
        None, "--category",
        help="Only install from these categories (comma-separated)"
    ),
    all_categories: bool = typer.Option(
        False, "--all-categories",
        help="Include every category"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run",
        help="Show what would be installed without writing anything"
    ),
    full: bool = typer.Option(
        False, "--full",
        help="Prefer llms-full.txt when available"
    ),
    yes: bool = typer.Option(
        False, "--yes", "-y",
        help="Skip prompts and install every match"
    ),
):
    """
    Detect dependencies and install matching llms.txt documentation.

    Examples:
        llmstxt init                        # Interactive selection
        llmstxt init -y                     # Install all matches
        llmstxt init --category payments    # Only the payments category
        llmstxt init --dry-run              # Preview
    """
    ui.show_banner(__version__)

    registry = get_registry()
    options = InitOptions(
        category=category,
        all_categories=all_categories,
        dry_run=dry_run,
        full=full,
        yes=yes,
    )
    run_init(get_project_dir(), registry, options, interactive=ui.is_interactive(yes))


@app.command()
def install(
    names: List[str] = typer.Argument(..., help="Names or slugs to install"),
    full: bool = typer.Option(
        False, "--full",
        help="Prefer llms-full.txt when available"
    ),
    force: bool = typer.Option(
        False, "--force", "-f",
        help="Re-download even if already installed"
    ),
):
    """
    Install llms.txt documentation by name.

    Examples:
        llmstxt install stripe
        llmstxt install vercel-ai-sdk astro --full
    """
    project_dir = get_project_dir()
    registry = get_registry()

    detected = detect_installed_agents()
    if detected:
        ui.dim(f"Detected: {', '.join(a.display_name for a in detected)}")

    entries = []
    unresolved = 0
    for name in names:
        entry = registry.resolve(name)
        if entry is None:
            ui.error(f'"{name}" not found in registry')
            ui.dim(f'Try `llmstxt search "{name}"` to find matching entries')
            unresolved += 1
            continue
        if full and not entry.llms_full_txt_url:
            ui.warn(f"{entry.name} has no llms-full.txt, installing llms.txt instead")
        if entry not in entries:
            entries.append(entry)

    targets = resolve_target_agents(project_dir, AGENTS, interactive=False)
    summary = install_entries(project_dir, entries, targets, full=full, force=force)
    summary.failed += unresolved
    print_summary(summary)

    track(
        "install",
        skills=",".join(summary.installed_slugs),
        agents=",".join(a.name for a in detected),
    )

    if summary.failed:
        raise typer.Exit(1)


@app.command()
def search(
    query: str = typer.Argument(..., help="Search query"),
    category: Optional[str] = typer.Option(
        None, "--category",
        help="Filter by categories (comma-separated)"
    ),
    all_categories: bool = typer.Option(
        False, "--all-categories",
        help="Search every category"
    ),
    limit: int = typer.Option(
        10, "--limit", "-n",
        help="Maximum number of results"
    ),
):
    """Search the registry for llms.txt entries."""
    registry = get_registry()

    if all_categories:
        categories = []
    elif category:
        categories = parse_categories(category)
    else:
        categories = list(PRIMARY_CATEGORIES)

    results = registry.search(query, categories=categories, limit=limit)
    if not results:
        ui.info(f'No results for "{query}"')
        if categories:
            ui.dim("Try --all-categories to search everything")
        return

    console.print(f"\n[bold]Results for \"{query}\":[/bold]")
    for entry in results:
        console.print(f"  [bold cyan]{entry.name}[/bold cyan] [dim]({entry.slug})[/dim]")
        if entry.description:
            console.print(f"    {entry.description}")
        console.print(f"    [dim]{entry.category} · {entry.llms_txt_url}[/dim]")
        if entry.llms_full_txt_url:
            console.print(f"    [dim]full: {entry.llms_full_txt_url}[/dim]")

    ui.dim(f"\nShowing {len(results)} result(s). Install with: llmstxt install <name>")
    track("search", skills=query)


@app.command(name="list")
def list_skills():
    """List installed llms.txt documentation."""
    entries = list(read_lockfile(get_project_dir()).entries.values())

    if not entries:
        ui.info("No llms.txt files installed")
        ui.dim("Run `llmstxt init` to auto-detect or `llmstxt install <name>` to add entries")
        return

    table = Table(title=f"Installed llms.txt files ({len(entries)})", header_style="bold cyan")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Format", style="dim", no_wrap=True)
    table.add_column("Size", justify="right")
    table.add_column("Fetched")
    table.add_column("Source", style="dim")

    stale = 0
    for entry in entries:
        days = age_in_days(entry.fetched_at)
        fetched = format_age(days)
        if days > STALE_DAYS:
            stale += 1
            fetched += " [yellow](stale)[/yellow]"
        table.add_row(entry.name, entry.format, format_size(entry.size), fetched, entry.source_url)

    console.print(table)

    if stale:
        ui.warn(f"{stale} file(s) older than {STALE_DAYS} days. Run `llmstxt update` to refresh.")


app.command(name="ls", hidden=True)(list_skills)


@app.command()
def info(name: str = typer.Argument(..., help="Name or slug to look up")):
    """Show details about a registry entry."""
    registry = get_registry()

    entry = registry.resolve(name)
    if entry is None:
        ui.error(f'"{name}" not found in registry')
        ui.dim(f'Try `llmstxt search "{name}"` to find matching entries')
        raise typer.Exit(1)

    project_dir = get_project_dir()

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="cyan", justify="right")
    table.add_column("Value", style="white")
    table.add_row("Slug", entry.slug)
    table.add_row("Category", entry.category)
    if entry.domain:
        table.add_row("Domain", entry.domain)
    table.add_row("llms.txt", entry.llms_txt_url)
    if entry.llms_full_txt_url:
        table.add_row("Full", entry.llms_full_txt_url)

    lock_entry = get_entry(project_dir, entry.slug)
    if lock_entry and is_present(project_dir, entry.slug):
        table.add_row("Status", "[green]Installed[/green]")
        table.add_row("Format", lock_entry.format)
        table.add_row("Size", format_size(lock_entry.size))
        table.add_row("Fetched", format_age(age_in_days(lock_entry.fetched_at)))
    else:
        table.add_row("Status", "[dim]Not installed[/dim]")

    console.print(Panel(
        table,
        title=f"[bold cyan]{entry.name}[/bold cyan]",
        subtitle=entry.description or None,
        border_style="cyan",
        padding=(1, 2)
    ))

    if not lock_entry:
        console.print(f"  Install with: [cyan]llmstxt install {entry.slug}[/cyan]")


@app.command()
def update(
    name: Optional[str] = typer.Argument(
        None,
        help="Entry to update (all installed entries if omitted)"
    ),
    force: bool = typer.Option(
        False, "--force", "-f",
        help="Re-download even if unchanged"
    ),
):
    """Update installed llms.txt documentation."""
    project_dir = get_project_dir()
    installed = list(read_lockfile(project_dir).entries.values())

    if not installed:
        ui.info("No llms.txt files installed. Run `llmstxt init` first.")
        return

    if name:
        found = find_installed(project_dir, name)
        if found is None:
            ui.error(f'"{name}" not found in installed files')
            raise typer.Exit(1)
        installed = [found]

    registry = get_registry()
    targets = resolve_target_agents(project_dir, AGENTS, interactive=False)
    summary = update_installed(project_dir, registry, installed, targets, force=force)

    console.print("\n[bold]Summary[/bold]")
    if summary.updated:
        console.print(f"  [green]✓[/green] Updated: {summary.updated}")
    if summary.unchanged:
        console.print(f"  [dim]○[/dim] Unchanged: {summary.unchanged}")
    if summary.failed:
        console.print(f"  [red]✗[/red] Failed: {summary.failed}")

    track("update", skills=",".join(summary.updated_slugs))

    if summary.failed:
        raise typer.Exit(1)


@app.command()
def remove(
    name: str = typer.Argument(..., help="Name or slug to remove"),
    yes: bool = typer.Option(
        False, "--yes", "-y",
        help="Skip the confirmation prompt"
    ),
):
    """Remove installed documentation from every agent directory."""
    project_dir = get_project_dir()

    entry = find_installed(project_dir, name)
    if entry is None:
        ui.error(f'"{name}" is not installed')
        ui.dim("Run `llmstxt list` to see installed files")
        raise typer.Exit(1)

    if ui.is_interactive(yes) and not ui.confirm(f"Remove {entry.name} from all agent directories?"):
        ui.warn("Removal cancelled.")
        return

    uninstall_skill(project_dir, entry.slug, AGENTS)
    sync_claude_md(project_dir)
    ui.success(f"Removed {entry.name} from all agent directories")

    track("remove", skills=entry.slug)


app.command(name="rm", hidden=True)(remove)


@app.command()
def version():
    """Display version information."""
    ui.show_banner(__version__)

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="cyan", justify="right")
    table.add_column("Value", style="white")

    table.add_row("Version", __version__)
    table.add_row("Python", platform.python_version())
    table.add_row("Platform", platform.system())
    table.add_row("Cache", str(get_cache_dir()))

    console.print(Panel(
        table,
        title="[bold cyan]llmstxt[/bold cyan]",
        border_style="cyan",
        padding=(1, 2)
    ))


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
