"""
Installing skills into a project.

``run_init`` is the ``init`` flow: detect dependencies, filter them by
category, pick agents and skills, then install sequentially and report.
``install_entries`` is the shared install loop, also used by ``install``.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Set, Tuple

from llmstxt import ui
from llmstxt.agent_selection import (
    ensure_universal_agents,
    get_initial_agents,
    load_saved_agent_prefs,
    resolve_agents,
    save_agent_prefs,
)
from llmstxt.agents import AGENTS, AgentConfig, detect_installed_agents
from llmstxt.context import sync_claude_md
from llmstxt.detector import Match, detect_from_package_json, filter_matches_by_categories
from llmstxt.errors import LlmstxtError
from llmstxt.fetcher import fetch_llms_txt
from llmstxt.lockfile import LockfileEntry, add_entry, is_installed, utc_now
from llmstxt.paths import PathLike, sanitize_slug
from llmstxt.registry import PRIMARY_CATEGORIES, Registry, RegistryEntry, parse_categories
from llmstxt.storage import add_to_gitignore, has_canonical_copy, install_to_agents
from llmstxt.telemetry import track

SEARCH_RESULTS_LIMIT = 20


@dataclass
class InitOptions:
    category: Optional[str] = None
    all_categories: bool = False
    dry_run: bool = False
    full: bool = False
    yes: bool = False


@dataclass
class InstallSummary:
    installed: int = 0
    skipped: int = 0
    failed: int = 0
    installed_slugs: List[str] = field(default_factory=list)


def resolve_categories(options: InitOptions) -> List[str]:
    """Categories to keep. An empty list means every category."""
    if options.all_categories:
        return []
    if options.category:
        return parse_categories(options.category)
    return list(PRIMARY_CATEGORIES)


def choose_format(entry: RegistryEntry, full: bool) -> Tuple[str, str]:
    """Return ``(format, url)``; llms-full.txt only when asked for and offered."""
    if full and entry.llms_full_txt_url:
        return "llms-full.txt", entry.llms_full_txt_url
    return "llms.txt", entry.llms_txt_url


def is_present(project_dir: PathLike, slug: str) -> bool:
    """Installed according to the lockfile and still on disk."""
    try:
        return is_installed(project_dir, slug) and has_canonical_copy(project_dir, slug)
    except LlmstxtError:
        # unsafe slug; the install loop reports it
        return False


def resolve_target_agents(
    project_dir: PathLike,
    all_agents: Sequence[AgentConfig] = AGENTS,
    interactive: bool = False,
) -> Optional[List[AgentConfig]]:
    """
    Decide which agents receive the skills.

    The pre-selection comes from saved preferences, then project markers,
    then the defaults. Interactive runs confirm it with a multi-select and
    remember the answer. Universal agents are always included.

    Returns None if the user cancelled.
    """
    saved = load_saved_agent_prefs(project_dir)
    selected = get_initial_agents(all_agents, saved, project_dir)

    if interactive:
        options = [
            (a.name, a.display_name, "always included" if a.is_universal else a.skills_dir)
            for a in all_agents
        ]
        picked = ui.multiselect(options, "Which agents should receive the skills?", preselected=selected)
        if picked is None:
            return None
        selected = picked
        save_agent_prefs(project_dir, selected)

    return resolve_agents(ensure_universal_agents(selected, all_agents), all_agents)


def install_entries(
    project_dir: PathLike,
    entries: Sequence[RegistryEntry],
    target_agents: Sequence[AgentConfig],
    full: bool = False,
    force: bool = False,
) -> InstallSummary:
    """Fetch and install each entry in turn. One failure never stops the rest."""
    summary = InstallSummary()

    for entry in entries:
        fmt, url = choose_format(entry, full)

        if not force and is_present(project_dir, entry.slug):
            ui.dim(f"○ {entry.name} already installed")
            summary.skipped += 1
            continue

        try:
            sanitize_slug(entry.slug)
            with ui.spinner(f"Fetching {entry.name}..."):
                result = fetch_llms_txt(url)
            installed = install_to_agents(project_dir, entry, result.content, fmt, target_agents)
            add_entry(
                project_dir,
                LockfileEntry(
                    slug=entry.slug,
                    format=fmt,
                    source_url=url,
                    etag=result.etag,
                    last_modified=result.last_modified,
                    fetched_at=utc_now(),
                    checksum=installed.checksum,
                    size=installed.size,
                    name=entry.name,
                ),
            )
        except (LlmstxtError, OSError) as e:
            ui.error(f"{entry.name}: {e}")
            summary.failed += 1
            continue

        ui.success(f"{entry.name} [dim]→ {', '.join(installed.agents) or 'canonical only'}[/dim]")
        for agent_name, status in installed.links.items():
            if not status.linked:
                ui.warn(f"Could not link {entry.slug} for {agent_name} ({status.value})")
        summary.installed += 1
        summary.installed_slugs.append(entry.slug)

    if summary.installed:
        add_to_gitignore(project_dir)
        sync_claude_md(project_dir)

    return summary


@dataclass
class UpdateSummary:
    updated: int = 0
    unchanged: int = 0
    failed: int = 0
    updated_slugs: List[str] = field(default_factory=list)


def update_installed(
    project_dir: PathLike,
    registry: Registry,
    entries: Sequence[LockfileEntry],
    target_agents: Sequence[AgentConfig],
    force: bool = False,
) -> UpdateSummary:
    """Re-fetch installed skills, using the stored ETag unless ``force``."""
    summary = UpdateSummary()

    for locked in entries:
        try:
            with ui.spinner(f"Checking {locked.name}..."):
                result = fetch_llms_txt(locked.source_url, None if force else locked.etag)

            if result.not_modified:
                ui.dim(f"○ {locked.name} unchanged")
                summary.unchanged += 1
                continue

            registry_entry = registry.get(locked.slug)
            if registry_entry is None:
                ui.warn(f"{locked.name} is no longer in the registry, skipping")
                summary.unchanged += 1
                continue

            installed = install_to_agents(project_dir, registry_entry, result.content, locked.format, target_agents)
            add_entry(
                project_dir,
                LockfileEntry(
                    slug=locked.slug,
                    format=locked.format,
                    source_url=locked.source_url,
                    etag=result.etag,
                    last_modified=result.last_modified,
                    fetched_at=utc_now(),
                    checksum=installed.checksum,
                    size=installed.size,
                    name=locked.name,
                ),
            )
        except (LlmstxtError, OSError) as e:
            ui.error(f"{locked.name}: {e}")
            summary.failed += 1
            continue

        if installed.checksum == locked.checksum and not force:
            ui.dim(f"○ {locked.name} unchanged (same content)")
            summary.unchanged += 1
        else:
            ui.success(f"{locked.name} updated")
            summary.updated += 1
            summary.updated_slugs.append(locked.slug)

    if summary.updated:
        sync_claude_md(project_dir)

    return summary


def print_summary(summary: InstallSummary):
    lines = []
    if summary.installed:
        lines.append(f"[green]✓[/green] Installed: {summary.installed}")
    if summary.skipped:
        lines.append(f"[dim]○[/dim] Skipped: {summary.skipped}")
    if summary.failed:
        lines.append(f"[red]✗[/red] Failed: {summary.failed}")
    if lines:
        ui.console.print("\n[bold]Summary[/bold]")
        for line in lines:
            ui.console.print(f"  {line}")


def entry_hint(project_dir: PathLike, entry: RegistryEntry, dep_slugs: Set[str]) -> str:
    hints = []
    if is_present(project_dir, entry.slug):
        hints.append("installed")
    if entry.slug in dep_slugs:
        hints.append("in your deps")
    hints.append(entry.category)
    return " · ".join(hints)


def pick_from_list(
    project_dir: PathLike,
    entries: Sequence[RegistryEntry],
    dep_slugs: Set[str],
    prompt_text: Optional[str] = None,
    preselected: Optional[Sequence[str]] = None,
) -> Optional[List[RegistryEntry]]:
    """Multi-select over ``entries``. None if cancelled."""
    options = [(e.slug, e.name, entry_hint(project_dir, e, dep_slugs)) for e in entries]
    picked = ui.multiselect(
        options,
        prompt_text or f"Select entries ({len(entries)} available)",
        preselected=preselected,
    )
    if picked is None:
        return None
    return [e for e in entries if e.slug in picked]


def browse_by_category(project_dir: PathLike, registry: Registry, dep_slugs: Set[str]) -> List[RegistryEntry]:
    counts = Counter(entry.category for entry in registry.all())
    options = [(category, category, f"{count} entries") for category, count in counts.most_common()]
    category = ui.select(options, "Select a category")
    if category is None:
        return []
    return pick_from_list(project_dir, registry.all([category]), dep_slugs) or []


def search_by_name(project_dir: PathLike, registry: Registry, dep_slugs: Set[str]) -> List[RegistryEntry]:
    query = ui.prompt("Search for (e.g. react, stripe, prisma)")
    if not query:
        return []
    results = registry.search(query, limit=SEARCH_RESULTS_LIMIT)
    if not results:
        ui.warn(f'No results for "{query}"')
        return []
    return pick_from_list(project_dir, results, dep_slugs) or []


def select_entries(
    project_dir: PathLike,
    registry: Registry,
    matches: Sequence[Match],
) -> Optional[List[RegistryEntry]]:
    """
    Let the user choose what to install.

    Starts from the dependency matches, with the ones not yet installed
    pre-selected, then offers browsing and searching the registry for more.

    Returns None if the user cancelled, an empty list if they chose nothing.
    """
    dep_entries = [m.registry_entry for m in matches]
    dep_slugs = {m.slug for m in matches}

    selected = pick_from_list(
        project_dir,
        dep_entries,
        dep_slugs,
        f"Select documentation to install ({len(dep_entries)} found)",
        preselected=[e.slug for e in dep_entries if not is_present(project_dir, e.slug)],
    )
    if selected is None:
        return None

    while True:
        actions = []
        if selected:
            actions.append(("install", f"Install {len(selected)} selected", ", ".join(e.name for e in selected)))
        actions += [
            ("browse", "Browse by category", ""),
            ("search", "Search by name", ""),
            ("done", "Cancel" if selected else "Exit", ""),
        ]
        message = f"{len(selected)} selected. Add more or install?" if selected else "Find documentation another way?"
        action = ui.select(actions, message)

        if action is None or action == "done":
            return None if selected else []
        if action == "install":
            return selected

        if action == "browse":
            more = browse_by_category(project_dir, registry, dep_slugs)
        else:
            more = search_by_name(project_dir, registry, dep_slugs)
        for entry in more:
            if entry not in selected:
                selected.append(entry)


def pick_format(entries: Sequence[RegistryEntry], full: bool = False) -> Optional[str]:
    """Ask llms.txt or llms-full.txt, only when some entry offers the full text."""
    if full:
        return "llms-full.txt"
    with_full = sum(1 for e in entries if e.llms_full_txt_url)
    if not with_full:
        return "llms.txt"
    return ui.select(
        [
            ("llms.txt", "llms.txt", "concise, smaller and faster to load"),
            ("llms-full.txt", "llms-full.txt", f"comprehensive, {with_full}/{len(entries)} selected have it"),
        ],
        "Which documentation format?",
    )


def run_init(
    project_dir: PathLike,
    registry: Registry,
    options: InitOptions,
    interactive: bool = False,
    all_agents: Sequence[AgentConfig] = AGENTS,
) -> InstallSummary:
    """Install documentation for the project's dependencies."""
    summary = InstallSummary()

    matches = detect_from_package_json(project_dir, registry)
    if not matches:
        ui.info("No dependencies with llms.txt documentation found.")
        return summary

    categories = resolve_categories(options)
    matches = filter_matches_by_categories(matches, categories)
    if not matches:
        ui.info(f"No matches in categories: {', '.join(categories)}")
        ui.dim("Use --all-categories or --category <list> to widen the search.")
        return summary

    names = ", ".join(f"[cyan]{m.registry_entry.name}[/cyan]" for m in matches)
    ui.info(f"Found {len(matches)} matching your dependencies: {names}")

    if options.dry_run:
        targets = resolve_target_agents(project_dir, all_agents, interactive=False)
        for match in matches:
            note = " [dim](already installed)[/dim]" if is_present(project_dir, match.slug) else ""
            ui.console.print(f"  [cyan]{match.registry_entry.name}[/cyan]{note}")
        ui.dim(f"Agents: {', '.join(a.name for a in targets)}")
        ui.info("Dry run: no files were written")
        return summary

    targets = resolve_target_agents(project_dir, all_agents, interactive)
    if targets is None:
        ui.warn("Installation cancelled.")
        return summary

    entries = [m.registry_entry for m in matches]
    full = options.full
    if interactive:
        picked = select_entries(project_dir, registry, matches)
        if picked is None:
            ui.warn("Installation cancelled.")
            return summary
        if not picked:
            ui.warn("No skills selected.")
            return summary
        fmt = pick_format(picked, options.full)
        if fmt is None:
            ui.warn("Installation cancelled.")
            return summary
        full = fmt == "llms-full.txt"
        entries = picked

    summary = install_entries(project_dir, entries, targets, full=full)
    # installed matches left unticked still count as skipped
    summary.skipped += sum(
        1 for m in matches if m.registry_entry not in entries and is_present(project_dir, m.slug)
    )
    print_summary(summary)
    ui.console.print(
        f"\n[green]Done![/green] Your AI agents now have access to "
        f"{summary.installed} documentation skill(s)."
    )

    track(
        "init",
        skills=",".join(summary.installed_slugs),
        agents=",".join(a.name for a in detect_installed_agents(all_agents)),
    )
    return summary
