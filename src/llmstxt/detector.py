"""Match a project's npm dependencies against the registry."""

import json
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from llmstxt.paths import PathLike
from llmstxt.registry import Registry, RegistryEntry

# {"npm": {"package-name": "registry-slug"}}
PackageMappings = Dict[str, Dict[str, str]]


@dataclass
class Match:
    slug: str
    registry_entry: RegistryEntry
    matched_packages: List[str] = field(default_factory=list)


def load_package_mappings() -> PackageMappings:
    raw = resources.files("llmstxt").joinpath("data", "package-mappings.json").read_text(encoding="utf-8")
    return json.loads(raw)


def detect_from_package_json(
    project_dir: PathLike,
    registry: Registry,
    mappings: Optional[PackageMappings] = None,
) -> List[Match]:
    """Return registry entries for the dependencies declared in package.json.

    A missing or unparsable package.json yields no matches. Several
    packages can map to one slug; they are grouped under a single match.
    """
    pkg_path = Path(project_dir) / "package.json"
    if not pkg_path.is_file():
        return []

    try:
        pkg = json.loads(pkg_path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError, UnicodeDecodeError):
        return []
    if not isinstance(pkg, dict):
        return []

    deps = {}
    for key in ("dependencies", "devDependencies"):
        section = pkg.get(key)
        if isinstance(section, dict):
            deps.update(section)

    if mappings is None:
        mappings = load_package_mappings()
    npm = mappings.get("npm", {})

    by_slug: Dict[str, List[str]] = {}
    for dep_name in deps:
        slug = npm.get(dep_name)
        if slug:
            by_slug.setdefault(slug, []).append(dep_name)

    matches = []
    for slug, packages in by_slug.items():
        entry = registry.get(slug)
        if entry:
            matches.append(Match(slug=slug, registry_entry=entry, matched_packages=packages))
    return matches


def filter_matches_by_categories(matches: Sequence[Match], categories: Sequence[str]) -> List[Match]:
    if not categories:
        return list(matches)
    return [m for m in matches if m.registry_entry.category in categories]
