"""
Supported AI agents and the symlink fan-out between them.

Skill content lives once per project in ``.agents/skills/<slug>/``.
Universal agents read that directory directly. Every other agent gets a
relative symlink ``<skills_dir>/<slug> -> ../../.agents/skills/<slug>``.
"""

import os
import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from llmstxt.config import CANONICAL_DIR, get_config_home
from llmstxt.paths import PathLike, assert_path_containment, sanitize_slug


def _never_installed() -> bool:
    return False


@dataclass(frozen=True)
class AgentConfig:
    """One supported AI coding tool."""

    name: str
    display_name: str
    # Relative path from project root for project-scope skills
    skills_dir: str
    # Reads the canonical .agents/skills/ location directly
    is_universal: bool = False
    detect_installed: Callable[[], bool] = field(
        default=_never_installed, compare=False, repr=False
    )


def _home_exists(*parts: str) -> Callable[[], bool]:
    return lambda: Path.home().joinpath(*parts).exists()


def _config_exists(*parts: str) -> Callable[[], bool]:
    return lambda: get_config_home().joinpath(*parts).exists()


def _any_of(*checks: Callable[[], bool]) -> Callable[[], bool]:
    return lambda: any(check() for check in checks)


AGENTS = (
    AgentConfig(
        name="claude-code",
        display_name="Claude Code",
        skills_dir=".claude/skills",
        detect_installed=_home_exists(".claude"),
    ),
    AgentConfig(
        name="cursor",
        display_name="Cursor",
        skills_dir=".cursor/skills",
        detect_installed=_home_exists(".cursor"),
    ),
    AgentConfig(
        name="windsurf",
        display_name="Windsurf",
        skills_dir=".windsurf/skills",
        detect_installed=_home_exists(".codeium", "windsurf"),
    ),
    AgentConfig(
        name="cline",
        display_name="Cline",
        skills_dir=".cline/skills",
        detect_installed=_home_exists(".cline"),
    ),
    AgentConfig(
        name="roo",
        display_name="Roo Code",
        skills_dir=".roo/skills",
        detect_installed=_home_exists(".roo"),
    ),
    AgentConfig(
        name="opencode",
        display_name="OpenCode",
        skills_dir=CANONICAL_DIR,
        is_universal=True,
        detect_installed=_any_of(_config_exists("opencode"), _home_exists(".opencode")),
    ),
    AgentConfig(
        name="amp",
        display_name="Amp",
        skills_dir=CANONICAL_DIR,
        is_universal=True,
        detect_installed=_config_exists("amp"),
    ),
    AgentConfig(
        name="codex",
        display_name="Codex",
        skills_dir=CANONICAL_DIR,
        is_universal=True,
        detect_installed=_home_exists(".codex"),
    ),
    AgentConfig(
        name="gemini-cli",
        display_name="Gemini CLI",
        skills_dir=CANONICAL_DIR,
        is_universal=True,
        detect_installed=_home_exists(".gemini"),
    ),
)


def get_agent(name: str, all_agents: Sequence[AgentConfig] = AGENTS) -> Optional[AgentConfig]:
    for agent in all_agents:
        if agent.name == name:
            return agent
    return None


def detect_installed_agents(all_agents: Iterable[AgentConfig] = AGENTS) -> List[AgentConfig]:
    """Return the agents whose tool is present on this machine.

    A check that raises counts as "not installed" so one broken check never
    hides the others.
    """
    installed = []
    for agent in all_agents:
        try:
            found = agent.detect_installed()
        except Exception:
            found = False
        if found:
            installed.append(agent)
    return installed


class LinkStatus(str, Enum):
    """Outcome of linking one agent to a canonical skill directory."""

    CREATED = "created"
    ALREADY_LINKED = "already_linked"
    SKIPPED = "skipped"          # universal agent, or nothing to link to yet
    UNSUPPORTED = "unsupported"  # platform refused the symlink

    @property
    def linked(self) -> bool:
        return self in (LinkStatus.CREATED, LinkStatus.ALREADY_LINKED)


def canonical_skill_path(project_dir: PathLike, slug: str) -> Path:
    """Get ``<project>/.agents/skills/<slug>`` after validating the slug."""
    slug = sanitize_slug(slug)
    canonical_root = Path(project_dir) / CANONICAL_DIR
    path = canonical_root / slug
    assert_path_containment(path, canonical_root)
    return path


def agent_skill_path(project_dir: PathLike, slug: str, agent: AgentConfig) -> Path:
    """Get ``<project>/<agent.skills_dir>/<slug>`` after validating slug and skills_dir."""
    slug = sanitize_slug(slug)
    agent_root = Path(project_dir) / agent.skills_dir
    path = agent_root / slug
    assert_path_containment(path, agent_root)
    assert_path_containment(path, project_dir)
    return path


def _remove_path(path: Path) -> None:
    """Remove a symlink, file or directory without following links."""
    if path.is_symlink():
        path.unlink()
    elif path.is_dir():
        shutil.rmtree(path)
    else:
        path.unlink()


def link_agent_skill(project_dir: PathLike, slug: str, agent: AgentConfig) -> LinkStatus:
    """Link an agent's skill directory to the canonical copy.

    E.g. ``.claude/skills/<slug>`` -> ``../../.agents/skills/<slug>``.

    Whatever already occupies the agent path is replaced unless it is
    already the expected link. Existence checks are link-aware so a
    dangling symlink is cleaned up rather than treated as empty.
    """
    if agent.is_universal:
        return LinkStatus.SKIPPED

    canonical = canonical_skill_path(project_dir, slug)
    target = agent_skill_path(project_dir, slug, agent)

    if not canonical.is_dir():
        return LinkStatus.SKIPPED

    target.parent.mkdir(parents=True, exist_ok=True)
    expected = os.path.relpath(canonical, target.parent)

    if os.path.lexists(target):
        if target.is_symlink():
            if os.readlink(target) == expected:
                return LinkStatus.ALREADY_LINKED
        elif os.path.realpath(target) == os.path.realpath(canonical):
            # skills_dir itself is a link into .agents/skills
            return LinkStatus.ALREADY_LINKED
        _remove_path(target)

    try:
        os.symlink(expected, target, target_is_directory=True)
    except OSError:
        # e.g. Windows without Developer Mode
        return LinkStatus.UNSUPPORTED
    return LinkStatus.CREATED


def create_agent_symlink(project_dir: PathLike, slug: str, agent: AgentConfig) -> bool:
    """Link an agent to the canonical skill; True if the link is in place."""
    return link_agent_skill(project_dir, slug, agent).linked


def remove_agent_skill(project_dir: PathLike, slug: str, agent: AgentConfig) -> None:
    """Remove an agent's symlink or skill directory for ``slug``, if any."""
    path = agent_skill_path(project_dir, slug, agent)
    if not os.path.lexists(path):
        return
    _remove_path(path)
