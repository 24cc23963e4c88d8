"""
Writing skills to disk.

A skill is written once to ``.agents/skills/<slug>/`` and then linked into
every selected agent's skills directory.
"""

import hashlib
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import yaml

from llmstxt import lockfile
from llmstxt.agents import (
    AGENTS,
    AgentConfig,
    LinkStatus,
    canonical_skill_path,
    link_agent_skill,
    remove_agent_skill,
)
from llmstxt.config import CANONICAL_DIR, LLMS_DIR
from llmstxt.paths import PathLike
from llmstxt.registry import RegistryEntry

SKILL_FILE = "SKILL.md"
REFERENCE_FILE = "reference.md"
LARGE_FILE_THRESHOLD = 500  # lines

GITIGNORE_ENTRIES = [f"{LLMS_DIR}/", f"{CANONICAL_DIR}/"]


@dataclass
class InstallResult:
    checksum: str
    size: int
    # names of agents that can see the skill
    agents: List[str] = field(default_factory=list)
    links: Dict[str, LinkStatus] = field(default_factory=dict)


def source_url_for(entry: RegistryEntry, fmt: str) -> str:
    if fmt == "llms-full.txt" and entry.llms_full_txt_url:
        return entry.llms_full_txt_url
    return entry.llms_txt_url


def generate_skill_md(entry: RegistryEntry, content: str, fmt: str) -> Tuple[str, Optional[str]]:
    """
    Build SKILL.md for a registry entry.

    Returns ``(skill_md, reference_md)``. Large documents are kept out of
    SKILL.md and written to reference.md, which SKILL.md points to.
    """
    is_large = len(content.split("\n")) > LARGE_FILE_THRESHOLD
    format_label = "full " if fmt == "llms-full.txt" else ""

    frontmatter = yaml.safe_dump(
        {
            "name": f"{entry.slug}-docs",
            "description": (
                f"Official {entry.name} {format_label}documentation. "
                f"Reference when working with {entry.name}."
            ),
            "user-invocable": False,
        },
        sort_keys=False,
        allow_unicode=True,
        width=1000,
    )

    header = [
        "---",
        frontmatter.rstrip("\n"),
        "---",
        "",
        f"# {entry.name} Documentation",
        "",
        entry.description,
        "",
        f"Source: {source_url_for(entry, fmt)}",
        "",
    ]

    if is_large:
        header.append(f"For complete documentation, see [{REFERENCE_FILE}]({REFERENCE_FILE}).")
        return "\n".join(header) + "\n", content

    return "\n".join(header + ["---", "", content]), None


def install_to_agents(
    project_dir: PathLike,
    entry: RegistryEntry,
    content: str,
    fmt: str,
    target_agents: Sequence[AgentConfig],
) -> InstallResult:
    """Write the canonical copy of a skill and link it into each target agent."""
    canonical = canonical_skill_path(project_dir, entry.slug)
    canonical.mkdir(parents=True, exist_ok=True)

    skill_md, reference_md = generate_skill_md(entry, content, fmt)
    (canonical / SKILL_FILE).write_text(skill_md, encoding="utf-8")
    reference_path = canonical / REFERENCE_FILE
    if reference_md is not None:
        reference_path.write_text(reference_md, encoding="utf-8")
    elif reference_path.exists():
        # left over from an earlier, larger version
        reference_path.unlink()

    result = InstallResult(
        checksum=hashlib.sha256(content.encode("utf-8")).hexdigest(),
        size=len(content.encode("utf-8")),
    )

    for agent in target_agents:
        if agent.is_universal:
            result.agents.append(agent.name)
            continue
        status = link_agent_skill(project_dir, entry.slug, agent)
        result.links[agent.name] = status
        if status.linked:
            result.agents.append(agent.name)

    Path(project_dir, LLMS_DIR).mkdir(parents=True, exist_ok=True)
    return result


def has_canonical_copy(project_dir: PathLike, slug: str) -> bool:
    return (canonical_skill_path(project_dir, slug) / SKILL_FILE).is_file()


def remove_from_agents(
    project_dir: PathLike, slug: str, all_agents: Sequence[AgentConfig] = AGENTS
):
    """Remove the canonical copy and every agent link for ``slug``."""
    for agent in all_agents:
        if not agent.is_universal:
            remove_agent_skill(project_dir, slug, agent)

    canonical = canonical_skill_path(project_dir, slug)
    if canonical.is_symlink():
        canonical.unlink()
    elif canonical.exists():
        shutil.rmtree(canonical)


def uninstall_skill(
    project_dir: PathLike, slug: str, all_agents: Sequence[AgentConfig] = AGENTS
) -> bool:
    """Remove a skill's files and its lockfile entry together.

    Returns True if anything was recorded for ``slug``.
    """
    remove_from_agents(project_dir, slug, all_agents)
    return lockfile.remove_entry(project_dir, slug)


def add_to_gitignore(project_dir: PathLike) -> bool:
    """Make sure .gitignore ignores llmstxt state. Returns True if the file changed."""
    gitignore_path = Path(project_dir) / ".gitignore"

    if gitignore_path.exists():
        content = gitignore_path.read_text(encoding="utf-8")
        present = {line.strip() for line in content.splitlines()}
        missing = [e for e in GITIGNORE_ENTRIES if e not in present]
        if not missing:
            return False
        prefix = "" if not content or content.endswith("\n") else "\n"
        block = "\n# llms.txt documentation\n" + "\n".join(missing) + "\n"
        with open(gitignore_path, "a", encoding="utf-8") as f:
            f.write(prefix + block)
    else:
        gitignore_path.write_text(
            "# llms.txt documentation\n" + "\n".join(GITIGNORE_ENTRIES) + "\n",
            encoding="utf-8",
        )
    return True
