"""
Deciding which agents receive skills in a project.

All functions take the agent list explicitly so they can be tested
against a fake catalog without touching the real home directory.
"""

import json
from pathlib import Path
from typing import List, Optional, Sequence

from llmstxt.agents import AgentConfig
from llmstxt.config import PREFS_FILE, get_llms_dir
from llmstxt.paths import PathLike

# Pre-selected when there are no saved preferences and no project markers
DEFAULT_AGENTS = ["claude-code", "cursor", "codex"]


def detect_project_agents(project_dir: PathLike, all_agents: Sequence[AgentConfig]) -> List[str]:
    """Return names of non-universal agents whose config dir exists in the project.

    The marker is the first segment of ``skills_dir`` (``.cursor`` for
    ``.cursor/skills``). Universal agents all share ``.agents/`` so its
    presence says nothing about a specific tool.
    """
    detected = []
    root = Path(project_dir)
    for agent in all_agents:
        if agent.is_universal:
            continue
        marker = agent.skills_dir.replace("\\", "/").split("/")[0]
        if not marker or marker in (".", "..", "skills"):
            continue
        try:
            if (root / marker).is_dir():
                detected.append(agent.name)
        except OSError:
            continue
    return detected


def get_initial_agents(
    all_agents: Sequence[AgentConfig],
    saved_prefs: Optional[List[str]],
    project_dir: Optional[PathLike] = None,
) -> List[str]:
    """Compute which agents should be pre-selected.

    Priority:
      1. Saved preferences (the user already told us what they want).
      2. Project-level detection (.cursor/, .claude/ ... exist).
      3. DEFAULT_AGENTS.
    """
    valid_names = {agent.name for agent in all_agents}

    if saved_prefs:
        filtered = [name for name in saved_prefs if name in valid_names]
        if filtered:
            return filtered

    if project_dir:
        detected = detect_project_agents(project_dir, all_agents)
        if detected:
            return detected

    return [name for name in DEFAULT_AGENTS if name in valid_names]


def ensure_universal_agents(selected: Sequence[str], all_agents: Sequence[AgentConfig]) -> List[str]:
    """Append every universal agent not already in ``selected``."""
    result = []
    for name in selected:
        if name not in result:
            result.append(name)
    for agent in all_agents:
        if agent.is_universal and agent.name not in result:
            result.append(agent.name)
    return result


def resolve_agents(names: Sequence[str], all_agents: Sequence[AgentConfig]) -> List[AgentConfig]:
    """Map agent names back to configs, in ``all_agents`` order."""
    wanted = set(names)
    return [agent for agent in all_agents if agent.name in wanted]


def get_prefs_path(project_dir: PathLike) -> Path:
    return get_llms_dir(project_dir) / PREFS_FILE


def load_saved_agent_prefs(project_dir: PathLike) -> Optional[List[str]]:
    """Read saved agent preferences; None if missing or unreadable."""
    prefs_path = get_prefs_path(project_dir)
    if not prefs_path.exists():
        return None
    try:
        with open(prefs_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError):
        return None
    agents = data.get("agents") if isinstance(data, dict) else None
    if isinstance(agents, list) and all(isinstance(a, str) for a in agents):
        return agents
    return None


def save_agent_prefs(project_dir: PathLike, agent_names: Sequence[str]) -> bool:
    """Save agent preferences for the next run. Returns False if the write failed."""
    prefs_path = get_prefs_path(project_dir)
    try:
        prefs_path.parent.mkdir(parents=True, exist_ok=True)
        with open(prefs_path, "w", encoding="utf-8") as f:
            json.dump({"agents": list(agent_names)}, f, indent=2)
            f.write("\n")
    except OSError:
        return False
    return True
