from pathlib import Path
from typing import List

import pytest

from llmstxt.agents import AgentConfig
from llmstxt.registry import Registry, RegistryEntry


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep every test away from the real home directory and network."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    monkeypatch.setenv("XDG_CACHE_HOME", str(home / ".cache"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("LLMSTXT_TELEMETRY_DISABLED", "1")
    monkeypatch.setenv("LLMSTXT_OFFLINE", "1")
    for var in ("CI", "GITHUB_ACTIONS", "GITLAB_CI", "CIRCLECI", "TRAVIS", "DO_NOT_TRACK"):
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    path = tmp_path / "project"
    path.mkdir()
    return path


def make_agent(name: str, universal: bool = False) -> AgentConfig:
    return AgentConfig(
        name=name,
        display_name=name,
        skills_dir=".agents/skills" if universal else f".{name}/skills",
        is_universal=universal,
    )


@pytest.fixture
def calibration_agents() -> List[AgentConfig]:
    return [
        make_agent("claude-code"),
        make_agent("cursor"),
        make_agent("cline"),
        make_agent("windsurf"),
        make_agent("roo"),
        make_agent("amp", universal=True),
        make_agent("codex", universal=True),
        make_agent("gemini-cli", universal=True),
    ]


def make_entry(slug: str, category: str = "developer-tools", **kwargs) -> RegistryEntry:
    return RegistryEntry(
        slug=slug,
        name=kwargs.pop("name", slug.replace("-", " ").title()),
        category=category,
        llms_txt_url=kwargs.pop("llms_txt_url", f"https://{slug}.example.com/llms.txt"),
        **kwargs,
    )


@pytest.fixture
def registry() -> Registry:
    return Registry([
        make_entry("stripe-docs", "payments", name="Stripe", domain="docs.stripe.com",
                   description="Payments infrastructure for the internet."),
        make_entry("astro", "developer-tools", name="Astro", domain="docs.astro.build",
                   description="The web framework for content-driven websites.",
                   llms_full_txt_url="https://astro.example.com/llms-full.txt"),
        make_entry("prisma", "data-analytics", name="Prisma", domain="prisma.io",
                   description="Node.js and TypeScript ORM."),
    ])
