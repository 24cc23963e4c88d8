import json
import os
from pathlib import Path
from typing import List

import pytest
from typer.testing import CliRunner

import llmstxt
import llmstxt.installer as installer
from llmstxt import app
from llmstxt.errors import RegistryError
from llmstxt.fetcher import FetchResult
from llmstxt.lockfile import get_lockfile_path, is_installed
from llmstxt.registry import Registry

runner = CliRunner()


@pytest.fixture
def project(project_dir: Path, registry: Registry, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A stripe-using project as the working directory, with registry and fetch faked."""
    (project_dir / "package.json").write_text(json.dumps({"dependencies": {"stripe": "^14.0.0"}}))
    monkeypatch.chdir(project_dir)
    monkeypatch.setattr(llmstxt, "load_registry", lambda: registry)
    return project_dir


@pytest.fixture
def fetches(monkeypatch: pytest.MonkeyPatch) -> List[tuple]:
    calls = []

    def fake_fetch(url, existing_etag=None, client=None):
        calls.append((url, existing_etag))
        if existing_etag == '"v1"':
            return FetchResult(content="", etag='"v1"', not_modified=True)
        return FetchResult(content="# Stripe\n\nPayments docs.\n", etag='"v1"')

    monkeypatch.setattr(installer, "fetch_llms_txt", fake_fetch)
    return calls


def test_init_default_categories_installs_nothing(project: Path, fetches) -> None:
    result = runner.invoke(app, ["init", "--yes"])

    assert result.exit_code == 0, result.output
    assert "No matches in categories" in result.output
    assert fetches == []
    assert not (project / ".agents").exists()
    assert not get_lockfile_path(project).exists()


def test_init_with_category_installs_and_links(project: Path, fetches) -> None:
    result = runner.invoke(app, ["init", "--yes", "--category", "payments"])

    assert result.exit_code == 0, result.output
    assert fetches == [("https://stripe-docs.example.com/llms.txt", None)]

    canonical = project / ".agents" / "skills" / "stripe-docs"
    assert (canonical / "SKILL.md").is_file()
    for skills_dir in (".claude/skills", ".cursor/skills"):
        link = project / skills_dir / "stripe-docs"
        assert link.is_symlink()
        assert link.resolve() == canonical.resolve()
        assert (link / "SKILL.md").read_text() == (canonical / "SKILL.md").read_text()

    assert is_installed(project, "stripe-docs")
    gitignore = (project / ".gitignore").read_text().splitlines()
    assert ".llms/" in gitignore and ".agents/skills/" in gitignore
    assert ".agents/skills/stripe-docs/SKILL.md" in (project / "CLAUDE.md").read_text()


def test_init_twice_skips_installed(project: Path, fetches) -> None:
    runner.invoke(app, ["init", "-y", "--category", "payments"])
    result = runner.invoke(app, ["init", "-y", "--category", "payments"])

    assert result.exit_code == 0
    assert len(fetches) == 1
    assert "Skipped: 1" in result.output


def test_init_dry_run(project: Path, fetches) -> None:
    result = runner.invoke(app, ["init", "--dry-run", "--all-categories"])

    assert result.exit_code == 0
    assert "Stripe" in result.output
    assert "Dry run" in result.output
    assert fetches == []
    assert sorted(p.name for p in project.iterdir()) == ["package.json"]


def test_init_without_package_json(project: Path, fetches) -> None:
    (project / "package.json").unlink()
    result = runner.invoke(app, ["init", "-y"])
    assert result.exit_code == 0
    assert "No dependencies" in result.output


def test_registry_failure_exits_1(project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def fail():
        raise RegistryError("no registry anywhere")

    monkeypatch.setattr(llmstxt, "load_registry", fail)
    result = runner.invoke(app, ["init", "-y"])

    assert result.exit_code == 1
    assert "no registry anywhere" in result.output


def test_install_by_name(project: Path, fetches) -> None:
    result = runner.invoke(app, ["install", "stripe"])

    assert result.exit_code == 0, result.output
    assert is_installed(project, "stripe-docs")
    assert os.path.islink(project / ".cursor" / "skills" / "stripe-docs")


def test_install_unknown_name_exits_1(project: Path, fetches) -> None:
    result = runner.invoke(app, ["install", "zzzzqqqq"])
    assert result.exit_code == 1
    assert "not found in registry" in result.output
    assert fetches == []


def test_list_and_ls(project: Path, fetches) -> None:
    result = runner.invoke(app, ["list"])
    assert "No llms.txt files installed" in result.output

    runner.invoke(app, ["install", "stripe-docs"])
    for command in ("list", "ls"):
        result = runner.invoke(app, [command])
        assert result.exit_code == 0
        assert "Stripe" in result.output
        assert "llms.txt" in result.output


def test_update_uses_etag(project: Path, fetches) -> None:
    runner.invoke(app, ["install", "stripe-docs"])

    result = runner.invoke(app, ["update"])
    assert result.exit_code == 0, result.output
    assert fetches[-1] == ("https://stripe-docs.example.com/llms.txt", '"v1"')
    assert "Unchanged: 1" in result.output

    result = runner.invoke(app, ["update", "stripe-docs", "--force"])
    assert result.exit_code == 0, result.output
    assert fetches[-1] == ("https://stripe-docs.example.com/llms.txt", None)
    assert "Updated: 1" in result.output


def test_update_unknown_name(project: Path, fetches) -> None:
    runner.invoke(app, ["install", "stripe-docs"])
    result = runner.invoke(app, ["update", "ghost"])
    assert result.exit_code == 1


def test_remove(project: Path, fetches) -> None:
    runner.invoke(app, ["install", "stripe-docs"])

    result = runner.invoke(app, ["rm", "Stripe", "--yes"])

    assert result.exit_code == 0, result.output
    assert not is_installed(project, "stripe-docs")
    assert not (project / ".agents" / "skills" / "stripe-docs").exists()
    assert not os.path.lexists(project / ".claude" / "skills" / "stripe-docs")
    assert not (project / "CLAUDE.md").exists()


def test_remove_not_installed(project: Path) -> None:
    result = runner.invoke(app, ["remove", "stripe-docs", "-y"])
    assert result.exit_code == 1
    assert "is not installed" in result.output


def test_search(project: Path) -> None:
    result = runner.invoke(app, ["search", "stripe", "--all-categories"])
    assert result.exit_code == 0
    assert "stripe-docs" in result.output

    result = runner.invoke(app, ["search", "stripe"])
    assert "stripe-docs" not in result.output


def test_info(project: Path) -> None:
    result = runner.invoke(app, ["info", "stripe-docs"])
    assert result.exit_code == 0
    assert "payments" in result.output
    assert "Not installed" in result.output

    assert runner.invoke(app, ["info", "zzzzqqqq"]).exit_code == 1


def test_version() -> None:
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert llmstxt.__version__ in result.output
