import json
from pathlib import Path

from llmstxt import lockfile
from llmstxt.lockfile import (
    LockfileEntry,
    add_entry,
    get_entry,
    get_lockfile_path,
    is_installed,
    read_lockfile,
    remove_entry,
)


def sample_entry(slug: str = "stripe-docs", checksum: str = "abc") -> LockfileEntry:
    return LockfileEntry(
        slug=slug,
        format="llms.txt",
        source_url="https://docs.stripe.com/llms.txt",
        etag='"v1"',
        last_modified=None,
        fetched_at="2026-01-01T00:00:00Z",
        checksum=checksum,
        size=12,
        name="Stripe",
    )


def test_missing_lockfile_is_empty(project_dir: Path) -> None:
    assert read_lockfile(project_dir).entries == {}
    assert not is_installed(project_dir, "stripe-docs")
    assert not get_lockfile_path(project_dir).exists()


def test_add_then_is_installed(project_dir: Path) -> None:
    add_entry(project_dir, sample_entry())
    assert is_installed(project_dir, "stripe-docs")
    assert get_entry(project_dir, "stripe-docs") == sample_entry()


def test_on_disk_format_uses_camel_case(project_dir: Path) -> None:
    add_entry(project_dir, sample_entry())
    data = json.loads(get_lockfile_path(project_dir).read_text())

    assert data["version"] == 1
    assert "updatedAt" in data
    entry = data["entries"]["stripe-docs"]
    assert set(entry) == {
        "slug", "format", "sourceUrl", "etag", "lastModified",
        "fetchedAt", "checksum", "size", "name",
    }
    assert entry["sourceUrl"] == "https://docs.stripe.com/llms.txt"
    assert entry["lastModified"] is None


def test_add_entry_replaces_existing(project_dir: Path) -> None:
    add_entry(project_dir, sample_entry(checksum="old"))
    add_entry(project_dir, sample_entry("astro"))
    add_entry(project_dir, sample_entry(checksum="new"))

    entries = read_lockfile(project_dir).entries
    assert sorted(entries) == ["astro", "stripe-docs"]
    assert entries["stripe-docs"].checksum == "new"


def test_remove_entry(project_dir: Path) -> None:
    add_entry(project_dir, sample_entry())
    assert remove_entry(project_dir, "stripe-docs") is True
    assert not is_installed(project_dir, "stripe-docs")
    assert remove_entry(project_dir, "stripe-docs") is False


def test_write_leaves_no_temp_file(project_dir: Path) -> None:
    add_entry(project_dir, sample_entry())
    files = sorted(p.name for p in get_lockfile_path(project_dir).parent.iterdir())
    assert files == ["llms.lock.json"]


def test_corrupt_lockfile_is_backed_up(project_dir: Path, monkeypatch) -> None:
    warnings = []
    monkeypatch.setattr(lockfile.ui, "warn", warnings.append)

    path = get_lockfile_path(project_dir)
    path.parent.mkdir(parents=True)
    path.write_text("{ this is not json")

    assert read_lockfile(project_dir).entries == {}
    backup = path.with_name("llms.lock.json.backup")
    assert backup.read_text() == "{ this is not json"
    assert not path.exists()
    assert len(warnings) == 1


def test_wrong_version_counts_as_corrupt(project_dir: Path, monkeypatch) -> None:
    monkeypatch.setattr(lockfile.ui, "warn", lambda message: None)
    path = get_lockfile_path(project_dir)
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps({"version": 99, "entries": {}}))

    assert read_lockfile(project_dir).entries == {}
    assert path.with_name("llms.lock.json.backup").exists()


def test_undecodable_lockfile_is_backed_up(project_dir: Path, monkeypatch) -> None:
    monkeypatch.setattr(lockfile.ui, "warn", lambda message: None)
    path = get_lockfile_path(project_dir)
    path.parent.mkdir(parents=True)
    path.write_bytes(b"\xff\xfe garbage")

    assert read_lockfile(project_dir).entries == {}
    assert path.with_name("llms.lock.json.backup").read_bytes() == b"\xff\xfe garbage"
