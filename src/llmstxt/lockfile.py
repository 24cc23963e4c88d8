"""
The project lockfile: ``.llms/llms.lock.json``.

It records every installed skill with its fetch provenance and is the
source of truth for "is this skill installed". The on-disk keys are
camelCase so the file stays compatible with the JavaScript CLI.
"""

import json
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from llmstxt import ui
from llmstxt.config import LOCKFILE_NAME, get_llms_dir
from llmstxt.paths import PathLike

LOCKFILE_VERSION = 1
FORMATS = ("llms.txt", "llms-full.txt")


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class LockfileEntry:
    slug: str
    format: str
    source_url: str
    etag: Optional[str]
    last_modified: Optional[str]
    fetched_at: str
    checksum: str
    size: int
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "slug": self.slug,
            "format": self.format,
            "sourceUrl": self.source_url,
            "etag": self.etag,
            "lastModified": self.last_modified,
            "fetchedAt": self.fetched_at,
            "checksum": self.checksum,
            "size": self.size,
            "name": self.name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LockfileEntry":
        fmt = data.get("format", "llms.txt")
        if fmt not in FORMATS:
            raise ValueError(f"Unknown format: {fmt}")
        return cls(
            slug=data["slug"],
            format=fmt,
            source_url=data["sourceUrl"],
            etag=data.get("etag"),
            last_modified=data.get("lastModified"),
            fetched_at=data["fetchedAt"],
            checksum=data.get("checksum", ""),
            size=int(data.get("size", 0)),
            name=data.get("name") or data["slug"],
        )


@dataclass
class Lockfile:
    version: int = LOCKFILE_VERSION
    updated_at: str = field(default_factory=utc_now)
    entries: Dict[str, LockfileEntry] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "updatedAt": self.updated_at,
            "entries": {slug: entry.to_dict() for slug, entry in self.entries.items()},
        }


def get_lockfile_path(project_dir: PathLike) -> Path:
    """Get the absolute path to the lockfile for a project directory."""
    return get_llms_dir(project_dir) / LOCKFILE_NAME


def _parse(raw: str) -> Lockfile:
    data = json.loads(raw)
    if not isinstance(data, dict) or data.get("version") != LOCKFILE_VERSION:
        raise ValueError("Invalid lockfile format")
    entries = data.get("entries")
    if not isinstance(entries, dict):
        raise ValueError("Invalid lockfile format")
    return Lockfile(
        version=LOCKFILE_VERSION,
        updated_at=data.get("updatedAt") or utc_now(),
        entries={slug: LockfileEntry.from_dict(entry) for slug, entry in entries.items()},
    )


def read_lockfile(project_dir: PathLike) -> Lockfile:
    """Read the lockfile; an empty one if missing, a backed-up empty one if corrupt."""
    lockfile_path = get_lockfile_path(project_dir)
    try:
        raw = lockfile_path.read_bytes()
    except FileNotFoundError:
        return Lockfile()

    try:
        return _parse(raw.decode("utf-8"))
    except (ValueError, KeyError, TypeError, AttributeError):
        # UnicodeDecodeError is a ValueError
        backup_path = lockfile_path.with_name(lockfile_path.name + ".backup")
        try:
            os.replace(lockfile_path, backup_path)
            ui.warn(f"Corrupt lockfile backed up to {backup_path}")
        except OSError as e:
            ui.warn(f"Corrupt lockfile ignored (could not back up: {e})")
        return Lockfile()


def write_lockfile(project_dir: PathLike, lockfile: Lockfile):
    """Write the lockfile atomically via a temp file."""
    lockfile_path = get_lockfile_path(project_dir)
    lockfile_path.parent.mkdir(parents=True, exist_ok=True)

    lockfile.updated_at = utc_now()

    tmp_path = lockfile_path.with_name(lockfile_path.name + ".tmp")
    with open(tmp_path, "w", encoding="utf-8") as f:
        json.dump(lockfile.to_dict(), f, indent=2)
        f.write("\n")
    os.replace(tmp_path, lockfile_path)


def add_entry(project_dir: PathLike, entry: LockfileEntry):
    """Add or replace the entry for ``entry.slug``."""
    lockfile = read_lockfile(project_dir)
    lockfile.entries[entry.slug] = entry
    write_lockfile(project_dir, lockfile)


def remove_entry(project_dir: PathLike, slug: str) -> bool:
    """Remove an entry by slug. Returns False if there was nothing to remove."""
    lockfile = read_lockfile(project_dir)
    if slug not in lockfile.entries:
        return False
    del lockfile.entries[slug]
    write_lockfile(project_dir, lockfile)
    return True


def get_entry(project_dir: PathLike, slug: str) -> Optional[LockfileEntry]:
    return read_lockfile(project_dir).entries.get(slug)


def is_installed(project_dir: PathLike, slug: str) -> bool:
    """True iff the lockfile has an entry for ``slug``."""
    return slug in read_lockfile(project_dir).entries
