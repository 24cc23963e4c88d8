"""
The llms.txt registry.

Entries are loaded from the local cache, then the remote registry, then
the snapshot bundled with the package. Search uses rapidfuzz over name,
slug, domain and description.
"""

import json
from dataclasses import dataclass
from importlib import resources
from typing import Any, Dict, Iterable, List, Optional, Sequence

import httpx
from rapidfuzz import fuzz

from llmstxt import cache
from llmstxt.config import REGISTRY_TIMEOUT, get_registry_url, is_offline
from llmstxt.errors import RegistryError

PRIMARY_CATEGORIES = [
    "ai-ml",
    "developer-tools",
    "data-analytics",
    "automation-workflow",
    "infrastructure-cloud",
    "security-identity",
]

# (field, weight) for fuzzy search
SEARCH_FIELDS = [
    ("name", 0.4),
    ("slug", 0.3),
    ("domain", 0.2),
    ("description", 0.1),
]
SEARCH_THRESHOLD = 60.0


@dataclass(frozen=True)
class RegistryEntry:
    slug: str
    name: str
    category: str
    llms_txt_url: str
    llms_full_txt_url: Optional[str] = None
    description: str = ""
    domain: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RegistryEntry":
        return cls(
            slug=data["slug"],
            name=data["name"],
            category=data.get("category", ""),
            llms_txt_url=data["llmsTxtUrl"],
            llms_full_txt_url=data.get("llmsFullTxtUrl") or None,
            description=data.get("description", ""),
            domain=data.get("domain", ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "slug": self.slug,
            "name": self.name,
            "category": self.category,
            "llmsTxtUrl": self.llms_txt_url,
            "description": self.description,
            "domain": self.domain,
        }
        if self.llms_full_txt_url:
            data["llmsFullTxtUrl"] = self.llms_full_txt_url
        return data


def is_valid_entry(data: Any) -> bool:
    """Check that a raw record has the fields a RegistryEntry needs."""
    if not isinstance(data, dict):
        return False
    for key in ("slug", "name", "category", "llmsTxtUrl"):
        value = data.get(key)
        if not isinstance(value, str) or not value:
            return False
    for key in ("description", "domain"):
        if not isinstance(data.get(key, ""), str):
            return False
    full = data.get("llmsFullTxtUrl")
    return full is None or isinstance(full, str)


def parse_entries(raw: Any) -> List[RegistryEntry]:
    if not isinstance(raw, list):
        return []
    return [RegistryEntry.from_dict(item) for item in raw if is_valid_entry(item)]


def parse_categories(value: Optional[str]) -> List[str]:
    """Split a comma-separated --category value."""
    if not value:
        return []
    return [c.strip() for c in value.split(",") if c.strip()]


def filter_by_categories(
    items: Iterable[RegistryEntry], categories: Optional[Sequence[str]] = None
) -> List[RegistryEntry]:
    """Keep entries in ``categories``; an empty or missing list keeps everything."""
    items = list(items)
    if not categories:
        return items
    return [entry for entry in items if entry.category in categories]


class Registry:
    """An in-memory, searchable list of registry entries."""

    def __init__(self, entries: Iterable[RegistryEntry], source: str = "memory"):
        self.entries = list(entries)
        self.source = source
        self._by_slug = {entry.slug: entry for entry in self.entries}

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, slug: str) -> Optional[RegistryEntry]:
        return self._by_slug.get(slug)

    def all(self, categories: Optional[Sequence[str]] = None) -> List[RegistryEntry]:
        return filter_by_categories(self.entries, categories)

    def search(
        self,
        query: str,
        categories: Optional[Sequence[str]] = None,
        limit: Optional[int] = None,
    ) -> List[RegistryEntry]:
        """Fuzzy search; best matches first."""
        query = query.strip().lower()
        if not query:
            return []

        scored = []
        for index, entry in enumerate(filter_by_categories(self.entries, categories)):
            best = 0.0
            for field_name, weight in SEARCH_FIELDS:
                text = getattr(entry, field_name).lower()
                if not text:
                    continue
                score = fuzz.WRatio(query, text)
                if query in text:
                    score = max(score, 90.0)
                # weight scales a field score between 0.9x and 1.0x
                best = max(best, score * (0.9 + weight / 4))
            if best >= SEARCH_THRESHOLD:
                scored.append((-best, index, entry))

        scored.sort(key=lambda item: (item[0], item[1]))
        results = [entry for _, _, entry in scored]
        return results[:limit] if limit else results

    def resolve(self, name_or_slug: str) -> Optional[RegistryEntry]:
        """Resolve a name or slug: exact slug, then case-insensitive name, then fuzzy."""
        exact = self.get(name_or_slug)
        if exact:
            return exact

        lowered = name_or_slug.lower()
        for entry in self.entries:
            if entry.name.lower() == lowered:
                return entry

        results = self.search(name_or_slug, limit=1)
        return results[0] if results else None


def load_bundled_entries() -> List[RegistryEntry]:
    """Load the registry snapshot shipped with the package."""
    raw = resources.files("llmstxt").joinpath("data", "registry.json").read_text(encoding="utf-8")
    return parse_entries(json.loads(raw))


def fetch_remote_entries(client: Optional[httpx.Client] = None) -> List[RegistryEntry]:
    """Fetch the registry from GitHub. Returns [] on any failure."""
    try:
        if client is not None:
            response = client.get(get_registry_url(), timeout=REGISTRY_TIMEOUT)
        else:
            response = httpx.get(get_registry_url(), timeout=REGISTRY_TIMEOUT, follow_redirects=True)
        if response.status_code != 200:
            return []
        return parse_entries(response.json())
    except (httpx.HTTPError, ValueError):
        return []


def load_registry(client: Optional[httpx.Client] = None) -> Registry:
    """Load registry entries from cache, remote, or bundled fallback."""
    cached = parse_entries(cache.get_cached_registry())
    if cached:
        return Registry(cached, source="cache")

    if not is_offline():
        remote = fetch_remote_entries(client)
        if remote:
            cache.set_cached_registry([entry.to_dict() for entry in remote])
            return Registry(remote, source="remote")

    try:
        bundled = load_bundled_entries()
    except (OSError, ValueError) as e:
        raise RegistryError(f"Could not load bundled registry: {e}") from e
    if not bundled:
        raise RegistryError("Registry is empty")
    return Registry(bundled, source="bundled")
