"""Local cache for the remote registry. Failures here are never fatal."""

import json
import time
from pathlib import Path
from typing import Any, List, Optional

from llmstxt.config import REGISTRY_CACHE_TTL, get_cache_dir


def get_cache_path() -> Path:
    return get_cache_dir() / "registry.json"


def get_cached_registry() -> Optional[List[Any]]:
    """Return cached raw registry records if the cache is fresh, or None."""
    cache_path = get_cache_path()
    try:
        if not cache_path.exists():
            return None
        age = time.time() - cache_path.stat().st_mtime
        if age > REGISTRY_CACHE_TTL:
            return None
        with open(cache_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError):
        return None
    return data if isinstance(data, list) else None


def set_cached_registry(records: List[Any]) -> bool:
    """Persist raw registry records to the cache file."""
    cache_path = get_cache_path()
    try:
        cache_path.parent.mkdir(parents=True, exist_ok=True)
        with open(cache_path, "w", encoding="utf-8") as f:
            json.dump(records, f)
    except OSError:
        return False
    return True
