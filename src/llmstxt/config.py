"""
Constants and environment-driven settings.

llmstxt has no config file of its own. Project state lives inside the
project (``.llms/`` and ``.agents/skills/``); everything else is read from
the environment at call time so tests can override it with monkeypatch.
"""

import os
from pathlib import Path

# Package version - keep in sync with pyproject.toml
__version__ = "0.4.0"

# Canonical location for skill content, relative to the project root
CANONICAL_DIR = ".agents/skills"

# Project metadata directory (lockfile, saved agent preferences)
LLMS_DIR = ".llms"
LOCKFILE_NAME = "llms.lock.json"
PREFS_FILE = "agent-prefs.json"

REMOTE_REGISTRY_URL = (
    "https://raw.githubusercontent.com/thedaviddias/llms-txt-hub/main/packages/cli/data/registry.json"
)
TELEMETRY_ENDPOINT = "https://llmstxt.directory/api/cli/telemetry"

REGISTRY_CACHE_TTL = 24 * 60 * 60  # seconds
REGISTRY_TIMEOUT = 5.0
FETCH_TIMEOUT = 30.0
TELEMETRY_TIMEOUT = 2.0
MAX_CONTENT_SIZE = 10 * 1024 * 1024  # 10MB

CI_ENV_VARS = ["CI", "GITHUB_ACTIONS", "GITLAB_CI", "CIRCLECI", "TRAVIS"]


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes")


def get_registry_url() -> str:
    """Return the remote registry URL, honoring LLMSTXT_REGISTRY_URL."""
    return os.getenv("LLMSTXT_REGISTRY_URL") or REMOTE_REGISTRY_URL


def is_offline() -> bool:
    """True when LLMSTXT_OFFLINE asks us to skip the remote registry."""
    return _env_flag("LLMSTXT_OFFLINE")


def is_telemetry_disabled() -> bool:
    return _env_flag("DO_NOT_TRACK") or _env_flag("LLMSTXT_TELEMETRY_DISABLED")


def is_ci() -> bool:
    return any(os.getenv(var) for var in CI_ENV_VARS)


def get_cache_dir() -> Path:
    """Get the directory holding the cached registry."""
    base = os.getenv("XDG_CACHE_HOME")
    root = Path(base) if base else Path.home() / ".cache"
    return root / "llmstxt"


def get_config_home() -> Path:
    """Get the XDG config directory used by agent detection checks."""
    base = os.getenv("XDG_CONFIG_HOME")
    return Path(base) if base else Path.home() / ".config"


def get_llms_dir(project_dir) -> Path:
    return Path(project_dir) / LLMS_DIR
