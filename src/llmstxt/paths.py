"""
Slug validation and path containment checks.

Slugs come from a remote registry, so they are never trusted as path
components. Every path built from a slug or from an agent's skills
directory goes through these two checks before the filesystem is touched.
"""

import os
import re
from pathlib import Path
from typing import Union

from llmstxt.errors import InvalidSlugError, PathTraversalError

SLUG_PATTERN = re.compile(r"^[a-z0-9][a-z0-9._-]*$", re.IGNORECASE)

PathLike = Union[str, Path]


def sanitize_slug(slug) -> str:
    """Return ``slug`` unchanged if it is safe to use as a directory name.

    Raises InvalidSlugError for non-strings, empty strings, anything
    outside ``[a-z0-9._-]`` (first character alphanumeric) and any value
    containing ``..``.
    """
    if not isinstance(slug, str) or not slug:
        raise InvalidSlugError(f"Invalid slug: {slug!r}")
    if ".." in slug or not SLUG_PATTERN.fullmatch(slug):
        raise InvalidSlugError(f"Invalid slug: {slug!r}")
    return slug


def assert_path_containment(full_path: PathLike, parent_dir: PathLike) -> None:
    """Raise PathTraversalError unless ``full_path`` is strictly inside ``parent_dir``.

    Both paths are made absolute lexically. Symlinks are not followed, since
    agent skill paths are themselves symlinks into the canonical directory.
    """
    resolved = os.path.abspath(os.fspath(full_path))
    parent = os.path.abspath(os.fspath(parent_dir))
    if not resolved.startswith(parent.rstrip(os.sep) + os.sep):
        raise PathTraversalError(f"Path {full_path} escapes {parent_dir}")
