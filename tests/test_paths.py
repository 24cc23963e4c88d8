import os
from pathlib import Path

import pytest

from llmstxt.errors import InvalidSlugError, LlmstxtError, PathTraversalError
from llmstxt.paths import assert_path_containment, sanitize_slug


@pytest.mark.parametrize("slug", ["stripe-docs", "a", "vercel_ai.sdk", "0x", "Next.js", "bun-1.2"])
def test_valid_slugs_are_returned_unchanged(slug: str) -> None:
    assert sanitize_slug(slug) == slug


@pytest.mark.parametrize(
    "slug",
    ["", "..", "a..b", "../etc", "a/b", "a\\b", "-leading", ".hidden", "_x", "spa ce", "tab\t", "newline\n"],
)
def test_invalid_slugs_are_rejected(slug: str) -> None:
    with pytest.raises(InvalidSlugError):
        sanitize_slug(slug)


@pytest.mark.parametrize("value", [None, 42, b"bytes", ["list"]])
def test_non_string_slugs_are_rejected(value) -> None:
    with pytest.raises(InvalidSlugError):
        sanitize_slug(value)


def test_slug_errors_share_the_package_base_class() -> None:
    with pytest.raises(LlmstxtError):
        sanitize_slug("../x")


def test_descendants_are_contained(tmp_path: Path) -> None:
    assert_path_containment(tmp_path / "x", tmp_path)
    assert_path_containment(tmp_path / "x" / "y", tmp_path)
    assert_path_containment(str(tmp_path / "a" / ".." / "b"), str(tmp_path))


@pytest.mark.parametrize("child", ["..", "../sibling", "x/../..", "x/../../y"])
def test_escaping_paths_are_rejected(tmp_path: Path, child: str) -> None:
    parent = tmp_path / "parent"
    with pytest.raises(PathTraversalError):
        assert_path_containment(os.path.join(str(parent), child), parent)


def test_parent_is_not_inside_itself(tmp_path: Path) -> None:
    with pytest.raises(PathTraversalError):
        assert_path_containment(tmp_path, tmp_path)


def test_prefix_sibling_is_not_contained(tmp_path: Path) -> None:
    with pytest.raises(PathTraversalError):
        assert_path_containment(tmp_path / "skills-evil" / "x", tmp_path / "skills")


def test_relative_paths_resolve_against_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "root").mkdir()
    assert_path_containment("root/child", str(tmp_path / "root"))
    with pytest.raises(PathTraversalError):
        assert_path_containment("other", "root")
