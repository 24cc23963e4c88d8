"""
Downloading llms.txt files.

Every URL comes from the registry, so it is checked before any request
is made: only http(s), and never a loopback, private or otherwise
non-public address literal.
"""

import ipaddress
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

import httpx

from llmstxt.config import FETCH_TIMEOUT, MAX_CONTENT_SIZE
from llmstxt.errors import FetchError


@dataclass
class FetchResult:
    content: str
    etag: Optional[str] = None
    last_modified: Optional[str] = None
    not_modified: bool = False


def _is_blocked_ip(hostname: str) -> bool:
    try:
        ip = ipaddress.ip_address(hostname)
    except ValueError:
        return False
    return (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_reserved
        or ip.is_unspecified
        or ip.is_multicast
    )


def validate_url(url: str) -> None:
    """Raise FetchError unless ``url`` is safe to fetch."""
    try:
        parts = urlsplit(url)
    except ValueError as e:
        raise FetchError(f"Invalid URL: {url}") from e

    if parts.scheme not in ("http", "https"):
        raise FetchError(f'Unsupported protocol "{parts.scheme}" in URL: {url}')

    hostname = (parts.hostname or "").lower()
    if not hostname:
        raise FetchError(f"Invalid URL: {url}")
    if hostname == "localhost" or hostname.endswith(".localhost") or _is_blocked_ip(hostname):
        raise FetchError(f"URL targets a private/reserved address: {url}")


def fetch_llms_txt(
    url: str,
    existing_etag: Optional[str] = None,
    client: Optional[httpx.Client] = None,
) -> FetchResult:
    """
    Fetch an llms.txt file with ETag support.

    Args:
        url: File URL from the registry.
        existing_etag: ETag from the lockfile; sent as If-None-Match.
        client: Optional httpx client, used as-is (tests pass a MockTransport).

    Returns:
        FetchResult; ``not_modified`` is set on a 304 and content is empty.

    Raises:
        FetchError: Invalid URL, network failure, HTTP error, HTML body or
            a body larger than MAX_CONTENT_SIZE.
    """
    validate_url(url)

    headers = {}
    if existing_etag:
        headers["If-None-Match"] = existing_etag

    owns_client = client is None
    if owns_client:
        client = httpx.Client(timeout=FETCH_TIMEOUT, follow_redirects=True)

    try:
        try:
            response = client.get(url, headers=headers)
        except httpx.TimeoutException as e:
            raise FetchError(f"Request timed out after {FETCH_TIMEOUT:.0f}s: {url}") from e
        except httpx.HTTPError as e:
            raise FetchError(f"Failed to fetch {url}: {e}") from e
    finally:
        if owns_client:
            client.close()

    if response.status_code == 304:
        return FetchResult(
            content="",
            etag=existing_etag,
            last_modified=response.headers.get("last-modified"),
            not_modified=True,
        )

    if response.is_error:
        raise FetchError(f"HTTP {response.status_code}: {response.reason_phrase}")

    content_type = response.headers.get("content-type", "")
    if "text/html" in content_type:
        raise FetchError(f"Received HTML instead of plain text from {url}; the URL may be invalid")

    content_length = response.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > MAX_CONTENT_SIZE:
        raise FetchError(f"Response too large ({content_length} bytes, max {MAX_CONTENT_SIZE})")

    if len(response.content) > MAX_CONTENT_SIZE:
        raise FetchError(f"Response too large ({len(response.content)} bytes, max {MAX_CONTENT_SIZE})")

    return FetchResult(
        content=response.text,
        etag=response.headers.get("etag"),
        last_modified=response.headers.get("last-modified"),
    )
