import httpx
import pytest

from llmstxt.config import MAX_CONTENT_SIZE
from llmstxt.errors import FetchError
from llmstxt.fetcher import fetch_llms_txt, validate_url

URL = "https://docs.example.com/llms.txt"


def client_for(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


@pytest.mark.parametrize("url", [URL, "http://example.com/llms.txt", "https://8.8.8.8/llms.txt"])
def test_public_urls_are_allowed(url: str) -> None:
    validate_url(url)


@pytest.mark.parametrize(
    "url",
    [
        "ftp://example.com/llms.txt",
        "file:///etc/passwd",
        "https://localhost/llms.txt",
        "http://app.localhost:3000/llms.txt",
        "http://127.0.0.1/llms.txt",
        "http://10.1.2.3/llms.txt",
        "http://172.20.0.1/llms.txt",
        "http://192.168.1.1/llms.txt",
        "http://169.254.169.254/latest/meta-data",
        "http://0.0.0.0/llms.txt",
        "http://[::1]/llms.txt",
        "http://[fe80::1]/llms.txt",
        "not a url",
    ],
)
def test_unsafe_urls_are_rejected(url: str) -> None:
    with pytest.raises(FetchError):
        validate_url(url)


def test_fetch_returns_content_and_headers() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert "If-None-Match" not in request.headers
        return httpx.Response(
            200,
            text="# Docs\n",
            headers={"content-type": "text/plain", "etag": '"v2"', "last-modified": "Wed, 01 Jan 2026 00:00:00 GMT"},
        )

    with client_for(handler) as client:
        result = fetch_llms_txt(URL, client=client)

    assert result.content == "# Docs\n"
    assert result.etag == '"v2"'
    assert result.last_modified == "Wed, 01 Jan 2026 00:00:00 GMT"
    assert not result.not_modified


def test_etag_sent_and_304_is_not_modified() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["If-None-Match"] == '"v1"'
        return httpx.Response(304)

    with client_for(handler) as client:
        result = fetch_llms_txt(URL, existing_etag='"v1"', client=client)

    assert result.not_modified
    assert result.content == ""
    assert result.etag == '"v1"'


def test_http_error_raises() -> None:
    with client_for(lambda request: httpx.Response(404)) as client:
        with pytest.raises(FetchError, match="HTTP 404"):
            fetch_llms_txt(URL, client=client)


def test_html_is_rejected() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html></html>", headers={"content-type": "text/html; charset=utf-8"})

    with client_for(handler) as client:
        with pytest.raises(FetchError, match="HTML"):
            fetch_llms_txt(URL, client=client)


def test_oversized_body_is_rejected() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"x" * (MAX_CONTENT_SIZE + 1), headers={"content-type": "text/plain"})

    with client_for(handler) as client:
        with pytest.raises(FetchError, match="too large"):
            fetch_llms_txt(URL, client=client)


def test_network_error_is_wrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with client_for(handler) as client:
        with pytest.raises(FetchError, match="Failed to fetch"):
            fetch_llms_txt(URL, client=client)


def test_private_url_never_reaches_the_network() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("request should not be sent")

    with client_for(handler) as client:
        with pytest.raises(FetchError):
            fetch_llms_txt("http://127.0.0.1/llms.txt", client=client)
