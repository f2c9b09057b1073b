"""Tests for the SharePoint REST connector.

SharePoint is simulated with httpx.MockTransport.
"""

import json

import httpx
import pytest

from spvm.platform.connectors import SharePointConnector, describe_status
from spvm.platform.connectors.retry_helpers import should_retry_on_rate_limit_or_timeout
from spvm.schemas import VersionPolicy

SITE = "https://contoso.sharepoint.com/sites/finance"


def _connector(handler) -> SharePointConnector:
    return SharePointConnector(transport=httpx.MockTransport(handler), timeout=5)


@pytest.mark.asyncio
async def test_get_site_metadata():
    """Test the site read: URL, bearer token and OData headers."""
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"Title": "Finance", "Url": SITE})

    response = await _connector(handler).get_site_metadata(SITE + "/", "tok")

    assert response.status_ok is True
    assert response.status_code == 200
    assert response.body == {"Title": "Finance", "Url": SITE}
    request = seen[0]
    assert request.method == "GET"
    assert request.url.path == "/sites/finance/_api/web"
    assert request.url.params["$select"] == "Title,Url"
    assert request.headers["Authorization"] == "Bearer tok"
    assert request.headers["Accept"] == "application/json;odata=nometadata"


@pytest.mark.asyncio
async def test_list_document_libraries_filters_visible_libraries():
    """Test that only visible document libraries are requested."""
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"value": [{"Id": "g1", "Title": "Documents"}]})

    response = await _connector(handler).list_document_libraries(SITE, "tok")

    assert response.body["value"][0]["Title"] == "Documents"
    assert seen[0].url.path == "/sites/finance/_api/web/lists"
    assert seen[0].url.params["$filter"] == "BaseTemplate eq 101 and Hidden eq false"
    assert seen[0].url.params["$select"] == "Id,Title"


@pytest.mark.asyncio
async def test_update_library_versioning_request():
    """Test the PATCH sent for one library."""
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(204)

    policy = VersionPolicy(major_version_limit=3, minor_version_limit=1)
    response = await _connector(handler).update_library_versioning(SITE, "tok", "g1", policy)

    assert response.status_ok is True
    assert response.status_code == 204
    assert response.body is None
    request = seen[0]
    assert request.method == "PATCH"
    assert request.url.path == "/sites/finance/_api/web/lists(guid'g1')"
    assert request.headers["IF-MATCH"] == "*"
    assert request.headers["Content-Type"] == "application/json;odata=nometadata"
    assert json.loads(request.content) == {
        "enableVersioning": True,
        "majorVersionLimit": 3,
        "majorWithMinorVersionsLimit": 1,
    }


@pytest.mark.asyncio
async def test_error_status_is_returned_not_raised():
    """Test that a 403 comes back as a failed response."""
    response = await _connector(
        lambda request: httpx.Response(403, json={"error": "denied"})
    ).get_site_metadata(SITE, "tok")

    assert response.status_ok is False
    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [429, 503])
async def test_throttling_is_retried(status_code):
    """Test that a throttled response (429 or 503) is retried after Retry-After."""
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) == 1:
            return httpx.Response(status_code, headers={"Retry-After": "1"})
        return httpx.Response(200, json={"Title": "Finance"})

    response = await _connector(handler).get_site_metadata(SITE, "tok")

    assert response.status_ok is True
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_throttling_retries_exhausted():
    """Test that persistent throttling ends as a failed 429 response."""
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(429, headers={"Retry-After": "1"})

    response = await _connector(handler).get_site_metadata(SITE, "tok")

    assert response.status_ok is False
    assert response.status_code == 429
    assert len(calls) == 3


@pytest.mark.asyncio
async def test_transport_error_raises():
    """Test that a connection failure surfaces as httpx.HTTPError."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(httpx.HTTPError):
        await _connector(handler).get_site_metadata(SITE, "tok")


def test_describe_status():
    """Test operator-facing status descriptions."""
    assert describe_status(404) == "HTTP 404 (not found)"
    assert describe_status(500).startswith("HTTP 500")


@pytest.mark.asyncio
async def test_server_too_busy_retries_exhausted():
    """Test that a persistent 503 ends as a failed response with a throttling description."""
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(503, headers={"Retry-After": "1"})

    response = await _connector(handler).get_site_metadata(SITE, "tok")

    assert response.status_ok is False
    assert response.status_code == 503
    assert len(calls) == 3
    assert describe_status(503) == "HTTP 503 (SharePoint is too busy, throttled)"


def test_other_server_errors_are_not_retried():
    """Test the retry predicate: only throttling statuses and timeouts qualify."""
    request = httpx.Request("GET", SITE)

    def status_error(code):
        return httpx.HTTPStatusError(
            "error", request=request, response=httpx.Response(code, request=request)
        )

    assert should_retry_on_rate_limit_or_timeout(status_error(503)) is True
    assert should_retry_on_rate_limit_or_timeout(status_error(429)) is True
    assert should_retry_on_rate_limit_or_timeout(status_error(500)) is False
    assert should_retry_on_rate_limit_or_timeout(httpx.ReadTimeout("slow")) is True
