"""Unit tests for the GitHub compare client."""

from __future__ import annotations

import secrets
import typing as typ

import httpx
import pytest

from goship.config.models import Repo
from goship.errors import AuthConfigError, ExternalAPIError
from goship.github import GitHubCompareClient, GitHubConfig

_TOKEN = secrets.token_hex(8)
_API_URL = "https://example.test"
_REPO = Repo(owner="octo", name="reef")

Handler = typ.Callable[[httpx.Request], httpx.Response]


def _compare_body(*messages: str) -> dict[str, typ.Any]:
    return {
        "status": "ahead",
        "commits": [
            {"sha": f"sha{index}", "commit": {"message": message}}
            for index, message in enumerate(messages)
        ],
    }


def _make_client(
    handler: Handler,
    *,
    token: str = _TOKEN,
    max_pages: int = 10,
) -> GitHubCompareClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GitHubCompareClient(
        GitHubConfig(token=token, api_url=_API_URL, max_pages=max_pages),
        http_client=http_client,
    )


@pytest.mark.asyncio
async def test_compare_requests_range_with_bearer_token() -> None:
    """The compare endpoint is called for base...head with the token header."""
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=_compare_body("[Fix#1] a", "plain"))

    client = _make_client(handler)

    messages = await client.compare_commit_messages(_REPO, "old", "new")

    assert messages == ["[Fix#1] a", "plain"]
    (request,) = requests
    assert request.method == "GET"
    assert request.url.path == "/repos/octo/reef/compare/old...new"
    assert request.url.params["per_page"] == "100"
    assert request.headers["Authorization"] == f"Bearer {_TOKEN}"


@pytest.mark.asyncio
async def test_compare_follows_link_pagination_in_order() -> None:
    """Pages linked with rel=next are fetched and concatenated in order."""
    next_url = f"{_API_URL}/repos/octo/reef/compare/old...new?per_page=100&page=2"
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        if request.url.params.get("page") == "2":
            return httpx.Response(200, json=_compare_body("third"))
        return httpx.Response(
            200,
            json=_compare_body("first", "second"),
            headers={"Link": f'<{next_url}>; rel="next", <{next_url}>; rel="last"'},
        )

    client = _make_client(handler)

    messages = await client.compare_commit_messages(_REPO, "old", "new")

    assert messages == ["first", "second", "third"]
    assert seen[1] == next_url


@pytest.mark.asyncio
async def test_compare_stops_at_max_pages() -> None:
    """Pagination is capped so a runaway range cannot loop forever."""
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(
            200,
            json=_compare_body(f"page {calls}"),
            headers={"Link": f'<{request.url}&page={calls + 1}>; rel="next"'},
        )

    client = _make_client(handler, max_pages=2)

    messages = await client.compare_commit_messages(_REPO, "old", "new")

    assert messages == ["page 1", "page 2"]
    assert calls == 2


@pytest.mark.asyncio
async def test_compare_skips_commits_without_message() -> None:
    """Entries lacking a string message contribute nothing."""

    def handler(request: httpx.Request) -> httpx.Response:
        del request
        body = {"commits": [{"commit": {}}, "junk", {"commit": {"message": "ok"}}]}
        return httpx.Response(200, json=body)

    client = _make_client(handler)

    assert await client.compare_commit_messages(_REPO, "a", "b") == ["ok"]


@pytest.mark.asyncio
async def test_compare_without_token_fails_on_first_use() -> None:
    """A missing token is only reported when a comparison is attempted."""
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=_compare_body())

    client = _make_client(handler, token="")

    with pytest.raises(AuthConfigError, match="GITHUB_API_TOKEN"):
        await client.compare_commit_messages(_REPO, "a", "b")
    assert calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [401, 403])
async def test_compare_rejected_credential_raises_auth_error(status: int) -> None:
    """Authentication failures are distinguished for diagnostics."""
    client = _make_client(lambda request: httpx.Response(status, json={}))

    with pytest.raises(AuthConfigError) as excinfo:
        await client.compare_commit_messages(_REPO, "a", "b")

    assert isinstance(excinfo.value, ExternalAPIError)
    assert excinfo.value.status_code == status
    assert excinfo.value.service == "GitHub"


@pytest.mark.asyncio
async def test_compare_unknown_repository_raises_external_error() -> None:
    """A 404 for an unknown repository aborts the comparison."""
    client = _make_client(lambda request: httpx.Response(404, json={}))

    with pytest.raises(ExternalAPIError) as excinfo:
        await client.compare_commit_messages(_REPO, "a", "b")

    assert not isinstance(excinfo.value, AuthConfigError)
    assert excinfo.value.status_code == 404


@pytest.mark.asyncio
async def test_compare_transport_failure_raises_external_error() -> None:
    """Connection failures are wrapped as ExternalAPIError."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _make_client(handler)

    with pytest.raises(ExternalAPIError, match="could not reach GitHub"):
        await client.compare_commit_messages(_REPO, "a", "b")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, content=b"not json"),
        httpx.Response(200, json=["commits"]),
        httpx.Response(200, json={"status": "identical"}),
    ],
)
async def test_compare_malformed_body_raises(response: httpx.Response) -> None:
    """Bodies without a commits list are rejected."""
    client = _make_client(lambda request: response)

    with pytest.raises(ExternalAPIError, match="missing expected field"):
        await client.compare_commit_messages(_REPO, "a", "b")


def test_config_from_env_reads_token(monkeypatch: pytest.MonkeyPatch) -> None:
    """The GitHub token is read from GITHUB_API_TOKEN and hidden from repr."""
    monkeypatch.setenv("GITHUB_API_TOKEN", f"  {_TOKEN} ")

    config = GitHubConfig.from_env()

    assert config.token == _TOKEN
    assert _TOKEN not in repr(config)


def test_config_from_env_allows_missing_token(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Startup does not fail when the token is absent."""
    monkeypatch.delenv("GITHUB_API_TOKEN", raising=False)

    assert GitHubConfig.from_env().token == ""
