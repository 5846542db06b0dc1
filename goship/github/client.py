"""GitHub REST client for commit-range comparisons."""

from __future__ import annotations

import dataclasses
import os
import typing as typ

import httpx

from goship.errors import AuthConfigError, ExternalAPIError
from goship.logging import get_logger, log_warning

if typ.TYPE_CHECKING:
    from goship.config.models import Repo

logger = get_logger(__name__)

GITHUB_TOKEN_ENV_VAR = "GITHUB_API_TOKEN"
SERVICE_NAME = "GitHub"

_HTTP_OK_RANGE = range(200, 300)
_AUTH_FAILURE_STATUSES = frozenset({401, 403})


@dataclasses.dataclass(frozen=True, slots=True)
class GitHubConfig:
    """Configuration for the GitHub REST API client.

    ``token`` may be empty: the client only refuses to work when a comparison
    is first requested, so a missing token surfaces on first use rather than
    at process start.
    """

    token: str
    api_url: str = "https://api.github.com"
    timeout_s: float = 20.0
    user_agent: str = "goship/0.1"
    per_page: int = 100
    max_pages: int = 10

    @classmethod
    def from_env(cls) -> GitHubConfig:
        """Build configuration from the ``GITHUB_API_TOKEN`` env var."""
        return cls(token=os.environ.get(GITHUB_TOKEN_ENV_VAR, "").strip())

    def __repr__(self) -> str:
        """Hide the token from debug output."""
        return f"GitHubConfig(api_url={self.api_url!r}, token='***')"


class CommitSource(typ.Protocol):
    """Interface for fetching commit messages of a revision range."""

    async def compare_commit_messages(
        self, repo: Repo, base: str, head: str
    ) -> list[str]:
        """Return commit messages between ``base`` (exclusive) and ``head``."""
        ...


def _commit_messages(payload: object) -> list[str]:
    if not isinstance(payload, dict):
        raise ExternalAPIError.malformed(SERVICE_NAME, "response")
    commits = payload.get("commits")
    if not isinstance(commits, list):
        raise ExternalAPIError.malformed(SERVICE_NAME, "commits")

    messages: list[str] = []
    for entry in commits:
        if not isinstance(entry, dict):
            continue
        commit = entry.get("commit")
        message = commit.get("message") if isinstance(commit, dict) else None
        if isinstance(message, str):
            messages.append(message)
    return messages


def _next_page_url(response: httpx.Response) -> str | None:
    link = response.links.get("next")
    if not link:
        return None
    url = link.get("url")
    return url if isinstance(url, str) and url else None


class GitHubCompareClient:
    """GitHub implementation of :class:`CommitSource`."""

    def __init__(
        self,
        config: GitHubConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with the provided API configuration."""
        self._config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=config.timeout_s)

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._config.token}",
            "Accept": "application/vnd.github+json",
            "User-Agent": self._config.user_agent,
        }

    async def compare_commit_messages(
        self, repo: Repo, base: str, head: str
    ) -> list[str]:
        """Return commit messages in the order GitHub's compare API lists them.

        Pages are followed through the ``Link`` header until exhausted or
        ``max_pages`` is reached.

        Raises
        ------
        AuthConfigError
            If no token is configured or GitHub rejects it.
        ExternalAPIError
            On transport failures, other non-2xx statuses, or malformed bodies.

        """
        if not self._config.token:
            raise AuthConfigError.missing_token(SERVICE_NAME, GITHUB_TOKEN_ENV_VAR)

        url: str | None = (
            f"{self._config.api_url.rstrip('/')}/repos/{repo.owner}/{repo.name}"
            f"/compare/{base}...{head}"
        )
        params: dict[str, int] | None = {"per_page": self._config.per_page}
        messages: list[str] = []
        pages = 0

        while url is not None:
            if pages >= self._config.max_pages:
                log_warning(
                    logger,
                    "compare %s %s...%s truncated after %d pages",
                    repo.slug,
                    base,
                    head,
                    pages,
                )
                break
            response = await self._get(url, params)
            messages.extend(_commit_messages(self._decode(response)))
            pages += 1
            url = _next_page_url(response)
            params = None

        return messages

    async def _get(
        self, url: str, params: dict[str, int] | None
    ) -> httpx.Response:
        try:
            response = await self._client.get(
                url, params=params, headers=self._headers()
            )
        except httpx.TransportError as exc:
            raise ExternalAPIError.transport(SERVICE_NAME, exc) from exc

        if response.status_code in _AUTH_FAILURE_STATUSES:
            raise AuthConfigError.rejected(SERVICE_NAME, response.status_code)
        if response.status_code not in _HTTP_OK_RANGE:
            raise ExternalAPIError.http_error(SERVICE_NAME, response.status_code)
        return response

    @staticmethod
    def _decode(response: httpx.Response) -> object:
        try:
            return response.json()
        except ValueError as exc:
            raise ExternalAPIError.malformed(SERVICE_NAME, "body") from exc
