"""Pivotal Tracker v5 client for story lookups and deployment comments."""

from __future__ import annotations

import dataclasses
import typing as typ

import httpx

from goship.errors import ExternalAPIError
from goship.logging import get_logger, log_error, log_warning

if typ.TYPE_CHECKING:
    from goship.config.models import PivotalConfiguration, StoryId

logger = get_logger(__name__)

SERVICE_NAME = "Pivotal"
TOKEN_HEADER = "X-TrackerToken"
_HTTP_OK = 200


@dataclasses.dataclass(frozen=True, slots=True)
class PivotalConfig:
    """Endpoint configuration for the Pivotal Tracker API."""

    base_url: str = "https://www.pivotaltracker.com/services/v5/"
    timeout_s: float = 20.0

    def url(self, path: str) -> str:
        """Join ``path`` onto the API base URL."""
        return f"{self.base_url.rstrip('/')}/{path}"


class StoryCommenter(typ.Protocol):
    """Interface for posting a comment on a tracker story."""

    async def post_comment(
        self,
        story_id: StoryId,
        message: str,
        credential: PivotalConfiguration,
    ) -> None:
        """Post ``message`` as a comment on ``story_id``."""
        ...


def _project_id(payload: object) -> int:
    if not isinstance(payload, dict):
        raise ExternalAPIError.malformed(SERVICE_NAME, "response")
    project_id = payload.get("project_id")
    # bool is an int subclass; a JSON true is still a type mismatch.
    if not isinstance(project_id, int) or isinstance(project_id, bool):
        raise ExternalAPIError.malformed(SERVICE_NAME, "project_id")
    return project_id


class PivotalClient:
    """Pivotal Tracker implementation of :class:`StoryCommenter`.

    The tracker credential is supplied on every call and is only ever placed
    in the ``X-TrackerToken`` request header.
    """

    def __init__(
        self,
        config: PivotalConfig | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client, creating an HTTP client when none is given."""
        self._config = config or PivotalConfig()
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=self._config.timeout_s
        )

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    @staticmethod
    def _headers(credential: PivotalConfiguration) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            TOKEN_HEADER: credential.token,
        }

    async def resolve_project_for_story(
        self, story_id: StoryId, credential: PivotalConfiguration
    ) -> int:
        """Return the id of the tracker project that owns ``story_id``.

        Raises
        ------
        ExternalAPIError
            On transport failure, any non-200 status (including an unknown
            story), or a body without an integer ``project_id``.

        """
        try:
            response = await self._client.get(
                self._config.url(f"stories/{story_id}"),
                headers=self._headers(credential),
            )
        except httpx.TransportError as exc:
            log_error(logger, "could not make get request to Pivotal: %s", exc)
            raise ExternalAPIError.transport(SERVICE_NAME, exc) from exc

        if response.status_code != _HTTP_OK:
            log_error(
                logger, "non-200 response from Pivotal API: %d", response.status_code
            )
            raise ExternalAPIError.http_error(SERVICE_NAME, response.status_code)

        try:
            payload = response.json()
        except ValueError as exc:
            raise ExternalAPIError.malformed(SERVICE_NAME, "body") from exc
        return _project_id(payload)

    async def post_comment(
        self,
        story_id: StoryId,
        message: str,
        credential: PivotalConfiguration,
    ) -> None:
        """Post ``message`` as a comment on ``story_id``.

        The owning project is resolved first; if that fails nothing is
        posted and the error propagates. A non-200 answer to the comment
        itself is only logged, because posting is best effort.

        Raises
        ------
        ExternalAPIError
            If the project lookup fails or the comment request never gets a
            response.

        """
        project_id = await self.resolve_project_for_story(story_id, credential)
        path = f"projects/{project_id}/stories/{story_id}/comments"
        try:
            response = await self._client.post(
                self._config.url(path),
                data={"text": message},
                headers={TOKEN_HEADER: credential.token},
            )
        except httpx.TransportError as exc:
            log_error(logger, "could not make post request to Pivotal: %s", exc)
            raise ExternalAPIError.transport(SERVICE_NAME, exc) from exc

        if response.status_code != _HTTP_OK:
            log_warning(
                logger,
                "non-200 response from Pivotal API for story %s: %d %s",
                story_id,
                response.status_code,
                response.text,
            )
