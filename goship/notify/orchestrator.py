"""Post-deploy notification of the tracker stories a deployment shipped.

After a deployment the notifier compares the previous and the new revision,
collects the story ids referenced by the commits in between, and posts a
``Deployed to <env>: <timestamp>`` comment on each story.

Posting is best effort. Each story gets its own :class:`asyncio.Task`, the
notifier returns as soon as the tasks are created, and a failure for one
story is logged without affecting the others or the caller. The tasks are
exposed on the returned :class:`NotificationDispatch` so callers (and tests)
can wait for them with a bounded timeout when they care to.

Usage
-----
>>> async with DeploymentNotifier.from_env() as notifier:
...     dispatch = await notifier.notify_deployment(
...         credential, "production", "gengo", "goship", "abc123", "def456"
...     )

"""

from __future__ import annotations

import asyncio
import dataclasses
import os
import typing as typ

from goship.common.time import DEFAULT_TIME_ZONE, format_deploy_timestamp, utcnow
from goship.config.lookup import (
    effective_source_repo,
    find_environment_by_name,
    find_project_by_name,
)
from goship.github.client import GitHubCompareClient, GitHubConfig
from goship.github.scanner import CommitRangeScanner
from goship.logging import get_logger, log_error, log_info
from goship.pivotal.client import PivotalClient, PivotalConfig

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt
    import types

    from goship.config.models import Config, PivotalConfiguration, StoryId
    from goship.pivotal.client import StoryCommenter

logger = get_logger(__name__)

TIME_ZONE_ENV_VAR = "GOSHIP_TIME_ZONE"


@dataclasses.dataclass(frozen=True, slots=True)
class NotifierSettings:
    """Runtime settings for deployment notifications.

    Attributes
    ----------
    time_zone
        IANA zone used to render the deployment timestamp. Falls back to UTC
        when the zone database lacks it.
    drain_timeout_s
        Upper bound, in seconds, that :meth:`DeploymentNotifier.aclose` waits
        for in-flight postings before closing HTTP clients.

    """

    time_zone: str = DEFAULT_TIME_ZONE
    drain_timeout_s: float = 30.0

    @classmethod
    def from_env(cls) -> NotifierSettings:
        """Read ``GOSHIP_TIME_ZONE``, keeping the default when it is unset."""
        raw = os.environ.get(TIME_ZONE_ENV_VAR, "").strip()
        return cls(time_zone=raw or DEFAULT_TIME_ZONE)


def deployment_message(environment_name: str, timestamp: str) -> str:
    """Return the comment text posted on each deployed story."""
    return f"Deployed to {environment_name}: {timestamp}"


@dataclasses.dataclass(frozen=True, slots=True)
class NotificationOutcome:
    """Result of posting one story comment."""

    story_id: StoryId
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        """Return True when the comment request completed."""
        return self.error is None


@dataclasses.dataclass(frozen=True, slots=True)
class NotificationDispatch:
    """Story postings launched for one deployment."""

    environment_name: str
    message: str
    story_ids: tuple[StoryId, ...] = ()
    tasks: tuple[asyncio.Task[NotificationOutcome], ...] = ()

    async def wait(self, timeout: float | None = None) -> list[NotificationOutcome]:
        """Wait up to ``timeout`` seconds and return outcomes that finished.

        Outcomes are listed in dispatch order. Postings still running when the
        timeout expires are left running and omitted from the result.
        """
        if not self.tasks:
            return []
        done, _pending = await asyncio.wait(self.tasks, timeout=timeout)
        return [task.result() for task in self.tasks if task in done]


class DeploymentNotifier:
    """Scan a deployed commit range and comment on every referenced story."""

    def __init__(
        self,
        scanner: CommitRangeScanner,
        commenter: StoryCommenter,
        *,
        settings: NotifierSettings | None = None,
        clock: cabc.Callable[[], dt.datetime] = utcnow,
        closers: cabc.Sequence[cabc.Callable[[], cabc.Awaitable[None]]] = (),
    ) -> None:
        """Initialise with a scanner, a story commenter and optional settings."""
        self._scanner = scanner
        self._commenter = commenter
        self._settings = settings or NotifierSettings()
        self._clock = clock
        self._closers = tuple(closers)
        self._in_flight: set[asyncio.Task[NotificationOutcome]] = set()

    @classmethod
    def from_env(cls) -> DeploymentNotifier:
        """Build a notifier backed by real GitHub and Pivotal clients.

        The GitHub token comes from ``GITHUB_API_TOKEN``; the tracker
        credential is passed to each notification call.
        """
        github = GitHubCompareClient(GitHubConfig.from_env())
        pivotal = PivotalClient(PivotalConfig())
        return cls(
            CommitRangeScanner(github),
            pivotal,
            settings=NotifierSettings.from_env(),
            closers=(github.aclose, pivotal.aclose),
        )

    @property
    def settings(self) -> NotifierSettings:
        """Return the settings this notifier was built with."""
        return self._settings

    @property
    def in_flight(self) -> int:
        """Return the number of postings that have not finished yet."""
        return len(self._in_flight)

    async def notify_deployment(  # noqa: PLR0913
        self,
        credential: PivotalConfiguration,
        environment_name: str,
        owner: str,
        repo_name: str,
        head_revision: str,
        base_revision: str,
    ) -> NotificationDispatch:
        """Dispatch one comment per story referenced in the deployed range.

        Returns once the range is scanned and every posting task has been
        created; the postings themselves are not awaited.

        Raises
        ------
        ExternalAPIError
            If the commit range cannot be scanned. No posting is dispatched.

        """
        timestamp = format_deploy_timestamp(self._clock(), self._settings.time_zone)
        story_ids = await self._scanner.scan_commit_range(
            owner, repo_name, base_revision, head_revision
        )
        message = deployment_message(environment_name, timestamp)

        tasks = tuple(
            self._dispatch(story_id, message, credential) for story_id in story_ids
        )
        log_info(
            logger,
            "dispatched %d story notifications for %s/%s to %s",
            len(tasks),
            owner,
            repo_name,
            environment_name,
        )
        return NotificationDispatch(
            environment_name=environment_name,
            message=message,
            story_ids=tuple(story_ids),
            tasks=tasks,
        )

    async def notify_for_environment(
        self,
        config: Config,
        project_name: str,
        environment_name: str,
        head_revision: str,
        base_revision: str,
    ) -> NotificationDispatch:
        """Notify stories for a configured project environment.

        The commit range is read from the project's effective source repo.
        Nothing is scanned when the configuration has no tracker credential.

        Raises
        ------
        NotFoundError
            If the project or environment is not configured.
        ExternalAPIError
            If the commit range cannot be scanned.

        """
        project = find_project_by_name(config.projects, project_name)
        environment = find_environment_by_name(
            config.projects, project_name, environment_name
        )
        if config.pivotal is None:
            log_info(
                logger,
                "pivotal is not configured; skipping notifications for %s",
                project.name,
            )
            return NotificationDispatch(environment_name=environment.name, message="")

        repo = effective_source_repo(project)
        return await self.notify_deployment(
            config.pivotal,
            environment.name,
            repo.owner,
            repo.name,
            head_revision,
            base_revision,
        )

    def _dispatch(
        self,
        story_id: StoryId,
        message: str,
        credential: PivotalConfiguration,
    ) -> asyncio.Task[NotificationOutcome]:
        task = asyncio.create_task(
            self._post(story_id, message, credential),
            name=f"goship-notify-{story_id}",
        )
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    async def _post(
        self,
        story_id: StoryId,
        message: str,
        credential: PivotalConfiguration,
    ) -> NotificationOutcome:
        try:
            await self._commenter.post_comment(story_id, message, credential)
        except Exception as exc:  # noqa: BLE001 - postings are isolated per story
            log_error(
                logger,
                "error posting comment for story %s: %s",
                story_id,
                exc,
                exc_info=exc,
            )
            return NotificationOutcome(story_id=story_id, error=exc)
        return NotificationOutcome(story_id=story_id)

    async def drain(self, timeout: float | None = None) -> None:
        """Wait up to ``timeout`` seconds for in-flight postings to finish."""
        if self._in_flight:
            await asyncio.wait(set(self._in_flight), timeout=timeout)

    async def aclose(self) -> None:
        """Drain in-flight postings, then close the underlying clients."""
        await self.drain(self._settings.drain_timeout_s)
        for close in self._closers:
            await close()

    async def __aenter__(self) -> DeploymentNotifier:
        """Return the notifier for use in ``async with`` blocks."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        """Close the notifier on context exit."""
        await self.aclose()
