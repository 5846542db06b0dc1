"""Extract Pivotal Tracker story ids from a range of commits.

Commits reference a story with a bracketed tag ending in ``#<digits>``, for
example ``[Fix #12345] handle empty config``. Only the first tag of each
message counts.
"""

from __future__ import annotations

import re
import typing as typ

from goship.config.models import Repo
from goship.logging import get_logger, log_debug

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from goship.config.models import StoryId

    from .client import CommitSource

logger = get_logger(__name__)

STORY_REFERENCE = re.compile(r"\[.*#(\d+)\].*")


def extract_story_id(message: str) -> StoryId | None:
    """Return the story id referenced by ``message``, if any.

    Examples
    --------
    >>> extract_story_id("[Fix#123] patch")
    '123'
    >>> extract_story_id("[no hash here]") is None
    True

    """
    match = STORY_REFERENCE.search(message)
    return match.group(1) if match else None


def unique_story_ids(messages: cabc.Iterable[str]) -> list[StoryId]:
    """Return referenced story ids in order of first appearance."""
    seen: set[StoryId] = set()
    story_ids: list[StoryId] = []
    for message in messages:
        story_id = extract_story_id(message)
        if story_id is None or story_id in seen:
            continue
        seen.add(story_id)
        story_ids.append(story_id)
    return story_ids


class CommitRangeScanner:
    """Find the stories referenced by commits in a revision range."""

    def __init__(self, source: CommitSource) -> None:
        """Initialise with the commit source used for comparisons."""
        self._source = source

    async def scan_commit_range(
        self,
        owner: str,
        repo_name: str,
        base_revision: str,
        head_revision: str,
    ) -> list[StoryId]:
        """Return unique story ids referenced between two revisions.

        ``base_revision`` is exclusive and ``head_revision`` inclusive. Errors
        from the commit source propagate unchanged; no partial list is ever
        returned.
        """
        repo = Repo(owner=owner, name=repo_name)
        messages = await self._source.compare_commit_messages(
            repo, base_revision, head_revision
        )
        story_ids = unique_story_ids(messages)
        log_debug(
            logger,
            "scanned %s %s...%s: %d commits, %d stories",
            repo.slug,
            base_revision,
            head_revision,
            len(messages),
            len(story_ids),
        )
        return story_ids
