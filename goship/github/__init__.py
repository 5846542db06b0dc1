"""GitHub commit-range comparison and story reference scanning."""

from __future__ import annotations

from .client import (
    GITHUB_TOKEN_ENV_VAR,
    CommitSource,
    GitHubCompareClient,
    GitHubConfig,
)
from .scanner import (
    STORY_REFERENCE,
    CommitRangeScanner,
    extract_story_id,
    unique_story_ids,
)

__all__ = [
    "GITHUB_TOKEN_ENV_VAR",
    "STORY_REFERENCE",
    "CommitRangeScanner",
    "CommitSource",
    "GitHubCompareClient",
    "GitHubConfig",
    "extract_story_id",
    "unique_story_ids",
]
