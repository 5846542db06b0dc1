"""Unit tests for story reference extraction and commit-range scanning."""

from __future__ import annotations

import pytest

from goship.config.models import Repo
from goship.errors import ExternalAPIError
from goship.github import CommitRangeScanner, extract_story_id, unique_story_ids
from tests.helpers.notify_fakes import FakeCommitSource


@pytest.mark.parametrize(
    ("message", "expected"),
    [
        ("[anything#123] rest", "123"),
        ("[#7]", "7"),
        ("[Fix #100] patch\n\nlonger body", "100"),
        ("Merge pull request #12 from gengo/x\n\n[Feature#4242] add", "4242"),
        ("prefix [finishes #9] suffix", "9"),
    ],
)
def test_extract_story_id_matches_bracketed_tags(message: str, expected: str) -> None:
    """A bracketed tag ending in #digits yields the digits."""
    assert extract_story_id(message) == expected


@pytest.mark.parametrize(
    "message",
    [
        "no brackets here",
        "[no hash here]",
        "[Fix#] missing digits",
        "Fix#123 without brackets",
        "[Fix#12a] trailing letters",
        "",
    ],
)
def test_extract_story_id_ignores_other_text(message: str) -> None:
    """Messages without a well-formed tag contribute nothing."""
    assert extract_story_id(message) is None


def test_extract_story_id_uses_single_match_per_message() -> None:
    """The greedy bracket match takes the last tag of a message."""
    assert extract_story_id("[a#1] and [b#2]") == "2"
    assert unique_story_ids(["[a#1] and [b#2]"]) == ["2"]


def test_unique_story_ids_keeps_first_appearance() -> None:
    """Repeated ids appear once, at the position of their first occurrence."""
    messages = ["[x#42] a", "[y#7] b", "plain", "[z#42] c", "[w#8] d"]

    assert unique_story_ids(messages) == ["42", "7", "8"]


@pytest.mark.asyncio
async def test_scan_commit_range_deduplicates_in_provider_order() -> None:
    """Scanning the documented range yields each story once, in order."""
    source = FakeCommitSource(
        ["[Fix#100] patch", "unrelated", "[Fix#100] patch2", "[Add#200] feature"]
    )
    scanner = CommitRangeScanner(source)

    story_ids = await scanner.scan_commit_range("gengo", "goship", "base", "head")

    assert story_ids == ["100", "200"]
    assert source.calls == [(Repo(owner="gengo", name="goship"), "base", "head")]


@pytest.mark.asyncio
async def test_scan_commit_range_empty_range_is_not_an_error() -> None:
    """An identical base and head produce an empty list."""
    scanner = CommitRangeScanner(FakeCommitSource([]))

    assert await scanner.scan_commit_range("gengo", "goship", "abc", "abc") == []


@pytest.mark.asyncio
async def test_scan_commit_range_propagates_source_errors() -> None:
    """Provider failures abort the scan without a partial result."""
    error = ExternalAPIError.http_error("GitHub", 404)
    scanner = CommitRangeScanner(FakeCommitSource(["[a#1]"], error=error))

    with pytest.raises(ExternalAPIError) as excinfo:
        await scanner.scan_commit_range("gengo", "missing", "a", "b")

    assert excinfo.value is error
