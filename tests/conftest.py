"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import pytest

from goship.github.client import GITHUB_TOKEN_ENV_VAR
from goship.logging import LOG_LEVEL_ENV_VAR
from goship.notify.orchestrator import TIME_ZONE_ENV_VAR


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the caller's goship settings out of every test."""
    for name in (GITHUB_TOKEN_ENV_VAR, LOG_LEVEL_ENV_VAR, TIME_ZONE_ENV_VAR):
        monkeypatch.delenv(name, raising=False)
