"""Pivotal Tracker story lookup and comment client."""

from __future__ import annotations

from .client import TOKEN_HEADER, PivotalClient, PivotalConfig, StoryCommenter

__all__ = ["TOKEN_HEADER", "PivotalClient", "PivotalConfig", "StoryCommenter"]
