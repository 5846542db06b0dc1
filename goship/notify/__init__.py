"""Post-deploy tracker notifications."""

from __future__ import annotations

from .orchestrator import (
    DeploymentNotifier,
    NotificationDispatch,
    NotificationOutcome,
    NotifierSettings,
    deployment_message,
)

__all__ = [
    "DeploymentNotifier",
    "NotificationDispatch",
    "NotificationOutcome",
    "NotifierSettings",
    "deployment_message",
]
