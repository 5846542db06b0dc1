"""Deployment configuration: projects, environments and their lookups.

Load and query a configuration file::

    >>> from goship.config import load_config, find_environment_by_name
    >>> config = load_config("config.yaml")
    >>> env = find_environment_by_name(config.projects, "dashboard", "staging")

"""

from __future__ import annotations

from .loader import config_from_document, load_config
from .lookup import (
    effective_source_repo,
    find_environment_by_name,
    find_project_by_name,
)
from .models import (
    Config,
    Environment,
    PivotalConfiguration,
    Project,
    Repo,
    StoryId,
)
from .validation import ConfigValidationError, validate_config

__all__ = [
    "Config",
    "ConfigValidationError",
    "Environment",
    "PivotalConfiguration",
    "Project",
    "Repo",
    "StoryId",
    "config_from_document",
    "effective_source_repo",
    "find_environment_by_name",
    "find_project_by_name",
    "load_config",
    "validate_config",
]
