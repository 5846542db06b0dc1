"""Validation rules for goship configuration files."""

from __future__ import annotations

import re
import typing as typ

if typ.TYPE_CHECKING:
    from .models import Config, Project, Repo

REPO_SEGMENT_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class ConfigValidationError(ValueError):
    """Raised when a configuration fails structural validation."""

    def __init__(self, issues: list[str]) -> None:
        """Capture validation issues whilst preserving the aggregated message."""
        super().__init__("\n".join(issues))
        self.issues = issues


def validate_config(config: Config) -> Config:
    """Validate a configuration, returning it when all checks pass."""
    issues: list[str] = []
    seen_projects: set[str] = set()

    for project in config.projects:
        if project.name in seen_projects:
            issues.append(f"duplicate project name '{project.name}'")
        seen_projects.add(project.name)
        _validate_project(project, issues)

    if config.pivotal is not None and not config.pivotal.token.strip():
        issues.append("pivotal.token must not be empty when pivotal is configured")

    if issues:
        raise ConfigValidationError(issues)

    return config


def _validate_project(project: Project, issues: list[str]) -> None:
    if not project.name.strip():
        issues.append("project is missing a name")

    _validate_repo(project.name, "repo", project.repo, issues)
    if project.source is not None:
        _validate_repo(project.name, "source", project.source, issues)

    if not project.environments:
        issues.append(f"project {project.name} defines no envs")

    seen_envs: set[str] = set()
    for environment in project.environments:
        if not environment.name.strip():
            issues.append(f"project {project.name} has an env without a name")
        elif environment.name in seen_envs:
            issues.append(
                f"duplicate env name '{environment.name}' in project {project.name}"
            )
        seen_envs.add(environment.name)


def _validate_repo(
    project_name: str, label: str, repo: Repo, issues: list[str]
) -> None:
    for field_name, value in ("repo_owner", repo.owner), ("repo_name", repo.name):
        if not REPO_SEGMENT_PATTERN.match(value):
            issues.append(
                f"project {project_name} {label} {field_name} '{value}' "
                "must contain only letters, digits, dots, underscores, or dashes"
            )
