"""Name-based lookups over configured projects."""

from __future__ import annotations

import typing as typ

import msgspec

from goship.errors import NotFoundError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .models import Environment, Project, Repo


def find_project_by_name(projects: cabc.Iterable[Project], name: str) -> Project:
    """Return the first project named ``name``.

    Raises
    ------
    NotFoundError
        If no project has exactly that name.

    """
    for project in projects:
        if project.name == name:
            return project
    raise NotFoundError.project(name)


def find_environment_by_name(
    projects: cabc.Iterable[Project], project_name: str, env_name: str
) -> Environment:
    """Return a copy of environment ``env_name`` of project ``project_name``.

    The returned environment is detached from configuration: mutating it
    (for example flipping ``is_locked``) does not affect ``projects``.

    Raises
    ------
    NotFoundError
        If the project or the environment does not exist.

    """
    project = find_project_by_name(projects, project_name)
    for environment in project.environments:
        if environment.name == env_name:
            return msgspec.structs.replace(
                environment, hosts=list(environment.hosts)
            )
    raise NotFoundError.environment(env_name)


def effective_source_repo(project: Project) -> Repo:
    """Return ``project.source`` when set, else ``project.repo``."""
    return project.source_repo
