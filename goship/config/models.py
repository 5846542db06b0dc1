"""Typed deployment configuration structures.

The wire field names match the goship YAML configuration file, so a decoded
file converts straight into these structs (see :mod:`goship.config.loader`).
"""

from __future__ import annotations

import msgspec

from goship.common.slug import repo_slug

StoryId = str


class Repo(msgspec.Struct, kw_only=True, frozen=True):
    """Revision repository identity.

    Attributes
    ----------
    owner : str
        GitHub owner or organisation (``repo_owner`` on the wire).
    name : str
        Repository name (``repo_name`` on the wire).

    """

    owner: str = msgspec.field(name="repo_owner")
    name: str = msgspec.field(name="repo_name")

    @property
    def slug(self) -> str:
        """Return the GitHub-style owner/name identifier."""
        return repo_slug(self.owner, self.name)


class Environment(msgspec.Struct, kw_only=True):
    """A deployable environment of a project.

    Attributes
    ----------
    name : str
        Environment name, unique within its project.
    deploy : str
        Deploy target or command handed to the deployment executor.
    repo_path : str
        Path of the checked-out repository on the hosts.
    hosts : list[str]
        Hosts the environment is deployed to, in deploy order.
    branch : str
        Branch deployed to this environment.
    comment : str
        Free-form note shown on the dashboard.
    is_locked : bool
        Lock flag owned by the external locking mechanism.

    """

    name: str
    deploy: str = ""
    repo_path: str = ""
    hosts: list[str] = msgspec.field(default_factory=list)
    branch: str = ""
    comment: str = ""
    is_locked: bool = False


class Project(msgspec.Struct, kw_only=True, frozen=True):
    """A deployable project.

    Attributes
    ----------
    name : str
        Project name shown on the dashboard.
    repo : Repo
        Repository that is deployed.
    environments : list[Environment]
        Deployable environments (``envs`` on the wire).
    source : Repo, optional
        Repository holding the full source history, used when ``repo`` does
        not carry it.
    travis_token : str
        Optional CI token for build status columns.

    """

    name: str
    repo: Repo
    environments: list[Environment] = msgspec.field(
        default_factory=list, name="envs"
    )
    source: Repo | None = None
    travis_token: str = ""

    @property
    def source_repo(self) -> Repo:
        """Return the repository that owns commit history for this project."""
        if self.source is not None:
            return self.source
        return self.repo


class PivotalConfiguration(msgspec.Struct, kw_only=True, frozen=True):
    """Pivotal Tracker credential block."""

    token: str

    def __repr__(self) -> str:
        """Mask the token so it never reaches logs."""
        return "PivotalConfiguration(token='***')"


class Config(msgspec.Struct, kw_only=True):
    """Root of a goship configuration file."""

    projects: list[Project] = msgspec.field(default_factory=list)
    deploy_user: str = ""
    notify: str = ""
    pivotal: PivotalConfiguration | None = None
