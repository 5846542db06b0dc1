"""YAML loader for goship configuration files."""

from __future__ import annotations

import typing as typ
from pathlib import Path

import msgspec
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .models import Config
from .validation import ConfigValidationError, validate_config

YAML_VERSION = (1, 2)
_INLINE_REPO_KEYS = ("repo_owner", "repo_name")


def load_config(path: Path | str) -> Config:
    """Parse and validate a YAML configuration file."""
    yaml = _yaml()
    path_obj = Path(path)

    try:
        loaded = yaml.load(path_obj.read_text(encoding="utf-8"))
    except (OSError, YAMLError) as exc:
        raise ConfigValidationError([f"failed to parse YAML: {exc}"]) from exc

    if loaded is None:
        raise ConfigValidationError(["configuration file is empty"])

    return config_from_document(loaded)


def config_from_document(document: object) -> Config:
    """Convert a decoded YAML/JSON document into a validated :class:`Config`."""
    if not isinstance(document, dict):
        raise ConfigValidationError(["configuration root must be a mapping"])

    try:
        config = msgspec.convert(_lift_inline_repos(document), type=Config)
    except msgspec.ValidationError as exc:
        raise ConfigValidationError([f"schema validation failed: {exc}"]) from exc

    return validate_config(config)


def _lift_inline_repos(document: dict[str, typ.Any]) -> dict[str, typ.Any]:
    # Projects carry repo_owner/repo_name inline; Project expects a nested repo.
    projects = document.get("projects")
    if not isinstance(projects, list):
        return document

    lifted: list[object] = []
    for raw in projects:
        if isinstance(raw, dict) and "repo" not in raw:
            project = {k: v for k, v in raw.items() if k not in _INLINE_REPO_KEYS}
            project["repo"] = {k: raw[k] for k in _INLINE_REPO_KEYS if k in raw}
            lifted.append(project)
        else:
            lifted.append(raw)
    return {**document, "projects": lifted}


def _yaml() -> YAML:
    yaml = YAML(typ="safe")
    yaml.version = YAML_VERSION
    yaml.allow_duplicate_keys = False
    return yaml
