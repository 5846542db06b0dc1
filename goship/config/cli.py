"""Command-line helper that validates a goship configuration file."""

from __future__ import annotations

import argparse
from pathlib import Path

import msgspec

from .loader import load_config
from .validation import ConfigValidationError


def main(argv: list[str] | None = None) -> int:
    """Validate a configuration file and optionally export it as JSON.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Exit code: 0 on success, 1 when validation fails.

    """
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("config", type=Path, help="YAML configuration to validate")
    parser.add_argument(
        "--json-out",
        type=Path,
        default=None,
        help="Optional path to write the validated configuration as JSON",
    )
    args = parser.parse_args(argv)

    config_path: Path = args.config
    try:
        config = load_config(config_path)
    except ConfigValidationError as exc:
        print(f"Configuration validation failed for {config_path}:")
        for issue in exc.issues:
            print(f"  - {issue}")
        return 1

    if args.json_out:
        args.json_out.write_bytes(msgspec.json.encode(config))

    print(
        f"configuration {config_path} is valid "
        f"({len(config.projects)} projects / "
        f"{sum(len(project.environments) for project in config.projects)} envs)"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
