"""Command-line entry point that notifies tracker stories after a deploy.

Run with ``python -m goship.notify.cli`` or the ``goship-notify`` script::

    goship-notify config.yaml dashboard production --base abc123 --head def456

Reads ``GITHUB_API_TOKEN`` for GitHub access and ``GOSHIP_LOG_LEVEL`` for
log verbosity. Waits at most the notifier's drain timeout for postings, then
exits 0. Exits 1 when the project, the environment, or the commit range
cannot be resolved.
"""

from __future__ import annotations

import argparse
import asyncio
import os
from pathlib import Path

from goship.config.loader import load_config
from goship.config.validation import ConfigValidationError
from goship.errors import ExternalAPIError, NotFoundError
from goship.logging import (
    LOG_LEVEL_ENV_VAR,
    configure_logging,
    get_logger,
    log_error,
    log_warning,
)

from .orchestrator import DeploymentNotifier

logger = get_logger(__name__)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Comment deployed stories.")
    parser.add_argument("config", type=Path, help="YAML configuration file")
    parser.add_argument("project", help="Configured project name")
    parser.add_argument("environment", help="Environment that was deployed")
    parser.add_argument("--base", required=True, help="Previously deployed revision")
    parser.add_argument("--head", required=True, help="Newly deployed revision")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (defaults to GOSHIP_LOG_LEVEL, then INFO)",
    )
    return parser


async def _notify(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    async with DeploymentNotifier.from_env() as notifier:
        dispatch = await notifier.notify_for_environment(
            config, args.project, args.environment, args.head, args.base
        )
        outcomes = await dispatch.wait(notifier.settings.drain_timeout_s)

    finished = {outcome.story_id for outcome in outcomes}
    failed = [outcome.story_id for outcome in outcomes if not outcome.ok]
    unfinished = [sid for sid in dispatch.story_ids if sid not in finished]
    print(
        f"notified {len(outcomes) - len(failed)} of "
        f"{len(dispatch.story_ids)} stories for {args.project}/{args.environment}"
    )
    if failed:
        print(f"failed stories: {', '.join(failed)}")
    if unfinished:
        print(f"unfinished stories: {', '.join(unfinished)}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Parse ``argv``, run the notification and return an exit code."""
    args = _parser().parse_args(argv)

    raw_level = args.log_level or os.environ.get(LOG_LEVEL_ENV_VAR, "INFO")
    normalized_level, invalid_level = configure_logging(raw_level)
    if invalid_level:
        log_warning(
            logger,
            "Invalid log level %r, falling back to %s",
            raw_level,
            normalized_level,
        )

    try:
        return asyncio.run(_notify(args))
    except ConfigValidationError as exc:
        print(f"Configuration validation failed for {args.config}:")
        for issue in exc.issues:
            print(f"  - {issue}")
    except NotFoundError as exc:
        print(str(exc))
    except ExternalAPIError as exc:
        log_error(logger, "could not scan commits: %s", exc)
        print(f"could not scan commits: {exc}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
