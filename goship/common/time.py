"""Clock helpers and deployment timestamp formatting."""

from __future__ import annotations

import datetime as dt
import zoneinfo

from goship.logging import get_logger, log_error

logger = get_logger(__name__)

DEFAULT_TIME_ZONE = "Asia/Tokyo"
TIMESTAMP_LAYOUT = "%Y-%m-%d %H:%M:%S"


def utcnow() -> dt.datetime:
    """Return an aware UTC timestamp."""
    return dt.datetime.now(dt.UTC)


def load_zone(zone_name: str) -> zoneinfo.ZoneInfo | None:
    """Return the named zone, or ``None`` when its data is unavailable."""
    try:
        return zoneinfo.ZoneInfo(zone_name)
    except (zoneinfo.ZoneInfoNotFoundError, ValueError, OSError):
        return None


def format_deploy_timestamp(
    now: dt.datetime, zone_name: str = DEFAULT_TIME_ZONE
) -> str:
    """Render ``now`` in ``zone_name`` as ``YYYY-MM-DD HH:MM:SS (ABBR)``.

    When the zone database has no entry for ``zone_name`` the timestamp is
    rendered in UTC, labelled ``(UTC)``, and an error is logged. The fallback
    never raises.

    Examples
    --------
    >>> moment = dt.datetime(2024, 1, 2, 3, 4, 5, tzinfo=dt.UTC)
    >>> format_deploy_timestamp(moment)
    '2024-01-02 12:04:05 (JST)'

    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=dt.UTC)

    zone = load_zone(zone_name)
    if zone is None:
        log_error(logger, "time zone information for %s not found", zone_name)
        return f"{now.astimezone(dt.UTC).strftime(TIMESTAMP_LAYOUT)} (UTC)"

    local = now.astimezone(zone)
    return f"{local.strftime(TIMESTAMP_LAYOUT)} ({local.tzname()})"
