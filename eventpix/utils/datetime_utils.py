"""
Centralized DateTime Utilities
==============================

Timestamps persisted to MongoDB are always timezone-aware UTC. Values shown
to operators (API responses, chat messages) are rendered in the timezone
configured in eventpix.core.config.

Functions:
- utc_now(): current UTC time for persistence
- ensure_utc(): normalize a stored datetime into aware UTC
- to_iso(): ISO 8601 string in the application timezone
"""
import logging
import zoneinfo
from datetime import datetime, timedelta, timezone as dt_timezone, tzinfo
from typing import Optional

from ..core.config import get_settings

logger = logging.getLogger(__name__)


def _get_app_timezone() -> tzinfo:
    """
    Get the application timezone from config.
    Returns UTC if the configured name is invalid.
    """
    tz_str = get_settings().local_timezone

    if tz_str.upper() == "UTC":
        return dt_timezone.utc

    try:
        return zoneinfo.ZoneInfo(tz_str)
    except (zoneinfo.ZoneInfoNotFoundError, ValueError):
        logger.warning("Invalid timezone '%s', falling back to UTC", tz_str)
        return dt_timezone.utc


def utc_now() -> datetime:
    """
    Get current UTC time as a timezone-aware datetime.

    Use this for all timestamps that will be persisted to MongoDB (BSON Date).
    """
    return datetime.now(dt_timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime into a timezone-aware UTC datetime.

    - If dt is None -> None
    - If dt is naive -> assume it represents UTC (this matches MongoDB/PyMongo behavior)
    - If dt is aware -> convert to UTC
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=dt_timezone.utc)
    return dt.astimezone(dt_timezone.utc)


def to_iso(dt: Optional[datetime]) -> Optional[str]:
    """
    Convert datetime object to ISO 8601 string in the application timezone.
    Naive datetimes are treated as UTC.

    Returns:
        ISO 8601 formatted string ('Z' suffix for UTC), or None if dt is None
    """
    if dt is None:
        return None

    local = ensure_utc(dt).astimezone(_get_app_timezone())
    if local.utcoffset() == timedelta(0):
        return local.replace(microsecond=0, tzinfo=None).isoformat() + "Z"
    return local.replace(microsecond=0).isoformat()
