"""
Expiration choices offered to paste creators and their display helpers.
"""
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional


class Expiration(str, Enum):
    """Time-to-live options a paste can be created with."""

    ONE_HOUR = "1h"
    ONE_DAY = "1d"
    ONE_WEEK = "1w"
    ONE_MONTH = "1m"
    NEVER = "never"

    @property
    def ttl_seconds(self) -> Optional[int]:
        return _TTL_SECONDS[self]

    @property
    def label(self) -> str:
        return _LABELS[self]

    def expires_at(self, now: datetime) -> Optional[datetime]:
        """Absolute expiry instant for a paste created at ``now``, or None for never."""
        if self.ttl_seconds is None:
            return None
        return now + timedelta(seconds=self.ttl_seconds)


_TTL_SECONDS = {
    Expiration.ONE_HOUR: 3600,
    Expiration.ONE_DAY: 86400,
    Expiration.ONE_WEEK: 604800,
    Expiration.ONE_MONTH: 2592000,
    Expiration.NEVER: None,
}

_LABELS = {
    Expiration.ONE_HOUR: "1 Hour",
    Expiration.ONE_DAY: "1 Day",
    Expiration.ONE_WEEK: "1 Week",
    Expiration.ONE_MONTH: "1 Month",
    Expiration.NEVER: "Never",
}

DEFAULT_EXPIRATION = Expiration.ONE_DAY


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(moment: datetime) -> datetime:
    """Read a timestamp without a timezone as UTC; aware timestamps pass through."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def format_expires_in(expires_at: Optional[datetime], now: Optional[datetime] = None) -> str:
    """
    Human readable countdown shown next to a paste.

    Whole days when at least a day remains, otherwise whole hours,
    otherwise whole minutes.
    """
    if expires_at is None:
        return "Never expires"
    now = now or utcnow()
    remaining = (expires_at - now).total_seconds()
    if remaining <= 0:
        return "Expired"
    hours = int(remaining // 3600)
    days = hours // 24
    if days > 0:
        return f"Expires in {days}d"
    if hours > 0:
        return f"Expires in {hours}h"
    minutes = int(remaining // 60)
    return f"Expires in {minutes}m"
