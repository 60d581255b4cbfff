"""Human-readable timestamp labels used by page templates."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional, Sequence, Tuple

_MINUTE = 60
_HOUR = 3_600
_DAY = 86_400
_WEEK = 604_800
_MONTH = 2_419_200
_YEAR = 31_536_000

# (exclusive upper bound in seconds, unit length in seconds, unit label)
_BUCKETS: Sequence[Tuple[float, int, str]] = (
    (_HOUR, _MINUTE, "minute"),
    (_DAY, _HOUR, "hour"),
    (_WEEK, _DAY, "day"),
    (_MONTH, _WEEK, "week"),
    (_YEAR, _MONTH, "month"),
    (float("inf"), _YEAR, "year"),
)


class TimeFormatter:
    """Formats ISO-8601 timestamps relative to an injectable clock."""

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or (lambda: datetime.now().astimezone())

    def relative(self, timestamp: object) -> str:
        moment = _parse(timestamp)
        if moment is None:
            return ""
        now = self._clock()
        if now.tzinfo is None:
            now = now.astimezone()
        age = (now - moment).total_seconds()
        if age < _MINUTE:
            return "just now"
        for upper, unit_seconds, label in _BUCKETS:
            if age < upper:
                count = int(age // unit_seconds)
                suffix = "" if count == 1 else "s"
                return f"{count} {label}{suffix} ago"
        return ""  # pragma: no cover - last bucket is unbounded

    def absolute(self, timestamp: object) -> str:
        moment = _parse(timestamp)
        if moment is None:
            return ""
        return moment.strftime("%b %d, %Y")


def _parse(timestamp: object) -> Optional[datetime]:
    if not isinstance(timestamp, str) or not timestamp.strip():
        return None
    try:
        moment = datetime.fromisoformat(timestamp.strip())
        if moment.tzinfo is None:
            moment = moment.astimezone()
    except (ValueError, OverflowError, OSError):
        return None
    return moment


__all__ = ["TimeFormatter"]
