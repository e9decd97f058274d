from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta

logger = logging.getLogger(__name__)

PERIOD_CHOICES = ("today", "yesterday", "week", "month")
DEFAULT_PERIOD = "week"

# Days before today at which each window starts, and the offset of its last day.
_PERIOD_WINDOWS = {
    "today": (0, 0),
    "yesterday": (1, 1),
    "week": (6, 0),
    "month": (29, 0),
}


@dataclass(frozen=True)
class DateRange:
    start_date: str
    end_date: str

    def as_params(self) -> dict[str, str]:
        return {"start_date": self.start_date, "end_date": self.end_date}


def _as_iso(value: date | str) -> str:
    return value if isinstance(value, str) else value.isoformat()


def resolve_date_range(
    period: str,
    start_date: date | str | None = None,
    end_date: date | str | None = None,
) -> DateRange:
    """Turn a period token, or explicit bounds, into an inclusive date range.

    Explicit bounds win only when both are given. Unknown tokens fall back to
    the rolling week so resolution never fails. "Today" is the host's local
    calendar day.
    """
    if start_date and end_date:
        resolved = DateRange(_as_iso(start_date), _as_iso(end_date))
        if resolved.start_date > resolved.end_date:
            logger.warning(
                "Explicit date range is inverted: %s to %s",
                resolved.start_date,
                resolved.end_date,
            )
        return resolved

    days_back, end_offset = _PERIOD_WINDOWS.get(
        period, _PERIOD_WINDOWS[DEFAULT_PERIOD]
    )
    today = date.today()
    start = today - timedelta(days=days_back)
    end = today - timedelta(days=end_offset)
    return DateRange(start.isoformat(), end.isoformat())
