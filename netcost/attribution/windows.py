"""
Request windows and billing periods.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List

from netcost.core.errors import InvalidWindowError


@dataclass(frozen=True)
class Window:
    """A half-open time range ``[start, end)``."""
    start: datetime
    end: datetime

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def is_future(self, now: datetime) -> bool:
        return self.start > now

    def __str__(self) -> str:
        return f"[{self.start.isoformat()}, {self.end.isoformat()})"


def expand_windows(start: datetime, end: datetime, resolution: timedelta) -> List[Window]:
    """
    Split ``[start, end)`` into consecutive windows of ``resolution``.

    Raises:
        InvalidWindowError: if the range is empty, the resolution is not
            positive, or the range is not a whole number of resolutions
    """
    if resolution <= timedelta(0):
        raise InvalidWindowError(f"resolution must be positive, got {resolution}")
    if end <= start:
        raise InvalidWindowError(f"end {end.isoformat()} is not after start {start.isoformat()}")
    if (end - start) % resolution:
        raise InvalidWindowError(
            f"range {start.isoformat()} - {end.isoformat()} is not a multiple of {resolution}"
        )

    windows = []
    current = start
    while current < end:
        windows.append(Window(current, current + resolution))
        current += resolution
    return windows


def billing_period_start(reference: datetime, start_day: int) -> datetime:
    """
    Start of the billing period that contains ``reference``.

    Periods begin at midnight on ``start_day`` of each month. When that day
    does not exist in the previous month it is clamped to the month's last day.
    """
    if not 1 <= start_day <= 31:
        raise ValueError(f"billing period start day must be within 1..31, got {start_day}")

    midnight = reference.replace(hour=0, minute=0, second=0, microsecond=0)
    if start_day <= reference.day:
        return midnight.replace(day=start_day)

    year, month = reference.year, reference.month - 1
    if month == 0:
        year, month = year - 1, 12
    day = min(start_day, calendar.monthrange(year, month)[1])
    return midnight.replace(year=year, month=month, day=day)
