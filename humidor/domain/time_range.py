"""Historical time ranges offered to consumers, with their sample limits."""

from datetime import datetime, timedelta
from enum import Enum


class TimeRange(str, Enum):
    DAY = "24h"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"

    @property
    def duration(self) -> timedelta:
        return {
            TimeRange.DAY: timedelta(days=1),
            TimeRange.WEEK: timedelta(days=7),
            TimeRange.MONTH: timedelta(days=30),
            TimeRange.YEAR: timedelta(days=365),
        }[self]

    @property
    def limit(self) -> int:
        """Maximum samples requested for the range."""
        return {
            TimeRange.DAY: 24 * 6,  # every 10 minutes
            TimeRange.WEEK: 7 * 24,  # hourly
            TimeRange.MONTH: 30 * 24,  # hourly
            TimeRange.YEAR: 365,  # daily
        }[self]

    def start(self, now: datetime) -> datetime:
        return now - self.duration
