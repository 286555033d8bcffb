"""
Clock used by the borrowing workflow and the reports.

Services never call ``date.today()`` directly so tests can pin the date.
"""

from datetime import date, datetime, timezone


class Clock:
    """Wall clock returning the current UTC date."""

    def today(self) -> date:
        return datetime.now(timezone.utc).date()


class FixedClock(Clock):
    """Clock pinned to a single date."""

    def __init__(self, current: date):
        self.current = current

    def today(self) -> date:
        return self.current


def get_clock() -> Clock:
    return Clock()
