"""
season.py
---------
League seasons by calendar:

- Spring: Feb 15 - Jun 30
- Fall:   Aug 1  - Dec 31

Dates between seasons belong to the upcoming one (January and early February
to Spring, July to Fall). Everything here takes an explicit date so callers
decide what "today" means.
"""

from dataclasses import dataclass
from datetime import date, datetime


SPRING_START = (2, 15)
SPRING_END = (6, 30)
FALL_START = (8, 1)
FALL_END = (12, 31)


@dataclass(frozen=True)
class SeasonWindow:
    name: str
    year: int
    start: date
    end: date

    def cutoff(self) -> datetime:
        """Season start as a naive datetime, the form card timestamps are stored in."""
        return datetime(self.start.year, self.start.month, self.start.day)


def _spring(year: int) -> SeasonWindow:
    return SeasonWindow("Spring", year, date(year, *SPRING_START), date(year, *SPRING_END))


def _fall(year: int) -> SeasonWindow:
    return SeasonWindow("Fall", year, date(year, *FALL_START), date(year, *FALL_END))


def season_for(day: date) -> SeasonWindow:
    """Return the season `day` belongs to (or the next one, between seasons)."""
    if isinstance(day, datetime):
        day = day.date()

    # January and early February look ahead to the coming Spring
    spring = _spring(day.year)
    if day <= spring.end:
        return spring
    # July and the Fall months both resolve to Fall of the same year
    return _fall(day.year)
