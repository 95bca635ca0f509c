# clock.py
# Event dates and kick-off times are stored naive, in the league's local time
# (LEAGUE_TIMEZONE). Anything coming in from outside goes through
# to_league_time() before it is compared with stored values.

from datetime import date, datetime
from typing import Optional

import pytz

from checkin_backend.core.config import LEAGUE_TIMEZONE


def league_tz():
    return pytz.timezone(LEAGUE_TIMEZONE)


def to_league_time(value: Optional[datetime]) -> Optional[datetime]:
    """Aware datetimes are converted to league time; naive ones are taken as-is."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(league_tz()).replace(tzinfo=None)


def league_now() -> datetime:
    return datetime.now(league_tz()).replace(tzinfo=None)


def league_today() -> date:
    return league_now().date()
