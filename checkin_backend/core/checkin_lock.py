# checkin_lock.py
# Attendance edits for a match close a fixed time after kick-off.
# Pure functions: "now" is always passed in by the caller.

from datetime import datetime
from typing import Optional

from checkin_backend.core.config import CHECKIN_LOCK_AFTER


def lock_timestamp(match_start: Optional[datetime]) -> Optional[datetime]:
    """
    Moment after which attendance for the match is frozen.
    Returns None when the match has no scheduled start.
    """
    if match_start is None:
        return None
    return match_start + CHECKIN_LOCK_AFTER


def is_check_in_locked(match_start: Optional[datetime], now: datetime) -> bool:
    """
    True once `now` is strictly past the lock timestamp.
    An unscheduled match is never locked.
    """
    locked_at = lock_timestamp(match_start)
    if locked_at is None:
        return False
    return now > locked_at
