import logging
from datetime import datetime
from typing import Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from checkin_backend.core.checkin_lock import is_check_in_locked, lock_timestamp
from checkin_backend.core.clock import league_now
from checkin_backend.core.database import transaction
from checkin_backend.core.errors import (
    CheckInLocked, MemberSuspended, NotFoundError, ValidationError
)
from checkin_backend.models.card_model import MatchAttendee, TeamType
from checkin_backend.models.league_model import Match
from checkin_backend.services.eligibility_service import eligibility
from checkin_backend.services.league_records import bounded, event_timestamp, find_match, find_member, match_start

logger = logging.getLogger(__name__)


async def _require_match(db: AsyncSession, match_id: str) -> Match:
    match = await find_match(db, match_id)
    if match is None:
        raise NotFoundError(f"Match {match_id} not found")
    return match


async def check_in_status(db: AsyncSession, match_id: str, now: datetime) -> Dict:
    """Lock state of a match's attendance sheet at `now`."""
    match = await _require_match(db, match_id)
    start = await match_start(db, match)
    return {
        "match_id": match_id,
        "match_start": start,
        "lock_timestamp": lock_timestamp(start),
        "locked": is_check_in_locked(start, now),
    }


async def _find_attendee(db: AsyncSession, match_id: str, member_id: str) -> Optional[MatchAttendee]:
    async def _load():
        result = await db.execute(
            select(MatchAttendee).where(MatchAttendee.match_id == match_id, MatchAttendee.member_id == member_id)
        )
        return result.scalars().first()

    return await bounded(_load(), f"find attendee {member_id} for match {match_id}")


async def check_in(
    db: AsyncSession,
    match_id: str,
    member_id: str,
    team_type: str,
    now: Optional[datetime] = None,
) -> MatchAttendee:
    """
    Check a member in to a match.

    Refused when the sheet is locked, or when the member still owes suspension
    events as of the match's event (including when that cannot be determined).
    Checking in twice returns the existing attendance row.
    """
    now = now or league_now()
    try:
        team_type = TeamType(team_type)
    except ValueError as exc:
        raise ValidationError(str(exc)) from None

    # 1️⃣ Match exists and is still editable
    match = await _require_match(db, match_id)
    start = await match_start(db, match)
    if is_check_in_locked(start, now):
        raise CheckInLocked(f"Check-in for match {match_id} closed at {lock_timestamp(start)}")

    if await find_member(db, member_id) is None:
        raise NotFoundError(f"Member {member_id} not found")

    existing = await _find_attendee(db, match_id, member_id)
    if existing is not None:
        return existing

    # 2️⃣ Eligibility at the event being checked into
    as_of = await event_timestamp(db, match.event_id)
    if as_of is None:
        raise NotFoundError(f"Event {match.event_id} for match {match_id} not found")
    owed, eligible = await eligibility(db, member_id, as_of)
    if not eligible:
        raise MemberSuspended(f"Member {member_id} is suspended for this event", remaining_events=owed)

    # 3️⃣ Record attendance
    attendee = MatchAttendee(match_id=match_id, member_id=member_id, team_type=team_type, checked_in_at=now)
    async with transaction(db):
        db.add(attendee)
    logger.info("Member %s checked in to match %s (%s)", member_id, match_id, team_type.value)
    return attendee


async def check_out(db: AsyncSession, match_id: str, member_id: str, now: Optional[datetime] = None) -> bool:
    """
    Remove a member's attendance. Returns False when they were not checked in.
    The lock applies here as well.
    """
    now = now or league_now()
    match = await _require_match(db, match_id)
    start = await match_start(db, match)
    if is_check_in_locked(start, now):
        raise CheckInLocked(f"Check-in for match {match_id} closed at {lock_timestamp(start)}")

    async with transaction(db):
        attendee = await _find_attendee(db, match_id, member_id)
        if attendee is None:
            return False
        await db.delete(attendee)
    logger.info("Member %s checked out of match %s", member_id, match_id)
    return True
