"""
league_records.py
-----------------
Read-only access to the records the suspension engine depends on but does not
own: the event timeline, matches, match cards and disciplinary history.

Every read goes through `bounded()`, so a slow or broken database surfaces as
DependencyUnavailable after DEPENDENCY_TIMEOUT_SECONDS instead of hanging the
request. Nothing in this module writes.
"""

import asyncio
import logging
from datetime import datetime, time
from typing import Awaitable, List, Optional, Tuple, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from checkin_backend.core.config import DEPENDENCY_TIMEOUT_SECONDS
from checkin_backend.core.errors import DependencyUnavailable
from checkin_backend.models.card_model import CardType, DisciplinaryRecord, MatchCard
from checkin_backend.models.league_model import Event, Match, TeamMember

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def bounded(awaitable: Awaitable[T], what: str) -> T:
    """
    Await a collaborator read with the configured timeout.
    Timeouts and database errors become DependencyUnavailable.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=DEPENDENCY_TIMEOUT_SECONDS)
    except asyncio.TimeoutError as exc:
        logger.error("Read timed out after %.1fs: %s", DEPENDENCY_TIMEOUT_SECONDS, what)
        raise DependencyUnavailable(f"{what} timed out") from exc
    except SQLAlchemyError as exc:
        logger.error("Read failed: %s (%s)", what, exc)
        raise DependencyUnavailable(f"{what} failed") from exc


async def _all(db: AsyncSession, stmt) -> list:
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def _first(db: AsyncSession, stmt):
    result = await db.execute(stmt)
    return result.scalars().first()


# ================================
# Schedule helpers
# ================================

def combine_match_start(event_date: Optional[datetime], match_time: Optional[time]) -> Optional[datetime]:
    """Kick-off = the event's calendar day at `match_time`. None when either part is missing."""
    if event_date is None or match_time is None:
        return None
    return datetime.combine(event_date.date(), match_time)


def card_timestamp(event_date: datetime, match_time: Optional[time]) -> datetime:
    """
    When a card happened: kick-off if the match has a time, otherwise the event date.
    """
    return combine_match_start(event_date, match_time) or event_date


# ================================
# Event timeline
# ================================

async def list_events(
    db: AsyncSession,
    after: Optional[datetime] = None,
    before: Optional[datetime] = None,
) -> List[Event]:
    """
    Events in ascending chronological order.
    `after` / `before` are exclusive bounds when given.
    """
    stmt = select(Event)
    if after is not None:
        stmt = stmt.where(Event.date > after)
    if before is not None:
        stmt = stmt.where(Event.date < before)
    stmt = stmt.order_by(Event.date, Event.id)
    return await bounded(_all(db, stmt), "list events")


async def find_event(db: AsyncSession, event_id: str) -> Optional[Event]:
    return await bounded(_first(db, select(Event).where(Event.id == event_id)), f"find event {event_id}")


async def event_timestamp(db: AsyncSession, event_id: str) -> Optional[datetime]:
    event = await find_event(db, event_id)
    return event.date if event else None


# ================================
# Matches & members
# ================================

async def find_match(db: AsyncSession, match_id: str) -> Optional[Match]:
    return await bounded(_first(db, select(Match).where(Match.id == match_id)), f"find match {match_id}")


async def match_start(db: AsyncSession, match: Match) -> Optional[datetime]:
    """Scheduled kick-off for `match`, or None when it has no time slot yet."""
    if match.match_time is None:
        return None
    return combine_match_start(await event_timestamp(db, match.event_id), match.match_time)


async def find_member(db: AsyncSession, member_id: str) -> Optional[TeamMember]:
    return await bounded(
        _first(db, select(TeamMember).where(TeamMember.id == member_id)), f"find member {member_id}"
    )


# ================================
# Cards
# ================================

async def list_match_cards(
    db: AsyncSession,
    member_id: Optional[str] = None,
    match_id: Optional[str] = None,
) -> List[MatchCard]:
    stmt = select(MatchCard)
    if member_id is not None:
        stmt = stmt.where(MatchCard.member_id == member_id)
    if match_id is not None:
        stmt = stmt.where(MatchCard.match_id == match_id)
    stmt = stmt.order_by(MatchCard.id)
    return await bounded(_all(db, stmt), "list match cards")


async def list_timed_match_cards(
    db: AsyncSession,
    member_id: Optional[str] = None,
    card_type: Optional[CardType] = None,
) -> List[Tuple[MatchCard, datetime, datetime]]:
    """
    Match cards joined to their match and event.
    Yields (card, card_timestamp, event_date) tuples.
    """
    stmt = (
        select(MatchCard, Match.match_time, Event.date)
        .join(Match, Match.id == MatchCard.match_id)
        .join(Event, Event.id == Match.event_id)
    )
    if member_id is not None:
        stmt = stmt.where(MatchCard.member_id == member_id)
    if card_type is not None:
        stmt = stmt.where(MatchCard.card_type == card_type)

    async def _rows():
        result = await db.execute(stmt.order_by(Event.date, MatchCard.id))
        return result.all()

    rows = await bounded(_rows(), "list timed match cards")
    return [(card, card_timestamp(event_date, match_time), event_date) for card, match_time, event_date in rows]


async def list_disciplinary_records(
    db: AsyncSession,
    member_id: Optional[str] = None,
    team_id: Optional[str] = None,
) -> List[DisciplinaryRecord]:
    """Lifetime history, newest incident first."""
    stmt = select(DisciplinaryRecord)
    if member_id is not None:
        stmt = stmt.where(DisciplinaryRecord.member_id == member_id)
    if team_id is not None:
        stmt = stmt.join(TeamMember, TeamMember.id == DisciplinaryRecord.member_id).where(
            TeamMember.team_id == team_id
        )
    stmt = stmt.order_by(DisciplinaryRecord.incident_date.desc(), DisciplinaryRecord.created_at.desc())
    return await bounded(_all(db, stmt), "list disciplinary records")
