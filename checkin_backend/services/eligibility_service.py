"""
eligibility_service.py
----------------------
Decides whether a member may play as of a point in the season.

Remaining events are never read from Suspension.events_remaining. For every
active suspension we replay the event timeline:

1. Anchor: the event in which the card was shown (via card_source_id -> match
   -> event). Falls back to the stored suspension_start when the match or its
   event cannot be found.
2. Count events strictly after the anchor and strictly before `as_of`.
   The event that produced the card does not count, and neither does the
   event being checked into.
3. remaining = max(0, suspension_event_count - events counted).

Totals add up across suspensions. If any read fails, is_eligible() answers
False (the member stays out until the data is back).
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from checkin_backend.core.errors import DependencyUnavailable
from checkin_backend.models.league_model import Event
from checkin_backend.models.suspension_model import Suspension
from checkin_backend.services.league_records import event_timestamp, find_match, list_events
from checkin_backend.services.suspension_service import list_active_suspensions

logger = logging.getLogger(__name__)


async def effective_start(db: AsyncSession, suspension: Suspension) -> datetime:
    """Timestamp of the event where the card happened, else the stored start."""
    if suspension.card_source_id:
        match = await find_match(db, suspension.card_source_id)
        if match is not None:
            anchored = await event_timestamp(db, match.event_id)
            if anchored is not None:
                return anchored
        logger.debug(
            "Suspension %s: source %s not resolvable, using stored start",
            suspension.id, suspension.card_source_id,
        )
    return suspension.suspension_start


def events_between(events: Sequence[Event], start: datetime, as_of: datetime) -> int:
    """Number of events with start < date < as_of."""
    return sum(1 for event in events if start < event.date < as_of)


def remaining_for(suspension: Suspension, events_passed: int) -> int:
    return max(0, suspension.suspension_event_count - events_passed)


async def suspension_breakdown(db: AsyncSession, member_id: str, as_of: datetime) -> List[Dict]:
    """
    Per-suspension view of what the member still owes as of `as_of`.
    Raises DependencyUnavailable if the ledger or timeline cannot be read.
    """
    # Suspensions and the timeline are read in the same session
    suspensions = await list_active_suspensions(db, member_id)
    if not suspensions:
        return []
    timeline = await list_events(db, before=as_of)

    breakdown = []
    for suspension in suspensions:
        start = await effective_start(db, suspension)
        passed = events_between(timeline, start, as_of)
        breakdown.append({
            "suspension_id": suspension.id,
            "card_type": suspension.card_type,
            "effective_start": start,
            "suspension_event_count": suspension.suspension_event_count,
            "events_passed": passed,
            "remaining_events": remaining_for(suspension, passed),
        })
    return breakdown


async def remaining_events(db: AsyncSession, member_id: str, as_of: datetime) -> int:
    """Total events the member still has to sit out as of `as_of`."""
    breakdown = await suspension_breakdown(db, member_id, as_of)
    total = sum(item["remaining_events"] for item in breakdown)
    logger.debug("Member %s owes %s event(s) as of %s", member_id, total, as_of)
    return total


async def eligibility(db: AsyncSession, member_id: str, as_of: datetime) -> Tuple[Optional[int], bool]:
    """
    (remaining_events, eligible) for the member at `as_of`.
    Fails closed: when the ledger or timeline cannot be read the result is
    (None, False).
    """
    try:
        remaining = await remaining_events(db, member_id, as_of)
    except DependencyUnavailable as exc:
        logger.warning(
            "⚠️ Eligibility for member %s as of %s could not be computed (%s); treating as NOT eligible",
            member_id, as_of, exc.detail,
        )
        return None, False
    return remaining, remaining == 0


async def is_eligible(db: AsyncSession, member_id: str, as_of: datetime) -> bool:
    """True only when the member owes no events (False if that cannot be established)."""
    _, eligible = await eligibility(db, member_id, as_of)
    return eligible
