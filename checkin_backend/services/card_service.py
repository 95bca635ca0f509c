import logging
from typing import Dict, Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from checkin_backend.core.config import DEFAULT_RED_CARD_SUSPENSION_EVENTS
from checkin_backend.core.database import transaction
from checkin_backend.core.errors import NotFoundError, ValidationError
from checkin_backend.models.card_model import CardType, MatchAttendee, MatchCard, TeamType
from checkin_backend.models.league_model import Event, Match
from checkin_backend.models.suspension_model import Suspension, SuspensionCardType, SuspensionStatus
from checkin_backend.services.league_records import bounded, event_timestamp, find_event, find_match, find_member

logger = logging.getLogger(__name__)


# =========================================
# 🟨🟥 Issue a card
# =========================================
async def issue_match_card(
    db: AsyncSession,
    match_id: str,
    member_id: str,
    team_type: str,
    card_type: str,
    reason: Optional[str] = None,
    notes: Optional[str] = None,
    minute: Optional[int] = None,
    suspension_events: Optional[int] = None,
) -> Dict:
    """
    Record a card shown during a match.

    A red card also opens a suspension in the same transaction:
    - card_source_id = the match id
    - suspension_start = the timestamp of the match's event
    - length = suspension_events, or DEFAULT_RED_CARD_SUSPENSION_EVENTS

    Returns {"card": MatchCard, "suspension": Suspension | None}.
    """
    # 1️⃣ Validate input
    try:
        card_type = CardType(card_type)
        team_type = TeamType(team_type)
    except ValueError as exc:
        raise ValidationError(str(exc)) from None
    if minute is not None and minute < 0:
        raise ValidationError("minute must be >= 0")
    if card_type == CardType.RED:
        events = DEFAULT_RED_CARD_SUSPENSION_EVENTS if suspension_events is None else suspension_events
        if events < 1:
            raise ValidationError("suspension_events must be at least 1")
    elif suspension_events is not None:
        raise ValidationError("suspension_events only applies to red cards")

    # 2️⃣ Resolve match, event and member
    match = await find_match(db, match_id)
    if match is None:
        raise NotFoundError(f"Match {match_id} not found")
    if await find_member(db, member_id) is None:
        raise NotFoundError(f"Member {member_id} not found")
    event_date = await event_timestamp(db, match.event_id)
    if event_date is None:
        raise NotFoundError(f"Event {match.event_id} for match {match_id} not found")

    # 3️⃣ Card (+ suspension) in one unit
    card = MatchCard(
        match_id=match_id,
        member_id=member_id,
        team_type=team_type,
        card_type=card_type,
        reason=reason,
        notes=notes,
        minute=minute,
    )
    suspension = None
    async with transaction(db):
        db.add(card)
        if card_type == CardType.RED:
            suspension = Suspension(
                member_id=member_id,
                card_type=SuspensionCardType.RED,
                card_source_id=match_id,
                suspension_event_count=events,
                suspension_start=event_date,
                events_remaining=events,
                status=SuspensionStatus.ACTIVE,
                notes=reason,
            )
            db.add(suspension)

    logger.info(
        "Card %s issued: %s for member %s in match %s%s",
        card.id, card_type.value, member_id, match_id,
        f" -> suspension {suspension.id} ({suspension.suspension_event_count} event(s))" if suspension else "",
    )
    return {"card": card, "suspension": suspension}


# =========================================
# Retract a card
# =========================================
async def retract_match_card(db: AsyncSession, card_id: int) -> Dict:
    """
    Delete a match card together with what depends on it.
    For a red card that is one active red suspension of the same member citing
    the same match (the newest, when two reds came out of one match). Both
    deletions commit together or not at all.
    """
    async with transaction(db):
        card = await bounded(db.get(MatchCard, card_id), f"get card {card_id}")
        if card is None:
            raise NotFoundError(f"Card {card_id} not found")

        suspensions_deleted = 0
        if card.card_type == CardType.RED:
            result = await db.execute(
                select(Suspension).where(
                    Suspension.member_id == card.member_id,
                    Suspension.card_source_id == card.match_id,
                    Suspension.card_type == SuspensionCardType.RED,
                    Suspension.status == SuspensionStatus.ACTIVE,
                )
                .order_by(Suspension.created_at.desc(), Suspension.id.desc())
                .limit(1)
            )
            suspension = result.scalars().first()
            if suspension is not None:
                await db.delete(suspension)
                suspensions_deleted = 1

        await db.delete(card)

    logger.info("Card %s retracted (%s suspension(s) removed)", card_id, suspensions_deleted)
    return {"card_id": card_id, "suspensions_deleted": suspensions_deleted}


# =========================================
# Delete an event and everything hanging off it
# =========================================
async def delete_event(db: AsyncSession, event_id: str) -> Dict:
    """
    Remove an event with its matches, their cards and attendees, and the
    suspensions that cite those matches. Returns the number of rows removed
    per table.
    """
    event = await find_event(db, event_id)
    if event is None:
        raise NotFoundError(f"Event {event_id} not found")

    async with transaction(db):
        result = await db.execute(select(Match.id).where(Match.event_id == event_id))
        match_ids = list(result.scalars().all())

        counts = {"match_cards": 0, "match_attendees": 0, "suspensions": 0, "matches": 0}
        if match_ids:
            counts["suspensions"] = (
                await db.execute(delete(Suspension).where(Suspension.card_source_id.in_(match_ids)))
            ).rowcount
            counts["match_cards"] = (
                await db.execute(delete(MatchCard).where(MatchCard.match_id.in_(match_ids)))
            ).rowcount
            counts["match_attendees"] = (
                await db.execute(delete(MatchAttendee).where(MatchAttendee.match_id.in_(match_ids)))
            ).rowcount
            counts["matches"] = (
                await db.execute(delete(Match).where(Match.id.in_(match_ids)))
            ).rowcount
        await db.execute(delete(Event).where(Event.id == event_id))
        counts["events"] = 1

    logger.info("Event %s deleted: %s", event_id, counts)
    return counts
