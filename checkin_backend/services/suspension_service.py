import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from checkin_backend.core.clock import league_now
from checkin_backend.core.database import transaction
from checkin_backend.core.errors import NotFoundError, ValidationError
from checkin_backend.models.suspension_model import Suspension, SuspensionCardType, SuspensionStatus
from checkin_backend.services.league_records import bounded, find_member

logger = logging.getLogger(__name__)


# ================================
# READS
# ================================

async def get_suspension(db: AsyncSession, suspension_id: int) -> Suspension:
    """Fetch one suspension or raise NotFoundError."""
    suspension = await bounded(db.get(Suspension, suspension_id), f"get suspension {suspension_id}")
    if suspension is None:
        raise NotFoundError(f"Suspension {suspension_id} not found")
    return suspension


async def list_active_suspensions(db: AsyncSession, member_id: Optional[str] = None) -> List[Suspension]:
    """
    Active suspensions, oldest start first.
    Pass member_id to restrict to one member.
    """
    stmt = select(Suspension).where(Suspension.status == SuspensionStatus.ACTIVE)
    if member_id is not None:
        stmt = stmt.where(Suspension.member_id == member_id)
    stmt = stmt.order_by(Suspension.suspension_start, Suspension.id)

    async def _load():
        result = await db.execute(stmt)
        return list(result.scalars().all())

    return await bounded(_load(), "list active suspensions")


# ================================
# MUTATIONS
# ================================

async def create_suspension(
    db: AsyncSession,
    member_id: str,
    card_type: str,
    suspension_event_count: int,
    suspension_start: datetime,
    card_source_id: Optional[str] = None,
    notes: Optional[str] = None,
) -> Suspension:
    """
    Record a new active suspension with events_remaining = suspension_event_count.

    Rejects (before anything is written):
    - a missing member id or start timestamp
    - an unknown card type
    - suspension_event_count < 1
    Unknown members raise NotFoundError.
    """
    # 1️⃣ Validate input
    if not member_id:
        raise ValidationError("member_id is required")
    if suspension_start is None:
        raise ValidationError("suspension_start is required")
    try:
        card_type = SuspensionCardType(card_type)
    except ValueError:
        allowed = ", ".join(t.value for t in SuspensionCardType)
        raise ValidationError(f"card_type must be one of: {allowed}") from None
    if isinstance(suspension_event_count, bool) or not isinstance(suspension_event_count, int):
        raise ValidationError("suspension_event_count must be an integer")
    if suspension_event_count < 1:
        raise ValidationError("suspension_event_count must be at least 1")

    # 2️⃣ Member must exist
    if await find_member(db, member_id) is None:
        raise NotFoundError(f"Member {member_id} not found")

    # 3️⃣ Write
    suspension = Suspension(
        member_id=member_id,
        card_type=card_type,
        card_source_id=card_source_id or None,
        suspension_event_count=suspension_event_count,
        suspension_start=suspension_start,
        events_remaining=suspension_event_count,
        status=SuspensionStatus.ACTIVE,
        notes=notes,
    )
    async with transaction(db):
        db.add(suspension)

    logger.info(
        "Suspension %s created: member=%s type=%s events=%s source=%s",
        suspension.id, member_id, card_type.value, suspension_event_count, card_source_id,
    )
    return suspension


async def mark_served(db: AsyncSession, suspension_id: int, now: Optional[datetime] = None) -> Suspension:
    """
    Close a suspension immediately (events_remaining -> 0).
    Calling it on an already served suspension changes nothing.
    """
    async with transaction(db):
        suspension = await get_suspension(db, suspension_id)
        if suspension.status == SuspensionStatus.SERVED:
            logger.debug("Suspension %s already served, nothing to do", suspension_id)
            return suspension

        now = now or league_now()
        suspension.events_remaining = 0
        suspension.status = SuspensionStatus.SERVED
        suspension.served_at = now
        suspension.updated_at = now
        db.add(suspension)

    logger.info("Suspension %s marked served (member=%s)", suspension_id, suspension.member_id)
    return suspension


async def reduce_by_one(db: AsyncSession, suspension_id: int, now: Optional[datetime] = None) -> Suspension:
    """
    Take one event off an active suspension (never below 0).
    Reaching 0 serves the suspension. Served suspensions are left alone.
    """
    async with transaction(db):
        suspension = await get_suspension(db, suspension_id)
        if suspension.status == SuspensionStatus.SERVED:
            logger.debug("Suspension %s already served, reduce ignored", suspension_id)
            return suspension

        now = now or league_now()
        suspension.events_remaining = max(0, suspension.events_remaining - 1)
        suspension.updated_at = now
        if suspension.events_remaining == 0:
            suspension.status = SuspensionStatus.SERVED
            suspension.served_at = now
        db.add(suspension)

    logger.info(
        "Suspension %s reduced: %s event(s) left%s",
        suspension_id,
        suspension.events_remaining,
        " (served)" if suspension.status == SuspensionStatus.SERVED else "",
    )
    return suspension


async def delete_suspension(db: AsyncSession, suspension_id: int) -> None:
    """Hard delete (admin action)."""
    async with transaction(db):
        suspension = await get_suspension(db, suspension_id)
        await db.delete(suspension)
    logger.info("Suspension %s deleted (member=%s)", suspension_id, suspension.member_id)
