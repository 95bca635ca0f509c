import logging
from datetime import datetime
from typing import Dict, List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from checkin_backend.core.config import ORPHAN_MATCH_TOLERANCE
from checkin_backend.core.database import transaction
from checkin_backend.models.card_model import CardType
from checkin_backend.models.suspension_model import Suspension, SuspensionStatus
from checkin_backend.services.league_records import bounded, list_timed_match_cards

logger = logging.getLogger(__name__)

# ============================================
# Orphaned suspensions
# ============================================
# An active suspension that cites a source match is orphaned when the member
# has no red match card whose match time lies within ORPHAN_MATCH_TOLERANCE
# of the suspension's stored start (inclusive).
# Suspensions without a card_source_id (manual accumulation) are never candidates.


def has_linked_red_card(suspension: Suspension, red_card_times: List[datetime]) -> bool:
    start = suspension.suspension_start
    return any(abs(card_time - start) <= ORPHAN_MATCH_TOLERANCE for card_time in red_card_times)


async def _candidates(db: AsyncSession) -> List[Suspension]:
    stmt = (
        select(Suspension)
        .where(Suspension.status == SuspensionStatus.ACTIVE, Suspension.card_source_id.is_not(None))
        .order_by(Suspension.id)
    )

    async def _load():
        result = await db.execute(stmt)
        return list(result.scalars().all())

    return await bounded(_load(), "list sourced suspensions")


async def find_orphans(db: AsyncSession) -> List[Suspension]:
    """Active, sourced suspensions with no red card near their start."""
    orphans = []
    red_cards_by_member: Dict[str, List[datetime]] = {}

    for suspension in await _candidates(db):
        if suspension.member_id not in red_cards_by_member:
            rows = await list_timed_match_cards(db, member_id=suspension.member_id, card_type=CardType.RED)
            red_cards_by_member[suspension.member_id] = [card_time for _, card_time, _ in rows]

        if not has_linked_red_card(suspension, red_cards_by_member[suspension.member_id]):
            orphans.append(suspension)

    logger.debug("Orphan scan: %s orphaned suspension(s)", len(orphans))
    return orphans


async def cleanup_orphans(db: AsyncSession) -> int:
    """
    Delete every orphan found by find_orphans() in one transaction.
    Any failure rolls back the whole batch.
    """
    async with transaction(db):
        orphans = await find_orphans(db)
        for suspension in orphans:
            await db.delete(suspension)

    if orphans:
        logger.info(
            "🧹 Removed %s orphaned suspension(s): %s",
            len(orphans), ", ".join(str(s.id) for s in orphans),
        )
    return len(orphans)
