from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from checkin_backend.core.errors import NotFoundError
from checkin_backend.models.card_model import CardSummary, CardType
from checkin_backend.services.league_records import find_member, list_disciplinary_records, list_timed_match_cards


async def card_summary(db: AsyncSession, member_id: str, season_cutoff: datetime) -> CardSummary:
    """
    Card counts for one member.

    - all_match_* / current_season_*: match cards; "current" means the card's
      event is on or after `season_cutoff`.
    - lifetime_*: disciplinary history only.

    The two sources are counted separately and never added together, so an
    incident recorded in both places is not double counted.
    """
    if await find_member(db, member_id) is None:
        raise NotFoundError(f"Member {member_id} not found")

    summary = CardSummary(member_id=member_id, season_cutoff=season_cutoff)

    # 1️⃣ Match cards
    for card, _, event_date in await list_timed_match_cards(db, member_id=member_id):
        current = event_date >= season_cutoff
        if card.card_type == CardType.YELLOW:
            summary.all_match_yellow += 1
            summary.current_season_yellow += int(current)
        elif card.card_type == CardType.RED:
            summary.all_match_red += 1
            summary.current_season_red += int(current)

    # 2️⃣ Lifetime history
    for record in await list_disciplinary_records(db, member_id=member_id):
        if record.card_type == CardType.YELLOW:
            summary.lifetime_yellow += 1
        elif record.card_type == CardType.RED:
            summary.lifetime_red += 1

    return summary
