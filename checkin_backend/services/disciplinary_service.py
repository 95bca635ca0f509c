import logging
from typing import Iterable, List, Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from checkin_backend.core.database import transaction
from checkin_backend.core.errors import NotFoundError, ValidationError
from checkin_backend.models.card_model import CardType, DisciplinaryRecord, DisciplinaryRecordIn
from checkin_backend.services.league_records import bounded, find_member

logger = logging.getLogger(__name__)

TRUTHY_STRINGS = ("true", "1", "yes", "on")


def parse_served_flag(value) -> bool:
    """Booleans pass through; strings count as served when true/1/yes/on."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY_STRINGS
    return bool(value)


def normalize_card_type(raw: Optional[str]) -> Optional[str]:
    """
    Card type from imported history sheets.
    YELLOW/RED map to themselves, N/A means "no card" (skip the row),
    anything else is treated as a yellow.
    """
    value = (raw or "").strip().upper()
    if value == "RED":
        return CardType.RED.value
    if value == "N/A":
        return None
    return CardType.YELLOW.value


async def save_disciplinary_records(
    db: AsyncSession,
    member_id: str,
    records: Iterable[DisciplinaryRecordIn],
    replace_all: bool = False,
) -> List[DisciplinaryRecord]:
    """
    Append history records for a member. Card types are normalised first and
    N/A rows are skipped.
    With replace_all=True the member's existing records are deleted first,
    in the same transaction.
    """
    if not member_id:
        raise ValidationError("member_id is required")
    records = list(records)
    if await find_member(db, member_id) is None:
        raise NotFoundError(f"Member {member_id} not found")

    rows = []
    for record in records:
        card_type = normalize_card_type(record.card_type)
        if card_type is None:
            logger.debug("Skipping N/A history record for member %s", member_id)
            continue
        if record.suspension_matches is not None and record.suspension_matches < 0:
            raise ValidationError("suspension_matches must be >= 0")
        served = parse_served_flag(record.suspension_served)
        rows.append(DisciplinaryRecord(
            member_id=member_id,
            card_type=CardType(card_type),
            reason=record.reason,
            notes=record.notes,
            incident_date=record.incident_date,
            event_description=record.event_description,
            suspension_matches=record.suspension_matches,
            suspension_served=served,
            # A served date only makes sense on a served record
            suspension_served_date=record.suspension_served_date if served else None,
        ))

    async with transaction(db):
        if replace_all:
            result = await db.execute(delete(DisciplinaryRecord).where(DisciplinaryRecord.member_id == member_id))
            if result.rowcount:
                logger.info("Replacing %s disciplinary record(s) for member %s", result.rowcount, member_id)
        db.add_all(rows)

    logger.info("Saved %s disciplinary record(s) for member %s", len(rows), member_id)
    return rows


async def delete_disciplinary_record(db: AsyncSession, record_id: int) -> None:
    async with transaction(db):
        record = await bounded(db.get(DisciplinaryRecord, record_id), f"get disciplinary record {record_id}")
        if record is None:
            raise NotFoundError(f"Disciplinary record {record_id} not found")
        await db.delete(record)
