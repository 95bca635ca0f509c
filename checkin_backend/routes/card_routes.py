from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from checkin_backend.core.clock import league_today, to_league_time
from checkin_backend.core.database import get_db
from checkin_backend.core.season import season_for
from checkin_backend.models.card_model import (
    CardSummary, DisciplinaryRecordRead, DisciplinaryRecordsSave, MatchCardCreate, MatchCardRead
)
from checkin_backend.models.suspension_model import SuspensionRead
from checkin_backend.services import card_service, disciplinary_service
from checkin_backend.services.card_summary_service import card_summary
from checkin_backend.services.league_records import list_disciplinary_records, list_match_cards

router = APIRouter()


# =========================================
# 🟨🟥 Match cards
# =========================================
@router.get("/", response_model=List[MatchCardRead])
async def get_match_cards(
    member_id: Optional[str] = Query(None),
    match_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return await list_match_cards(db, member_id=member_id, match_id=match_id)


@router.post("/", status_code=status.HTTP_201_CREATED)
async def issue_card(payload: MatchCardCreate, db: AsyncSession = Depends(get_db)):
    """
    Record a card. A red card opens a suspension anchored to the match's event.
    """
    result = await card_service.issue_match_card(
        db,
        match_id=payload.match_id,
        member_id=payload.member_id,
        team_type=payload.team_type,
        card_type=payload.card_type,
        reason=payload.reason,
        notes=payload.notes,
        minute=payload.minute,
        suspension_events=payload.suspension_events,
    )
    suspension = result["suspension"]
    return {
        "card": MatchCardRead.model_validate(result["card"]),
        "suspension": SuspensionRead.model_validate(suspension) if suspension else None,
    }


@router.delete("/{card_id}")
async def retract_card(card_id: int, db: AsyncSession = Depends(get_db)):
    """Remove a card and the suspension it caused, atomically."""
    return await card_service.retract_match_card(db, card_id)


# =========================================
# Card summary
# =========================================
@router.get("/summary/{member_id}", response_model=CardSummary)
async def get_card_summary(
    member_id: str,
    season_cutoff: Optional[datetime] = Query(None, description="Defaults to the start of the current season"),
    db: AsyncSession = Depends(get_db),
):
    """
    Current-season and all-time match cards next to lifetime disciplinary history.
    """
    cutoff = to_league_time(season_cutoff) or season_for(league_today()).cutoff()
    return await card_summary(db, member_id, cutoff)


# =========================================
# Disciplinary history (mounted under /disciplinary-records)
# =========================================
disciplinary_router = APIRouter()


@disciplinary_router.get("/", response_model=List[DisciplinaryRecordRead])
async def get_disciplinary_records(
    member_id: Optional[str] = Query(None),
    team_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return await list_disciplinary_records(db, member_id=member_id, team_id=team_id)


@disciplinary_router.post("/", response_model=List[DisciplinaryRecordRead], status_code=status.HTTP_201_CREATED)
async def save_disciplinary_records(payload: DisciplinaryRecordsSave, db: AsyncSession = Depends(get_db)):
    """Append records for a member (or replace them all with replace_all=true)."""
    return await disciplinary_service.save_disciplinary_records(
        db, payload.member_id, payload.records, replace_all=payload.replace_all
    )


@disciplinary_router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_disciplinary_record(record_id: int, db: AsyncSession = Depends(get_db)):
    await disciplinary_service.delete_disciplinary_record(db, record_id)
