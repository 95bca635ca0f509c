from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from checkin_backend.core.clock import league_now, to_league_time
from checkin_backend.core.database import get_db
from checkin_backend.models.card_model import TeamType
from checkin_backend.services import attendance_service

router = APIRouter()


class CheckInRequest(BaseModel):
    member_id: str
    team_type: TeamType


# ============================================
# Attendance lock
# ============================================
@router.get("/{match_id}/lock")
async def get_match_lock(
    match_id: str,
    now: Optional[datetime] = Query(None, description="Defaults to the current league time"),
    db: AsyncSession = Depends(get_db),
):
    """
    Whether attendance for the match can still be edited.
    Matches without a kick-off time are never locked.
    """
    return await attendance_service.check_in_status(db, match_id, to_league_time(now) or league_now())


# ============================================
# Check in / check out
# ============================================
@router.post("/{match_id}/attendance", status_code=status.HTTP_201_CREATED)
async def check_in_member(match_id: str, payload: CheckInRequest, db: AsyncSession = Depends(get_db)):
    """
    Check a member in.
    423 once the match is locked, 409 while the member is suspended.
    """
    attendee = await attendance_service.check_in(db, match_id, payload.member_id, payload.team_type)
    return {
        "match_id": attendee.match_id,
        "member_id": attendee.member_id,
        "team_type": attendee.team_type,
        "checked_in_at": attendee.checked_in_at,
    }


@router.delete("/{match_id}/attendance/{member_id}")
async def check_out_member(match_id: str, member_id: str, db: AsyncSession = Depends(get_db)):
    removed = await attendance_service.check_out(db, match_id, member_id)
    return {"match_id": match_id, "member_id": member_id, "removed": removed}
