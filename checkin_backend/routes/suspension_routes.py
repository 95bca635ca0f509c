from typing import List, Optional
from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from checkin_backend.core.clock import to_league_time
from checkin_backend.core.database import get_db
from checkin_backend.models.suspension_model import SuspensionCreate, SuspensionRead, EligibilityRead
from checkin_backend.services import suspension_service, orphan_service
from checkin_backend.services.eligibility_service import eligibility, suspension_breakdown

router = APIRouter()


# ============================================
# Orphans (declared before /{suspension_id} so the path is not shadowed)
# ============================================
@router.get("/orphans", response_model=List[SuspensionRead])
async def list_orphaned_suspensions(db: AsyncSession = Depends(get_db)):
    """
    Active suspensions citing a match, with no red card for the member within
    24h of the suspension start. Read only.
    """
    return await orphan_service.find_orphans(db)


@router.post("/orphans/cleanup")
async def cleanup_orphaned_suspensions(db: AsyncSession = Depends(get_db)):
    """Delete all orphaned suspensions in one transaction."""
    deleted = await orphan_service.cleanup_orphans(db)
    return {"deleted": deleted}


# ============================================
# Ledger CRUD
# ============================================
@router.get("/", response_model=List[SuspensionRead])
async def list_active_suspensions(
    member_id: Optional[str] = Query(None, description="Restrict to one member"),
    db: AsyncSession = Depends(get_db),
):
    """Active suspensions, optionally for one member."""
    return await suspension_service.list_active_suspensions(db, member_id)


@router.post("/", response_model=SuspensionRead, status_code=status.HTTP_201_CREATED)
async def create_suspension(payload: SuspensionCreate, db: AsyncSession = Depends(get_db)):
    return await suspension_service.create_suspension(
        db,
        member_id=payload.member_id,
        card_type=payload.card_type,
        suspension_event_count=payload.suspension_event_count,
        suspension_start=to_league_time(payload.suspension_start),
        card_source_id=payload.card_source_id,
        notes=payload.notes,
    )


@router.get("/{suspension_id}", response_model=SuspensionRead)
async def get_suspension(suspension_id: int, db: AsyncSession = Depends(get_db)):
    return await suspension_service.get_suspension(db, suspension_id)


@router.post("/{suspension_id}/served", response_model=SuspensionRead)
async def mark_suspension_served(suspension_id: int, db: AsyncSession = Depends(get_db)):
    """Close the suspension now. Repeating the call is harmless."""
    return await suspension_service.mark_served(db, suspension_id)


@router.post("/{suspension_id}/reduce", response_model=SuspensionRead)
async def reduce_suspension(suspension_id: int, db: AsyncSession = Depends(get_db)):
    """Take one event off the suspension; it is served once it reaches zero."""
    return await suspension_service.reduce_by_one(db, suspension_id)


@router.delete("/{suspension_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_suspension(suspension_id: int, db: AsyncSession = Depends(get_db)):
    await suspension_service.delete_suspension(db, suspension_id)


# ============================================
# Eligibility (mounted separately under /eligibility)
# ============================================
eligibility_router = APIRouter()


@eligibility_router.get("/{member_id}", response_model=EligibilityRead)
async def get_eligibility(
    member_id: str,
    as_of: datetime = Query(..., description="Timestamp of the event being checked into"),
    db: AsyncSession = Depends(get_db),
):
    """
    Remaining suspension events and the eligibility decision at `as_of`.
    If the data cannot be read the member is reported as not eligible.
    """
    as_of = to_league_time(as_of)
    remaining, eligible = await eligibility(db, member_id, as_of)
    return EligibilityRead(member_id=member_id, as_of=as_of, remaining_events=remaining, eligible=eligible)


@eligibility_router.get("/{member_id}/breakdown")
async def get_eligibility_breakdown(
    member_id: str,
    as_of: datetime = Query(...),
    db: AsyncSession = Depends(get_db),
):
    """Per-suspension replay of the event timeline (admin view)."""
    as_of = to_league_time(as_of)
    return {"member_id": member_id, "as_of": as_of, "suspensions": await suspension_breakdown(db, member_id, as_of)}
