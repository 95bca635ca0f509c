from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from checkin_backend.core.database import get_db
from checkin_backend.services.card_service import delete_event
from checkin_backend.services.league_records import list_events

router = APIRouter()


@router.get("/")
async def get_events(db: AsyncSession = Depends(get_db)):
    """The event timeline, oldest first."""
    events = await list_events(db)
    return [{"id": e.id, "name": e.name, "date": e.date, "description": e.description} for e in events]


@router.delete("/{event_id}")
async def remove_event(event_id: str, db: AsyncSession = Depends(get_db)):
    """
    Delete an event with its matches, cards, attendees and the suspensions
    those matches produced. Returns the rows removed per table.
    """
    return {"event_id": event_id, "deleted": await delete_event(db, event_id)}
