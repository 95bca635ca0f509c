# checkin_backend/models/card_model.py
# Cards shown during matches, who attended each match, and the lifetime
# disciplinary history that is kept separately from match cards.

from typing import Optional, List
from datetime import datetime, date
from enum import Enum
from pydantic import BaseModel
from sqlmodel import SQLModel, Field, UniqueConstraint


class CardType(str, Enum):
    YELLOW = "yellow"
    RED = "red"


class TeamType(str, Enum):
    HOME = "home"
    AWAY = "away"


class MatchCard(SQLModel, table=True):
    """One card issued to a member during a specific match."""
    id: Optional[int] = Field(default=None, primary_key=True)
    match_id: str = Field(foreign_key="match.id", index=True)
    member_id: str = Field(foreign_key="teammember.id", index=True)
    team_type: TeamType
    card_type: CardType
    reason: Optional[str] = None
    notes: Optional[str] = None
    minute: Optional[int] = Field(default=None, ge=0)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class MatchAttendee(SQLModel, table=True):
    """A member checked in to play a match."""
    __table_args__ = (UniqueConstraint("match_id", "member_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    match_id: str = Field(foreign_key="match.id", index=True)
    member_id: str = Field(foreign_key="teammember.id")
    team_type: TeamType
    checked_in_at: datetime = Field(default_factory=datetime.utcnow)


class DisciplinaryRecord(SQLModel, table=True):
    """
    Lifetime disciplinary entry (imported history or manually entered).
    Independent of MatchCard: removing a match card never touches these rows.
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    member_id: str = Field(foreign_key="teammember.id", index=True)
    card_type: CardType
    reason: Optional[str] = None
    notes: Optional[str] = None
    incident_date: Optional[date] = None
    event_description: Optional[str] = None

    # Suspension obligation carried by the record itself (if any)
    suspension_matches: Optional[int] = Field(default=None, ge=0)
    suspension_served: bool = Field(default=False)
    suspension_served_date: Optional[date] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)


# -------------------------------
# Pydantic schemas for API requests/responses
# -------------------------------

class MatchCardCreate(BaseModel):
    match_id: str
    member_id: str
    team_type: TeamType
    card_type: CardType
    reason: Optional[str] = None
    notes: Optional[str] = None
    minute: Optional[int] = None
    # Only meaningful for red cards; falls back to DEFAULT_RED_CARD_SUSPENSION_EVENTS
    suspension_events: Optional[int] = None


class MatchCardRead(BaseModel):
    id: int
    match_id: str
    member_id: str
    team_type: TeamType
    card_type: CardType
    reason: Optional[str] = None
    notes: Optional[str] = None
    minute: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class DisciplinaryRecordIn(BaseModel):
    """
    Incoming history entry. Imported sheets send card types as "YELLOW", "RED"
    or "N/A" and served flags as "yes"/"1"/"on", so both stay loosely typed
    and are normalised when saved.
    """
    card_type: Optional[str] = None
    reason: Optional[str] = None
    notes: Optional[str] = None
    incident_date: Optional[date] = None
    event_description: Optional[str] = None
    suspension_matches: Optional[int] = None
    suspension_served: Optional[bool | str | int] = None
    suspension_served_date: Optional[date] = None


class DisciplinaryRecordsSave(BaseModel):
    member_id: str
    records: List[DisciplinaryRecordIn]
    replace_all: bool = False


class DisciplinaryRecordRead(BaseModel):
    id: int
    member_id: str
    card_type: CardType
    reason: Optional[str] = None
    notes: Optional[str] = None
    incident_date: Optional[date] = None
    event_description: Optional[str] = None
    suspension_matches: Optional[int] = None
    suspension_served: bool
    suspension_served_date: Optional[date] = None
    created_at: datetime

    class Config:
        from_attributes = True


class CardSummary(BaseModel):
    """Match-card counts (all / current season) next to lifetime history counts."""
    member_id: str
    season_cutoff: datetime
    all_match_yellow: int = 0
    all_match_red: int = 0
    current_season_yellow: int = 0
    current_season_red: int = 0
    lifetime_yellow: int = 0
    lifetime_red: int = 0
