# checkin_backend/models/league_model.py
# Flat league records: teams, members, events (match days) and their matches.
# These rows are owned by the league admin screens; the suspension engine only reads them.

import uuid
from typing import Optional, List
from datetime import datetime, time
from enum import Enum
from sqlmodel import SQLModel, Field, Relationship


def new_id() -> str:
    return uuid.uuid4().hex


class MatchStatus(str, Enum):
    """Lifecycle of a scheduled match"""
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Team(SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)
    name: str
    category: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    members: List["TeamMember"] = Relationship(back_populates="team")


class TeamMember(SQLModel, table=True):
    """A rostered player. Disciplinary history and suspensions hang off the member id."""
    id: str = Field(default_factory=new_id, primary_key=True)
    team_id: str = Field(foreign_key="team.id", index=True)
    name: str
    jersey_number: Optional[int] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    team: Optional[Team] = Relationship(back_populates="members")


class Event(SQLModel, table=True):
    """
    One league event (match day). `date` is its position in the season's chronology
    and the only field suspension counting looks at.
    """
    id: str = Field(default_factory=new_id, primary_key=True)
    name: str
    date: datetime = Field(index=True)
    description: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Match(SQLModel, table=True):
    """
    A fixture played during an event.
    Kick-off is the event's calendar day combined with `match_time`.
    """
    id: str = Field(default_factory=new_id, primary_key=True)
    event_id: str = Field(foreign_key="event.id", index=True)
    home_team_id: str = Field(foreign_key="team.id")
    away_team_id: str = Field(foreign_key="team.id")

    field: Optional[str] = None
    match_time: Optional[time] = None          # None = not scheduled yet
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    match_status: MatchStatus = Field(default=MatchStatus.SCHEDULED)
    created_at: datetime = Field(default_factory=datetime.utcnow)
