# suspension_model.py
# Defines the Suspension table.
# A Suspension bars a member from a number of league events after a red card
# or an accumulation of yellows. The stored events_remaining is a display/audit
# snapshot; eligibility is always recomputed from the event timeline.

from typing import Optional
from datetime import datetime
from enum import Enum
from pydantic import BaseModel
from sqlmodel import SQLModel, Field


class SuspensionCardType(str, Enum):
    RED = "red"
    YELLOW_ACCUMULATION = "yellow_accumulation"


class SuspensionStatus(str, Enum):
    ACTIVE = "active"
    SERVED = "served"


class Suspension(SQLModel, table=True):
    """Database model for member suspensions counted in league events."""
    id: Optional[int] = Field(default=None, primary_key=True)
    member_id: str = Field(foreign_key="teammember.id", index=True)

    card_type: SuspensionCardType
    # Match that produced the card; None for manually entered accumulation suspensions
    card_source_id: Optional[str] = Field(default=None, index=True)

    suspension_event_count: int = Field(ge=0)
    suspension_start: datetime
    events_remaining: int = Field(ge=0)
    status: SuspensionStatus = Field(default=SuspensionStatus.ACTIVE, index=True)
    notes: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    served_at: Optional[datetime] = None


# -------------------------------
# Pydantic schemas for API requests/responses
# -------------------------------

class SuspensionCreate(BaseModel):
    member_id: str
    card_type: SuspensionCardType
    card_source_id: Optional[str] = None
    suspension_event_count: int
    suspension_start: datetime
    notes: Optional[str] = None


class SuspensionRead(BaseModel):
    id: int
    member_id: str
    card_type: SuspensionCardType
    card_source_id: Optional[str] = None
    suspension_event_count: int
    suspension_start: datetime
    events_remaining: int
    status: SuspensionStatus
    notes: Optional[str] = None
    created_at: datetime
    served_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EligibilityRead(BaseModel):
    member_id: str
    as_of: datetime
    remaining_events: Optional[int]   # None when the ledger could not be read
    eligible: bool
