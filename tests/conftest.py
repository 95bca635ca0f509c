"""Pytest configuration and fixtures for the check-in backend tests."""

from datetime import datetime, time, timedelta
from typing import Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from checkin_backend import models  # noqa: F401  (registers every table)
from checkin_backend.core.database import enable_sqlite_snapshots
from checkin_backend.models.card_model import CardType, DisciplinaryRecord, MatchCard, TeamType
from checkin_backend.models.league_model import Event, Match, Team, TeamMember
from checkin_backend.models.suspension_model import Suspension, SuspensionCardType, SuspensionStatus

BASE_TIME = datetime(2025, 3, 1, 0, 0)


def at(offset_hours: float) -> datetime:
    """Readable timeline positions: at(100) is 100 hours after BASE_TIME."""
    return BASE_TIME + timedelta(hours=offset_hours)


@pytest_asyncio.fixture
async def db():
    """Fresh in-memory database per test."""
    engine = enable_sqlite_snapshots(create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    ))
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    maker = sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as session:
        yield session
    await engine.dispose()


class LeagueBuilder:
    """Writes league fixtures straight to the test database."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self._teams_ready = False

    async def _save(self, row):
        self.db.add(row)
        await self.db.commit()
        return row

    async def teams(self):
        if not self._teams_ready:
            self.db.add(Team(id="home", name="Lumberjacks"))
            self.db.add(Team(id="away", name="Renegades"))
            await self.db.commit()
            self._teams_ready = True

    async def member(self, member_id: str = "m1", team_id: str = "home") -> TeamMember:
        await self.teams()
        return await self._save(TeamMember(id=member_id, team_id=team_id, name=f"Player {member_id}"))

    async def event(self, event_id: str, date: datetime) -> Event:
        return await self._save(Event(id=event_id, name=f"Event {event_id}", date=date))

    async def match(self, match_id: str, event_id: str, match_time: Optional[time] = None) -> Match:
        await self.teams()
        return await self._save(Match(
            id=match_id, event_id=event_id, home_team_id="home", away_team_id="away", match_time=match_time,
        ))

    async def card(self, match_id: str, member_id: str, card_type: CardType) -> MatchCard:
        return await self._save(MatchCard(
            match_id=match_id, member_id=member_id, team_type=TeamType.HOME, card_type=card_type,
        ))

    async def history(self, member_id: str, card_type: CardType, **kwargs) -> DisciplinaryRecord:
        return await self._save(DisciplinaryRecord(member_id=member_id, card_type=card_type, **kwargs))

    async def suspension(
        self,
        member_id: str,
        count: int,
        start: datetime,
        card_source_id: Optional[str] = None,
        card_type: SuspensionCardType = SuspensionCardType.RED,
        status: SuspensionStatus = SuspensionStatus.ACTIVE,
    ) -> Suspension:
        """Raw ledger row, bypassing create_suspension() validation."""
        return await self._save(Suspension(
            member_id=member_id,
            card_type=card_type,
            card_source_id=card_source_id,
            suspension_event_count=count,
            suspension_start=start,
            events_remaining=count if status == SuspensionStatus.ACTIVE else 0,
            status=status,
        ))


@pytest_asyncio.fixture
async def league(db):
    return LeagueBuilder(db)
