import asyncio

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel

from checkin_backend.core.database import enable_sqlite_snapshots
from checkin_backend.core.errors import DependencyUnavailable
from checkin_backend.models.league_model import Event
from checkin_backend.models.suspension_model import SuspensionStatus
from checkin_backend.services import eligibility_service, league_records
from checkin_backend.services.eligibility_service import (
    eligibility,
    is_eligible,
    remaining_events,
    suspension_breakdown,
)
from tests.conftest import LeagueBuilder, at


async def _timeline(league, hours=(100, 150, 200, 250)):
    """One event (with one match) at each offset. Match ids are "match-<hours>"."""
    for h in hours:
        await league.event(f"event-{h}", at(h))
        await league.match(f"match-{h}", f"event-{h}")


@pytest.mark.asyncio
async def test_two_event_suspension_is_served_by_the_third_event(db, league):
    await league.member("m1")
    await _timeline(league)
    # Card shown at the event at 100; stored start is only approximately right
    await league.suspension("m1", 2, at(101), card_source_id="match-100")

    # Checking into 150: nothing strictly between 100 and 150
    assert await remaining_events(db, "m1", at(150)) == 2
    # Checking into 200: only 150 has passed
    assert await remaining_events(db, "m1", at(200)) == 1
    assert await is_eligible(db, "m1", at(200)) is False
    # Checking into 250: 150 and 200 have passed
    assert await remaining_events(db, "m1", at(250)) == 0
    assert await is_eligible(db, "m1", at(250)) is True


@pytest.mark.asyncio
async def test_card_event_is_never_counted(db, league):
    await league.member("m1")
    await _timeline(league)
    # Stored start is earlier than the card's event, but the anchor wins
    await league.suspension("m1", 1, at(90), card_source_id="match-100")

    assert await remaining_events(db, "m1", at(150)) == 1


@pytest.mark.asyncio
async def test_stored_start_is_used_when_source_match_is_gone(db, league):
    await league.member("m1")
    await _timeline(league)
    await league.suspension("m1", 1, at(120), card_source_id="deleted-match")

    assert await remaining_events(db, "m1", at(150)) == 1
    assert await remaining_events(db, "m1", at(200)) == 0


@pytest.mark.asyncio
async def test_stored_start_is_used_for_manual_suspensions(db, league):
    await league.member("m1")
    await _timeline(league)
    await league.suspension("m1", 2, at(100))

    # 100 is not strictly after the start, 150 is
    assert await remaining_events(db, "m1", at(200)) == 1


@pytest.mark.asyncio
async def test_suspensions_add_up(db, league):
    await league.member("m1")
    await _timeline(league)
    await league.suspension("m1", 2, at(100), card_source_id="match-100")
    await league.suspension("m1", 1, at(150), card_source_id="match-150")

    # 100-suspension: 150 passed -> 1 left. 150-suspension: nothing passed -> 1 left
    assert await remaining_events(db, "m1", at(200)) == 2

    breakdown = await suspension_breakdown(db, "m1", at(200))
    assert [item["remaining_events"] for item in breakdown] == [1, 1]
    assert breakdown[0]["effective_start"] == at(100)
    assert breakdown[0]["events_passed"] == 1


@pytest.mark.asyncio
async def test_served_suspensions_are_ignored(db, league):
    await league.member("m1")
    await _timeline(league)
    await league.suspension("m1", 5, at(100), status=SuspensionStatus.SERVED)

    assert await remaining_events(db, "m1", at(150)) == 0
    assert await is_eligible(db, "m1", at(150)) is True


@pytest.mark.asyncio
async def test_stored_events_remaining_is_not_trusted(db, league):
    await league.member("m1")
    await _timeline(league)
    suspension = await league.suspension("m1", 1, at(100), card_source_id="match-100")
    suspension.events_remaining = 0
    db.add(suspension)
    await db.commit()

    assert await remaining_events(db, "m1", at(150)) == 1


@pytest.mark.asyncio
async def test_zero_event_suspension_never_blocks(db, league):
    await league.member("m1")
    await _timeline(league)
    await league.suspension("m1", 0, at(100), card_source_id="match-100")

    assert await remaining_events(db, "m1", at(150)) == 0


@pytest.mark.asyncio
async def test_member_without_suspensions(db, league):
    await league.member("m1")
    assert await eligibility(db, "m1", at(150)) == (0, True)
    assert await suspension_breakdown(db, "m1", at(150)) == []


@pytest.mark.asyncio
async def test_fails_closed_when_timeline_cannot_be_read(db, league, monkeypatch):
    await league.member("m1")
    await _timeline(league)
    await league.suspension("m1", 1, at(100), card_source_id="match-100")

    async def broken_timeline(*args, **kwargs):
        raise DependencyUnavailable("list events failed")

    monkeypatch.setattr(eligibility_service, "list_events", broken_timeline)

    assert await is_eligible(db, "m1", at(250)) is False
    assert await eligibility(db, "m1", at(250)) == (None, False)
    with pytest.raises(DependencyUnavailable):
        await remaining_events(db, "m1", at(250))


@pytest.mark.asyncio
async def test_slow_reads_time_out(monkeypatch):
    monkeypatch.setattr(league_records, "DEPENDENCY_TIMEOUT_SECONDS", 0.01)

    with pytest.raises(DependencyUnavailable) as excinfo:
        await league_records.bounded(asyncio.sleep(1), "slow read")

    assert excinfo.value.retryable is True
    assert "timed out" in excinfo.value.detail


@pytest_asyncio.fixture
async def file_sessions(tmp_path):
    """Session factory over a SQLite file, one connection per session."""
    engine = enable_sqlite_snapshots(
        create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'league.db'}", poolclass=NullPool)
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.mark.asyncio
async def test_ledger_and_timeline_come_from_one_snapshot(file_sessions, monkeypatch):
    async with file_sessions() as db:
        league = LeagueBuilder(db)
        await league.member("m1")
        await league.event("event-100", at(100))
        await league.suspension("m1", 1, at(100))

        real_list_events = eligibility_service.list_events

        async def list_events_after_concurrent_write(session, **kwargs):
            # Another connection adds an event after the ledger was read
            async with file_sessions() as other:
                other.add(Event(id="event-150", name="Event 150", date=at(150)))
                await other.commit()
            return await real_list_events(session, **kwargs)

        monkeypatch.setattr(eligibility_service, "list_events", list_events_after_concurrent_write)

        assert await remaining_events(db, "m1", at(250)) == 1

    monkeypatch.undo()
    async with file_sessions() as db:
        assert await remaining_events(db, "m1", at(250)) == 0
