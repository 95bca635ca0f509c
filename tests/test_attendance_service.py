from datetime import datetime, time, timedelta

import pytest

from checkin_backend.core.errors import (
    CheckInLocked, DependencyUnavailable, MemberSuspended, NotFoundError, ValidationError
)
from checkin_backend.services import eligibility_service
from checkin_backend.services.attendance_service import check_in, check_in_status, check_out
from checkin_backend.services.card_service import issue_match_card

KICKOFF = time(19, 0)
WEEK_1 = datetime(2025, 3, 8)
WEEK_2 = datetime(2025, 3, 15)
WEEK_3 = datetime(2025, 3, 22)
BEFORE_WEEK_2 = datetime(2025, 3, 15, 18, 30)


async def _season(league):
    await league.member("m1")
    for n, day in enumerate((WEEK_1, WEEK_2, WEEK_3), start=1):
        await league.event(f"event-{n}", day)
        await league.match(f"match-{n}", f"event-{n}", match_time=KICKOFF)


@pytest.mark.asyncio
async def test_check_in_records_attendance_once(db, league):
    await _season(league)

    first = await check_in(db, "match-2", "m1", "home", now=BEFORE_WEEK_2)
    second = await check_in(db, "match-2", "m1", "home", now=BEFORE_WEEK_2)

    assert first.id is not None
    assert second.id == first.id
    assert first.checked_in_at == BEFORE_WEEK_2


@pytest.mark.asyncio
async def test_check_in_status(db, league):
    await _season(league)

    status = await check_in_status(db, "match-2", now=datetime(2025, 3, 15, 21, 41))

    assert status == {
        "match_id": "match-2",
        "match_start": datetime(2025, 3, 15, 19, 0),
        "lock_timestamp": datetime(2025, 3, 15, 21, 40),
        "locked": True,
    }


@pytest.mark.asyncio
async def test_check_in_closes_after_lock(db, league):
    await _season(league)

    await check_in(db, "match-2", "m1", "home", now=datetime(2025, 3, 15, 21, 39, 59))
    with pytest.raises(CheckInLocked):
        await check_in(db, "match-2", "m1", "home", now=datetime(2025, 3, 15, 21, 40, 1))
    with pytest.raises(CheckInLocked):
        await check_out(db, "match-2", "m1", now=datetime(2025, 3, 15, 21, 40, 1))


@pytest.mark.asyncio
async def test_unscheduled_match_stays_open(db, league):
    await league.member("m1")
    await league.event("event-x", WEEK_1)
    await league.match("match-x", "event-x")

    attendee = await check_in(db, "match-x", "m1", "away", now=datetime(2030, 1, 1))

    assert attendee.match_id == "match-x"
    status = await check_in_status(db, "match-x", now=datetime(2030, 1, 1))
    assert status["locked"] is False
    assert status["lock_timestamp"] is None


@pytest.mark.asyncio
async def test_suspended_member_sits_out_the_next_event(db, league):
    await _season(league)
    await issue_match_card(db, "match-1", "m1", "home", "red", suspension_events=1)

    with pytest.raises(MemberSuspended) as excinfo:
        await check_in(db, "match-2", "m1", "home", now=BEFORE_WEEK_2)
    assert excinfo.value.remaining_events == 1

    attendee = await check_in(db, "match-3", "m1", "home", now=datetime(2025, 3, 22, 18, 0))
    assert attendee.match_id == "match-3"


@pytest.mark.asyncio
async def test_check_in_refused_when_ledger_unreadable(db, league, monkeypatch):
    await _season(league)

    async def unreadable(*args, **kwargs):
        raise DependencyUnavailable("list active suspensions timed out")

    monkeypatch.setattr(eligibility_service, "list_active_suspensions", unreadable)

    with pytest.raises(MemberSuspended) as excinfo:
        await check_in(db, "match-2", "m1", "home", now=BEFORE_WEEK_2)
    assert excinfo.value.remaining_events is None


@pytest.mark.asyncio
async def test_check_out(db, league):
    await _season(league)
    await check_in(db, "match-2", "m1", "home", now=BEFORE_WEEK_2)

    assert await check_out(db, "match-2", "m1", now=BEFORE_WEEK_2) is True
    assert await check_out(db, "match-2", "m1", now=BEFORE_WEEK_2) is False


@pytest.mark.asyncio
async def test_check_in_rejects_bad_input(db, league):
    await _season(league)
    with pytest.raises(ValidationError):
        await check_in(db, "match-2", "m1", "sideline", now=BEFORE_WEEK_2)
    with pytest.raises(NotFoundError):
        await check_in(db, "match-404", "m1", "home", now=BEFORE_WEEK_2)
    with pytest.raises(NotFoundError):
        await check_in(db, "match-2", "ghost", "home", now=BEFORE_WEEK_2 - timedelta(days=1))
