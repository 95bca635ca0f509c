# seed_all.py
# Populates an empty database with a small demo league: two teams, a handful of
# members, three weekly events with one match each.
# Runs on the sync engine.

import logging
from datetime import datetime, time, timedelta

from sqlmodel import Session, SQLModel

from checkin_backend.core.database import get_sync_session, sync_engine
from checkin_backend.models.league_model import Event, Match, Team, TeamMember

logger = logging.getLogger(__name__)

DEMO_TEAMS = {
    "Lumberjacks": ["Alex Moreno", "Sam Okafor", "Jamie Lind", "Riley Chen"],
    "Renegades": ["Casey Novak", "Jordan Reyes", "Taylor Brooks", "Morgan Diaz"],
}
DEMO_EVENT_COUNT = 3
DEMO_KICKOFF = time(19, 0)


def seed_teams(session: Session) -> list[Team]:
    teams = []
    for team_name, members in DEMO_TEAMS.items():
        team = Team(name=team_name, category="Open")
        session.add(team)
        session.flush()
        for number, name in enumerate(members, start=1):
            session.add(TeamMember(team_id=team.id, name=name, jersey_number=number))
        teams.append(team)
        logger.info("   ➕ Team %s (%s members)", team_name, len(members))
    return teams


def seed_events(session: Session, home: Team, away: Team, first_day: datetime) -> None:
    for week in range(DEMO_EVENT_COUNT):
        event = Event(name=f"Match Day {week + 1}", date=first_day + timedelta(weeks=week))
        session.add(event)
        session.flush()
        session.add(Match(
            event_id=event.id,
            home_team_id=home.id if week % 2 == 0 else away.id,
            away_team_id=away.id if week % 2 == 0 else home.id,
            field="Field 1",
            match_time=DEMO_KICKOFF,
        ))
        logger.info("   📅 %s on %s", event.name, event.date.date())


def seed_all(first_day: datetime | None = None):
    logger.info("🌱 Starting demo league seeding...")
    SQLModel.metadata.create_all(sync_engine)

    first_day = first_day or datetime.combine(datetime.now().date(), time.min)
    with get_sync_session() as session:
        home, away = seed_teams(session)
        seed_events(session, home, away, first_day)
        session.commit()

    logger.info("✅ Demo league seeded.")


if __name__ == "__main__":
    from checkin_backend.core.logging_config import configure_logging

    configure_logging()
    seed_all()
