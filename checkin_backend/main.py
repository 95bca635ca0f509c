import logging
import os

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlmodel import select

from checkin_backend.core.database import get_sync_session, init_db
from checkin_backend.core.errors import CheckInError, MemberSuspended
from checkin_backend.core.logging_config import configure_logging
from checkin_backend.models.league_model import Team

# --- Routers ---
from checkin_backend.routes.suspension_routes import router as suspension_router, eligibility_router
from checkin_backend.routes.match_routes import router as match_router
from checkin_backend.routes.card_routes import router as card_router, disciplinary_router
from checkin_backend.routes.event_routes import router as event_router

logger = logging.getLogger(__name__)

app = FastAPI(title="League Check-In API")


@app.on_event("startup")
async def on_startup():
    configure_logging()

    # 1️⃣ Init DB tables async
    await init_db()

    # 2️⃣ Auto-seed a demo league in sync mode (empty database only)
    if os.getenv("CHECKIN_AUTO_SEED", "true").lower() in ("1", "true", "yes", "on"):
        from checkin_backend.seed.seed_all import seed_all

        with get_sync_session() as session:
            team_count = len(session.exec(select(Team)).all())
        if team_count == 0:
            logger.info("🌱 No teams found. Auto-seeding database...")
            seed_all()
        else:
            logger.info("✅ Database already seeded. Skipping auto-seed.")


# --- Domain errors -> HTTP ---
@app.exception_handler(CheckInError)
async def handle_checkin_error(request: Request, exc: CheckInError):
    body = {"detail": exc.detail, "error": exc.kind}
    if exc.retryable:
        body["retryable"] = True
    if isinstance(exc, MemberSuspended) and exc.remaining_events is not None:
        body["remaining_events"] = exc.remaining_events
    if exc.status_code >= 500:
        logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.detail)
    return JSONResponse(status_code=exc.status_code, content=body)


@app.get("/health", tags=["Health"])
async def health():
    return {"status": "ok"}


# Routers
app.include_router(suspension_router, prefix="/suspensions", tags=["Suspensions"])
app.include_router(eligibility_router, prefix="/eligibility", tags=["Eligibility"])
app.include_router(match_router, prefix="/matches", tags=["Matches"])
app.include_router(card_router, prefix="/cards", tags=["Cards"])
app.include_router(disciplinary_router, prefix="/disciplinary-records", tags=["Disciplinary"])
app.include_router(event_router, prefix="/events", tags=["Events"])
