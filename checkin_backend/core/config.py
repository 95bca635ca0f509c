import os
from datetime import timedelta

# =====================================
# Global configuration for the check-in backend
# =====================================

# TEST_MODE:
# When True, testing features are enabled.
# Example uses:
#   - DEBUG level logging for eligibility decisions
#   - SQL echo on both engines
TEST_MODE = os.getenv("CHECKIN_TEST_MODE", "false").lower() in ("1", "true", "yes", "on")

# Database file (SQLite)
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DATABASE_PATH = os.getenv("CHECKIN_DB_PATH", os.path.join(BASE_DIR, "checkin.db"))

# League local timezone, used when the host derives "today" for season defaults.
LEAGUE_TIMEZONE = os.getenv("CHECKIN_TIMEZONE", "America/Los_Angeles")

# Upper bound (seconds) for any single read against the event/card/ledger tables.
DEPENDENCY_TIMEOUT_SECONDS = float(os.getenv("CHECKIN_DEPENDENCY_TIMEOUT", "5.0"))

# =====================================
# Check-in lock policy
# =====================================
MATCH_DURATION = timedelta(hours=1, minutes=40)   # nominal match length
CHECKIN_GRACE_PERIOD = timedelta(hours=1)         # edits allowed after the final whistle
CHECKIN_LOCK_AFTER = MATCH_DURATION + CHECKIN_GRACE_PERIOD

# =====================================
# Suspension policy
# =====================================
# A suspension whose stored start is within this window of a red card for the
# same member is considered linked to that card.
ORPHAN_MATCH_TOLERANCE = timedelta(hours=24)

# Events a red card costs when the referee does not say otherwise
DEFAULT_RED_CARD_SUSPENSION_EVENTS = 1
