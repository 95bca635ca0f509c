# checkin_backend/models/__init__.py
# Centralized imports for all database models and schemas

# League records
from .league_model import Team, TeamMember, Event, Match, MatchStatus

# Cards, attendance and disciplinary history
from .card_model import (
    CardType, TeamType, MatchCard, MatchAttendee, DisciplinaryRecord,
    MatchCardCreate, MatchCardRead, DisciplinaryRecordIn, DisciplinaryRecordsSave,
    DisciplinaryRecordRead, CardSummary
)

# Suspension
from .suspension_model import (
    Suspension, SuspensionCardType, SuspensionStatus, SuspensionCreate,
    SuspensionRead, EligibilityRead
)
