# errors.py
# Domain exceptions raised by the services layer.
# main.py maps each kind to an HTTP status; services never raise HTTPException.


class CheckInError(Exception):
    """Base class for all domain errors."""
    status_code = 400
    kind = "error"
    retryable = False

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(CheckInError):
    """Input rejected before anything was written."""
    status_code = 422
    kind = "validation_error"


class NotFoundError(CheckInError):
    """Unknown suspension / member / match / event id."""
    status_code = 404
    kind = "not_found"


class DependencyUnavailable(CheckInError):
    """A collaborator read failed or ran past DEPENDENCY_TIMEOUT_SECONDS."""
    status_code = 503
    kind = "dependency_unavailable"
    retryable = True


class CheckInLocked(CheckInError):
    """Attendance for this match can no longer be edited."""
    status_code = 423
    kind = "checkin_locked"


class MemberSuspended(CheckInError):
    """Member still owes suspension events and cannot be checked in."""
    status_code = 409
    kind = "member_suspended"

    def __init__(self, detail: str, remaining_events: int | None = None):
        super().__init__(detail)
        self.remaining_events = remaining_events
