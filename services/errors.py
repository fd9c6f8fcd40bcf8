"""
Domain errors raised by the service layer.
Each carries the HTTP status the API maps it to; main.py renders them as
{"success": false, "error": message}.
"""


class ExamPortalError(Exception):
    status_code = 500
    default_message = "Server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# ─── 400 ──────────────────────────────────────────────────────────────────────

class ValidationError(ExamPortalError):
    status_code = 400
    default_message = "Invalid request"


class ExamInactive(ValidationError):
    default_message = "This exam is not active"


class ExamNotYetAvailable(ValidationError):
    default_message = "This exam is not available yet"


class TimeLimitExceeded(ValidationError):
    default_message = "Time limit exceeded"


# ─── 401 / 403 ────────────────────────────────────────────────────────────────

class Unauthorized(ExamPortalError):
    status_code = 401
    default_message = "Not authenticated"


class InvalidCredentials(Unauthorized):
    default_message = "Invalid credentials"


class Forbidden(ExamPortalError):
    status_code = 403
    default_message = "Access denied"


# ─── 404 ──────────────────────────────────────────────────────────────────────

class NotFound(ExamPortalError):
    status_code = 404
    default_message = "Not found"


class NoActiveSession(NotFound):
    default_message = "Exam session not found or already completed"


# ─── 409 ──────────────────────────────────────────────────────────────────────

class Conflict(ExamPortalError):
    status_code = 409
    default_message = "Conflict"


class DuplicateEmail(Conflict):
    default_message = "User already exists"


class AlreadyCompleted(Conflict):
    default_message = "You have already completed this exam"


class AlreadySubmitted(Conflict):
    default_message = "Exam already submitted"
