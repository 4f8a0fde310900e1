"""Error taxonomy shared by the quiz services and the HTTP layer."""

from __future__ import annotations


class QuizError(Exception):
    """Base class; ``kind`` is the stable machine-readable error name."""

    kind = "internal"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidArgumentError(QuizError):
    kind = "invalid_argument"
    status_code = 400


class NotFoundError(QuizError):
    kind = "not_found"
    status_code = 404


class ConflictError(QuizError):
    """Stale write on a session, or a submission the session can no longer accept."""

    kind = "conflict"
    status_code = 409


class StoreUnavailableError(QuizError):
    kind = "unavailable"
    status_code = 503
