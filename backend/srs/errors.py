"""Domain errors raised by the review engine.

Each error carries a machine-readable ``code`` and the HTTP status the API
layer answers with, so callers branch on codes instead of message text.
"""


class ReviewError(Exception):
    """Base class for review engine errors."""

    code = "REVIEW_ERROR"
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class CardNotFound(ReviewError):
    code = "CARD_NOT_FOUND"
    status_code = 404

    def __init__(self, card_id: int) -> None:
        super().__init__(f"Card {card_id} not found")
        self.card_id = card_id


class NotAuthorized(ReviewError):
    code = "USER_NOT_AUTHORIZED"
    status_code = 403

    def __init__(self, message: str = "User not authorized for this card") -> None:
        super().__init__(message)


class ValidationError(ReviewError):
    code = "VALIDATION_ERROR"
    status_code = 422


class InvalidGrade(ValidationError):
    code = "INVALID_GRADE"

    def __init__(self, value: object) -> None:
        super().__init__(f"Unrecognized grade: {value!r} (expected AGAIN, HARD, GOOD or EASY)")
        self.value = value


class InvalidQueueLimit(ValidationError):
    code = "INVALID_LIMIT"

    def __init__(self, limit: int) -> None:
        super().__init__(f"Queue limit must be at least 1, got {limit}")
        self.limit = limit


class ReviewConflict(ReviewError):
    """The card changed between read and write (e.g. a double submit)."""

    code = "REVIEW_CONFLICT"
    status_code = 409

    def __init__(self, card_id: int) -> None:
        super().__init__(f"Card {card_id} was modified by a concurrent review")
        self.card_id = card_id


class NotAuthenticated(ReviewError):
    code = "USER_NOT_AUTHENTICATED"
    status_code = 401

    def __init__(self) -> None:
        super().__init__("User not authenticated")


class InvalidTimezone(ValidationError):
    code = "INVALID_TIMEZONE"

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown timezone: {name!r}")
        self.name = name
