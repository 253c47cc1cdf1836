"""Custom exception hierarchy for the Circle API."""

from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base application error with a stable machine-readable code."""

    def __init__(self, message: str, code: str, status_code: int = 400) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the error in the API standard shape."""
        return {"error": self.message, "code": self.code}


class NotFoundError(AppError):
    """Raised when a requested resource does not exist."""

    def __init__(self, resource: str) -> None:
        super().__init__(message=f"{resource} not found", code="NOT_FOUND", status_code=404)


class ForbiddenError(AppError):
    """Raised when the user lacks permission for the action."""

    def __init__(self, reason: str = "You don't have permission") -> None:
        super().__init__(message=reason, code="FORBIDDEN", status_code=403)


class ConflictError(AppError):
    """Raised on duplicate/conflicting operations."""

    def __init__(self, reason: str, code: str = "CONFLICT") -> None:
        super().__init__(message=reason, code=code, status_code=409)


class UnauthorizedError(AppError):
    """Raised when the caller is not authenticated."""

    def __init__(self, reason: str = "Unauthorized") -> None:
        super().__init__(message=reason, code="UNAUTHORIZED", status_code=401)


class InvalidInputError(AppError):
    """Raised for request payload or parameter validation issues."""

    def __init__(self, reason: str) -> None:
        super().__init__(message=reason, code="INVALID_INPUT", status_code=422)


class ValidationError(AppError):
    """Raised with every field-level violation found, not just the first."""

    def __init__(self, violations: dict[str, list[str]]) -> None:
        self.violations = {field: list(messages) for field, messages in violations.items()}
        total = sum(len(messages) for messages in self.violations.values())
        super().__init__(
            message=f"{total} validation error(s)",
            code="VALIDATION_ERROR",
            status_code=422,
        )

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["fields"] = self.violations
        return payload


class AlreadyMemberError(ConflictError):
    """Raised when joining a community the user already belongs to."""

    def __init__(self) -> None:
        super().__init__("Already a member of this community", code="ALREADY_MEMBER")


class NotMemberError(AppError):
    """Raised when an action requires community membership."""

    def __init__(self, reason: str = "You are not a member of this community") -> None:
        super().__init__(message=reason, code="NOT_MEMBER", status_code=403)


class NotEligibleError(AppError):
    """Raised when a user cannot submit to a challenge right now."""

    def __init__(self, reason: str = "You cannot submit to this challenge") -> None:
        super().__init__(message=reason, code="NOT_ELIGIBLE", status_code=403)


class InvalidContentError(AppError):
    """Raised when a submission link is not accepted for its type."""

    def __init__(self, reason: str) -> None:
        super().__init__(message=reason, code="INVALID_CONTENT", status_code=422)


class ChallengeClosedError(ConflictError):
    """Raised when modifying a submission after the challenge ended."""

    def __init__(self) -> None:
        super().__init__("This challenge has ended", code="CHALLENGE_CLOSED")


class AlreadyVotedError(ConflictError):
    """Raised on a second vote for the same submission."""

    def __init__(self) -> None:
        super().__init__("You have already voted for this submission", code="ALREADY_VOTED")


class NotVotedError(ConflictError):
    """Raised when removing a vote that does not exist."""

    def __init__(self) -> None:
        super().__init__("You have not voted for this submission", code="NOT_VOTED")


class StorageError(AppError):
    """Raised for unexpected persistence failures; callers may retry."""

    def __init__(self, reason: str = "Storage request failed, please retry") -> None:
        super().__init__(message=reason, code="STORAGE_ERROR", status_code=503)


class UniqueViolationError(StorageError):
    """Raised when an insert hits a unique constraint."""

    def __init__(self, reason: str = "Duplicate row") -> None:
        super().__init__(reason)
