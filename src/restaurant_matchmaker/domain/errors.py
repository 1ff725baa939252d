"""Domain error codes for swipe sessions."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INVALID_OPERATION = "INVALID_OPERATION"
    BUDGET_EXCEEDED = "BUDGET_EXCEEDED"
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class NotFoundError(DomainError):
    """Raised when a session or candidate does not exist."""

    def __init__(self, message: str = "Session not found") -> None:
        super().__init__(code=ErrorCode.NOT_FOUND, message=message)


class ConflictError(DomainError):
    """Raised when a session already has a different partner."""

    def __init__(self, message: str = "Session already has a partner") -> None:
        super().__init__(code=ErrorCode.CONFLICT, message=message)


class InvalidOperationError(DomainError):
    """Raised for structurally disallowed actions."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_OPERATION, message=message)


class BudgetExceededError(DomainError):
    """Raised when a party has used every swipe."""

    def __init__(self, max_swipes: int) -> None:
        super().__init__(
            code=ErrorCode.BUDGET_EXCEEDED,
            message=f"Maximum swipes reached ({max_swipes})",
        )
        self.max_swipes = max_swipes


class PersistenceError(DomainError):
    """Raised when the backing store fails or keeps conflicting."""

    def __init__(self, message: str = "Failed to persist session state") -> None:
        super().__init__(code=ErrorCode.PERSISTENCE_ERROR, message=message)
