"""Error Hierarchy — typed, categorized exceptions for all account service failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Client errors (400-level) are not system faults; store errors (500-level) are
    - to_response() produces the `{"message": ...}` envelope clients rely on
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with AccountServiceError base: one FastAPI handler catches all
    - PersistenceError carries a FailureKind so routes never look at driver error codes
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone

from account_service.core.domain_types import FailureKind


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    CONFLICT = "conflict"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Context for error observability; never serialized to clients."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    debug_info: dict[str, Any] | None = None


class AccountServiceError(Exception):
    """Base exception for all account service errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to the REST error body."""
        return {"message": self.message}


# ─── Client Errors (400-level) ──────────────────────────────────

class MissingFieldsError(AccountServiceError):
    """id, username or password absent or empty."""
    def __init__(self, missing: list[str], context: ErrorContext | None = None):
        super().__init__(
            "Missing required fields: id, username, or password.",
            "MISSING_FIELDS", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.missing = missing


class DuplicateUserError(AccountServiceError):
    """Store rejected the insert on a uniqueness constraint."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Username already exists.",
            "DUPLICATE_USER", ErrorCategory.CONFLICT,
            ErrorSeverity.INFO, context, 409,
        )


# ─── Store Errors (500-level) ───────────────────────────────────

class PersistenceError(AccountServiceError):
    """Store operation failed, classified by the persistence gateway."""
    def __init__(
        self,
        message: str,
        operation: str,
        kind: FailureKind,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Database {operation} failed: {message}",
            "PERSISTENCE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.operation = operation
        self.kind = kind

    def to_response(self) -> dict:
        return {"message": "Database error."}


class AccountCreationError(AccountServiceError):
    """Insert failed for a reason other than a conflict."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Database error during account creation.",
            "ACCOUNT_CREATION_FAILED", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 500,
        )


class UserListingError(AccountServiceError):
    """Select over the users table failed."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Database error fetching users.",
            "USER_LISTING_FAILED", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 500,
        )
