"""Error Hierarchy — typed, categorized exceptions for all rankline failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Only PositionOutOfRange and ScopeCapacityExhausted are user-visible ordering failures;
      every other ordering condition is resolved inside the algorithm
    - ConcurrencyConflictError is surfaced, never retried internally
    - to_response() produces REST envelope; no internal details leaked in messages

Design Decisions:
    - Single hierarchy with RanklineError base: FastAPI global handler catches all (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    CAPACITY = "capacity"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    CONFIGURATION = "configuration"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    scope_key: tuple | None = None
    record_id: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class RanklineError(Exception):
    """Base exception for all rankline errors."""

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
        """Convert to standardized REST error response."""
        scope = self.context.scope_key
        return {
            "error": {
                "code": self.code,
                "message": self.context.user_message or self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "scope_key": list(scope) if scope is not None else None,
                    "record_id": self.context.record_id,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Ordering Errors (400-level) ─────────────────────────────────

class PositionOutOfRangeError(RanklineError):
    """Dense-mode position below the first index or beyond count + 1."""
    def __init__(
        self, position: int, lower: int, upper: int,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Position {position} is out of range [{lower}, {upper}]",
            "POSITION_OUT_OF_RANGE", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.position = position
        self.lower = lower
        self.upper = upper

    @property
    def too_large(self) -> bool:
        return self.position > self.upper


class ScopeCapacityExhaustedError(RanklineError):
    """Rebalance cannot space n records inside [MIN, MAX]. Fatal for the scope."""
    def __init__(
        self, record_count: int, rank_min: int, rank_max: int,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Scope cannot hold {record_count} records within ranks "
            f"[{rank_min}, {rank_max}]",
            "SCOPE_CAPACITY_EXHAUSTED", ErrorCategory.CAPACITY,
            ErrorSeverity.CRITICAL, context, 409,
        )
        self.record_count = record_count


class InvalidScopeKeyError(RanklineError):
    """Scope key arity does not match the table's scope fields."""
    def __init__(
        self, expected: int, received: int, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Scope key needs {expected} value(s), got {received}",
            "INVALID_SCOPE_KEY", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )


class ResourceNotFoundError(RanklineError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class InvalidBoundsError(RanklineError):
    """Rank bounds leave no room for midpoint allocation."""
    def __init__(self, rank_min: int, rank_max: int):
        super().__init__(
            f"Rank bounds [{rank_min}, {rank_max}] must satisfy max - min >= 2",
            "INVALID_RANK_BOUNDS", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, None, 500,
        )


class ConcurrencyConflictError(RanklineError):
    """Store reported a lock-wait timeout, deadlock or serialization failure."""
    def __init__(self, operation: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        if ctx.retry_after_ms is None:
            ctx.retry_after_ms = 100
        super().__init__(
            f"Concurrent mutation conflict during {operation}",
            "CONCURRENCY_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, ctx, 409,
        )
        self.operation = operation


class DatabaseError(RanklineError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
