"""Monadic Error Handling Types

Result/Either types for composable error propagation inside the binding
pipeline. Coercion rules return a Result instead of raising so that casters
decide how a failure surfaces (raise, or substitute null in permissive mode).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Generic, TypeVar, Union, final
from uuid import uuid4

T = TypeVar("T")
E = TypeVar("E", bound="AppError")


class ErrorCode(Enum):
    """Hierarchical error code taxonomy.
    
    E2xxx: Validation errors
    E3xxx: Casting errors
    E4xxx: Mapping/Hydration errors
    E5xxx: Metadata errors
    E6xxx: Normalization errors
    E9xxx: Internal/Unknown errors
    """
    # Validation (E2xxx)
    E2000_VALIDATION_GENERIC = 2000
    E2002_INVALID_FORMAT = 2002
    E2003_OUT_OF_RANGE = 2003
    E2012_INVALID_DATE = 2012
    E2021_INVALID_JSON = 2021
    E2022_INVALID_YAML = 2022
    
    # Casting (E3xxx)
    E3000_CAST_GENERIC = 3000
    E3001_CANNOT_CAST = 3001
    E3002_INVALID_ENUM_VALUE = 3002
    E3003_INVALID_DATETIME = 3003
    E3004_NO_CASTER = 3004
    E3005_STRICT_TYPE_MISMATCH = 3005
    
    # Mapping/Hydration (E4xxx)
    E4000_HYDRATION_GENERIC = 4000
    E4001_MISSING_REQUIRED_KEY = 4001
    E4002_INVALID_MAPPING = 4002
    E4003_UNSUPPORTED_INPUT = 4003
    E4004_CONSTRUCTION_FAILED = 4004
    
    # Metadata (E5xxx)
    E5001_UNSUPPORTED_TYPE = 5001
    
    # Normalization (E6xxx)
    E6000_NORMALIZATION_GENERIC = 6000
    E6001_COMPUTED_FIELD_CONFLICT = 6001
    
    # Internal (E9xxx)
    E9000_INTERNAL_GENERIC = 9000

    @property
    def category(self) -> str:
        """Human-readable error category."""
        code = self.value
        if 2000 <= code < 3000:
            return "validation"
        if 3000 <= code < 4000:
            return "casting"
        if 4000 <= code < 5000:
            return "hydration"
        if 5000 <= code < 6000:
            return "metadata"
        if 6000 <= code < 7000:
            return "normalization"
        return "internal"


@dataclass(frozen=True, slots=True)
class ErrorContext:
    """Immutable context for error tracing and debugging."""
    correlation_id: str = field(default_factory=lambda: str(uuid4())[:8])
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    origin: str = ""


@dataclass(frozen=True, slots=True)
class AppError:
    """Error value with code, message and structured metadata.
    
    Binding exceptions convert to AppError through ``to_app_error()`` so that
    callers can report every failure in the same shape.
    """
    code: ErrorCode
    message: str
    context: ErrorContext = field(default_factory=ErrorContext)
    metadata: dict = field(default_factory=dict)
    cause: Exception | None = None
    
    def to_dict(self) -> dict:
        """Serialize error for reporting."""
        return {
            "error": {
                "code": self.code.name,
                "code_num": self.code.value,
                "message": self.message,
                "category": self.code.category,
                "correlation_id": self.context.correlation_id,
                "timestamp": self.context.timestamp.isoformat(),
                "metadata": self.metadata,
            }
        }

    def __str__(self) -> str:
        return f"[{self.code.name}] {self.message} (correlation_id={self.context.correlation_id})"


@final
@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Success variant of Result monad."""
    value: T


@final
@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failure variant of Result monad."""
    error: E


# Type alias for Result monad
Result = Union[Ok[T], Err[E]]


def fail(code: ErrorCode, message: str, **metadata: Any) -> Err[AppError]:
    """Construct an Err carrying a fresh AppError."""
    return Err(AppError(code=code, message=message, metadata=metadata))


def from_exception(
    exc: Exception,
    code: ErrorCode = ErrorCode.E9000_INTERNAL_GENERIC,
    message: str | None = None,
    origin: str = "",
    **metadata,
) -> Err[AppError]:
    """Convert exception to Err with full context."""
    return Err(AppError(
        code=code,
        message=message or str(exc),
        context=ErrorContext(origin=origin),
        metadata=metadata,
        cause=exc,
    ))


def try_result(
    f: Callable[[], T],
    code: ErrorCode = ErrorCode.E9000_INTERNAL_GENERIC,
    origin: str = "",
    catch: tuple[type[Exception], ...] = (Exception,),
) -> Result[T, AppError]:
    """Execute function and wrap result in Result monad.
    
    Catches the given exception types and converts them to Err.
    """
    try:
        return Ok(f())
    except catch as e:
        return from_exception(e, code=code, origin=origin)


def first_ok(*attempts: Callable[[], Result[T, AppError]]) -> Result[T, AppError]:
    """Run attempts in order, returning the first Ok or the last Err."""
    last: Result[T, AppError] = fail(ErrorCode.E9000_INTERNAL_GENERIC, "No attempts given")
    for attempt in attempts:
        match last := attempt():
            case Ok():
                return last
    return last
