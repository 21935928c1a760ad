"""Error Handling System

Key components:
- ErrorCode: Hierarchical error code taxonomy
- AppError: Error value with full context
- Result[T, E]: Monadic container used by coercion rules
- BindingError and subclasses: exceptions raised by the binding pipeline

Usage:
    from bindery.core.errors import HydrationError

    try:
        user = engine.hydrate(User, payload)
    except HydrationError as exc:
        for error in exc.errors:
            log.warning("bind_failed", path=error.path, code=error.code.name)
"""
from .types import (
    # Core types
    Result,
    Ok,
    Err,
    AppError,
    ErrorCode,
    ErrorContext,
    # Constructors
    fail,
    from_exception,
    try_result,
    first_ok,
)

from .exceptions import (
    BindingError,
    CastError,
    MappingError,
    RuleViolation,
    ValidationError,
    HydrationError,
    NormalizationError,
    describe_type,
    join_path,
)

__all__ = [
    "Result",
    "Ok",
    "Err",
    "AppError",
    "ErrorCode",
    "ErrorContext",
    "fail",
    "from_exception",
    "try_result",
    "first_ok",
    "BindingError",
    "CastError",
    "MappingError",
    "RuleViolation",
    "ValidationError",
    "HydrationError",
    "NormalizationError",
    "describe_type",
    "join_path",
]
