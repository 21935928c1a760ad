"""Binding Exceptions

Exception hierarchy raised across the binding pipeline. Every exception
carries a field path so that an aggregate failure can tell the caller exactly
which input keys were wrong.

Taxonomy:
- CastError: one field could not be converted in the current cast mode
- RuleViolation: one failed validation rule (a value, never raised)
- ValidationError: one or more RuleViolations for one field
- MappingError: input is missing a required key or cannot be mapped
- HydrationError: aggregate of every field error from one hydration pass
- NormalizationError: programming errors detected while normalizing
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Sequence

from .types import AppError, ErrorCode


def describe_type(value: Any) -> str:
    """Short type name for error messages."""
    return "null" if value is None else type(value).__name__


def join_path(segment: str, path: str) -> str:
    """Prefix a field path; index segments attach without a dot (``tags[1]``)."""
    if not path:
        return segment
    return f"{segment}{path}" if path.startswith("[") else f"{segment}.{path}"


@dataclass(eq=False)
class BindingError(Exception):
    """Base error for every binding failure.
    
    ``path`` is dotted (``address.city``, ``items[2].name``) and grows as the
    error travels up through nested hydration via ``prepend_path``.
    """
    message: str
    path: str = ""
    expected_type: str | None = None
    given_type: str | None = None
    given_value: Any = None
    code: ErrorCode = ErrorCode.E9000_INTERNAL_GENERIC
    
    def __post_init__(self):
        super().__init__(self.message)
    
    def __str__(self) -> str: return self.full_message
    
    @property
    def full_message(self) -> str:
        return f"{self.path}: {self.message}" if self.path else self.message
    
    def with_path(self, path: str) -> BindingError: return replace(self, path=path)
    
    def prepend_path(self, segment: str) -> BindingError:
        return replace(self, path=join_path(segment, self.path))
    
    def to_app_error(self) -> AppError:
        """Convert to AppError for uniform reporting."""
        return AppError(code=self.code, message=self.full_message, metadata=self._metadata())
    
    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"path": self.path or "$", "code": self.code.name, "message": self.message}
        if self.expected_type: result["expected"] = self.expected_type
        if self.given_type: result["given"] = self.given_type
        return result
    
    def _metadata(self) -> dict[str, Any]:
        return {"path": self.path, "expected_type": self.expected_type, "given_type": self.given_type}


@dataclass(eq=False)
class CastError(BindingError):
    """A single value could not be converted to its declared type."""
    code: ErrorCode = ErrorCode.E3000_CAST_GENERIC
    
    @classmethod
    def cannot_cast(cls, value: Any, target: str, path: str = "", reason: str | None = None) -> CastError:
        message = f"Cannot cast {describe_type(value)} to {target}"
        return cls(message=f"{message}: {reason}" if reason else message, path=path, expected_type=target,
            given_type=describe_type(value), given_value=value, code=ErrorCode.E3001_CANNOT_CAST)
    
    @classmethod
    def invalid_enum_value(cls, value: Any, enum_name: str, valid: Sequence[Any], path: str = "") -> CastError:
        options = ", ".join(repr(v) for v in valid)
        return cls(message=f"Invalid value {value!r} for enum {enum_name}. Valid values: {options}", path=path,
            expected_type=enum_name, given_type=describe_type(value), given_value=value,
            code=ErrorCode.E3002_INVALID_ENUM_VALUE)
    
    @classmethod
    def invalid_datetime_format(cls, value: Any, fmt: str, path: str = "") -> CastError:
        return cls(message=f"Invalid datetime {value!r}, expected format {fmt}", path=path, expected_type="datetime",
            given_type=describe_type(value), given_value=value, code=ErrorCode.E3003_INVALID_DATETIME)
    
    @classmethod
    def no_caster_found(cls, value: Any, target: str, path: str = "") -> CastError:
        return cls(message=f"No caster found for type {target}", path=path, expected_type=target,
            given_type=describe_type(value), given_value=value, code=ErrorCode.E3004_NO_CASTER)
    
    @classmethod
    def strict_mismatch(cls, value: Any, target: str, path: str = "") -> CastError:
        return cls(message=f"Strict mode expects {target}, got {describe_type(value)}", path=path,
            expected_type=target, given_type=describe_type(value), given_value=value,
            code=ErrorCode.E3005_STRICT_TYPE_MISMATCH)
    
    @classmethod
    def from_app_error(cls, error: AppError, value: Any, target: str, path: str = "") -> CastError:
        return cls.cannot_cast(value, target, path=path, reason=error.message)


@dataclass(eq=False)
class MappingError(BindingError):
    """Input cannot be mapped onto the declared fields."""
    code: ErrorCode = ErrorCode.E4002_INVALID_MAPPING
    
    @classmethod
    def missing_required_key(cls, key: str, path: str = "") -> MappingError:
        return cls(message=f"Missing required key '{key}'", path=path, code=ErrorCode.E4001_MISSING_REQUIRED_KEY)
    
    @classmethod
    def invalid_mapping(cls, source_key: str, target: str, reason: str = "") -> MappingError:
        message = f"Cannot map '{source_key}' to '{target}'"
        return cls(message=f"{message}: {reason}" if reason else message, path=target)


@dataclass(frozen=True, slots=True)
class RuleViolation:
    """A single failed validation rule.
    
    Produced by validators and aggregated into a ValidationError; never
    raised on its own.
    """
    field_name: str
    rule_name: str
    message: str
    invalid_value: Any = None
    parameters: dict[str, Any] = field(default_factory=dict)
    
    @property
    def formatted_message(self) -> str: return f"[{self.field_name}] {self.rule_name}: {self.message}"
    
    def to_dict(self) -> dict[str, Any]:
        result = {"field": self.field_name, "rule": self.rule_name, "message": self.message}
        if self.parameters: result["parameters"] = dict(self.parameters)
        return result


@dataclass(eq=False)
class ValidationError(BindingError):
    """One or more rule violations for a single field."""
    violations: list[RuleViolation] = field(default_factory=list)
    code: ErrorCode = ErrorCode.E2000_VALIDATION_GENERIC
    
    @classmethod
    def from_violations(cls, message: str, violations: Sequence[RuleViolation], path: str = "") -> ValidationError:
        return cls(message=message, path=path, violations=list(violations))
    
    @property
    def violation_count(self) -> int: return len(self.violations)
    
    @property
    def full_message(self) -> str:
        head = super().full_message
        if not self.violations: return head
        return "\n".join([head, *(f"  - {v.formatted_message}" for v in self.violations)])
    
    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "violations": [v.to_dict() for v in self.violations]}
    
    def _metadata(self) -> dict[str, Any]:
        return {**super()._metadata(), "violations": [v.to_dict() for v in self.violations]}


@dataclass(eq=False)
class HydrationError(BindingError):
    """Aggregate of every field error collected during one hydration pass."""
    errors: list[BindingError] = field(default_factory=list)
    code: ErrorCode = ErrorCode.E4000_HYDRATION_GENERIC
    
    @classmethod
    def from_errors(cls, message: str, errors: Sequence[BindingError]) -> HydrationError:
        return cls(message=message, errors=list(errors))
    
    @property
    def error_count(self) -> int: return len(self.errors)
    
    @property
    def error_paths(self) -> list[str]: return [e.path for e in self.errors]
    
    @property
    def full_message(self) -> str:
        head = super().full_message
        if not self.errors: return head
        lines = [f"{head} ({self.error_count} errors)"]
        for error in self.errors:
            lines.extend(f"  {line}" for line in error.full_message.splitlines())
        return "\n".join(lines)
    
    def prepend_path(self, segment: str) -> HydrationError:
        return replace(self, path=join_path(segment, self.path),
            errors=[e.prepend_path(segment) for e in self.errors])
    
    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "error_count": self.error_count, "errors": [e.to_dict() for e in self.errors]}
    
    def _metadata(self) -> dict[str, Any]:
        return {"error_count": self.error_count, "errors": [e.to_dict() for e in self.errors],
            "error_codes": sorted({e.code.name for e in self.errors})}


@dataclass(eq=False)
class NormalizationError(BindingError):
    """Programming error detected while normalizing an instance."""
    code: ErrorCode = ErrorCode.E6000_NORMALIZATION_GENERIC
    
    @classmethod
    def computed_conflict(cls, name: str, owner: str) -> NormalizationError:
        return cls(message=f"Computed field '{name}' conflicts with a declared field of {owner}", path=name,
            code=ErrorCode.E6001_COMPUTED_FIELD_CONFLICT)
