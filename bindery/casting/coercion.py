"""Coercion Rules

Small, single-purpose conversions used by the casters. Rules never raise:
``coerce`` returns a Result and the caster decides how a failure surfaces.

Features:
- Type-safe coercion with Result types
- ``can_coerce`` pre-check so casters can pick the first applicable rule
- No silent data loss: non-integral floats never become ints
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Any, Generic, TypeVar

from bindery.core.errors import AppError, ErrorCode, Ok, Result, fail, try_result

T = TypeVar("T")


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True, slots=True)
class CoercionRule(ABC, Generic[T]):
    """Base class for coercion rules."""

    @property
    @abstractmethod
    def target_type(self) -> type[T]:
        """Type this rule coerces to."""

    @abstractmethod
    def can_coerce(self, value: Any) -> bool:
        """Check if value has the shape this rule converts from."""

    @abstractmethod
    def coerce(self, value: Any) -> Result[T, AppError]:
        """Coerce value to target type. Returns Result."""

    def __call__(self, value: Any) -> Result[T, AppError]:
        return self.coerce(value)


# ============ Numeric Rules ============

@dataclass(frozen=True, slots=True)
class StringToInt(CoercionRule[int]):
    """Coerce numeric string to int; "12.0" is accepted, "12.5" is not."""

    @property
    def target_type(self) -> type[int]: return int

    def can_coerce(self, value: Any) -> bool: return isinstance(value, str) and bool(value.strip())

    def coerce(self, value: Any) -> Result[int, AppError]:
        stripped = value.strip()
        try:
            return Ok(int(stripped))
        except ValueError:
            pass
        try:
            number = float(stripped)
        except ValueError:
            return fail(ErrorCode.E2002_INVALID_FORMAT, f"Cannot coerce '{value}' to int", value=value, target="int")
        if not number.is_integer():
            return fail(ErrorCode.E2003_OUT_OF_RANGE, f"Cannot coerce '{value}' to int without losing precision")
        return Ok(int(number))


@dataclass(frozen=True, slots=True)
class FloatToInt(CoercionRule[int]):

    @property
    def target_type(self) -> type[int]: return int

    def can_coerce(self, value: Any) -> bool: return isinstance(value, float)

    def coerce(self, value: Any) -> Result[int, AppError]:
        if not value.is_integer():
            return fail(ErrorCode.E2003_OUT_OF_RANGE, f"Cannot coerce {value} to int without losing precision")
        return Ok(int(value))


@dataclass(frozen=True, slots=True)
class StringToFloat(CoercionRule[float]):

    @property
    def target_type(self) -> type[float]: return float

    def can_coerce(self, value: Any) -> bool: return isinstance(value, str)

    def coerce(self, value: Any) -> Result[float, AppError]:
        return try_result(lambda: float(value.strip()), code=ErrorCode.E2002_INVALID_FORMAT,
            origin="StringToFloat", catch=(ValueError,))


@dataclass(frozen=True, slots=True)
class BoolToNumber(CoercionRule[Any]):
    """True/False to 1/0 (or 1.0/0.0)."""
    target: type = int

    @property
    def target_type(self) -> type: return self.target

    def can_coerce(self, value: Any) -> bool: return isinstance(value, bool)

    def coerce(self, value: Any) -> Result[Any, AppError]: return Ok(self.target(value))


# ============ Boolean Rules ============

@dataclass(frozen=True, slots=True)
class StringToBool(CoercionRule[bool]):
    """Coerce string to boolean, case-insensitive.

    Truthy: "true", "1", "yes", "on"
    Falsy: "false", "0", "no", "off", ""
    """
    true_values: frozenset[str] = frozenset({"true", "1", "yes", "on"})
    false_values: frozenset[str] = frozenset({"false", "0", "no", "off", ""})

    @property
    def target_type(self) -> type[bool]: return bool

    def can_coerce(self, value: Any) -> bool: return isinstance(value, str)

    def coerce(self, value: Any) -> Result[bool, AppError]:
        lower = value.strip().lower()
        if lower in self.true_values:
            return Ok(True)
        if lower in self.false_values:
            return Ok(False)
        return fail(ErrorCode.E2002_INVALID_FORMAT,
            f"Cannot coerce '{value}' to bool. Valid values: {sorted(self.true_values | self.false_values)}")


@dataclass(frozen=True, slots=True)
class NumberToBool(CoercionRule[bool]):

    @property
    def target_type(self) -> type[bool]: return bool

    def can_coerce(self, value: Any) -> bool: return is_number(value)

    def coerce(self, value: Any) -> Result[bool, AppError]: return Ok(bool(value))


# ============ String Rules ============

@dataclass(frozen=True, slots=True)
class ScalarToString(CoercionRule[str]):
    """Numbers render with ``str``; booleans render as "true"/"false"."""

    @property
    def target_type(self) -> type[str]: return str

    def can_coerce(self, value: Any) -> bool: return isinstance(value, (int, float))

    def coerce(self, value: Any) -> Result[str, AppError]:
        if isinstance(value, bool):
            return Ok("true" if value else "false")
        return Ok(str(value))


# ============ Temporal Rules ============

@dataclass(frozen=True, slots=True)
class ISO8601ToDateTime(CoercionRule[datetime]):
    """Coerce ISO8601 string to datetime, handling the Z suffix."""
    default_timezone: timezone | None = None

    @property
    def target_type(self) -> type[datetime]: return datetime

    def can_coerce(self, value: Any) -> bool: return isinstance(value, str)

    def _parse(self, value: str) -> datetime:
        stripped = value.strip()
        normalized = stripped[:-1] + "+00:00" if stripped.endswith(("Z", "z")) else stripped
        dt = datetime.fromisoformat(normalized)
        if dt.tzinfo is None and self.default_timezone:
            dt = dt.replace(tzinfo=self.default_timezone)
        return dt

    def coerce(self, value: Any) -> Result[datetime, AppError]:
        try:
            return Ok(self._parse(value))
        except ValueError as e:
            return fail(ErrorCode.E2012_INVALID_DATE, f"Cannot coerce '{value}' to datetime: {e}",
                value=value, target="datetime", format="ISO8601")


@dataclass(frozen=True, slots=True)
class FormattedStringToDateTime(CoercionRule[datetime]):
    """Parse with an explicit ``strptime`` format."""
    format: str = "%Y-%m-%dT%H:%M:%S%z"

    @property
    def target_type(self) -> type[datetime]: return datetime

    def can_coerce(self, value: Any) -> bool: return isinstance(value, str)

    def coerce(self, value: Any) -> Result[datetime, AppError]:
        try:
            return Ok(datetime.strptime(value.strip(), self.format))
        except ValueError as e:
            return fail(ErrorCode.E2012_INVALID_DATE, f"Cannot parse '{value}' with format {self.format}: {e}")


@dataclass(frozen=True, slots=True)
class TimestampToDateTime(CoercionRule[datetime]):
    """Unix timestamp (seconds) to an aware UTC datetime."""

    @property
    def target_type(self) -> type[datetime]: return datetime

    def can_coerce(self, value: Any) -> bool: return is_number(value)

    def coerce(self, value: Any) -> Result[datetime, AppError]:
        try:
            return Ok(datetime.fromtimestamp(value, tz=timezone.utc))
        except (OverflowError, OSError, ValueError) as e:
            return fail(ErrorCode.E2003_OUT_OF_RANGE, f"Timestamp {value} out of range: {e}")


@dataclass(frozen=True, slots=True)
class ISO8601ToDate(CoercionRule[date]):

    @property
    def target_type(self) -> type[date]: return date

    def can_coerce(self, value: Any) -> bool: return isinstance(value, str)

    def coerce(self, value: Any) -> Result[date, AppError]:
        return try_result(lambda: date.fromisoformat(value.strip()), code=ErrorCode.E2012_INVALID_DATE,
            origin="ISO8601ToDate", catch=(ValueError,))


@dataclass(frozen=True, slots=True)
class ISO8601ToTime(CoercionRule[time]):

    @property
    def target_type(self) -> type[time]: return time

    def can_coerce(self, value: Any) -> bool: return isinstance(value, str)

    def coerce(self, value: Any) -> Result[time, AppError]:
        return try_result(lambda: time.fromisoformat(value.strip()), code=ErrorCode.E2002_INVALID_FORMAT,
            origin="ISO8601ToTime", catch=(ValueError,))
