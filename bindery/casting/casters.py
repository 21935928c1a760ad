"""Built-in casters: untyped leaf value to typed value.

Default priorities: CollectionCaster 40, DateTimeCaster 30, EnumCaster 20,
ScalarCaster 10. Casters raise CastError; permissive substitution is handled
by the Hydrator.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime, time
from functools import partial
from typing import TYPE_CHECKING, Any, ClassVar

from bindery.context import Context
from bindery.core.errors import CastError, Err, Ok, first_ok
from bindery.meta.fields import FieldMeta

from .coercion import (
    BoolToNumber,
    CoercionRule,
    FloatToInt,
    FormattedStringToDateTime,
    ISO8601ToDate,
    ISO8601ToDateTime,
    ISO8601ToTime,
    NumberToBool,
    ScalarToString,
    StringToBool,
    StringToFloat,
    StringToInt,
    TimestampToDateTime,
)

if TYPE_CHECKING:
    from .registry import CasterRegistry

SCALARS = (str, int, float, bool)


class Caster(ABC):
    """Strategy converting one untyped value into the field's declared type."""
    priority: ClassVar[int] = 0

    @abstractmethod
    def supports(self, field: FieldMeta, value: Any) -> bool:
        """Whether this caster handles the field/value pair."""

    @abstractmethod
    def cast(self, field: FieldMeta, value: Any, ctx: Context) -> Any:
        """Convert value, raising CastError on failure."""

    def _apply(self, rule: CoercionRule, field: FieldMeta, value: Any) -> Any:
        match rule.coerce(value):
            case Ok(result):
                return result
            case Err(error):
                raise CastError.from_app_error(error, value, field.type.name)


# ============ Scalars ============

class ScalarCaster(Caster):
    """int, float, str and bool from any scalar input."""
    priority = 10

    RULES: ClassVar[dict[type, tuple[CoercionRule, ...]]] = {
        int: (BoolToNumber(int), FloatToInt(), StringToInt()),
        float: (BoolToNumber(float), StringToFloat()),
        bool: (StringToBool(), NumberToBool()),
        str: (ScalarToString(),),
    }

    def supports(self, field: FieldMeta, value: Any) -> bool:
        return field.type.is_primitive and isinstance(value, SCALARS)

    def cast(self, field: FieldMeta, value: Any, ctx: Context) -> Any:
        target = field.type.py_type
        if field.type.is_compatible(value):
            return float(value) if target is float else value
        if ctx.is_strict_mode():
            raise CastError.strict_mismatch(value, field.type.name)
        rule = next((r for r in self.RULES.get(target, ()) if r.can_coerce(value)), None)
        if rule is None:
            raise CastError.cannot_cast(value, field.type.name)
        return self._apply(rule, field, value)


# ============ Enums ============

class EnumCaster(Caster):
    """Enum members by value, then (loose mode) by name."""
    priority = 20

    def supports(self, field: FieldMeta, value: Any) -> bool:
        return field.type.is_enum and value is not None

    def cast(self, field: FieldMeta, value: Any, ctx: Context) -> Any:
        enum_type = field.type.enum_type
        if isinstance(value, enum_type):
            return value
        try:
            return enum_type(value)
        except ValueError:
            pass
        if ctx.is_strict_mode():
            raise CastError.strict_mismatch(value, enum_type.__qualname__)
        if isinstance(value, str):
            if value in enum_type.__members__:
                return enum_type.__members__[value]
            stripped = value.strip()
            if stripped.lstrip("-").isdigit():
                try:
                    return enum_type(int(stripped))
                except ValueError:
                    pass
        valid = [m.value for m in enum_type] if field.type.is_backed_enum else list(enum_type.__members__)
        raise CastError.invalid_enum_value(value, enum_type.__qualname__, valid)


# ============ Temporal ============

class DateTimeCaster(Caster):
    """datetime, date and time values.

    Strings are tried against ``format`` (strptime) when one is configured,
    then ISO-8601. Numbers are Unix timestamps. Strict mode accepts only
    temporal instances and strings in the configured format.
    """
    priority = 30

    def __init__(self, format: str | None = None):
        self.format = format

    @property
    def format_label(self) -> str: return self.format or "ISO-8601"

    def supports(self, field: FieldMeta, value: Any) -> bool:
        return field.type.is_temporal and value is not None

    def cast(self, field: FieldMeta, value: Any, ctx: Context) -> Any:
        target = field.type.py_type
        if field.type.is_compatible(value):
            return value
        if target is date and isinstance(value, datetime) and not ctx.is_strict_mode():
            return value.date()
        if not isinstance(value, (str, int, float)) or isinstance(value, bool):
            raise CastError.cannot_cast(value, field.type.name)
        if ctx.is_strict_mode() and not isinstance(value, str):
            raise CastError.strict_mismatch(value, field.type.name)

        attempts = [partial(rule.coerce, value) for rule in self._rules(target, strict=ctx.is_strict_mode())
            if rule.can_coerce(value)]
        match first_ok(*attempts):
            case Ok(result):
                return result
        raise CastError.invalid_datetime_format(value, self.format_label)

    def _rules(self, target: type, strict: bool) -> list[CoercionRule]:
        if target is date:
            return [ISO8601ToDate()]
        if target is time:
            return [ISO8601ToTime()]
        rules: list[CoercionRule] = [FormattedStringToDateTime(self.format)] if self.format else []
        if strict:
            return rules or [ISO8601ToDateTime()]
        return [*rules, ISO8601ToDateTime(), TimestampToDateTime()]


# ============ Collections ============

class CollectionCaster(Caster):
    """Typed collections of non-structured items, cast item by item.

    Items the registry cannot cast pass through unchanged. Collections of
    bindable types are hydrated by the Hydrator itself.
    """
    priority = 40

    def __init__(self, registry: CasterRegistry):
        self.registry = registry

    def supports(self, field: FieldMeta, value: Any) -> bool:
        return (field.type.is_typed_collection and not field.type.item_type.is_structured
            and isinstance(value, (list, tuple, set, frozenset)))

    def cast(self, field: FieldMeta, value: Any, ctx: Context) -> Any:
        item_type = field.type.item_type
        items = []
        for index, item in enumerate(value):
            item_field = field.with_type(item_type, name=f"{field.name}[{index}]")
            if item is None and item_type.accepts_null:
                items.append(None)
            elif self.registry.can_cast(item_field, item):
                try:
                    items.append(self.registry.cast(item_field, item, ctx))
                except CastError as e:
                    raise e.prepend_path(f"[{index}]") from e
            else:
                items.append(item)
        container = field.type.py_type
        return items if container in (None, list) else container(items)
