"""Dto Base Class

Convenience layer over the engine for bindable types.

Usage:
    @dataclass(frozen=True)
    class Address(Dto):
        street: str
        city: str
        country: str

    address = Address.from_data({"street": "1 Main", "city": "NY", "country": "US"})
    moved = address.with_(city="Boston")
    address.diff(moved)  # {"city": {"old": "NY", "new": "Boston"}}

Every method takes an optional ``engine`` (``default_engine()`` otherwise)
and an optional Context.
"""
from __future__ import annotations

import copy
import dataclasses
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, TypeVar

from bindery.context import Context
from bindery.core.errors import ErrorCode, HydrationError
from bindery.engine import Engine, default_engine
from bindery.meta.fields import ClassMeta

D = TypeVar("D", bound="Dto")


class Dto:
    """Mixin marking a class as bindable and adding from/to/with helpers."""
    __bindable__: ClassVar[bool] = True

    # ============ Creation ============

    @classmethod
    def from_data(cls: type[D], source: Any, ctx: Context | None = None, engine: Engine | None = None) -> D:
        """Hydrate from a mapping, JSON/YAML text or a foreign object."""
        return (engine or default_engine()).hydrate(cls, source, ctx)

    @classmethod
    def from_json(cls: type[D], text: str | bytes, ctx: Context | None = None, engine: Engine | None = None) -> D:
        if not isinstance(text, (str, bytes, bytearray)):
            raise TypeError(f"from_json expects str or bytes, got {type(text).__name__}")
        return (engine or default_engine()).hydrate(cls, text, ctx)

    @classmethod
    def partial(cls: type[D], *fields: str) -> PartialBuilder[D]:
        """Builder that hydrates only ``fields``; every other field is treated as absent."""
        return PartialBuilder(cls, fields)

    # ============ Output ============

    def to_dict(self, ctx: Context | None = None, engine: Engine | None = None) -> dict[str, Any]:
        return (engine or default_engine()).normalize(self, ctx)

    def to_json(self, ctx: Context | None = None, engine: Engine | None = None, **dumps_kwargs: Any) -> str:
        return (engine or default_engine()).normalize_to_json(self, ctx, **dumps_kwargs)

    # ============ Copies ============

    def with_(self: D, engine: Engine | None = None, **changes: Any) -> D:
        """New instance with ``changes`` applied; values are used as given, without casting."""
        meta = self._meta(engine)
        for name in changes:
            if not meta.has_field(name):
                raise HydrationError(message=f"Property '{name}' does not exist on {meta.class_name}",
                    path=name, code=ErrorCode.E4002_INVALID_MAPPING)
        if dataclasses.is_dataclass(self):
            init_changes = {k: v for k, v in changes.items() if meta.fields[k].in_constructor}
            instance = dataclasses.replace(self, **init_changes)
        else:
            args = {name: changes.get(name, getattr(self, name)) for name in meta.construction_order}
            instance = type(self)(**args)
            for field in meta.fields.values():
                if not field.in_constructor and hasattr(self, field.name):
                    setattr(instance, field.name, getattr(self, field.name))
        for name, value in changes.items():
            if not meta.fields[name].in_constructor:
                object.__setattr__(instance, name, value)
        return instance

    def clone(self: D) -> D:
        """Deep copy; hidden fields are kept."""
        return copy.deepcopy(self)

    def merge(self: D, other: D, engine: Engine | None = None) -> D:
        """Copy with every non-None value of ``other`` applied over this instance."""
        self._require_same_type(other, "merge")
        meta = self._meta(engine)
        changes = {name: value for name in meta.field_names
            if (value := getattr(other, name, None)) is not None}
        return self.with_(engine=engine, **changes)

    # ============ Comparison ============

    def diff(self, other: Dto, ctx: Context | None = None, engine: Engine | None = None) -> dict[str, dict[str, Any]]:
        """Field-by-field differences of the normalized forms: ``{name: {"old": ..., "new": ...}}``."""
        self._require_same_type(other, "diff")
        ctx = (ctx or Context.from_settings()).wrap(None)
        mine, theirs = self.to_dict(ctx, engine), other.to_dict(ctx, engine)
        return {
            key: {"old": mine.get(key), "new": theirs.get(key)}
            for key in (*mine, *(k for k in theirs if k not in mine))
            if key not in mine or key not in theirs or mine[key] != theirs[key]
        }

    def equals(self, other: Any, ctx: Context | None = None, engine: Engine | None = None) -> bool:
        return isinstance(other, type(self)) and not self.diff(other, ctx, engine)

    # ============ Helpers ============

    def _meta(self, engine: Engine | None) -> ClassMeta:
        return (engine or default_engine()).meta_factory.create(type(self))

    def _require_same_type(self, other: Any, action: str) -> None:
        if not isinstance(other, type(self)):
            raise TypeError(f"Can only {action} DTOs of the same type. "
                f"Expected {type(self).__qualname__}, got {type(other).__qualname__}")


@dataclass(frozen=True)
class PartialBuilder(Generic[D]):
    """Hydrates ``dto_class`` from the allowed fields of a source, for partial updates.

    Allowed names are field names; input keys are still resolved through
    ``MapFrom`` and the context's naming strategy. Required fields left out
    of the allowed set are reported as missing.
    """
    dto_class: type[D]
    allowed_fields: tuple[str, ...]

    def from_data(self, source: Any, ctx: Context | None = None, engine: Engine | None = None) -> D:
        engine = engine or default_engine()
        meta = engine.meta_factory.create(self.dto_class)
        for name in self.allowed_fields:
            if not meta.has_field(name):
                raise HydrationError(message=f"Property '{name}' does not exist on {meta.class_name}",
                    path=name, code=ErrorCode.E4002_INVALID_MAPPING)
        return engine.hydrate(self.dto_class, source, ctx, only=frozenset(self.allowed_fields))
