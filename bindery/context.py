"""Binding Context

Immutable per-call configuration threaded through hydration, validation and
normalization. Every ``with_*`` method returns a new Context, so a single
instance can be shared freely across threads.

Usage:
    ctx = Context().with_validation().with_cast_mode(CastMode.PERMISSIVE)
    ctx = ctx.only("id", "email").wrap("data")
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping

if TYPE_CHECKING:
    from bindery.core.config import Settings
    from bindery.hydration.naming import NamingStrategy


class CastMode(str, Enum):
    """How casters treat input that is not already the declared type."""
    LOOSE = "loose"            # Best-effort coercion, CastError on failure
    STRICT = "strict"          # Only exact types (int widening to float allowed)
    PERMISSIVE = "permissive"  # Failed casts become None on nullable fields


@dataclass(frozen=True, slots=True)
class SerializationOptions:
    """Field filtering, depth limit, computed-field selection and output wrapping.

    ``only`` wins over ``exclude``. ``include_lazy`` is None for no computed
    fields, an empty tuple for all of them, or the names to include.
    """
    only: tuple[str, ...] | None = None
    exclude: tuple[str, ...] | None = None
    max_depth: int = 10
    include_lazy: tuple[str, ...] | None = None
    wrap_key: str | None = None

    def should_include(self, name: str) -> bool:
        if self.only is not None:
            return name in self.only
        if self.exclude is not None:
            return name not in self.exclude
        return True

    def should_include_lazy(self, name: str) -> bool:
        if self.include_lazy is None:
            return False
        return not self.include_lazy or name in self.include_lazy

    @property
    def wants_lazy(self) -> bool: return self.include_lazy is not None

    def can_descend(self, depth: int) -> bool: return depth < self.max_depth

    def with_only(self, *names: str) -> SerializationOptions: return replace(self, only=tuple(names))

    def with_exclude(self, *names: str) -> SerializationOptions: return replace(self, exclude=tuple(names))

    def with_max_depth(self, depth: int) -> SerializationOptions:
        if depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {depth}")
        return replace(self, max_depth=depth)

    def with_lazy(self, *names: str) -> SerializationOptions: return replace(self, include_lazy=tuple(names))

    def with_wrap(self, key: str | None) -> SerializationOptions: return replace(self, wrap_key=key)


@dataclass(frozen=True, slots=True)
class Context:
    """Immutable configuration bundle for one binding call."""
    naming_strategy: NamingStrategy | None = None
    validation_enabled: bool = False
    serialization: SerializationOptions = field(default_factory=SerializationOptions)
    cast_mode: CastMode = CastMode.LOOSE
    custom_data: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    global_pipeline: tuple[Any, ...] = ()

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> Context:
        """Default context built from BINDERY_* settings."""
        if settings is None:
            from bindery.core.config import get_settings
            settings = get_settings()
        return cls(cast_mode=CastMode(settings.CAST_MODE),
            serialization=SerializationOptions(max_depth=settings.MAX_DEPTH))

    @classmethod
    def permissive(cls) -> Context: return cls(cast_mode=CastMode.PERMISSIVE)

    @classmethod
    def strict(cls) -> Context: return cls(cast_mode=CastMode.STRICT)

    # ============ Mutators (copy-on-write) ============

    def with_naming_strategy(self, strategy: NamingStrategy | None) -> Context:
        return replace(self, naming_strategy=strategy)

    def with_validation(self, enabled: bool = True) -> Context: return replace(self, validation_enabled=enabled)

    def with_serialization(self, options: SerializationOptions) -> Context: return replace(self, serialization=options)

    def with_cast_mode(self, mode: CastMode | str) -> Context: return replace(self, cast_mode=CastMode(mode))

    def with_custom(self, **data: Any) -> Context:
        return replace(self, custom_data=MappingProxyType({**self.custom_data, **data}))

    def with_global_pipeline(self, *steps: Any) -> Context: return replace(self, global_pipeline=tuple(steps))

    def only(self, *names: str) -> Context: return self.with_serialization(self.serialization.with_only(*names))

    def exclude(self, *names: str) -> Context: return self.with_serialization(self.serialization.with_exclude(*names))

    def include_lazy(self, *names: str) -> Context: return self.with_serialization(self.serialization.with_lazy(*names))

    def max_depth(self, depth: int) -> Context: return self.with_serialization(self.serialization.with_max_depth(depth))

    def wrap(self, key: str | None) -> Context: return self.with_serialization(self.serialization.with_wrap(key))

    # ============ Queries ============

    def is_strict_mode(self) -> bool: return self.cast_mode is CastMode.STRICT

    def is_permissive_mode(self) -> bool: return self.cast_mode is CastMode.PERMISSIVE

    def get_custom(self, key: str, default: Any = None) -> Any: return self.custom_data.get(key, default)

    def has_custom(self, key: str) -> bool: return key in self.custom_data
