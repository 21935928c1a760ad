"""Caster registry: priority-ordered, first-match dispatch."""
from __future__ import annotations

from typing import Any

from bindery.context import Context
from bindery.core.errors import CastError
from bindery.core.registry import PriorityRegistry
from bindery.meta.fields import FieldMeta

from .casters import Caster, CollectionCaster, DateTimeCaster, EnumCaster, ScalarCaster


class CasterRegistry:
    """Dispatches a field/value pair to the highest-priority caster that supports it."""
    
    def __init__(self) -> None:
        self._casters: PriorityRegistry[Caster] = PriorityRegistry()
    
    @classmethod
    def with_defaults(cls, datetime_format: str | None = None) -> CasterRegistry:
        registry = cls()
        registry.register(ScalarCaster())
        registry.register(EnumCaster())
        registry.register(DateTimeCaster(datetime_format))
        registry.register(CollectionCaster(registry))
        return registry
    
    def register(self, caster: Caster, priority: int | None = None) -> None:
        self._casters.register(caster, caster.priority if priority is None else priority)
    
    def get(self, field: FieldMeta, value: Any) -> Caster | None:
        return self._casters.first(lambda c: c.supports(field, value))
    
    def can_cast(self, field: FieldMeta, value: Any) -> bool: return self.get(field, value) is not None
    
    def cast(self, field: FieldMeta, value: Any, ctx: Context) -> Any:
        caster = self.get(field, value)
        if caster is None:
            raise CastError.no_caster_found(value, field.type.describe())
        return caster.cast(field, value, ctx)
    
    @property
    def casters(self) -> list[Caster]: return self._casters.strategies()
    
    def __len__(self) -> int: return len(self._casters)
