"""Mapper: resolve each field's value from the raw input keys."""
from __future__ import annotations

from typing import Any, Mapping

from bindery.context import Context
from bindery.meta.fields import ClassMeta, FieldMeta

from .naming import Direction, NamingStrategy

_MISSING = object()


class Mapper:
    """Builds a dict keyed by field name from input keyed by source names.
    
    Lookup order per field: the ``MapFrom`` key or the naming strategy's
    source key, then the field name itself, then any input key the strategy
    maps back onto the field. A key counts as present even when its value is None.
    """
    
    def source_key(self, field: FieldMeta, strategy: NamingStrategy | None) -> str:
        if field.source_key:
            return field.source_key
        return strategy.convert(field.name, Direction.TO_SOURCE) if strategy else field.name
    
    def map(self, data: Mapping[str, Any], meta: ClassMeta, ctx: Context) -> dict[str, Any]:
        strategy = ctx.naming_strategy
        reverse: dict[str, str] | None = None
        result: dict[str, Any] = {}
        for field in meta.fields.values():
            value = self._lookup(data, (self.source_key(field, strategy), field.name))
            if value is _MISSING and strategy is not None and not field.source_key:
                if reverse is None:
                    reverse = {strategy.convert(str(k), Direction.TO_FIELD): k for k in data}
                if field.name in reverse:
                    value = data[reverse[field.name]]
            if value is not _MISSING:
                result[field.name] = value
        return result
    
    @staticmethod
    def _lookup(data: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
        for key in keys:
            if key in data:
                return data[key]
        return _MISSING
