"""Transformer registry: priority-ordered, first-match dispatch."""
from __future__ import annotations

from typing import Any

from bindery.context import Context
from bindery.core.registry import PriorityRegistry
from bindery.meta.fields import FieldMeta

from .transformers import DateTimeTransformer, EnumTransformer, Transformer


class TransformerRegistry:
    
    def __init__(self) -> None:
        self._transformers: PriorityRegistry[Transformer] = PriorityRegistry()
    
    @classmethod
    def with_defaults(cls, datetime_format: str | None = None) -> TransformerRegistry:
        registry = cls()
        registry.register(DateTimeTransformer(datetime_format))
        registry.register(EnumTransformer())
        return registry
    
    def register(self, transformer: Transformer, priority: int | None = None) -> None:
        self._transformers.register(transformer, transformer.priority if priority is None else priority)
    
    def get(self, field: FieldMeta | None, value: Any) -> Transformer | None:
        return self._transformers.first(lambda t: t.supports(field, value))
    
    def can_transform(self, field: FieldMeta | None, value: Any) -> bool: return self.get(field, value) is not None
    
    def transform(self, field: FieldMeta | None, value: Any, ctx: Context) -> Any:
        """Transform with the first matching transformer; unmatched values pass through."""
        transformer = self.get(field, value)
        return value if transformer is None else transformer.transform(field, value, ctx)
    
    def __len__(self) -> int: return len(self._transformers)
