"""Built-in transformers: typed leaf value to output value (inverse of casters)."""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime, time
from enum import Enum
from typing import Any, ClassVar

from bindery.context import Context
from bindery.meta.fields import FieldMeta


class Transformer(ABC):
    priority: ClassVar[int] = 0
    
    @abstractmethod
    def supports(self, field: FieldMeta | None, value: Any) -> bool:
        """Whether this transformer handles the value; ``field`` is None for computed values."""
    
    @abstractmethod
    def transform(self, field: FieldMeta | None, value: Any, ctx: Context) -> Any:
        """Convert a typed value to its output form."""


class DateTimeTransformer(Transformer):
    """Temporal values to strings, ISO-8601 unless a strftime ``format`` is given."""
    priority = 10
    
    def __init__(self, format: str | None = None):
        self.format = format
    
    def supports(self, field: FieldMeta | None, value: Any) -> bool: return isinstance(value, (datetime, date, time))
    
    def transform(self, field: FieldMeta | None, value: Any, ctx: Context) -> Any:
        if self.format and isinstance(value, datetime):
            return value.strftime(self.format)
        return value.isoformat()


class EnumTransformer(Transformer):
    """Enum members to their backing value, or their name when the value is not a primitive."""
    priority = 20
    
    def supports(self, field: FieldMeta | None, value: Any) -> bool: return isinstance(value, Enum)
    
    def transform(self, field: FieldMeta | None, value: Any, ctx: Context) -> Any:
        return value.value if isinstance(value.value, (str, int, float, bool)) else value.name
