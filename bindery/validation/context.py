from __future__ import annotations

from dataclasses import dataclass, field as dataclass_field
from typing import Any, Mapping

from bindery.context import Context
from bindery.meta.fields import FieldMeta


@dataclass(frozen=True, slots=True)
class ValidationContext:
    """What a validator may look at besides the value itself.
    
    ``data`` is the full mapped input keyed by field name, so cross-field
    rules such as RequiredIf can inspect sibling values.
    """
    field: FieldMeta
    data: Mapping[str, Any] = dataclass_field(default_factory=dict)
    context: Context = dataclass_field(default_factory=Context)
    
    def has_field(self, name: str) -> bool: return name in self.data
    
    def get_field_value(self, name: str, default: Any = None) -> Any: return self.data.get(name, default)
