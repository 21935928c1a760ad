"""Type descriptors: the recursive shape of a declared field type."""
from __future__ import annotations

import dataclasses
import types
from dataclasses import dataclass, replace
from datetime import date, datetime, time
from enum import Enum
from typing import Annotated, Any, Union, get_args, get_origin

PRIMITIVES: dict[type, str] = {int: "int", float: "float", str: "str", bool: "bool"}
TEMPORALS: tuple[type, ...] = (datetime, date, time)
COLLECTIONS: dict[Any, str] = {list: "list", tuple: "tuple", set: "set", frozenset: "frozenset"}


def is_bindable(tp: Any) -> bool:
    """True for types the engine hydrates field by field (dataclasses and Dto subclasses)."""
    return isinstance(tp, type) and (dataclasses.is_dataclass(tp) or getattr(tp, "__bindable__", False))


def type_id_of(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def strip_annotated(hint: Any) -> tuple[Any, tuple[Any, ...]]:
    """Split ``Annotated`` metadata from a hint, including inside ``X | None`` unions."""
    if get_origin(hint) is Annotated:
        inner, *metadata = get_args(hint)
        bare, nested = strip_annotated(inner)
        return bare, (*metadata, *nested)
    if get_origin(hint) in (Union, types.UnionType):
        parts = [strip_annotated(arg) for arg in get_args(hint)]
        metadata = tuple(m for _, meta in parts for m in meta)
        if not metadata:
            return hint, ()
        return Union[tuple(bare for bare, _ in parts)], metadata
    return hint, ()


@dataclass(frozen=True, slots=True)
class TypeDescriptor:
    """Recursive description of a field type.
    
    ``item_type`` is set for typed collections and may be None for bare
    ``list``/``tuple``. An enum descriptor always carries its enum class.
    """
    name: str
    py_type: Any = None
    is_primitive: bool = False
    is_nullable: bool = False
    is_collection: bool = False
    item_type: TypeDescriptor | None = None
    is_enum: bool = False
    enum_type: type[Enum] | None = None
    is_structured: bool = False
    is_temporal: bool = False
    
    def __post_init__(self):
        if self.is_enum and self.enum_type is None:
            raise ValueError(f"Enum type descriptor '{self.name}' requires an enum class")
    
    @classmethod
    def mixed(cls) -> TypeDescriptor: return cls(name="mixed", is_nullable=True)
    
    @property
    def is_mixed(self) -> bool: return self.name == "mixed"
    
    @property
    def accepts_null(self) -> bool: return self.is_nullable or self.is_mixed
    
    @property
    def is_typed_collection(self) -> bool: return self.is_collection and self.item_type is not None
    
    @property
    def is_backed_enum(self) -> bool:
        return self.is_enum and all(isinstance(m.value, (str, int)) for m in self.enum_type)
    
    def with_nullable(self, nullable: bool = True) -> TypeDescriptor: return replace(self, is_nullable=nullable)
    
    def with_item_type(self, item_type: TypeDescriptor | None) -> TypeDescriptor:
        return replace(self, item_type=item_type, is_collection=True)
    
    def describe(self) -> str:
        """Readable form used in error messages, e.g. ``list[int]|None``."""
        base = f"{self.name}[{self.item_type.describe()}]" if self.is_typed_collection else self.name
        return f"{base}|None" if self.is_nullable and not self.is_mixed else base
    
    def is_compatible(self, value: Any) -> bool:
        """Whether ``value`` already satisfies this type without conversion."""
        if value is None:
            return self.accepts_null
        if self.is_mixed or self.py_type is None:
            return True
        if isinstance(self.py_type, tuple):
            return isinstance(value, self.py_type)
        if self.py_type is float:
            return isinstance(value, (int, float)) and not isinstance(value, bool)
        if self.py_type is int:
            return isinstance(value, int) and not isinstance(value, bool)
        if self.py_type is date:
            return isinstance(value, date) and not isinstance(value, datetime)
        return isinstance(value, self.py_type)
    
    @classmethod
    def from_hint(cls, hint: Any) -> TypeDescriptor:
        """Build a descriptor from a resolved type hint."""
        hint, _ = strip_annotated(hint)
        if hint is Any or hint is object:
            return cls.mixed()
        if hint is None or hint is type(None):
            return cls(name="None", py_type=type(None), is_nullable=True)
        
        origin = get_origin(hint)
        if origin in (Union, types.UnionType):
            args = get_args(hint)
            members = [a for a in args if a is not type(None)]
            nullable = len(members) < len(args)
            if len(members) == 1:
                return cls.from_hint(members[0]).with_nullable(nullable)
            classes = tuple(get_origin(m) or m for m in members)
            return cls(name="|".join(cls.from_hint(m).name for m in members),
                py_type=classes if all(isinstance(c, type) for c in classes) else None, is_nullable=nullable)
        
        if origin in COLLECTIONS or hint in COLLECTIONS:
            container = origin or hint
            args = [a for a in get_args(hint) if a is not Ellipsis]
            homogeneous = len(args) == 1 and (container is not tuple or Ellipsis in get_args(hint))
            item = cls.from_hint(args[0]) if homogeneous else None
            return cls(name=COLLECTIONS[container], py_type=container, is_collection=True, item_type=item)
        
        if origin is dict or hint is dict:
            return cls(name="dict", py_type=dict)
        
        if isinstance(hint, type):
            if issubclass(hint, Enum):
                return cls(name=hint.__qualname__, py_type=hint, is_enum=True, enum_type=hint)
            if issubclass(hint, TEMPORALS):
                return cls(name=hint.__name__, py_type=hint, is_temporal=True)
            if hint in PRIMITIVES:
                return cls(name=PRIMITIVES[hint], py_type=hint, is_primitive=True)
            if is_bindable(hint):
                return cls(name=hint.__qualname__, py_type=hint, is_structured=True)
            return cls(name=hint.__qualname__, py_type=hint)
        
        # Literal, TypeVar and other special forms bind without conversion
        return replace(cls.mixed(), name=str(hint), is_nullable=False)
