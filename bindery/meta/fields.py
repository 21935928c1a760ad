"""Field and class metadata built once per bindable type."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from .types import TypeDescriptor

A = TypeVar("A")


@dataclass(frozen=True, slots=True)
class FieldMeta:
    """Structural and policy description of one field.
    
    ``annotations`` keeps every raw ``Annotated`` marker; the resolved
    policies (source key, caster, transformer, hidden, rules) are broken out
    into their own attributes.
    """
    name: str
    type: TypeDescriptor
    is_immutable: bool = False
    has_default: bool = False
    default_value: Any = None
    default_factory: Callable[[], Any] | None = None
    source_key: str | None = None
    caster: Any = None
    transformer: Any = None
    is_hidden: bool = False
    in_constructor: bool = True
    validation_rules: tuple[Any, ...] = ()
    annotations: tuple[Any, ...] = ()
    
    @property
    def is_required(self) -> bool: return not self.has_default and not self.type.is_nullable
    
    @property
    def effective_source_key(self) -> str: return self.source_key or self.name
    
    def resolve_default(self) -> Any:
        return self.default_factory() if self.default_factory is not None else self.default_value
    
    def get_annotation(self, kind: type[A]) -> A | None:
        return next((a for a in self.annotations if isinstance(a, kind)), None)
    
    def has_annotation(self, kind: type) -> bool: return self.get_annotation(kind) is not None
    
    def get_rule(self, kind: type[A]) -> A | None:
        return next((r for r in self.validation_rules if isinstance(r, kind)), None)
    
    def has_rule(self, kind: type) -> bool: return self.get_rule(kind) is not None
    
    def with_type(self, type_: TypeDescriptor, name: str | None = None) -> FieldMeta:
        """Derive an item-level FieldMeta, used when casting collection items."""
        return FieldMeta(name=name or self.name, type=type_, is_immutable=self.is_immutable,
            annotations=self.annotations)


@dataclass(frozen=True, slots=True)
class ClassMeta:
    """Cached structural description of one bindable type."""
    type_id: str
    cls: type
    is_immutable: bool
    fields: dict[str, FieldMeta]
    construction_order: tuple[str, ...]
    annotations: tuple[Any, ...] = field(default=())
    
    @property
    def class_name(self) -> str: return self.cls.__qualname__
    
    @property
    def field_names(self) -> list[str]: return list(self.fields)
    
    @property
    def constructor_fields(self) -> list[FieldMeta]: return [self.fields[n] for n in self.construction_order]
    
    @property
    def required_fields(self) -> list[FieldMeta]: return [f for f in self.fields.values() if f.is_required]
    
    @property
    def optional_fields(self) -> list[FieldMeta]: return [f for f in self.fields.values() if not f.is_required]
    
    @property
    def hidden_fields(self) -> list[FieldMeta]: return [f for f in self.fields.values() if f.is_hidden]
    
    @property
    def visible_fields(self) -> list[FieldMeta]: return [f for f in self.fields.values() if not f.is_hidden]
    
    def get(self, name: str) -> FieldMeta | None: return self.fields.get(name)
    
    def has_field(self, name: str) -> bool: return name in self.fields
    
    def get_annotation(self, kind: type[A]) -> A | None:
        return next((a for a in self.annotations if isinstance(a, kind)), None)
