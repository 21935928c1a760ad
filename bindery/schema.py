"""Schema Generators

Schemas for bindable types, read from the same ClassMeta the engine binds
with. Property names are field names, matching normalized output.

Features:
- JSON Schema draft 2020-12 (``JSONSchemaGenerator``)
- OpenAPI 3.0 component schemas (``OpenAPIGenerator``)
- hidden fields skipped, ``required`` from FieldMeta.is_required
- nested bindable types emitted once and referenced; definitions are keyed by
  class name, or by the full type id when two nested types share a name
- validation rules mapped to ``minimum``/``maximum``/``minLength``/
  ``maxLength``/``pattern``/``format``
"""
from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field as dc_field
from datetime import date, datetime, time
from enum import Enum
from typing import Any, ClassVar

from bindery.meta.annotations import Deprecated
from bindery.meta.factory import MetaFactory
from bindery.meta.fields import ClassMeta, FieldMeta
from bindery.meta.types import TypeDescriptor, type_id_of
from bindery.validation.rules import Between, Email, Length, Max, Min, Regex, Url

DRAFT = "https://json-schema.org/draft/2020-12/schema"
OPENAPI_VERSION = "3.0.3"


@dataclass
class _Definitions:
    """Per-call registry of emitted object schemas."""
    root: type
    schemas: dict[str, dict[str, Any]] = dc_field(default_factory=dict)
    keys: dict[type, str] = dc_field(default_factory=dict)

    def key_for(self, cls: type) -> str:
        if cls not in self.keys:
            name = cls.__qualname__
            self.keys[cls] = type_id_of(cls) if name in self.keys.values() else name
        return self.keys[cls]

    def is_known(self, cls: type) -> bool: return cls in self.keys


class SchemaGenerator(ABC):
    """Base class for ClassMeta-driven schema generators."""

    TYPE_MAP: ClassVar[dict[type, dict[str, Any]]] = {
        str: {"type": "string"},
        int: {"type": "integer"},
        float: {"type": "number"},
        bool: {"type": "boolean"},
        datetime: {"type": "string", "format": "date-time"},
        date: {"type": "string", "format": "date"},
        time: {"type": "string", "format": "time"},
        dict: {"type": "object"},
    }

    def __init__(self, meta_factory: MetaFactory | None = None):
        self.meta_factory = meta_factory or MetaFactory()

    @abstractmethod
    def schema(self, cls: type) -> dict[str, Any]:
        """Schema document for ``cls`` as a dict."""

    @abstractmethod
    def _ref(self, key: str, defs: _Definitions) -> dict[str, Any]:
        """Reference to the definition stored under ``key``."""

    @abstractmethod
    def _nullable(self, schema: dict[str, Any]) -> dict[str, Any]:
        """Wrap ``schema`` so it also admits null."""

    def generate(self, cls: type, indent: int = 2) -> str:
        return json.dumps(self.schema(cls), indent=indent)

    def generate_all(self, *classes: type, separator: str = "\n\n") -> str:
        return separator.join(self.generate(c) for c in classes)

    # ============ Objects ============

    def _object(self, meta: ClassMeta, defs: _Definitions) -> dict[str, Any]:
        key = defs.key_for(meta.cls)
        # placeholder first so self-referencing types terminate
        defs.schemas.setdefault(key, {})
        properties = {f.name: self._field(f, defs) for f in meta.visible_fields}
        result: dict[str, Any] = {"type": "object", "properties": properties}
        if required := [f.name for f in meta.visible_fields if f.is_required]:
            result["required"] = required
        if meta.cls.__doc__ and not meta.cls.__doc__.startswith(f"{meta.cls.__name__}("):
            result["description"] = meta.cls.__doc__.strip()
        defs.schemas[key] = result
        return result

    def _field(self, field: FieldMeta, defs: _Definitions) -> dict[str, Any]:
        schema = self._apply_rules(self._type(field.type, defs), field)
        if field.type.is_nullable and not field.type.is_mixed:
            schema = self._nullable(schema)
        if field.has_default and field.default_factory is None and _is_json_scalar(field.default_value):
            schema["default"] = field.default_value.value if isinstance(field.default_value, Enum) else field.default_value
        if field.has_annotation(Deprecated):
            schema["deprecated"] = True
        return schema

    # ============ Types ============

    def _type(self, type_: TypeDescriptor, defs: _Definitions) -> dict[str, Any]:
        if type_.is_mixed or type_.py_type is None:
            return {}
        if type_.is_structured:
            if not defs.is_known(type_.py_type):
                self._object(self.meta_factory.create(type_.py_type), defs)
            return self._ref(defs.key_for(type_.py_type), defs)
        if type_.is_enum:
            values = [m.value if type_.is_backed_enum else m.name for m in type_.enum_type]
            kinds = {type(v) for v in values}
            schema: dict[str, Any] = {"enum": values}
            if kinds == {str}:
                schema["type"] = "string"
            elif kinds == {int}:
                schema["type"] = "integer"
            return schema
        if type_.is_collection:
            schema = {"type": "array"}
            if type_.item_type is not None:
                schema["items"] = self._type(type_.item_type, defs)
            if type_.py_type in (set, frozenset):
                schema["uniqueItems"] = True
            return schema
        if isinstance(type_.py_type, tuple):
            return {"anyOf": [self._type(TypeDescriptor.from_hint(c), defs) for c in type_.py_type]}
        return dict(self.TYPE_MAP.get(type_.py_type, {"type": "object"}))

    def _apply_rules(self, schema: dict[str, Any], field: FieldMeta) -> dict[str, Any]:
        for rule in field.validation_rules:
            match rule:
                case Min(min=low):
                    schema["minimum"] = low
                case Max(max=high):
                    schema["maximum"] = high
                case Between(min=low, max=high):
                    schema.update(minimum=low, maximum=high)
                case Length(min=low, max=high):
                    if low is not None:
                        schema["minLength"] = low
                    if high is not None:
                        schema["maxLength"] = high
                case Regex(pattern=pattern):
                    schema["pattern"] = pattern
                case Email():
                    schema["format"] = "email"
                case Url():
                    schema["format"] = "uri"
        return schema


class JSONSchemaGenerator(SchemaGenerator):
    """Generate JSON Schema (draft 2020-12).

    Nested types go under ``$defs``; a reference back to the root type is ``#``.
    Nullable fields become ``anyOf`` with ``{"type": "null"}``.
    """

    def schema(self, cls: type) -> dict[str, Any]:
        defs = _Definitions(root=cls)
        meta = self.meta_factory.create(cls)
        document = {"$schema": DRAFT, "title": cls.__name__, **self._object(meta, defs)}
        defs.schemas.pop(defs.key_for(cls), None)
        if defs.schemas:
            document["$defs"] = defs.schemas
        return document

    def _ref(self, key: str, defs: _Definitions) -> dict[str, Any]:
        return {"$ref": "#" if key == defs.key_for(defs.root) else f"#/$defs/{key}"}

    def _nullable(self, schema: dict[str, Any]) -> dict[str, Any]:
        return {"anyOf": [schema, {"type": "null"}]}


class OpenAPIGenerator(SchemaGenerator):
    """Generate OpenAPI 3.0 component schemas.

    ``schema(cls)`` is the component for one type; nested types are
    referenced under ``#/components/schemas``. ``components(*classes)``
    collects every referenced type into one ``components`` section.
    """

    TYPE_MAP: ClassVar[dict[type, dict[str, Any]]] = {
        **SchemaGenerator.TYPE_MAP,
        int: {"type": "integer", "format": "int64"},
        float: {"type": "number", "format": "double"},
    }

    def schema(self, cls: type) -> dict[str, Any]:
        return self._object(self.meta_factory.create(cls), _Definitions(root=cls))

    def components(self, *classes: type) -> dict[str, Any]:
        """OpenAPI ``components`` section holding ``classes`` and every type they reference."""
        schemas: dict[str, dict[str, Any]] = {}
        for cls in classes:
            defs = _Definitions(root=cls)
            self._object(self.meta_factory.create(cls), defs)
            for key, definition in defs.schemas.items():
                schemas.setdefault(key, definition)
        return {"schemas": schemas}

    def document(self, *classes: type, title: str = "API", version: str = "1.0.0") -> dict[str, Any]:
        """Minimal OpenAPI document exposing ``classes`` as components."""
        return {
            "openapi": OPENAPI_VERSION,
            "info": {"title": title, "version": version},
            "paths": {},
            "components": self.components(*classes),
        }

    def _ref(self, key: str, defs: _Definitions) -> dict[str, Any]:
        return {"$ref": f"#/components/schemas/{key}"}

    def _nullable(self, schema: dict[str, Any]) -> dict[str, Any]:
        # 3.0 ignores siblings of $ref
        if "$ref" in schema:
            return {"allOf": [schema], "nullable": True}
        return {**schema, "nullable": True}


def _is_json_scalar(value: Any) -> bool:
    if isinstance(value, Enum):
        return _is_json_scalar(value.value)
    return value is None or isinstance(value, (str, int, float, bool))
