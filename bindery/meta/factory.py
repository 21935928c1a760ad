"""Metadata Factory

Introspects a bindable type once and caches the resulting ClassMeta. Later
lookups for the same type return the identical cached object.

Supported shapes:
- dataclasses (frozen dataclasses produce immutable metadata)
- classes with an annotated ``__init__``; annotated public class attributes
  that are not constructor parameters become non-constructor fields
"""
from __future__ import annotations

import dataclasses
import inspect
from typing import Any, ClassVar, get_origin, get_type_hints

from bindery.core.errors import BindingError, ErrorCode
from bindery.core.logging import meta_logger
from bindery.validation.rules import Rule

from .annotations import BARE_MARKERS, CastWith, Hidden, MapFrom, TransformWith
from .cache import MemoryMetaCache, MetaCache
from .fields import ClassMeta, FieldMeta
from .types import TypeDescriptor, strip_annotated, type_id_of

log = meta_logger()

_NO_DEFAULT = object()


class MetaFactory:
    """Builds and caches ClassMeta per type."""
    
    def __init__(self, cache: MetaCache | None = None):
        self.cache = cache if cache is not None else MemoryMetaCache()
    
    def create(self, cls: type) -> ClassMeta:
        type_id = type_id_of(cls)
        if (meta := self.cache.get(type_id)) is not None:
            return meta
        log.debug("meta_cache_miss", type_id=type_id)
        meta = self._build(cls, type_id)
        self.cache.set(type_id, meta)
        return meta
    
    get = create
    
    def _build(self, cls: type, type_id: str) -> ClassMeta:
        if not isinstance(cls, type):
            raise TypeError(f"Expected a class, got {type(cls).__name__}")
        try:
            hints = get_type_hints(cls, include_extras=True)
        except (NameError, TypeError) as e:
            raise BindingError(message=f"Cannot resolve type hints of {cls.__qualname__}: {e}",
                code=ErrorCode.E5001_UNSUPPORTED_TYPE) from e
        
        if dataclasses.is_dataclass(cls):
            fields, order = self._dataclass_fields(cls, hints)
            is_immutable = cls.__dataclass_params__.frozen
        else:
            fields, order = self._init_fields(cls, hints)
            is_immutable = False
        
        log.debug("meta_built", type_id=type_id, fields=len(fields), immutable=is_immutable)
        return ClassMeta(type_id=type_id, cls=cls, is_immutable=is_immutable, fields=fields,
            construction_order=tuple(order), annotations=tuple(getattr(cls, "__markers__", ())))
    
    def _dataclass_fields(self, cls: type, hints: dict[str, Any]) -> tuple[dict[str, FieldMeta], list[str]]:
        frozen = cls.__dataclass_params__.frozen
        fields: dict[str, FieldMeta] = {}
        for f in dataclasses.fields(cls):
            if f.name.startswith("_"):
                continue
            default = f.default if f.default is not dataclasses.MISSING else _NO_DEFAULT
            factory = f.default_factory if f.default_factory is not dataclasses.MISSING else None
            fields[f.name] = self._field(f.name, hints.get(f.name, Any), default, factory,
                in_constructor=f.init, immutable=frozen)
        return fields, [name for name, meta in fields.items() if meta.in_constructor]
    
    def _init_fields(self, cls: type, hints: dict[str, Any]) -> tuple[dict[str, FieldMeta], list[str]]:
        init = cls.__init__
        params = [
            p for p in list(inspect.signature(init).parameters.values())[1:]
            if p.kind in (p.POSITIONAL_OR_KEYWORD, p.KEYWORD_ONLY)
        ] if init is not object.__init__ else []
        init_hints = get_type_hints(init, include_extras=True) if params else {}
        
        fields: dict[str, FieldMeta] = {}
        for p in params:
            default = p.default if p.default is not p.empty else _NO_DEFAULT
            # A class-level annotation may carry markers the parameter hint lacks
            hint = init_hints.get(p.name) or hints.get(p.name, Any)
            fields[p.name] = self._field(p.name, hint, default, None, in_constructor=True)
        order = list(fields)
        
        for name, hint in hints.items():
            if name in fields or name.startswith("_") or get_origin(hint) is ClassVar:
                continue
            default = getattr(cls, name, _NO_DEFAULT)
            fields[name] = self._field(name, hint, default, None, in_constructor=False)
        return fields, order
    
    def _field(self, name: str, hint: Any, default: Any, factory: Any, *, in_constructor: bool,
               immutable: bool = False) -> FieldMeta:
        _, raw = strip_annotated(hint)
        markers = tuple(m() if isinstance(m, type) and issubclass(m, (Rule, *BARE_MARKERS)) else m for m in raw)
        
        map_from = next((m for m in markers if isinstance(m, MapFrom)), None)
        cast_with = next((m for m in markers if isinstance(m, CastWith)), None)
        transform_with = next((m for m in markers if isinstance(m, TransformWith)), None)
        
        return FieldMeta(
            name=name,
            type=TypeDescriptor.from_hint(hint),
            is_immutable=immutable,
            has_default=default is not _NO_DEFAULT or factory is not None,
            default_value=None if default is _NO_DEFAULT else default,
            default_factory=factory,
            source_key=map_from.key if map_from else None,
            caster=cast_with.caster if cast_with else None,
            transformer=transform_with.transformer if transform_with else None,
            is_hidden=any(isinstance(m, Hidden) for m in markers),
            in_constructor=in_constructor,
            validation_rules=tuple(m for m in markers if isinstance(m, Rule)),
            annotations=markers,
        )
