"""Normalizer

Inverse of hydration: typed instance to a plain, key-ordered dict.

- hidden and filtered-out fields are skipped
- nested bindable instances recurse one level deeper; past ``max_depth``
  they render as an empty dict
- collections and mappings are normalized element by element
- leaf values go to the field's ``TransformWith`` transformer, else the registry
- computed fields from ``compute_lazy_properties()`` are merged after the
  declared fields, only when selected by the serialization options; thunks
  run at most once per ``normalize`` call
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field as dataclass_field
from typing import Any, Callable

from bindery.context import Context
from bindery.core.errors import NormalizationError
from bindery.core.logging import normalization_logger
from bindery.meta.factory import MetaFactory
from bindery.meta.fields import ClassMeta, FieldMeta
from bindery.meta.types import is_bindable

from .registry import TransformerRegistry

log = normalization_logger()

_LEAVES = (str, int, float, bool, bytes)


@dataclass(frozen=True, slots=True)
class Lazy:
    """Deferred computed value; ``fn`` runs only if the field is selected for output."""
    fn: Callable[[], Any]

    def resolve(self) -> Any: return self.fn()


@dataclass
class _Run:
    """State scoped to one top-level normalize call."""
    ctx: Context
    computed: dict[int, dict[str, Any]] = dataclass_field(default_factory=dict)
    # holds instances so their ids stay unique for the whole run
    seen: list[Any] = dataclass_field(default_factory=list)


class Normalizer:

    def __init__(self, transformers: TransformerRegistry, meta_factory: MetaFactory):
        self.transformers = transformers
        self.meta_factory = meta_factory
        self._transformer_overrides: dict[Any, Any] = {}

    def normalize(self, instance: Any, meta: ClassMeta, ctx: Context, depth: int = 0) -> dict[str, Any]:
        return self._instance(instance, meta, _Run(ctx), depth)

    def _instance(self, instance: Any, meta: ClassMeta, run: _Run, depth: int) -> dict[str, Any]:
        options = run.ctx.serialization
        if not options.can_descend(depth):
            return {}
        if (before := getattr(instance, "before_serialization", None)) is not None:
            before()

        result: dict[str, Any] = {}
        for field in meta.visible_fields:
            if options.should_include(field.name):
                result[field.name] = self._value(getattr(instance, field.name, None), field, run, depth)

        if options.wants_lazy and hasattr(instance, "compute_lazy_properties"):
            result.update(self._computed(instance, meta, run, depth))
        return result

    # ============ Computed Fields ============

    def _computed(self, instance: Any, meta: ClassMeta, run: _Run, depth: int) -> dict[str, Any]:
        options = run.ctx.serialization
        key = id(instance)
        if key not in run.computed:
            run.seen.append(instance)
            declared = instance.compute_lazy_properties()
            for name in declared:
                if meta.has_field(name):
                    raise NormalizationError.computed_conflict(name, meta.class_name)
            run.computed[key] = dict(declared)

        output: dict[str, Any] = {}
        cache = run.computed[key]
        for name, value in list(cache.items()):
            if not options.should_include_lazy(name) or not options.should_include(name):
                continue
            if isinstance(value, Lazy) or (callable(value) and not isinstance(value, type)):
                value = value.resolve() if isinstance(value, Lazy) else value()
                # resolved once per run; later occurrences reuse the result
                cache[name] = _Resolved(value)
            elif isinstance(value, _Resolved):
                value = value.value
            output[name] = self._value(value, None, run, depth)
        log.debug("computed_fields_merged", type=meta.class_name, fields=list(output))
        return output

    # ============ Values ============

    def _value(self, value: Any, field: FieldMeta | None, run: _Run, depth: int) -> Any:
        if value is None:
            return None
        if is_bindable(type(value)):
            return self._instance(value, self.meta_factory.create(type(value)), run, depth + 1)
        if isinstance(value, (list, tuple, set, frozenset)):
            return [self._value(item, field, run, depth) for item in value]
        if isinstance(value, Mapping):
            return {k: self._value(v, field, run, depth) for k, v in value.items()}

        if field is not None and field.transformer is not None:
            return self._override(field.transformer).transform(field, value, run.ctx)
        if (transformer := self.transformers.get(field, value)) is not None:
            return transformer.transform(field, value, run.ctx)

        if isinstance(value, _LEAVES) or not hasattr(value, "__dict__"):
            return value
        # Foreign objects: public attributes, bounded by the same depth limit
        if not run.ctx.serialization.can_descend(depth + 1):
            return {}
        return {k: self._value(v, None, run, depth + 1) for k, v in vars(value).items() if not k.startswith("_")}

    def _override(self, transformer: Any) -> Any:
        if not isinstance(transformer, type):
            return transformer
        if transformer not in self._transformer_overrides:
            self._transformer_overrides[transformer] = transformer()
        return self._transformer_overrides[transformer]


@dataclass(frozen=True, slots=True)
class _Resolved:
    value: Any
