"""Hydrator

Builds a typed instance from a mapped input dict:

1. optional ``transform_input`` hook on the target class rewrites raw data
2. Mapper resolves field values from input keys
3. per field: missing-key / default handling, pipeline steps, validation of
   the raw value (when enabled), then casting
4. field errors are collected, and one HydrationError lists all of them
5. the instance is constructed, then optional ``after_hydration`` runs

Cast order: nested bindable types recurse, collections of bindable types
recurse per item, an explicit ``CastWith`` caster wins over the registry,
then registry dispatch, then values already of the declared type pass as-is.
"""
from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any

from bindery.casting.registry import CasterRegistry
from bindery.context import Context
from bindery.core.errors import BindingError, CastError, ErrorCode, HydrationError, MappingError
from bindery.core.logging import hydration_logger
from bindery.meta.annotations import DefaultFrom, Deprecated, Pipeline
from bindery.meta.factory import MetaFactory
from bindery.meta.fields import ClassMeta, FieldMeta
from bindery.validation.context import ValidationContext
from bindery.validation.registry import ValidatorRegistry

from .mapper import Mapper
from .pipeline import run_steps

log = hydration_logger()

_ABSENT = object()


class Hydrator:

    def __init__(
        self,
        meta_factory: MetaFactory,
        casters: CasterRegistry,
        validators: ValidatorRegistry,
        mapper: Mapper | None = None,
    ):
        self.meta_factory = meta_factory
        self.casters = casters
        self.validators = validators
        self.mapper = mapper or Mapper()
        self._caster_overrides: dict[Any, Any] = {}

    def hydrate(self, meta: ClassMeta, data: Mapping[str, Any], ctx: Context, only: frozenset[str] | None = None) -> Any:
        """Build an instance of ``meta.cls``; with ``only``, fields outside that set are treated as absent."""
        if (transform := getattr(meta.cls, "transform_input", None)) is not None:
            data = transform(dict(data))
        mapped = self.mapper.map(data, meta, ctx)
        if only is not None:
            mapped = {name: value for name, value in mapped.items() if name in only}
        self._warn_deprecated(meta, mapped)

        args: dict[str, Any] = {}
        extras: dict[str, Any] = {}
        errors: list[BindingError] = []
        for field in self._bindable_fields(meta):
            try:
                value = self._resolve(field, mapped, ctx)
            except BindingError as e:
                errors.append(e.prepend_path(field.name))
                continue
            if value is not _ABSENT:
                (args if field.in_constructor else extras)[field.name] = value

        if errors:
            log.debug("hydration_failed", type=meta.class_name, errors=len(errors))
            raise HydrationError.from_errors(f"Failed to hydrate {meta.class_name}", errors)

        instance = self._construct(meta, args)
        for name, value in extras.items():
            setattr(instance, name, value)
        if (after := getattr(instance, "after_hydration", None)) is not None:
            after()
        return instance

    # ============ Field Resolution ============

    def _bindable_fields(self, meta: ClassMeta) -> list[FieldMeta]:
        # dataclass fields outside __init__ are derived by the class itself
        if dataclasses.is_dataclass(meta.cls):
            return meta.constructor_fields
        return list(meta.fields.values())

    def _resolve(self, field: FieldMeta, mapped: dict[str, Any], ctx: Context) -> Any:
        present = field.name in mapped
        value = mapped.get(field.name)

        if not present and (default_from := field.get_annotation(DefaultFrom)) is not None:
            present, value = default_from.resolve()

        steps = (*ctx.global_pipeline, *(p for marker in field.annotations if isinstance(marker, Pipeline) for p in marker.steps))
        if present and steps:
            value = run_steps(steps, value, field, ctx)

        if not present and (field.has_default or not field.in_constructor):
            return _ABSENT

        if ctx.validation_enabled and field.validation_rules:
            self.validators.validate(field, value if present else None, ValidationContext(field, mapped, ctx))

        if not present:
            if field.type.accepts_null:
                return None
            raise MappingError.missing_required_key(self.mapper.source_key(field, ctx.naming_strategy))

        return self._cast_field(field, value, ctx)

    def _cast_field(self, field: FieldMeta, value: Any, ctx: Context) -> Any:
        if value is None and field.type.accepts_null:
            return None
        try:
            return self._cast(field, value, ctx)
        except CastError as e:
            if ctx.is_permissive_mode() and field.type.accepts_null:
                log.info("cast_suppressed", field=field.name, code=e.code.name, reason=e.message)
                return None
            raise

    def _cast(self, field: FieldMeta, value: Any, ctx: Context) -> Any:
        type_ = field.type
        if type_.is_structured:
            if isinstance(value, type_.py_type):
                return value
            if isinstance(value, Mapping):
                return self.hydrate(self.meta_factory.create(type_.py_type), value, ctx)

        if type_.is_typed_collection and type_.item_type.is_structured and isinstance(value, (list, tuple)):
            return self._hydrate_items(field, value, ctx)

        if field.caster is not None:
            return self._override(field.caster).cast(field, value, ctx)
        if self.casters.can_cast(field, value):
            return self.casters.cast(field, value, ctx)
        if type_.is_compatible(value):
            return value
        raise CastError.cannot_cast(value, type_.describe())

    def _hydrate_items(self, field: FieldMeta, items: list | tuple, ctx: Context) -> Any:
        item_type = field.type.item_type
        item_meta = self.meta_factory.create(item_type.py_type)
        result: list[Any] = []
        errors: list[BindingError] = []
        for index, item in enumerate(items):
            try:
                if item is None and item_type.accepts_null:
                    result.append(None)
                elif isinstance(item, item_type.py_type):
                    result.append(item)
                elif isinstance(item, Mapping):
                    result.append(self.hydrate(item_meta, item, ctx))
                else:
                    raise CastError.cannot_cast(item, item_type.name)
            except BindingError as e:
                errors.append(e.prepend_path(f"[{index}]"))
        if errors:
            raise HydrationError(message=f"Failed to hydrate {len(errors)} item(s) of {field.name}", errors=errors)
        container = field.type.py_type
        return result if container in (None, list) else container(result)

    def _override(self, caster: Any) -> Any:
        if not isinstance(caster, type):
            return caster
        if caster not in self._caster_overrides:
            self._caster_overrides[caster] = caster()
        return self._caster_overrides[caster]

    # ============ Construction ============

    def _construct(self, meta: ClassMeta, args: dict[str, Any]) -> Any:
        try:
            return meta.cls(**args)
        except (TypeError, ValueError) as e:
            raise HydrationError(message=f"Cannot construct {meta.class_name}: {e}",
                code=ErrorCode.E4004_CONSTRUCTION_FAILED) from e

    def _warn_deprecated(self, meta: ClassMeta, mapped: dict[str, Any]) -> None:
        if (marker := meta.get_annotation(Deprecated)) is not None:
            log.warning("deprecated_type_hydrated", type=meta.class_name, reason=marker.reason, since=marker.since)
        for name in mapped:
            field = meta.fields[name]
            if (marker := field.get_annotation(Deprecated)) is not None:
                log.warning("deprecated_field_supplied", type=meta.class_name, field=name,
                    reason=marker.reason, since=marker.since)
