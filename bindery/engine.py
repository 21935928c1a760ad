"""Binding Engine

Outermost entry point wiring the metadata factory, hydrator, normalizer and
input normalizers together.

Usage:
    engine = EngineFactory().with_meta_cache(FileMetaCache(".cache")).create()
    user = engine.hydrate(User, '{"id": "u1", "email_address": "a@b.com"}')
    payload = engine.normalize(user, Context().wrap("data"))

``default_engine()`` builds one engine from settings on first use. Pass an
engine explicitly wherever a different configuration is needed.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Any, TypeVar

from bindery.casting.registry import CasterRegistry
from bindery.context import Context
from bindery.core.config import Settings, get_settings
from bindery.core.errors import ErrorCode, NormalizationError
from bindery.core.logging import get_logger
from bindery.hydration.hydrator import Hydrator
from bindery.hydration.inputs import InputNormalizer, InputNormalizerRegistry
from bindery.hydration.mapper import Mapper
from bindery.meta.cache import FileMetaCache, MemoryMetaCache, MetaCache
from bindery.meta.factory import MetaFactory
from bindery.normalization.normalizer import Normalizer
from bindery.normalization.registry import TransformerRegistry
from bindery.validation.registry import ValidatorRegistry

T = TypeVar("T")

log = get_logger(__name__)


class Engine:
    """Hydrates typed instances from loose input and normalizes them back."""

    def __init__(
        self,
        meta_factory: MetaFactory,
        hydrator: Hydrator,
        normalizer: Normalizer,
        input_normalizers: InputNormalizerRegistry,
    ):
        self.meta_factory = meta_factory
        self.hydrator = hydrator
        self.normalizer = normalizer
        self.input_normalizers = input_normalizers

    def hydrate(self, cls: type[T], source: Any, ctx: Context | None = None, only: frozenset[str] | None = None) -> T:
        """Build an instance of ``cls`` from a mapping, JSON/YAML text or a foreign object.

        ``only`` limits binding to those top-level field names; other input keys are ignored.
        """
        ctx = ctx or Context.from_settings()
        data = self.input_normalizers.normalize(source)
        return self.hydrator.hydrate(self.meta_factory.create(cls), data, ctx, only)

    def normalize(self, instance: Any, ctx: Context | None = None) -> dict[str, Any]:
        ctx = ctx or Context.from_settings()
        result = self.normalizer.normalize(instance, self.meta_factory.create(type(instance)), ctx)
        wrap_key = ctx.serialization.wrap_key
        return {wrap_key: result} if wrap_key else result

    def normalize_to_json(self, instance: Any, ctx: Context | None = None, **dumps_kwargs: Any) -> str:
        data = self.normalize(instance, ctx)
        try:
            return json.dumps(data, **{"default": str, **dumps_kwargs})
        except (TypeError, ValueError) as e:
            raise NormalizationError(message=f"Failed to encode to JSON: {e}",
                code=ErrorCode.E6000_NORMALIZATION_GENERIC) from e


@dataclass(frozen=True)
class EngineFactory:
    """Immutable builder; every ``with_*`` returns a new factory.

    Components left unset fall back to defaults derived from ``settings``:
    a FileMetaCache when ``META_CACHE_DIR`` is set (memory otherwise) and
    ``DATETIME_FORMAT`` for the datetime caster and transformer.
    """
    meta_cache: MetaCache | None = None
    caster_registry: CasterRegistry | None = None
    transformer_registry: TransformerRegistry | None = None
    validator_registry: ValidatorRegistry | None = None
    input_normalizers: tuple[tuple[InputNormalizer, int | None], ...] = ()
    datetime_format: str | None = None
    settings: Settings | None = None

    def with_meta_cache(self, cache: MetaCache) -> EngineFactory: return replace(self, meta_cache=cache)

    def with_caster_registry(self, registry: CasterRegistry) -> EngineFactory:
        return replace(self, caster_registry=registry)

    def with_transformer_registry(self, registry: TransformerRegistry) -> EngineFactory:
        return replace(self, transformer_registry=registry)

    def with_validator_registry(self, registry: ValidatorRegistry) -> EngineFactory:
        return replace(self, validator_registry=registry)

    def with_input_normalizer(self, normalizer: InputNormalizer, priority: int | None = None) -> EngineFactory:
        return replace(self, input_normalizers=(*self.input_normalizers, (normalizer, priority)))

    def with_datetime_format(self, fmt: str | None) -> EngineFactory: return replace(self, datetime_format=fmt)

    def with_settings(self, settings: Settings) -> EngineFactory: return replace(self, settings=settings)

    def create(self) -> Engine:
        settings = self.settings or get_settings()
        fmt = self.datetime_format or settings.DATETIME_FORMAT

        meta_factory = MetaFactory(self.meta_cache if self.meta_cache is not None else self._default_cache(settings))
        casters = self.caster_registry if self.caster_registry is not None else CasterRegistry.with_defaults(fmt)
        transformers = (self.transformer_registry if self.transformer_registry is not None
            else TransformerRegistry.with_defaults(fmt))
        validators = (self.validator_registry if self.validator_registry is not None
            else ValidatorRegistry.with_defaults())

        inputs = InputNormalizerRegistry.with_defaults()
        for normalizer, priority in self.input_normalizers:
            inputs.register(normalizer, priority)

        log.debug("engine_created", cache=type(meta_factory.cache).__name__, datetime_format=fmt,
            casters=len(casters), transformers=len(transformers), validators=len(validators))
        return Engine(
            meta_factory=meta_factory,
            hydrator=Hydrator(meta_factory, casters, validators, Mapper()),
            normalizer=Normalizer(transformers, meta_factory),
            input_normalizers=inputs,
        )

    @staticmethod
    def _default_cache(settings: Settings) -> MetaCache:
        if settings.uses_file_cache:
            return FileMetaCache(settings.META_CACHE_DIR)
        return MemoryMetaCache()


@lru_cache
def default_engine() -> Engine:
    return EngineFactory().create()
