"""Bindery: declarative, type-directed data binding.

Hydrates typed instances from loose input (mappings, JSON/YAML text,
foreign objects), normalizes them back to plain dicts, and validates raw
values against declared rules.

Usage:
    from dataclasses import dataclass
    from typing import Annotated
    from bindery import Dto, MapFrom, Email, Context

    @dataclass
    class User(Dto):
        id: str
        email: Annotated[str, MapFrom("email_address"), Email()]

    user = User.from_data({"id": "u1", "email_address": "a@b.com"}, Context().with_validation())
    user.to_dict()  # {"id": "u1", "email": "a@b.com"}
"""
from bindery.context import Context, CastMode, SerializationOptions
from bindery.core.errors import (
    BindingError,
    CastError,
    MappingError,
    RuleViolation,
    ValidationError,
    HydrationError,
    NormalizationError,
    ErrorCode,
)
from bindery.meta import (
    MapFrom,
    CastWith,
    TransformWith,
    Hidden,
    Pipeline,
    Deprecated,
    DefaultFrom,
    MetaFactory,
    MemoryMetaCache,
    FileMetaCache,
)
from bindery.validation import Required, RequiredIf, Min, Max, Between, Length, Regex, Email, Url, Valid
from bindery.hydration import CamelCaseStrategy, SnakeCaseStrategy, IdentityStrategy, TrimStrings, Lowercase, Uppercase, StripTags
from bindery.normalization import Lazy
from bindery.engine import Engine, EngineFactory, default_engine
from bindery.dto import Dto, PartialBuilder
from bindery.schema import JSONSchemaGenerator, OpenAPIGenerator

__version__ = "0.1.0"

__all__ = [
    "Context",
    "CastMode",
    "SerializationOptions",
    "BindingError",
    "CastError",
    "MappingError",
    "RuleViolation",
    "ValidationError",
    "HydrationError",
    "NormalizationError",
    "ErrorCode",
    "MapFrom",
    "CastWith",
    "TransformWith",
    "Hidden",
    "Pipeline",
    "Deprecated",
    "DefaultFrom",
    "MetaFactory",
    "MemoryMetaCache",
    "FileMetaCache",
    "Required",
    "RequiredIf",
    "Min",
    "Max",
    "Between",
    "Length",
    "Regex",
    "Email",
    "Url",
    "Valid",
    "CamelCaseStrategy",
    "SnakeCaseStrategy",
    "IdentityStrategy",
    "TrimStrings",
    "Lowercase",
    "Uppercase",
    "StripTags",
    "Lazy",
    "Engine",
    "EngineFactory",
    "default_engine",
    "Dto",
    "PartialBuilder",
    "JSONSchemaGenerator",
    "OpenAPIGenerator",
]
