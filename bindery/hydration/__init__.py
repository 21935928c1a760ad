"""Hydration: input normalizers, naming strategies, pipeline steps, mapper and hydrator."""
from .naming import Direction, NamingStrategy, IdentityStrategy, CamelCaseStrategy, SnakeCaseStrategy
from .pipeline import PipelineStep, TrimStrings, Lowercase, Uppercase, StripTags
from .inputs import InputNormalizer, MappingInput, JsonInput, YamlInput, ObjectInput, InputNormalizerRegistry
from .mapper import Mapper
from .hydrator import Hydrator

__all__ = [
    "Direction",
    "NamingStrategy",
    "IdentityStrategy",
    "CamelCaseStrategy",
    "SnakeCaseStrategy",
    "PipelineStep",
    "TrimStrings",
    "Lowercase",
    "Uppercase",
    "StripTags",
    "InputNormalizer",
    "MappingInput",
    "JsonInput",
    "YamlInput",
    "ObjectInput",
    "InputNormalizerRegistry",
    "Mapper",
    "Hydrator",
]
