"""Metadata layer: type descriptors, field/class metadata, caches and the factory."""
from .types import TypeDescriptor, is_bindable, type_id_of
from .fields import FieldMeta, ClassMeta
from .cache import MetaCache, MemoryMetaCache, FileMetaCache
from .annotations import MapFrom, CastWith, TransformWith, Hidden, Pipeline, Deprecated, DefaultFrom
from .factory import MetaFactory

__all__ = [
    "TypeDescriptor",
    "is_bindable",
    "type_id_of",
    "FieldMeta",
    "ClassMeta",
    "MetaCache",
    "MemoryMetaCache",
    "FileMetaCache",
    "MapFrom",
    "CastWith",
    "TransformWith",
    "Hidden",
    "Pipeline",
    "Deprecated",
    "DefaultFrom",
    "MetaFactory",
]
