"""Normalization: transformers, the transformer registry and the normalizer."""
from .transformers import Transformer, DateTimeTransformer, EnumTransformer
from .registry import TransformerRegistry
from .normalizer import Normalizer, Lazy

__all__ = ["Transformer", "DateTimeTransformer", "EnumTransformer", "TransformerRegistry", "Normalizer", "Lazy"]
