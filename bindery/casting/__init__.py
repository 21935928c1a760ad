"""Casting: coercion rules, casters and the caster registry."""
from .casters import Caster, ScalarCaster, EnumCaster, DateTimeCaster, CollectionCaster
from .registry import CasterRegistry

__all__ = ["Caster", "ScalarCaster", "EnumCaster", "DateTimeCaster", "CollectionCaster", "CasterRegistry"]
