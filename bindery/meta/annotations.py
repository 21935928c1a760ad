"""Declarative Field Markers

Markers are attached to fields with ``typing.Annotated`` and resolved once by
the MetaFactory into FieldMeta attributes.

Usage:
    @dataclass
    class User(Dto):
        email: Annotated[str, MapFrom("email_address"), Email()]
        password_hash: Annotated[str | None, Hidden] = None
        nickname: Annotated[str, Pipeline(TrimStrings, Lowercase)] = ""
"""
from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Any, Callable

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True, slots=True)
class MapFrom:
    """Read the field from a different input key."""
    key: str


@dataclass(frozen=True, slots=True)
class CastWith:
    """Force a specific caster (class or instance) for the field."""
    caster: Any


@dataclass(frozen=True, slots=True)
class TransformWith:
    """Force a specific transformer (class or instance) for the field."""
    transformer: Any


@dataclass(frozen=True, slots=True)
class Hidden:
    """Exclude the field from normalized output."""


@dataclass(frozen=True, slots=True)
class Pipeline:
    """Pre-processing steps applied to the raw value before validation and casting."""
    steps: tuple[Any, ...]
    
    def __init__(self, *steps: Any):
        object.__setattr__(self, "steps", tuple(steps))


@dataclass(frozen=True, slots=True)
class Deprecated:
    """Mark a field (or, via ``__markers__``, a whole type) as deprecated."""
    reason: str = ""
    since: str | None = None


@dataclass(frozen=True, slots=True)
class DefaultFrom:
    """Resolve the default at hydration time from an env var or a factory."""
    env: str | None = None
    factory: Callable[[], Any] | None = None
    
    def __post_init__(self):
        if self.env is None and self.factory is None:
            raise ValueError("DefaultFrom requires env or factory")
        if self.env is not None and not _IDENTIFIER.match(self.env):
            raise ValueError(f"Invalid environment variable name: {self.env}")
    
    def resolve(self) -> tuple[bool, Any]:
        """Return (found, value)."""
        if self.env is not None and self.env in os.environ:
            return True, os.environ[self.env]
        if self.factory is not None:
            return True, self.factory()
        return False, None


# Markers that may be written bare (``Hidden``) instead of instantiated (``Hidden()``)
BARE_MARKERS: tuple[type, ...] = (Hidden, Deprecated)
