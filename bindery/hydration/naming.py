"""Naming strategies: translate between declared field names and input keys.

Each strategy describes the key convention of the *input*:
- ``Direction.TO_SOURCE`` turns a field name into the input key to look up
- ``Direction.TO_FIELD`` turns an input key back into a field name
"""
from __future__ import annotations

import re
from abc import ABC, abstractmethod
from enum import Enum

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])|(?<=[A-Z])([A-Z][a-z])")
_SEPARATORS = re.compile(r"[-_\s]+")


class Direction(Enum):
    TO_SOURCE = "to_source"
    TO_FIELD = "to_field"


def to_snake(name: str) -> str:
    """``createdAt`` / ``created-at`` -> ``created_at``"""
    marked = _CAMEL_BOUNDARY.sub(lambda m: "_" + (m.group(1) or m.group(2)), name)
    return _SEPARATORS.sub("_", marked).lower()


def to_camel(name: str) -> str:
    """``created_at`` / ``created-at`` -> ``createdAt``; other names only get a lowercase first letter."""
    parts = [p for p in _SEPARATORS.split(name) if p]
    if not parts:
        return name
    if len(parts) == 1:
        return parts[0][:1].lower() + parts[0][1:]
    return parts[0].lower() + "".join(p[:1].upper() + p[1:].lower() for p in parts[1:])


class NamingStrategy(ABC):
    
    @abstractmethod
    def convert(self, name: str, direction: Direction) -> str:
        """Convert a name in the given direction."""


class IdentityStrategy(NamingStrategy):
    def convert(self, name: str, direction: Direction) -> str: return name


class CamelCaseStrategy(NamingStrategy):
    """Input keys are camelCase (``createdAt``), fields are snake_case."""
    
    def convert(self, name: str, direction: Direction) -> str:
        return to_camel(name) if direction is Direction.TO_SOURCE else to_snake(name)


class SnakeCaseStrategy(NamingStrategy):
    """Input keys are snake_case; also maps camelCase field names onto snake keys."""
    
    def convert(self, name: str, direction: Direction) -> str: return to_snake(name)
