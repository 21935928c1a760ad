"""Input Normalizers

Funnel every supported input shape into a plain string-keyed dict before
mapping. First match wins, in priority order:

- MappingInput (30): dicts and other mappings
- JsonInput (20): JSON text starting with ``{`` or ``[``
- YamlInput (10): any other text, parsed with ``yaml.safe_load``
- ObjectInput (0): pydantic models, dataclass instances, plain objects
"""
from __future__ import annotations

import dataclasses
import json
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, ClassVar

import yaml
from pydantic import BaseModel

from bindery.core.errors import ErrorCode, HydrationError, describe_type
from bindery.core.registry import PriorityRegistry


def _require_mapping(decoded: Any, kind: str, code: ErrorCode) -> dict[str, Any]:
    if not isinstance(decoded, Mapping):
        raise HydrationError(message=f"{kind} document must decode to an object, got {describe_type(decoded)}",
            code=code, given_type=describe_type(decoded))
    return dict(decoded)


class InputNormalizer(ABC):
    priority: ClassVar[int] = 0

    @abstractmethod
    def supports(self, source: Any) -> bool:
        """Whether this normalizer understands ``source``."""

    @abstractmethod
    def normalize(self, source: Any) -> dict[str, Any]:
        """Convert ``source`` to a string-keyed dict."""


class MappingInput(InputNormalizer):
    priority = 30

    def supports(self, source: Any) -> bool: return isinstance(source, Mapping)

    def normalize(self, source: Any) -> dict[str, Any]: return dict(source)


class JsonInput(InputNormalizer):
    priority = 20

    def supports(self, source: Any) -> bool:
        if isinstance(source, (bytes, bytearray)):
            source = source.decode("utf-8", errors="replace")
        return isinstance(source, str) and source.lstrip()[:1] in ("{", "[")

    def normalize(self, source: Any) -> dict[str, Any]:
        try:
            decoded = json.loads(source)
        except json.JSONDecodeError as e:
            raise HydrationError(message=f"Invalid JSON input: {e.msg} at line {e.lineno} column {e.colno}",
                code=ErrorCode.E2021_INVALID_JSON) from e
        except UnicodeDecodeError as e:
            raise HydrationError(message=f"Invalid JSON input: {e.reason} at byte {e.start}",
                code=ErrorCode.E2021_INVALID_JSON) from e
        return _require_mapping(decoded, "JSON", ErrorCode.E2021_INVALID_JSON)


class YamlInput(InputNormalizer):
    priority = 10

    def supports(self, source: Any) -> bool: return isinstance(source, (str, bytes))

    def normalize(self, source: Any) -> dict[str, Any]:
        try:
            decoded = yaml.safe_load(source)
        except yaml.YAMLError as e:
            raise HydrationError(message=f"Invalid YAML input: {e}", code=ErrorCode.E2022_INVALID_YAML) from e
        return _require_mapping(decoded, "YAML", ErrorCode.E2022_INVALID_YAML)


class ObjectInput(InputNormalizer):
    """Public field snapshot of a foreign object (shallow)."""

    def supports(self, source: Any) -> bool:
        if isinstance(source, (str, bytes, bytearray, Mapping, list, tuple, set, type)) or source is None:
            return False
        return isinstance(source, BaseModel) or dataclasses.is_dataclass(source) or hasattr(source, "__dict__")

    def normalize(self, source: Any) -> dict[str, Any]:
        if isinstance(source, BaseModel):
            return source.model_dump()
        if dataclasses.is_dataclass(source):
            return {f.name: getattr(source, f.name) for f in dataclasses.fields(source)}
        return {k: v for k, v in vars(source).items() if not k.startswith("_")}


class InputNormalizerRegistry:

    def __init__(self) -> None:
        self._normalizers: PriorityRegistry[InputNormalizer] = PriorityRegistry()

    @classmethod
    def with_defaults(cls) -> InputNormalizerRegistry:
        registry = cls()
        for normalizer in (MappingInput(), JsonInput(), YamlInput(), ObjectInput()):
            registry.register(normalizer)
        return registry

    def register(self, normalizer: InputNormalizer, priority: int | None = None) -> None:
        self._normalizers.register(normalizer, normalizer.priority if priority is None else priority)

    def normalize(self, source: Any) -> dict[str, Any]:
        normalizer = self._normalizers.first(lambda n: n.supports(source))
        if normalizer is None:
            raise HydrationError(message=f"Cannot hydrate from {describe_type(source)}",
                code=ErrorCode.E4003_UNSUPPORTED_INPUT, given_type=describe_type(source))
        return normalizer.normalize(source)
