"""Pre-processing steps applied to raw string input before validation and casting.

Steps come from the context's global pipeline first, then the field's
``Pipeline`` marker. Non-string values pass through untouched.
"""
from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Any, Iterable

from bindery.context import Context
from bindery.meta.fields import FieldMeta

_TAGS = re.compile(r"<[^>]*>")


class PipelineStep(ABC):
    
    def process(self, value: Any, field: FieldMeta, ctx: Context) -> Any:
        return self.apply(value) if isinstance(value, str) else value
    
    @abstractmethod
    def apply(self, value: str) -> str:
        """Transform a string value."""


class TrimStrings(PipelineStep):
    def apply(self, value: str) -> str: return value.strip()


class Lowercase(PipelineStep):
    def apply(self, value: str) -> str: return value.lower()


class Uppercase(PipelineStep):
    def apply(self, value: str) -> str: return value.upper()


class StripTags(PipelineStep):
    def apply(self, value: str) -> str: return _TAGS.sub("", value)


def run_steps(steps: Iterable[Any], value: Any, field: FieldMeta, ctx: Context) -> Any:
    """Run steps in order; a step may be given as a class or an instance."""
    for step in steps:
        instance = step() if isinstance(step, type) else step
        value = instance.process(value, field, ctx)
    return value
