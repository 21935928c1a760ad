"""Validation rule markers.

Rules are declared on fields through ``Annotated`` and collected into
``FieldMeta.validation_rules``. Each rule only carries its parameters and
message; the matching validator in ``validators.py`` does the checking.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, ClassVar


class Rule:
    """Base class for rule markers."""
    __slots__ = ()
    rule_name: ClassVar[str] = "rule"
    
    def default_message(self) -> str: return "The value is invalid"
    
    def resolve_message(self) -> str: return getattr(self, "message", None) or self.default_message()


@dataclass(frozen=True, slots=True)
class Required(Rule):
    message: str | None = None
    rule_name: ClassVar[str] = "required"
    
    def default_message(self) -> str: return "This field is required"


@dataclass(frozen=True, slots=True)
class RequiredIf(Rule):
    """Required only when ``field`` in the raw input equals ``value`` (strict equality)."""
    field: str
    value: Any
    message: str | None = None
    rule_name: ClassVar[str] = "required_if"
    
    def default_message(self) -> str: return f"This field is required when {self.field} is set"


@dataclass(frozen=True, slots=True)
class Min(Rule):
    min: float
    message: str | None = None
    rule_name: ClassVar[str] = "min"
    
    def default_message(self) -> str: return f"The value must be at least {self.min}"


@dataclass(frozen=True, slots=True)
class Max(Rule):
    max: float
    message: str | None = None
    rule_name: ClassVar[str] = "max"
    
    def default_message(self) -> str: return f"The value must be at most {self.max}"


@dataclass(frozen=True, slots=True)
class Between(Rule):
    min: float
    max: float
    message: str | None = None
    rule_name: ClassVar[str] = "between"
    
    def __post_init__(self):
        if self.min > self.max:
            raise ValueError(f"Between requires min <= max, got {self.min} > {self.max}")
    
    def default_message(self) -> str: return f"The value must be between {self.min} and {self.max}"


@dataclass(frozen=True, slots=True)
class Length(Rule):
    min: int | None = None
    max: int | None = None
    message: str | None = None
    rule_name: ClassVar[str] = "length"
    
    def __post_init__(self):
        if self.min is None and self.max is None:
            raise ValueError("Length requires min or max")
    
    def default_message(self) -> str:
        if self.min is not None and self.max is not None:
            return f"The length must be between {self.min} and {self.max} characters"
        if self.min is not None:
            return f"The length must be at least {self.min} characters"
        return f"The length must be at most {self.max} characters"


@dataclass(frozen=True, slots=True)
class Regex(Rule):
    pattern: str
    message: str | None = None
    rule_name: ClassVar[str] = "regex"
    
    def __post_init__(self):
        try:
            re.compile(self.pattern)
        except re.error as e:
            raise ValueError(f"Invalid regex pattern {self.pattern!r}: {e}") from e
    
    def default_message(self) -> str: return "The value does not match the required pattern"


@dataclass(frozen=True, slots=True)
class Email(Rule):
    message: str | None = None
    allow_display_name: bool = False
    rule_name: ClassVar[str] = "email"
    
    def default_message(self) -> str: return "The value must be a valid email address"


@dataclass(frozen=True, slots=True)
class Url(Rule):
    message: str | None = None
    schemes: tuple[str, ...] = ("http", "https")
    rule_name: ClassVar[str] = "url"
    
    def default_message(self) -> str: return "The value must be a valid URL"


@dataclass(frozen=True, slots=True)
class Valid(Rule):
    """Marks a nested bindable field (or each item of a collection) for cascaded validation."""
    each_item: bool = False
    rule_name: ClassVar[str] = "valid"
