"""Rule Validators

One validator per rule marker. A validator checks every rule of its kind on
the field and raises a single ValidationError holding one RuleViolation per
failed rule.

Null handling: only Required (and RequiredIf when its condition holds)
treat None as a violation. Every other rule accepts None, so rules are
composed with Required explicitly.

Priorities: Required 100, RequiredIf 90, Email/Url/Regex 50,
Min/Max/Between 40, Length 30, Valid 10.
"""
from __future__ import annotations

import dataclasses
import math
import re
from abc import ABC, abstractmethod
from email.utils import parseaddr
from typing import Any, ClassVar
from urllib.parse import urlparse

from bindery.core.errors import RuleViolation, ValidationError
from bindery.meta.fields import FieldMeta

from .context import ValidationContext
from .rules import Between, Email, Length, Max, Min, Regex, Required, RequiredIf, Rule, Url, Valid

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


def is_empty(value: Any) -> bool:
    if value is None or value == "":
        return True
    return isinstance(value, (list, tuple, dict, set, frozenset)) and not value


def as_number(value: Any) -> float | None:
    """Finite numeric view of a raw value; numeric strings count, booleans and non-finite values do not."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


class Validator(ABC):
    """Checks the rules of one kind declared on a field."""
    priority: ClassVar[int] = 0
    rule_type: ClassVar[type[Rule]] = Rule

    def supports(self, field: FieldMeta, value: Any) -> bool: return field.has_rule(self.rule_type)

    @abstractmethod
    def check(self, rule: Any, value: Any, context: ValidationContext) -> str | None:
        """Return a violation message, or None when the value passes."""

    def validate(self, field: FieldMeta, value: Any, context: ValidationContext) -> None:
        violations = [
            RuleViolation(field_name=field.name, rule_name=rule.rule_name, message=message,
                invalid_value=value, parameters=self.parameters(rule))
            for rule in field.validation_rules if isinstance(rule, self.rule_type)
            if (message := self.check(rule, value, context)) is not None
        ]
        if violations:
            raise ValidationError.from_violations(f"Validation failed for property '{field.name}'", violations)

    @staticmethod
    def parameters(rule: Rule) -> dict[str, Any]:
        return {f.name: getattr(rule, f.name) for f in dataclasses.fields(rule) if f.name != "message"}


# ============ Presence ============

class RequiredValidator(Validator):
    priority = 100
    rule_type = Required

    def check(self, rule: Required, value: Any, context: ValidationContext) -> str | None:
        return rule.resolve_message() if is_empty(value) else None


class RequiredIfValidator(Validator):
    priority = 90
    rule_type = RequiredIf

    def check(self, rule: RequiredIf, value: Any, context: ValidationContext) -> str | None:
        if not context.has_field(rule.field):
            return None
        other = context.get_field_value(rule.field)
        # strict equality: 1 does not satisfy "1", True does not satisfy 1
        if type(other) is not type(rule.value) or other != rule.value:
            return None
        return rule.resolve_message() if is_empty(value) else None


# ============ Format ============

class EmailValidator(Validator):
    priority = 50
    rule_type = Email

    def check(self, rule: Email, value: Any, context: ValidationContext) -> str | None:
        if value is None or value == "":
            return None
        if not isinstance(value, str):
            return rule.resolve_message()
        _, addr = parseaddr(value)
        candidate = addr if rule.allow_display_name else value
        return None if candidate and EMAIL_PATTERN.match(candidate) else rule.resolve_message()


class UrlValidator(Validator):
    priority = 50
    rule_type = Url

    def check(self, rule: Url, value: Any, context: ValidationContext) -> str | None:
        if value is None or value == "":
            return None
        if not isinstance(value, str) or any(c.isspace() for c in value):
            return rule.resolve_message()
        try:
            parsed = urlparse(value)
        except ValueError:
            return rule.resolve_message()
        if parsed.scheme.lower() not in rule.schemes or not parsed.netloc:
            return rule.resolve_message()
        return None


class RegexValidator(Validator):
    priority = 50
    rule_type = Regex

    def check(self, rule: Regex, value: Any, context: ValidationContext) -> str | None:
        if value is None or value == "":
            return None
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            return rule.resolve_message()
        return None if re.search(rule.pattern, str(value)) else rule.resolve_message()


# ============ Numeric Bounds (inclusive) ============

class MinValidator(Validator):
    priority = 40
    rule_type = Min

    def check(self, rule: Min, value: Any, context: ValidationContext) -> str | None:
        if value is None:
            return None
        number = as_number(value)
        if number is None:
            return rule.message or "The value must be numeric"
        return rule.resolve_message() if number < rule.min else None


class MaxValidator(Validator):
    priority = 40
    rule_type = Max

    def check(self, rule: Max, value: Any, context: ValidationContext) -> str | None:
        if value is None:
            return None
        number = as_number(value)
        if number is None:
            return rule.message or "The value must be numeric"
        return rule.resolve_message() if number > rule.max else None


class BetweenValidator(Validator):
    priority = 40
    rule_type = Between

    def check(self, rule: Between, value: Any, context: ValidationContext) -> str | None:
        if value is None:
            return None
        number = as_number(value)
        if number is None:
            return rule.message or "The value must be numeric"
        return None if rule.min <= number <= rule.max else rule.resolve_message()


# ============ Length ============

class LengthValidator(Validator):
    priority = 30
    rule_type = Length

    def check(self, rule: Length, value: Any, context: ValidationContext) -> str | None:
        if value is None:
            return None
        if not isinstance(value, str):
            return rule.message or "The value must be a string"
        size = len(value)
        if rule.min is not None and size < rule.min:
            return rule.resolve_message()
        if rule.max is not None and size > rule.max:
            return rule.resolve_message()
        return None


# ============ Nested ============

class ValidValidator(Validator):
    """Cascade marker; nested instances are validated while they are hydrated."""
    priority = 10
    rule_type = Valid

    def check(self, rule: Valid, value: Any, context: ValidationContext) -> str | None:
        return None


DEFAULT_VALIDATORS: tuple[type[Validator], ...] = (
    RequiredValidator,
    RequiredIfValidator,
    EmailValidator,
    UrlValidator,
    RegexValidator,
    MinValidator,
    MaxValidator,
    BetweenValidator,
    LengthValidator,
    ValidValidator,
)
