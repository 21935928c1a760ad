"""Declarative validation: rule markers, validators and the validator registry.

Usage:
    @dataclass
    class Signup(Dto):
        email: Annotated[str, Required(), Email()]
        age: Annotated[int, Between(18, 120)]
        company: Annotated[str | None, RequiredIf("account_type", "business")] = None
"""
from .rules import Rule, Required, RequiredIf, Min, Max, Between, Length, Regex, Email, Url, Valid
from .context import ValidationContext
from .validators import (
    Validator,
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
from .registry import ValidatorRegistry

__all__ = [
    "Rule",
    "Required",
    "RequiredIf",
    "Min",
    "Max",
    "Between",
    "Length",
    "Regex",
    "Email",
    "Url",
    "Valid",
    "ValidationContext",
    "Validator",
    "RequiredValidator",
    "RequiredIfValidator",
    "EmailValidator",
    "UrlValidator",
    "RegexValidator",
    "MinValidator",
    "MaxValidator",
    "BetweenValidator",
    "LengthValidator",
    "ValidValidator",
    "ValidatorRegistry",
]
