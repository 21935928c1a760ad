"""Validator registry: runs every supporting validator and aggregates violations."""
from __future__ import annotations

from types import ModuleType
from typing import Any

from bindery.core.errors import RuleViolation, ValidationError
from bindery.core.logging import validation_logger
from bindery.core.registry import PriorityRegistry
from bindery.meta.fields import FieldMeta

from .context import ValidationContext
from .validators import DEFAULT_VALIDATORS, Validator

log = validation_logger()


class ValidatorRegistry:
    """Priority-ordered validators. Unlike casters, every matching validator runs."""
    
    def __init__(self) -> None:
        self._validators: PriorityRegistry[Validator] = PriorityRegistry()
    
    @classmethod
    def with_defaults(cls) -> ValidatorRegistry:
        registry = cls()
        for validator_cls in DEFAULT_VALIDATORS:
            registry.register(validator_cls())
        return registry
    
    def register(self, validator: Validator, priority: int | None = None) -> None:
        self._validators.register(validator, validator.priority if priority is None else priority)
    
    def discover(self, module: ModuleType) -> int:
        """Register every concrete Validator subclass defined in ``module``."""
        return self._validators.discover(module, Validator)
    
    def validators_for(self, field: FieldMeta, value: Any) -> list[Validator]:
        return self._validators.matching(lambda v: v.supports(field, value))
    
    def validate(self, field: FieldMeta, value: Any, context: ValidationContext) -> None:
        """Raise one ValidationError listing every violated rule, or return None."""
        violations: list[RuleViolation] = []
        for validator in self.validators_for(field, value):
            try:
                validator.validate(field, value, context)
            except ValidationError as e:
                violations.extend(e.violations)
        if violations:
            log.debug("validation_failed", field=field.name, rules=[v.rule_name for v in violations])
            raise ValidationError.from_violations(f"Validation failed for property '{field.name}'", violations)
    
    def __len__(self) -> int: return len(self._validators)
