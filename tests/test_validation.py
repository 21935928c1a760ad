import pytest

from bindery import Between, Email, HydrationError, Length, Regex, Url, ValidationError
from bindery.meta import FieldMeta, TypeDescriptor
from bindery.validation import ValidationContext, ValidatorRegistry, validators
from bindery.validation.validators import as_number, is_empty

from tests.fixtures import AccountDto, ProfileDto, SignupDto


def validate(engine, ctx, cls, data):
    return engine.hydrate(cls, data, ctx.with_validation())


def violations_of(exc_info, index=0):
    return exc_info.value.errors[index].violations


# ============ Aggregation ============

class TestAggregation:

    def test_range_and_pattern_both_reported(self, engine, ctx):
        with pytest.raises(HydrationError) as exc_info:
            validate(engine, ctx, SignupDto, {"username": "ada", "code": "42"})
        error = exc_info.value.errors[0]
        assert isinstance(error, ValidationError)
        assert error.path == "code"
        assert error.violation_count == 2
        assert sorted(v.rule_name for v in error.violations) == ["between", "regex"]

    def test_every_field_is_validated(self, engine, ctx):
        with pytest.raises(HydrationError) as exc_info:
            validate(engine, ctx, SignupDto, {"username": "ab", "code": "42"})
        assert exc_info.value.error_paths == ["username", "code"]

    def test_violation_details(self, engine, ctx):
        with pytest.raises(HydrationError) as exc_info:
            validate(engine, ctx, SignupDto, {"username": "ada", "code": "42"})
        between = next(v for v in violations_of(exc_info) if v.rule_name == "between")
        assert between.field_name == "code"
        assert between.invalid_value == "42"
        assert between.parameters == {"min": 1, "max": 10}
        assert between.message == "The value must be between 1 and 10"

    def test_disabled_by_default(self, engine, ctx):
        assert engine.hydrate(SignupDto, {"username": "ab", "code": "42"}, ctx).code == "42"


# ============ Rules ============

class TestRequired:

    def test_missing_value(self, engine, ctx):
        with pytest.raises(HydrationError) as exc_info:
            validate(engine, ctx, SignupDto, {"code": "5"})
        username_error = exc_info.value.errors[0]
        assert isinstance(username_error, ValidationError)
        assert username_error.violations[0].rule_name == "required"

    def test_empty_string(self, engine, ctx):
        with pytest.raises(HydrationError) as exc_info:
            validate(engine, ctx, SignupDto, {"username": "", "code": "5"})
        assert [v.rule_name for v in violations_of(exc_info)] == ["required", "length"]

    def test_absent_field_takes_its_default(self, engine, ctx):
        assert validate(engine, ctx, ProfileDto, {}) == ProfileDto(nickname="anon")

    def test_present_value_is_still_checked(self, engine, ctx):
        with pytest.raises(HydrationError) as exc_info:
            validate(engine, ctx, ProfileDto, {"nickname": ""})
        assert [v.rule_name for v in violations_of(exc_info)] == ["required", "length"]


class TestRequiredIf:

    def test_condition_met(self, engine, ctx):
        with pytest.raises(HydrationError) as exc_info:
            validate(engine, ctx, AccountDto, {"account_type": "business", "company": None})
        assert exc_info.value.error_paths == ["company"]
        assert violations_of(exc_info)[0].rule_name == "required_if"

    def test_absent_company_keeps_its_default(self, engine, ctx):
        assert validate(engine, ctx, AccountDto, {"account_type": "business"}).company is None

    def test_condition_met_and_satisfied(self, engine, ctx):
        account = validate(engine, ctx, AccountDto, {"account_type": "business", "company": "Acme"})
        assert account.company == "Acme"

    def test_condition_not_met(self, engine, ctx):
        assert validate(engine, ctx, AccountDto, {"account_type": "personal"}).company is None

    def test_strict_equality(self, engine, ctx):
        assert validate(engine, ctx, AccountDto, {"account_type": "Business"}).company is None


class TestFormats:

    @pytest.mark.parametrize("contact", ["ada@example.com", "first.last+tag@mail.example.org"])
    def test_valid_email(self, engine, ctx, contact):
        assert validate(engine, ctx, AccountDto, {"account_type": "p", "contact": contact}).contact == contact

    @pytest.mark.parametrize("contact", ["ada", "ada@", "@example.com", "ada@example", "Ada <ada@example.com>"])
    def test_invalid_email(self, engine, ctx, contact):
        with pytest.raises(HydrationError) as exc_info:
            validate(engine, ctx, AccountDto, {"account_type": "p", "contact": contact})
        assert violations_of(exc_info)[0].rule_name == "email"

    @pytest.mark.parametrize("website", ["https://example.com", "http://example.com/path?q=1"])
    def test_valid_url(self, engine, ctx, website):
        assert validate(engine, ctx, AccountDto, {"account_type": "p", "website": website}).website == website

    @pytest.mark.parametrize("website", ["example.com", "ftp://example.com", "https://", "https://exa mple.com"])
    def test_invalid_url(self, engine, ctx, website):
        with pytest.raises(HydrationError) as exc_info:
            validate(engine, ctx, AccountDto, {"account_type": "p", "website": website})
        assert violations_of(exc_info)[0].rule_name == "url"


class TestBounds:

    @pytest.mark.parametrize("age", [18, "30", 130])
    def test_inclusive(self, engine, ctx, age):
        assert validate(engine, ctx, AccountDto, {"account_type": "p", "age": age}).age == int(age)

    @pytest.mark.parametrize("age, rule", [(17, "min"), (131, "max")])
    def test_out_of_range(self, engine, ctx, age, rule):
        with pytest.raises(HydrationError) as exc_info:
            validate(engine, ctx, AccountDto, {"account_type": "p", "age": age})
        assert [v.rule_name for v in violations_of(exc_info)] == [rule]

    def test_non_numeric(self, engine, ctx):
        with pytest.raises(HydrationError) as exc_info:
            validate(engine, ctx, AccountDto, {"account_type": "p", "age": "old"})
        messages = {v.rule_name: v.message for v in violations_of(exc_info)}
        assert messages == {"min": "The value must be numeric", "max": "The value must be numeric"}

    @pytest.mark.parametrize("age", ["nan", "inf", " -Infinity", float("nan"), float("inf")])
    def test_non_finite_numbers_are_not_numeric(self, engine, ctx, age):
        with pytest.raises(HydrationError) as exc_info:
            validate(engine, ctx, AccountDto, {"account_type": "p", "age": age})
        assert [v.message for v in violations_of(exc_info)] == ["The value must be numeric"] * 2

    def test_nan_fails_between(self, engine, ctx):
        with pytest.raises(HydrationError) as exc_info:
            validate(engine, ctx, ProfileDto, {"score": float("nan")})
        assert violations_of(exc_info)[0].rule_name == "between"

    def test_none_is_accepted(self, engine, ctx):
        account = validate(engine, ctx, AccountDto, {"account_type": "p", "age": None, "contact": None})
        assert account.age is None


# ============ Rule construction ============

class TestRuleConstruction:

    def test_between_requires_ordered_bounds(self):
        with pytest.raises(ValueError):
            Between(10, 1)

    def test_length_requires_a_bound(self):
        with pytest.raises(ValueError):
            Length()

    def test_regex_must_compile(self):
        with pytest.raises(ValueError, match="Invalid regex"):
            Regex("[unclosed")

    def test_custom_message(self):
        assert Email(message="bad email").resolve_message() == "bad email"
        assert Url().resolve_message() == "The value must be a valid URL"

    def test_length_messages(self):
        assert Length(min=3).default_message() == "The length must be at least 3 characters"
        assert Length(max=5).default_message() == "The length must be at most 5 characters"


# ============ Registry ============

class TestValidatorRegistry:

    def test_discover_registers_every_validator(self):
        registry = ValidatorRegistry()
        assert registry.discover(validators) == 10
        assert len(registry) == 10

    def test_validate_directly(self):
        registry = ValidatorRegistry.with_defaults()
        field = FieldMeta(name="code", type=TypeDescriptor.from_hint(str),
            validation_rules=(Length(max=2), Regex(r"^\d+$")))
        with pytest.raises(ValidationError) as exc_info:
            registry.validate(field, "abc", ValidationContext(field))
        assert [v.rule_name for v in exc_info.value.violations] == ["regex", "length"]
        assert registry.validate(field, "12", ValidationContext(field)) is None

    def test_only_matching_validators_run(self):
        registry = ValidatorRegistry.with_defaults()
        field = FieldMeta(name="code", type=TypeDescriptor.from_hint(str), validation_rules=(Length(max=2),))
        assert [type(v).__name__ for v in registry.validators_for(field, "x")] == ["LengthValidator"]


def test_helpers():
    assert is_empty("") and is_empty([]) and is_empty(None)
    assert not is_empty(0)
    assert as_number("1.5") == 1.5
    assert as_number(True) is None
    assert as_number("x") is None
    assert as_number(float("nan")) is None
    assert as_number("inf") is None
    assert as_number(7) == 7
