import pytest

from bindery.core.errors import (
    AppError,
    BindingError,
    CastError,
    Err,
    ErrorCode,
    HydrationError,
    MappingError,
    NormalizationError,
    Ok,
    RuleViolation,
    ValidationError,
    fail,
    first_ok,
    join_path,
    try_result,
)


# ============ Error codes ============

def test_error_code_categories():
    assert ErrorCode.E2021_INVALID_JSON.category == "validation"
    assert ErrorCode.E3005_STRICT_TYPE_MISMATCH.category == "casting"
    assert ErrorCode.E4001_MISSING_REQUIRED_KEY.category == "hydration"
    assert ErrorCode.E5001_UNSUPPORTED_TYPE.category == "metadata"
    assert ErrorCode.E6001_COMPUTED_FIELD_CONFLICT.category == "normalization"
    assert ErrorCode.E9000_INTERNAL_GENERIC.category == "internal"


# ============ Result ============

class TestResult:

    def test_fail_builds_an_err(self):
        match fail(ErrorCode.E2002_INVALID_FORMAT, "bad", value="x"):
            case Err(error):
                assert error.code is ErrorCode.E2002_INVALID_FORMAT
                assert error.metadata == {"value": "x"}
            case _:
                pytest.fail("expected Err")

    def test_try_result_catches_listed_exceptions(self):
        assert try_result(lambda: int("12"), code=ErrorCode.E2002_INVALID_FORMAT, origin="t") == Ok(12)
        result = try_result(lambda: int("x"), code=ErrorCode.E2002_INVALID_FORMAT, origin="t", catch=(ValueError,))
        assert isinstance(result, Err)
        assert result.error.code is ErrorCode.E2002_INVALID_FORMAT
        assert result.error.context.origin == "t"
        assert isinstance(result.error.cause, ValueError)

    def test_try_result_lets_other_exceptions_through(self):
        with pytest.raises(KeyError):
            try_result(lambda: {}["x"], catch=(ValueError,))

    def test_first_ok_returns_first_success(self):
        result = first_ok(
            lambda: fail(ErrorCode.E2002_INVALID_FORMAT, "first"),
            lambda: Ok("second"),
            lambda: Ok("third"),
        )
        assert result == Ok("second")

    def test_first_ok_returns_last_err(self):
        result = first_ok(
            lambda: fail(ErrorCode.E2002_INVALID_FORMAT, "first"),
            lambda: fail(ErrorCode.E2012_INVALID_DATE, "second"),
        )
        assert result.error.message == "second"

    def test_app_error_to_dict(self):
        error = AppError(code=ErrorCode.E3001_CANNOT_CAST, message="boom", metadata={"field": "age"})
        data = error.to_dict()
        assert data["error"]["code"] == "E3001_CANNOT_CAST"
        assert data["error"]["category"] == "casting"
        assert data["error"]["metadata"] == {"field": "age"}


# ============ Paths ============

def test_join_path_attaches_indexes_without_dot():
    assert join_path("tags", "[1]") == "tags[1]"
    assert join_path("address", "city") == "address.city"
    assert join_path("items", "") == "items"


def test_prepend_path_grows_outward():
    error = CastError.cannot_cast("x", "int").prepend_path("[2]").prepend_path("scores")
    assert error.path == "scores[2]"
    assert str(error).startswith("scores[2]: Cannot cast str to int")


# ============ Exceptions ============

class TestCastError:

    def test_cannot_cast(self):
        error = CastError.cannot_cast("abc", "int", reason="not numeric")
        assert error.code is ErrorCode.E3001_CANNOT_CAST
        assert error.expected_type == "int"
        assert error.given_type == "str"
        assert error.given_value == "abc"
        assert "not numeric" in error.message

    def test_invalid_enum_lists_valid_values(self):
        error = CastError.invalid_enum_value("x", "Status", ["a", "b"])
        assert error.code is ErrorCode.E3002_INVALID_ENUM_VALUE
        assert "'a', 'b'" in error.message

    def test_from_app_error_keeps_reason(self):
        app_error = AppError(code=ErrorCode.E2002_INVALID_FORMAT, message="Cannot coerce 'x' to int")
        error = CastError.from_app_error(app_error, "x", "int")
        assert error.code is ErrorCode.E3001_CANNOT_CAST
        assert "Cannot coerce 'x' to int" in error.message

    def test_is_binding_error(self):
        assert isinstance(CastError.strict_mismatch(1, "str"), BindingError)


def test_missing_required_key():
    error = MappingError.missing_required_key("email_address")
    assert error.code is ErrorCode.E4001_MISSING_REQUIRED_KEY
    assert error.message == "Missing required key 'email_address'"


class TestValidationError:

    def test_lists_every_violation(self):
        violations = [
            RuleViolation("code", "between", "The value must be between 1 and 10", "42", {"min": 1, "max": 10}),
            RuleViolation("code", "regex", "The value does not match the required pattern", "42"),
        ]
        error = ValidationError.from_violations("Validation failed for property 'code'", violations, path="code")
        assert error.violation_count == 2
        assert "[code] between:" in error.full_message
        assert "[code] regex:" in error.full_message
        assert error.to_dict()["violations"][0]["parameters"] == {"min": 1, "max": 10}

    def test_rule_violation_is_a_value(self):
        violation = RuleViolation("age", "min", "too small", 3)
        assert not isinstance(violation, Exception)
        assert violation.formatted_message == "[age] min: too small"


class TestHydrationError:

    def test_aggregates_nested_errors(self):
        nested = HydrationError.from_errors("Failed to hydrate AddressDto", [MappingError.missing_required_key("city").with_path("city")])
        error = HydrationError.from_errors("Failed to hydrate UserDto", [
            MappingError.missing_required_key("id").with_path("id"),
            nested.prepend_path("address"),
        ])
        assert error.error_count == 2
        assert error.error_paths == ["id", "address"]
        assert error.errors[1].errors[0].path == "address.city"
        text = error.full_message
        assert "(2 errors)" in text
        assert "address.city: Missing required key 'city'" in text

    def test_to_app_error_carries_codes(self):
        error = HydrationError.from_errors("Failed", [CastError.cannot_cast("x", "int").with_path("age")])
        app_error = error.to_app_error()
        assert app_error.code is ErrorCode.E4000_HYDRATION_GENERIC
        assert app_error.metadata["error_codes"] == ["E3001_CANNOT_CAST"]

    def test_can_be_raised_and_caught_as_binding_error(self):
        with pytest.raises(BindingError) as exc_info:
            raise HydrationError.from_errors("Failed", [])
        assert exc_info.value.code is ErrorCode.E4000_HYDRATION_GENERIC


def test_computed_conflict():
    error = NormalizationError.computed_conflict("name", "ConflictDto")
    assert error.code is ErrorCode.E6001_COMPUTED_FIELD_CONFLICT
    assert error.path == "name"


def test_app_error_string_names_the_code():
    error = CastError.cannot_cast("x", "int").to_app_error()
    assert error.context.correlation_id in str(error)
    assert str(error).startswith("[E3001_CANNOT_CAST] Cannot cast str to int")
