import json

import pytest

from bindery import Context, ErrorCode, HydrationError

from tests.fixtures import AddressDto, FrozenPoint, LazyUserDto, ProfileDto, Status, UserDto

ADDRESS = {"street": "1 Main", "city": "NY", "country": "US"}


@pytest.fixture
def address(engine):
    return AddressDto.from_data(ADDRESS, engine=engine)


# ============ Creation and output ============

class TestCreation:

    def test_from_data(self, address):
        assert address == AddressDto(**ADDRESS)

    def test_from_json(self, engine):
        assert AddressDto.from_json(json.dumps(ADDRESS), engine=engine) == AddressDto(**ADDRESS)

    def test_from_json_rejects_non_text(self, engine):
        with pytest.raises(TypeError, match="expects str or bytes"):
            AddressDto.from_json(ADDRESS, engine=engine)

    def test_partial_binds_only_allowed_fields(self, engine):
        profile = ProfileDto.partial("score").from_data({"nickname": "grace", "score": "42"}, engine=engine)
        assert profile == ProfileDto(nickname="anon", score=42.0)

    def test_partial_accepts_any_input_shape(self, engine):
        profile = ProfileDto.partial("nickname").from_data('{"nickname": "grace", "score": 7}', engine=engine)
        assert profile == ProfileDto(nickname="grace")

    def test_partial_resolves_mapped_keys(self, engine):
        payload = {"id": "u1", "email_address": "a@b.com", "name": "A", "created_at": "2026-01-15T10:30:00Z",
            "status": "active"}
        user = UserDto.partial("id", "email", "name", "created_at").from_data(payload, engine=engine)
        assert user.email == "a@b.com"
        assert user.status is Status.PENDING

    def test_partial_reports_required_fields_left_out(self, engine):
        with pytest.raises(HydrationError) as exc_info:
            AddressDto.partial("city").from_data(ADDRESS, engine=engine)
        assert exc_info.value.error_paths == ["street", "country"]

    def test_partial_rejects_unknown_fields(self, engine):
        with pytest.raises(HydrationError) as exc_info:
            AddressDto.partial("zip").from_data(ADDRESS, engine=engine)
        assert exc_info.value.code is ErrorCode.E4002_INVALID_MAPPING

    def test_default_engine(self):
        assert AddressDto.from_data(ADDRESS).city == "NY"

    def test_to_dict_and_to_json(self, engine, address):
        assert address.to_dict(engine=engine) == {**ADDRESS, "postal_code": None}
        assert json.loads(address.to_json(Context().only("city"), engine=engine)) == {"city": "NY"}

    def test_to_json_forwards_dumps_arguments(self, engine, address):
        assert address.to_json(Context().only("city"), engine=engine, indent=2) == '{\n  "city": "NY"\n}'


# ============ Copies ============

class TestCopies:

    def test_with_returns_a_new_instance(self, engine, address):
        moved = address.with_(engine=engine, city="Boston")
        assert moved.city == "Boston"
        assert address.city == "NY"
        assert moved.street == "1 Main"

    def test_with_does_not_cast(self, engine, address):
        assert address.with_(engine=engine, postal_code=10001).postal_code == 10001

    def test_with_frozen(self, engine):
        assert FrozenPoint(x=1, y=2).with_(engine=engine, x=5) == FrozenPoint(x=5, y=2)

    def test_with_unknown_field(self, engine, address):
        with pytest.raises(HydrationError) as exc_info:
            address.with_(engine=engine, zip="10001")
        assert exc_info.value.code is ErrorCode.E4002_INVALID_MAPPING
        assert exc_info.value.path == "zip"

    def test_clone_keeps_hidden_fields(self, engine):
        user = UserDto.from_data({
            "id": "u1", "email_address": "a@b.com", "name": "A", "created_at": "2026-01-15T10:30:00Z",
            "address": ADDRESS, "password_hash": "x",
        }, Context(), engine=engine)
        copy = user.clone()
        assert copy == user
        assert copy is not user
        assert copy.address is not user.address
        assert copy.password_hash == "x"

    def test_merge_applies_non_null_values(self, engine):
        base = AddressDto("1 Main", "NY", "US", postal_code="10001")
        update = AddressDto("2 Side", "Boston", "US")
        assert base.merge(update, engine=engine) == AddressDto("2 Side", "Boston", "US", postal_code="10001")

    def test_merge_requires_same_type(self, engine, address):
        with pytest.raises(TypeError, match="Can only merge DTOs of the same type"):
            address.merge(FrozenPoint(x=1), engine=engine)


# ============ Comparison ============

class TestComparison:

    def test_diff(self, engine, address):
        moved = address.with_(engine=engine, city="Boston", postal_code="02108")
        assert address.diff(moved, engine=engine) == {
            "city": {"old": "NY", "new": "Boston"},
            "postal_code": {"old": None, "new": "02108"},
        }

    def test_diff_respects_the_context(self, engine, address):
        moved = address.with_(engine=engine, city="Boston")
        assert address.diff(moved, Context().only("street"), engine=engine) == {}

    def test_diff_ignores_the_wrap_key(self, engine, address):
        moved = address.with_(engine=engine, city="Boston")
        assert address.diff(moved, Context().wrap("data"), engine=engine) == {"city": {"old": "NY", "new": "Boston"}}

    def test_diff_requires_same_type(self, engine, address):
        with pytest.raises(TypeError, match="Can only diff DTOs of the same type"):
            address.diff(FrozenPoint(x=1), engine=engine)

    def test_equals(self, engine, address):
        assert address.equals(AddressDto(**ADDRESS), engine=engine)
        assert not address.equals(address.with_(engine=engine, city="Boston"), engine=engine)
        assert not address.equals(FrozenPoint(x=1), engine=engine)

    def test_equals_ignores_computed_fields_unless_selected(self, engine):
        first = LazyUserDto(id="u1", first_name="Ada", last_name="Lovelace")
        second = LazyUserDto(id="u1", first_name="Ada", last_name="Lovelace")
        assert first.equals(second, Context().include_lazy(), engine=engine)
