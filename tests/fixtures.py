"""Bindable types shared by the test modules.

Defined at module level so type hints resolve and metadata can be pickled
by the file cache.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel

from bindery import (
    Between,
    CastWith,
    DefaultFrom,
    Deprecated,
    Dto,
    Email,
    Hidden,
    Lazy,
    Length,
    MapFrom,
    Max,
    Min,
    Pipeline,
    Regex,
    Required,
    RequiredIf,
    TransformWith,
    Url,
    Lowercase,
    StripTags,
    TrimStrings,
    Uppercase,
)
from bindery.casting import Caster
from bindery.normalization import Transformer


class Status(str, Enum):
    ACTIVE = "active"
    PENDING = "pending"
    INACTIVE = "inactive"


class Priority(Enum):
    LOW = 1
    HIGH = 2


class Color(Enum):
    RED = (255, 0, 0)
    GREEN = (0, 255, 0)


# ============ Core scenario ============

@dataclass
class AddressDto(Dto):
    street: str
    city: str
    country: str
    postal_code: str | None = None


@dataclass
class UserDto(Dto):
    id: str
    email: Annotated[str, MapFrom("email_address")]
    name: str
    created_at: datetime
    address: AddressDto | None = None
    status: Status = Status.PENDING
    password_hash: Annotated[str | None, Hidden] = None


@dataclass(frozen=True)
class FrozenPoint(Dto):
    x: int
    y: int = 0


class PlainPoint:
    """Not a dataclass: constructor parameters plus an annotated class attribute."""
    __bindable__ = True
    label: str = "origin"

    def __init__(self, x: int, y: int = 0):
        self.x = x
        self.y = y


# ============ Casting ============

@dataclass
class PermissiveDto(Dto):
    count: int | None = None
    ratio: float | None = None
    enabled: bool | None = None
    seen_at: datetime | None = None
    status: Status | None = None
    total: int = 0


@dataclass
class EnumDto(Dto):
    status: Status = Status.PENDING
    priority: Priority = Priority.LOW
    color: Color = Color.RED


@dataclass
class TemporalDto(Dto):
    at: datetime
    day: date | None = None


class UpperCaster(Caster):
    def supports(self, field, value) -> bool: return isinstance(value, str)

    def cast(self, field, value, ctx) -> Any: return value.upper()


class CentsTransformer(Transformer):
    def supports(self, field, value) -> bool: return isinstance(value, float)

    def transform(self, field, value, ctx) -> Any: return int(round(value * 100))


@dataclass
class CodeDto(Dto):
    code: Annotated[str, CastWith(UpperCaster)]
    amount: Annotated[float, TransformWith(CentsTransformer)] = 0.0


@dataclass
class TeamDto(Dto):
    name: str
    members: list[AddressDto] = field(default_factory=list)
    scores: list[int] = field(default_factory=list)
    tags: set[str] = field(default_factory=set)
    notes: list = field(default_factory=list)


# ============ Hydration extras ============

@dataclass
class CommentDto(Dto):
    author: Annotated[str, Pipeline(TrimStrings, Lowercase)]
    body: Annotated[str, Pipeline(StripTags, TrimStrings)]
    tag: Annotated[str, Pipeline(Uppercase())] = ""


@dataclass
class ServiceDto(Dto):
    region: Annotated[str, DefaultFrom(env="BINDERY_TEST_REGION")] = "us-east-1"
    retries: Annotated[int, DefaultFrom(factory=lambda: "3")] = 0


@dataclass
class LegacyDto(Dto):
    __markers__ = (Deprecated("use UserDto", since="0.2"),)
    name: str
    nickname: Annotated[str | None, Deprecated("use name")] = None


@dataclass
class HookedDto(Dto):
    name: str
    slug: str = ""
    _serializations: int = field(default=0, init=False, repr=False, compare=False)

    @classmethod
    def transform_input(cls, data: dict[str, Any]) -> dict[str, Any]:
        data.setdefault("slug", str(data.get("name", "")).strip().lower().replace(" ", "-"))
        return data

    def after_hydration(self) -> None:
        self.name = self.name.strip()

    def before_serialization(self) -> None:
        self._serializations += 1


class AddressModel(BaseModel):
    street: str
    city: str
    country: str


# ============ Validation ============

@dataclass
class SignupDto(Dto):
    username: Annotated[str, Required(), Length(min=3, max=20)]
    code: Annotated[str, Between(1, 10), Regex(r"^[A-Z]+$")]


@dataclass
class AccountDto(Dto):
    account_type: str
    company: Annotated[str | None, RequiredIf("account_type", "business")] = None
    website: Annotated[str | None, Url()] = None
    contact: Annotated[str | None, Email()] = None
    age: Annotated[int | None, Min(18), Max(130)] = None


@dataclass
class ProfileDto(Dto):
    nickname: Annotated[str, Required(), Length(min=3)] = "anon"
    score: Annotated[float | None, Between(0, 100)] = None


# ============ Normalization ============

@dataclass
class LazyUserDto(Dto):
    id: str
    first_name: str
    last_name: str
    _evaluations: list[str] = field(default_factory=list, init=False, repr=False, compare=False)

    def _track(self, name: str, value: Any) -> Any:
        self._evaluations.append(name)
        return value

    def compute_lazy_properties(self) -> dict[str, Any]:
        return {
            "full_name": Lazy(lambda: self._track("full_name", f"{self.first_name} {self.last_name}")),
            "initials": lambda: self._track("initials", self.first_name[:1] + self.last_name[:1]),
            "constant": 42,
        }


@dataclass
class PairDto(Dto):
    first: LazyUserDto
    second: LazyUserDto


@dataclass
class ConflictDto(Dto):
    name: str

    def compute_lazy_properties(self) -> dict[str, Any]:
        return {"name": "shadow"}


@dataclass
class NodeDto(Dto):
    """A tree node."""
    name: str
    child: NodeDto | None = None


@dataclass
class FactoryDefaultDto(Dto):
    items: list[str] = field(default_factory=lambda: ["a"])
