"""Engine-side value types.

These are plain in-memory shapes, independent of the ORM. The store adapter
builds them from rows; the engine never touches a session.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, model_validator


POINTS_CORRECT = 200
POINTS_INCORRECT = 100
DEFAULT_SUBJECT = "General Knowledge"


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything we store is UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Medal(str, enum.Enum):
    none = "none"
    bronze = "bronze"
    silver = "silver"
    gold = "gold"
    platinum = "platinum"


class _Scope(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class AllScope(_Scope):
    kind: Literal["all"] = "all"


class StateScope(_Scope):
    kind: Literal["state"] = "state"
    state_id: str = Field(min_length=1)


class DistrictScope(_Scope):
    kind: Literal["district"] = "district"
    state_id: str = Field(min_length=1)
    district_code: str = Field(min_length=1)


class SchoolScope(_Scope):
    kind: Literal["school"] = "school"
    state_id: str = Field(min_length=1)
    district_code: str = Field(min_length=1)
    school_id: str = Field(min_length=1)


TargetScope = Annotated[
    Union[AllScope, StateScope, DistrictScope, SchoolScope],
    Field(discriminator="kind"),
]

_scope_adapter: TypeAdapter = TypeAdapter(TargetScope)


def parse_scope(
    target_type: str | None,
    *,
    state_id: str | None = None,
    district_code: str | None = None,
    school_id: str | None = None,
) -> AllScope | StateScope | DistrictScope | SchoolScope | None:
    """Build a scope from loose stored fields.

    Returns None when the fields do not form exactly one ancestry chain
    (unknown type, a missing ancestor, or an id the scope does not carry).
    """
    raw = {
        "kind": str(target_type or "").strip().lower(),
        "state_id": state_id,
        "district_code": district_code,
        "school_id": school_id,
    }
    payload = {k: v for k, v in raw.items() if v not in (None, "")}
    try:
        return _scope_adapter.validate_python(payload)
    except ValidationError:
        return None


class Expiry(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["never", "hours", "days"]
    value: int | None = None

    @model_validator(mode="after")
    def _value_required(self) -> "Expiry":
        if self.type != "never" and (self.value is None or self.value <= 0):
            raise ValueError("expiry value must be a positive integer")
        return self

    def expires_at(self, created_at: datetime) -> datetime | None:
        if self.type == "never":
            return None
        unit = timedelta(hours=1) if self.type == "hours" else timedelta(days=1)
        return as_utc(created_at) + unit * int(self.value or 0)


def parse_expiry(expiry_type: str | None, value: int | None) -> Expiry | None:
    try:
        return Expiry(type=str(expiry_type or "never").strip().lower(), value=value)
    except ValidationError:
        return None


@dataclass(frozen=True)
class ContentItem:
    id: str
    kind: str
    title: str
    is_active: bool
    # None means the stored targeting or expiry was inconsistent.
    scope: AllScope | StateScope | DistrictScope | SchoolScope | None
    expiry: Expiry | None
    created_at: datetime
    audience: str | None = None
    scheduled_at: datetime | None = None


@dataclass(frozen=True)
class Participant:
    id: str
    name: str = ""
    auth_id: str | None = None
    email: str | None = None
    student_id: str | None = None
    school_code: str | None = None
    school: str | None = None
    school_name: str | None = None
    district_code: str | None = None
    district_name: str | None = None
    state: str | None = None


@dataclass(frozen=True)
class Organization:
    id: str
    name: str
    school_code: str = ""
    district_code: str = ""
    district_name: str = ""
    state: str = ""


@dataclass(frozen=True)
class District:
    district_name: str
    district_code: str


@dataclass(frozen=True)
class Region:
    id: str
    state_name: str
    state_code: str = ""
    districts: tuple[District, ...] = field(default_factory=tuple)

    def has_district(self, district_code: str) -> bool:
        return any(d.district_code == district_code for d in self.districts)


@dataclass(frozen=True)
class ActivityRecord:
    """A quiz attempt or a daily-practice answer.

    Quiz attempts carry ``content_id`` and a 0-100 ``score``. Practice records
    carry ``subject``, ``is_correct`` and optionally ``points``.
    """

    id: str
    submitted_at: datetime
    subject_key: str | None = None
    subject_email: str | None = None
    subject_name: str | None = None
    score: int = 0
    correct_count: int = 0
    total_count: int = 0
    completion_time_seconds: int = 0
    content_id: str | None = None
    subject: str | None = None
    is_correct: bool = False
    points: int | None = None
    school_code: str | None = None

    @property
    def awarded_points(self) -> int:
        if self.points is not None:
            return int(self.points)
        return POINTS_CORRECT if self.is_correct else POINTS_INCORRECT

    @property
    def subject_label(self) -> str:
        return (self.subject or "").strip() or DEFAULT_SUBJECT


@dataclass(frozen=True)
class LinkedRecord:
    record: ActivityRecord
    participant: Participant | None
    matched_by: str | None = None

    @property
    def is_resolved(self) -> bool:
        return self.participant is not None
