from __future__ import annotations

import logging
from typing import Any, Callable

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from leapboard.engine.aggregation import MonthWindow
from leapboard.engine.errors import NotFoundError, RegistryFetchError
from leapboard.engine.types import (
    ActivityRecord,
    ContentItem,
    District,
    Organization,
    Participant,
    Region,
    as_utc,
    parse_expiry,
    parse_scope,
)
from leapboard.models.activity import PracticeRecord, QuizAttempt
from leapboard.models.content import ContentKind, TargetedContent
from leapboard.models.registry import School, State, Student

log = logging.getLogger(__name__)


def _clean(value: str | None) -> str | None:
    value = (value or "").strip()
    return value or None


def to_participant(row: Student) -> Participant:
    return Participant(
        id=row.id,
        name=row.name or "",
        auth_id=_clean(row.auth_id),
        email=_clean(row.email),
        student_id=_clean(row.student_id),
        school_code=_clean(row.school_code),
        school=_clean(row.school),
        school_name=_clean(row.school_name),
        district_code=_clean(row.district_code),
        district_name=_clean(row.district_name),
        state=_clean(row.state),
    )


def to_organization(row: School) -> Organization:
    return Organization(
        id=row.id,
        name=row.name or "",
        school_code=row.school_code or "",
        district_code=row.district_code or "",
        district_name=row.district_name or "",
        state=row.state or "",
    )


def to_region(row: State) -> Region:
    districts: list[District] = []
    for d in row.districts or []:
        if not isinstance(d, dict):
            continue
        code = str(d.get("districtCode") or d.get("district_code") or "").strip()
        name = str(d.get("districtName") or d.get("district_name") or "").strip()
        if code:
            districts.append(District(district_name=name, district_code=code))
    return Region(id=row.id, state_name=row.state_name or "", state_code=row.state_code or "", districts=tuple(districts))


def to_content(row: TargetedContent) -> ContentItem:
    return ContentItem(
        id=row.id,
        kind=getattr(row.kind, "value", str(row.kind)),
        title=row.title or "",
        is_active=bool(row.is_active),
        scope=parse_scope(
            row.target_type,
            state_id=row.target_state_id,
            district_code=row.target_district_code,
            school_id=row.target_school_id,
        ),
        expiry=parse_expiry(row.expiry_type, row.expiry_value),
        created_at=as_utc(row.created_at),
        audience=(_clean(row.audience) or "").lower() or None,
        scheduled_at=as_utc(row.scheduled_at) if row.scheduled_at else None,
    )


def to_quiz_attempt(row: QuizAttempt) -> ActivityRecord:
    return ActivityRecord(
        id=row.id,
        submitted_at=as_utc(row.submitted_at),
        subject_key=_clean(row.subject_key),
        subject_email=_clean(row.subject_email),
        subject_name=_clean(row.subject_name),
        score=int(row.score or 0),
        correct_count=int(row.correct_count or 0),
        total_count=int(row.total_count or 0),
        completion_time_seconds=int(row.completion_time_seconds or 0),
        content_id=row.quiz_id,
    )


def to_practice_record(row: PracticeRecord) -> ActivityRecord:
    return ActivityRecord(
        id=row.id,
        submitted_at=as_utc(row.submitted_at),
        subject_key=_clean(row.subject_key),
        subject_email=_clean(row.subject_email),
        correct_count=1 if row.is_correct else 0,
        total_count=1,
        completion_time_seconds=int(row.time_taken_seconds or 0),
        subject=row.subject,
        is_correct=bool(row.is_correct),
        points=row.points,
        school_code=_clean(row.school_code),
    )


# Collection names follow the document-store naming used by the back office.
COLLECTIONS: dict[str, tuple[type, Callable[[Any], Any]]] = {
    "students": (Student, to_participant),
    "schools": (School, to_organization),
    "states": (State, to_region),
    "content": (TargetedContent, to_content),
    "quizAttempts": (QuizAttempt, to_quiz_attempt),
    "practiceRecords": (PracticeRecord, to_practice_record),
}


class DocumentStore:
    """Read-only document-style access over the SQL tables.

    Every failed read surfaces as RegistryFetchError; callers never get a
    partial collection.
    """

    def __init__(self, db: Session):
        self.db = db

    def _collection(self, collection: str) -> tuple[type, Callable[[Any], Any]]:
        try:
            return COLLECTIONS[collection]
        except KeyError as e:
            raise ValueError(f"unknown collection: {collection}") from e

    def _ordered(self, model: type, stmt):
        if hasattr(model, "submitted_at"):
            return stmt.order_by(model.submitted_at.asc(), model.id.asc())
        return stmt.order_by(model.id.asc())

    def _run(self, collection: str, stmt) -> list:
        model, convert = self._collection(collection)
        try:
            rows = self.db.scalars(self._ordered(model, stmt)).all()
        except SQLAlchemyError as e:
            log.exception("store: read failed collection=%s", collection)
            raise RegistryFetchError(collection) from e
        return [convert(row) for row in rows]

    def fetch_all(self, collection: str) -> list:
        model, _ = self._collection(collection)
        return self._run(collection, select(model))

    def query_by_field(self, collection: str, field: str, value: object) -> list:
        model, _ = self._collection(collection)
        column = getattr(model, field, None)
        if column is None or field.startswith("_"):
            raise ValueError(f"unknown field {field!r} for collection {collection}")
        return self._run(collection, select(model).where(column == value))

    def get_by_id(self, collection: str, ref_id: str):
        model, convert = self._collection(collection)
        try:
            row = self.db.get(model, ref_id)
        except SQLAlchemyError as e:
            log.exception("store: read failed collection=%s id=%s", collection, ref_id)
            raise RegistryFetchError(collection) from e
        return convert(row) if row is not None else None

    def participants(self) -> list[Participant]:
        return self.fetch_all("students")

    def schools(self) -> list[Organization]:
        return self.fetch_all("schools")

    def regions(self) -> list[Region]:
        return self.fetch_all("states")

    def content_items(self, kind: str | None = None) -> list[ContentItem]:
        if kind is None:
            return self.fetch_all("content")
        return self.query_by_field("content", "kind", ContentKind(kind))

    def get_content(self, content_id: str) -> ContentItem:
        item = self.get_by_id("content", content_id)
        if item is None:
            raise NotFoundError("content", content_id)
        return item

    def get_school(self, school_id: str) -> Organization:
        school = self.get_by_id("schools", school_id)
        if school is None:
            raise NotFoundError("organization", school_id)
        return school

    def quiz_attempts(self, content_id: str) -> list[ActivityRecord]:
        return self.query_by_field("quizAttempts", "quiz_id", content_id)

    def practice_records(self, window: MonthWindow | None = None) -> list[ActivityRecord]:
        stmt = select(PracticeRecord)
        if window is not None:
            stmt = stmt.where(PracticeRecord.submitted_at >= window.start, PracticeRecord.submitted_at < window.end)
        return self._run("practiceRecords", stmt)
