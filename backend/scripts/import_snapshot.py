from __future__ import annotations

import argparse
import json
import logging
import os
import pathlib
import sys
from datetime import datetime, timezone
from typing import Any

# Force /app into path for Docker compatibility
sys.path.append("/app")
# Also add current directory as fallback
sys.path.append(os.getcwd())

from sqlalchemy import delete

from leapboard.db.session import SessionLocal
from leapboard.models.activity import PracticeRecord, QuizAttempt
from leapboard.models.content import ContentKind, TargetedContent
from leapboard.models.registry import School, State, Student

log = logging.getLogger("leapboard.import")

_CONTENT_COLLECTIONS = {
    "quizzes": ContentKind.quiz,
    "webinars": ContentKind.webinar,
    "workshops": ContentKind.workshop,
}


def parse_ts(value: Any) -> datetime | None:
    """Accept ISO strings, epoch seconds and exported ``{"_seconds": n}`` timestamps."""
    if value is None or value == "":
        return None
    if isinstance(value, dict):
        seconds = value.get("_seconds", value.get("seconds"))
        if seconds is None:
            return None
        return datetime.fromtimestamp(int(seconds), tz=timezone.utc)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(float(value), tz=timezone.utc)
    s = str(value).strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    dt = datetime.fromisoformat(s)
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def _str(value: Any) -> str | None:
    s = str(value).strip() if value is not None else ""
    return s or None


def _int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return int(float(value))


def _state(doc: dict) -> State:
    return State(
        id=str(doc["id"]),
        state_name=str(doc.get("stateName") or ""),
        state_code=str(doc.get("stateCode") or ""),
        districts=[
            {"districtName": str(d.get("districtName") or ""), "districtCode": str(d.get("districtCode") or "")}
            for d in (doc.get("districts") or [])
            if isinstance(d, dict)
        ],
    )


def _school(doc: dict) -> School:
    return School(
        id=str(doc["id"]),
        name=str(doc.get("name") or doc.get("schoolName") or ""),
        school_code=str(doc.get("schoolCode") or ""),
        district_code=str(doc.get("districtCode") or ""),
        district_name=str(doc.get("districtName") or doc.get("district") or ""),
        state=str(doc.get("state") or ""),
    )


def _student(doc: dict) -> Student:
    return Student(
        id=str(doc["id"]),
        auth_id=_str(doc.get("uid")),
        email=_str(doc.get("email")),
        student_id=_str(doc.get("studentId")),
        name=str(doc.get("name") or ""),
        school_code=_str(doc.get("schoolCode")),
        school=_str(doc.get("school")),
        school_name=_str(doc.get("schoolName")),
        district_code=_str(doc.get("districtCode")),
        district_name=_str(doc.get("districtName") or doc.get("district")),
        state=_str(doc.get("state")),
        created_at=parse_ts(doc.get("createdAt")) or datetime.now(timezone.utc),
    )


def _content(doc: dict, kind: ContentKind) -> TargetedContent:
    return TargetedContent(
        id=str(doc["id"]),
        kind=kind,
        title=str(doc.get("title") or ""),
        is_active=bool(doc.get("isActive", True)),
        audience=_str(doc.get("audienceType")),
        target_type=str(doc.get("targetType") or "all"),
        target_state_id=_str(doc.get("targetStateId")),
        target_district_code=_str(doc.get("targetDistrictId") or doc.get("targetDistrictCode")),
        target_school_id=_str(doc.get("targetSchoolId")),
        expiry_type=str(doc.get("expiryType") or "never"),
        expiry_value=_int(doc.get("expiryValue")),
        scheduled_at=parse_ts(doc.get("scheduledDate")),
        created_at=parse_ts(doc.get("createdAt")) or datetime.now(timezone.utc),
    )


def _attempt(doc: dict) -> QuizAttempt:
    return QuizAttempt(
        id=str(doc["id"]),
        quiz_id=str(doc.get("quizId") or ""),
        subject_key=_str(doc.get("studentId")),
        subject_email=_str(doc.get("studentEmail")),
        subject_name=_str(doc.get("studentName")),
        score=_int(doc.get("score")) or 0,
        correct_count=_int(doc.get("correctAnswers")) or 0,
        total_count=_int(doc.get("totalQuestions")) or 0,
        completion_time_seconds=_int(doc.get("completionTime")) or 0,
        submitted_at=parse_ts(doc.get("submittedAt")) or datetime.now(timezone.utc),
    )


def _practice_records(doc: dict, school_codes: dict[str, str]) -> list[PracticeRecord]:
    # One streak document per auth uid, with one record per calendar day.
    owner = str(doc["id"])
    out: list[PracticeRecord] = []
    for day, rec in sorted((doc.get("records") or {}).items()):
        if not isinstance(rec, dict):
            continue
        submitted_at = parse_ts(rec.get("timestamp")) or parse_ts(f"{day}T00:00:00+00:00")
        out.append(
            PracticeRecord(
                id=f"{owner}_{day}",
                subject_key=owner,
                subject_email=_str(rec.get("email")),
                school_code=_str(rec.get("schoolCode")) or school_codes.get(owner),
                subject=_str(rec.get("subject")),
                is_correct=bool(rec.get("isCorrect")),
                points=_int(rec.get("points")),
                time_taken_seconds=_int(rec.get("timeTaken")),
                submitted_at=submitted_at,
            )
        )
    return out


def run(*, path: pathlib.Path, do_cleanup: bool) -> None:
    data = json.loads(path.read_text(encoding="utf-8"))

    with SessionLocal() as db:
        if do_cleanup:
            for model in (PracticeRecord, QuizAttempt, TargetedContent, Student, School, State):
                db.execute(delete(model))
            db.flush()

        counts: dict[str, int] = {}

        for doc in data.get("states") or []:
            db.merge(_state(doc))
            counts["states"] = counts.get("states", 0) + 1
        for doc in data.get("schools") or []:
            db.merge(_school(doc))
            counts["schools"] = counts.get("schools", 0) + 1

        school_codes: dict[str, str] = {}
        for doc in data.get("students") or []:
            student = _student(doc)
            db.merge(student)
            if student.auth_id and student.school_code:
                school_codes[student.auth_id] = student.school_code
            counts["students"] = counts.get("students", 0) + 1

        for collection, kind in _CONTENT_COLLECTIONS.items():
            for doc in data.get(collection) or []:
                db.merge(_content(doc, kind))
                counts[collection] = counts.get(collection, 0) + 1
        db.flush()

        for doc in data.get("quizAttempts") or []:
            db.merge(_attempt(doc))
            counts["quizAttempts"] = counts.get("quizAttempts", 0) + 1

        for doc in data.get("dailyStreaks") or []:
            for rec in _practice_records(doc, school_codes):
                db.merge(rec)
                counts["practiceRecords"] = counts.get("practiceRecords", 0) + 1

        db.commit()

    log.info("import_snapshot: path=%s counts=%s", path, json.dumps(counts, sort_keys=True))
    print(f"OK: imported {sum(counts.values())} documents from {path}")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    p = argparse.ArgumentParser()
    p.add_argument("path", help="Path to the JSON export (one key per collection)")
    p.add_argument("--cleanup", action="store_true", help="Delete existing rows before import")
    args = p.parse_args()

    run(path=pathlib.Path(args.path), do_cleanup=bool(args.cleanup))


if __name__ == "__main__":
    main()
