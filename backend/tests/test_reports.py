from datetime import datetime, timezone

import pytest

from leapboard.engine.aggregation import month_window
from leapboard.engine.errors import NotFoundError
from leapboard.models.activity import PracticeRecord
from leapboard.services.reports import ReportService


MARCH = month_window(2025, 3)


def _practice(db, *, key=None, email=None, school_code=None, subject="Math", correct=True, points=None, day=10, month=3):
    db.add(
        PracticeRecord(
            subject_key=key,
            subject_email=email,
            school_code=school_code,
            subject=subject,
            is_correct=correct,
            points=points,
            time_taken_seconds=20,
            submitted_at=datetime(2025, month, day, 9, 0, tzinfo=timezone.utc),
        )
    )


def test_math_scenario_report(db, world):
    _practice(db, key=world.asha.auth_id, correct=True, day=3)
    _practice(db, key=world.asha.auth_id, correct=True, day=4)
    _practice(db, key=world.asha.auth_id, correct=False, day=5)
    # Outside the window.
    _practice(db, key=world.ravi.auth_id, correct=True, month=4, day=1)
    db.commit()

    report = ReportService(db).build_organization_report(world.school_id, MARCH)

    assert report["organization"]["id"] == world.school_id
    assert report["month"] == "2025-03"
    # Asha, Ravi (matched on the legacy school name) and Meena.
    assert report["total_participants"] == 3
    assert report["active_participants"] == 1
    assert report["subjects"] == [
        {
            "subject": "Math",
            "questions_answered": 3,
            "correct_answers": 2,
            "total_score": 500,
            "percentage": 66.7,
            "medal": "none",
            "students_participated": 1,
            "average_score_per_student": 500,
        }
    ]
    assert report["top_performers"][0]["name"] == "Asha"
    assert report["top_performers"][0]["rank"] == 1


def test_report_counts_unresolved_records_with_school_hint(db, world):
    _practice(db, key=world.asha.auth_id, correct=True)
    _practice(db, key="uid-never-registered", school_code=world.school_code, correct=True, points=300)
    _practice(db, key="uid-never-registered", school_code=world.other_school_code, correct=True)
    db.commit()

    report = ReportService(db).build_organization_report(world.school_id, MARCH)

    assert report["total_questions"] == 2
    assert report["total_score"] == 500
    assert report["unresolved_records"] == 1
    assert report["active_participants"] == 1
    assert [p["participant_id"] for p in report["top_performers"]] == [world.asha.id]


def test_report_links_synthetic_email_records(db, world):
    _practice(db, email=f"{world.meena.student_id.lower()}@mindleap.edu", subject="Science", correct=True)
    db.commit()

    report = ReportService(db).build_organization_report(world.school_id, MARCH)

    assert report["active_participants"] == 1
    assert report["top_performers"][0]["participant_id"] == world.meena.id
    assert report["top_performers"][0]["student_id"] == world.meena.student_id


def test_report_is_idempotent(db, world):
    _practice(db, key=world.asha.auth_id, correct=True)
    _practice(db, key=world.ravi.auth_id, correct=False, subject="English")
    db.commit()

    service = ReportService(db)
    assert service.build_organization_report(world.school_id, MARCH) == service.build_organization_report(
        world.school_id, MARCH
    )


def test_report_unknown_organization_raises(db):
    with pytest.raises(NotFoundError):
        ReportService(db).build_organization_report("sch-missing", MARCH)


def test_compare_organizations_side_by_side(db, world):
    _practice(db, key=world.asha.auth_id, correct=True)
    _practice(db, key=world.hari.auth_id, correct=False)
    db.commit()

    result = ReportService(db).compare_organizations([world.school_id, world.other_school_id, world.school_id], MARCH)

    assert result["month"] == "2025-03"
    assert [r["organization"]["id"] for r in result["organizations"]] == [world.school_id, world.other_school_id]
    assert [r["total_score"] for r in result["organizations"]] == [200, 100]
    assert result["leaders"] == {
        "average_score": world.school_id,
        "active_participants": None,
        "total_questions": None,
    }


def test_comparison_leaders_follow_each_figure(db, world):
    _practice(db, key=world.asha.auth_id, correct=True)
    _practice(db, key=world.ravi.auth_id, correct=True, day=11)
    for day in (3, 4, 5):
        _practice(db, key=world.hari.auth_id, correct=False, day=day)
    db.commit()

    result = ReportService(db).compare_organizations([world.school_id, world.other_school_id], MARCH)

    # 400 over two active students against 300 over one.
    assert result["leaders"]["average_score"] == world.other_school_id
    assert result["leaders"]["active_participants"] == world.school_id
    assert result["leaders"]["total_questions"] == world.other_school_id


def test_compare_organizations_fails_on_any_unknown_id(db, world):
    with pytest.raises(NotFoundError):
        ReportService(db).compare_organizations([world.school_id, "sch-missing"], MARCH)


def test_compare_organizations_requires_ids(db):
    with pytest.raises(ValueError):
        ReportService(db).compare_organizations([], MARCH)
