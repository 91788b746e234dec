from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable
from zoneinfo import ZoneInfo

from leapboard.engine.ranking import rank
from leapboard.engine.types import LinkedRecord, Medal, Organization, Participant, as_utc

log = logging.getLogger(__name__)


# Absolute cumulative-score cutoffs, inclusive lower bounds.
MEDAL_THRESHOLDS: tuple[tuple[int, Medal], ...] = (
    (4000, Medal.platinum),
    (3000, Medal.gold),
    (2000, Medal.silver),
    (1000, Medal.bronze),
)


def classify_medal(total_score: int) -> Medal:
    for threshold, medal in MEDAL_THRESHOLDS:
        if total_score >= threshold:
            return medal
    return Medal.none


@dataclass(frozen=True)
class MonthWindow:
    start: datetime
    end: datetime
    label: str

    def contains(self, ts: datetime) -> bool:
        return self.start <= as_utc(ts) < self.end


_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


def month_window(year: int, month: int, tz_name: str = "UTC") -> MonthWindow:
    if not 1 <= int(month) <= 12:
        raise ValueError(f"invalid month: {month}")
    tz = ZoneInfo(tz_name)
    start = datetime(int(year), int(month), 1, tzinfo=tz)
    if int(month) == 12:
        end = datetime(int(year) + 1, 1, 1, tzinfo=tz)
    else:
        end = datetime(int(year), int(month) + 1, 1, tzinfo=tz)
    return MonthWindow(start=as_utc(start), end=as_utc(end), label=f"{int(year):04d}-{int(month):02d}")


def parse_month(value: str, tz_name: str = "UTC") -> MonthWindow:
    m = _MONTH_RE.match((value or "").strip())
    if not m:
        raise ValueError(f"invalid month: {value!r}, expected YYYY-MM")
    return month_window(int(m.group(1)), int(m.group(2)), tz_name)


def within(records: Iterable[LinkedRecord], window: MonthWindow) -> list[LinkedRecord]:
    return [r for r in records if window.contains(r.record.submitted_at)]


@dataclass
class SubjectSummary:
    subject: str
    questions_answered: int = 0
    correct_answers: int = 0
    total_score: int = 0
    participant_ids: set[str] = field(default_factory=set)

    @property
    def percentage(self) -> float:
        if self.questions_answered <= 0:
            return 0.0
        return round(self.correct_answers / self.questions_answered * 100, 1)

    @property
    def medal(self) -> Medal:
        return classify_medal(self.total_score)

    @property
    def students_participated(self) -> int:
        return len(self.participant_ids)

    @property
    def average_score_per_student(self) -> int:
        if not self.participant_ids:
            return 0
        return round(self.total_score / len(self.participant_ids))

    def as_dict(self) -> dict[str, object]:
        return {
            "subject": self.subject,
            "questions_answered": self.questions_answered,
            "correct_answers": self.correct_answers,
            "total_score": self.total_score,
            "percentage": self.percentage,
            "medal": self.medal.value,
            "students_participated": self.students_participated,
            "average_score_per_student": self.average_score_per_student,
        }


def aggregate_by_subject(records: Iterable[LinkedRecord]) -> list[SubjectSummary]:
    """Per-subject totals. Unresolved records count here like any other."""
    by_subject: dict[str, SubjectSummary] = {}
    for linked in records:
        rec = linked.record
        summary = by_subject.setdefault(rec.subject_label, SubjectSummary(subject=rec.subject_label))
        summary.questions_answered += 1
        summary.total_score += rec.awarded_points
        if rec.is_correct:
            summary.correct_answers += 1
        if linked.participant is not None:
            summary.participant_ids.add(linked.participant.id)

    subjects = sorted(by_subject.values(), key=lambda s: s.subject)
    subjects.sort(key=lambda s: s.percentage, reverse=True)
    return subjects


@dataclass
class ParticipantTotals:
    participant: Participant
    score: int = 0
    questions_answered: int = 0
    correct_answers: int = 0
    completion_time_seconds: int = 0

    def as_dict(self) -> dict[str, object]:
        p = self.participant
        return {
            "participant_id": p.id,
            "name": p.name or "Unknown Student",
            "student_id": p.student_id or p.id[:8].upper(),
            "score": self.score,
            "questions_answered": self.questions_answered,
            "correct_answers": self.correct_answers,
        }


def aggregate_by_participant(records: Iterable[LinkedRecord]) -> list[ParticipantTotals]:
    """Per-participant sums, in first-appearance order. Unresolved records are skipped."""
    totals: dict[str, ParticipantTotals] = {}
    for linked in records:
        if linked.participant is None:
            continue
        rec = linked.record
        row = totals.setdefault(linked.participant.id, ParticipantTotals(participant=linked.participant))
        row.score += rec.awarded_points
        row.questions_answered += 1
        row.completion_time_seconds += int(rec.completion_time_seconds or 0)
        if rec.is_correct:
            row.correct_answers += 1
    return list(totals.values())


def top_performers(records: Iterable[LinkedRecord], limit: int = 5) -> list[tuple[int, ParticipantTotals]]:
    return rank(aggregate_by_participant(records))[: max(0, int(limit))]


class GroupBy(str, enum.Enum):
    subject = "subject"
    participant = "participant"


def aggregate(
    records: Iterable[LinkedRecord],
    group_by: GroupBy,
    window: MonthWindow | None = None,
) -> list[SubjectSummary] | list[ParticipantTotals]:
    scoped = within(records, window) if window is not None else list(records)
    if group_by == GroupBy.subject:
        return aggregate_by_subject(scoped)
    return aggregate_by_participant(scoped)


@dataclass
class OrganizationSummary:
    organization: Organization
    window: MonthWindow
    total_participants: int
    active_participants: int
    total_questions: int
    correct_answers: int
    total_score: int
    unresolved_records: int
    subjects: list[SubjectSummary]
    top_performers: list[tuple[int, ParticipantTotals]]

    @property
    def average_score(self) -> int:
        if self.active_participants <= 0:
            return 0
        return round(self.total_score / self.active_participants)

    @property
    def streak_days(self) -> int:
        return self.correct_answers


def _in_organization(linked: LinkedRecord, organization: Organization, member_ids: set[str]) -> bool:
    if linked.participant is not None:
        return linked.participant.id in member_ids
    hint = (linked.record.school_code or "").strip()
    return bool(hint) and hint == organization.school_code


def summarize_organization(
    organization: Organization,
    members: Iterable[Participant],
    records: Iterable[LinkedRecord],
    window: MonthWindow,
    *,
    top_n: int = 5,
) -> OrganizationSummary:
    members = list(members)
    member_ids = {m.id for m in members}
    scoped = [r for r in within(records, window) if _in_organization(r, organization, member_ids)]

    active_ids = {r.participant.id for r in scoped if r.participant is not None}
    unresolved = sum(1 for r in scoped if r.participant is None)

    summary = OrganizationSummary(
        organization=organization,
        window=window,
        total_participants=len(members),
        active_participants=len(active_ids),
        total_questions=len(scoped),
        correct_answers=sum(1 for r in scoped if r.record.is_correct),
        total_score=sum(r.record.awarded_points for r in scoped),
        unresolved_records=unresolved,
        subjects=aggregate_by_subject(scoped),
        top_performers=top_performers(scoped, top_n),
    )
    log.info(
        "summarize_organization: school_id=%s month=%s members=%s active=%s records=%s unresolved=%s",
        organization.id,
        window.label,
        summary.total_participants,
        summary.active_participants,
        summary.total_questions,
        unresolved,
    )
    return summary


def current_streak(records: Iterable[LinkedRecord], today: date, tz_name: str = "UTC") -> int:
    """Consecutive correctly answered days ending today.

    An unanswered *today* does not break the streak (the day is not over);
    an incorrect answer or any earlier missing day does.
    """
    tz = ZoneInfo(tz_name)
    by_day: dict[date, bool] = {}
    for linked in records:
        day = as_utc(linked.record.submitted_at).astimezone(tz).date()
        by_day[day] = by_day.get(day, False) or bool(linked.record.is_correct)

    streak = 0
    day = today
    while True:
        if day in by_day:
            if not by_day[day]:
                break
            streak += 1
        elif day != today:
            break
        day -= timedelta(days=1)
    return streak
