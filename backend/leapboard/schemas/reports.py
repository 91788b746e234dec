from __future__ import annotations

from pydantic import BaseModel


class SubjectRow(BaseModel):
    subject: str
    questions_answered: int
    correct_answers: int
    total_score: int
    percentage: float
    medal: str
    students_participated: int
    average_score_per_student: int


class PerformerRow(BaseModel):
    rank: int
    participant_id: str
    name: str
    student_id: str
    score: int
    questions_answered: int
    correct_answers: int


class OrganizationOut(BaseModel):
    id: str
    name: str
    school_code: str
    district_code: str
    district_name: str
    state: str


class OrganizationReport(BaseModel):
    organization: OrganizationOut
    month: str
    window_start: str
    window_end: str
    total_participants: int
    active_participants: int
    total_questions: int
    correct_answers: int
    total_score: int
    average_score: int
    streak_days: int
    unresolved_records: int
    subjects: list[SubjectRow]
    top_performers: list[PerformerRow]


class ComparisonLeaders(BaseModel):
    average_score: str | None = None
    active_participants: str | None = None
    total_questions: str | None = None


class OrganizationComparison(BaseModel):
    month: str
    organizations: list[OrganizationReport]
    leaders: ComparisonLeaders
