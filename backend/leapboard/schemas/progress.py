from __future__ import annotations

from pydantic import BaseModel

from leapboard.schemas.reports import SubjectRow


class ProgressResponse(BaseModel):
    participant_id: str
    name: str
    total_points: int
    questions_answered: int
    correct_answers: int
    accuracy: float
    current_streak: int
    medal: str
    subjects: list[SubjectRow]
