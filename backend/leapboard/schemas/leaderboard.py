from __future__ import annotations

from pydantic import BaseModel


class LeaderboardRow(BaseModel):
    rank: int
    participant_id: str
    name: str
    student_id: str | None = None
    score: int
    percentage: int
    correct_count: int
    total_count: int
    completion_time_seconds: int
    submitted_at: str
    school_name: str | None = None
    district_name: str | None = None
    district_code: str | None = None
    state: str | None = None


class LeaderboardResponse(BaseModel):
    content_id: str
    rows: list[LeaderboardRow]
