import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from leapboard.db.base import Base


class QuizAttempt(Base):
    __tablename__ = "quiz_attempts"

    id: Mapped[str] = mapped_column(String(128), primary_key=True, default=lambda: uuid.uuid4().hex)
    quiz_id: Mapped[str] = mapped_column(String(128), ForeignKey("content_items.id"), index=True)

    # Whatever key the submitting client wrote: usually the auth uid, sometimes the registry id.
    subject_key: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    subject_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    subject_name: Mapped[str | None] = mapped_column(String(200), nullable=True)

    score: Mapped[int] = mapped_column(Integer, default=0)
    correct_count: Mapped[int] = mapped_column(Integer, default=0)
    total_count: Mapped[int] = mapped_column(Integer, default=0)
    completion_time_seconds: Mapped[int] = mapped_column(Integer, default=0)

    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, index=True)


class PracticeRecord(Base):
    __tablename__ = "practice_records"

    id: Mapped[str] = mapped_column(String(128), primary_key=True, default=lambda: uuid.uuid4().hex)

    subject_key: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    subject_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    school_code: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)

    subject: Mapped[str | None] = mapped_column(String(200), nullable=True)
    is_correct: Mapped[bool] = mapped_column(Boolean, default=False)
    # Older rows have no points; readers fall back to the fixed 200/100 scheme.
    points: Mapped[int | None] = mapped_column(Integer, nullable=True)
    time_taken_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)

    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, index=True)
