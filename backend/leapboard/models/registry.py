import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from leapboard.db.base import Base


def _new_id() -> str:
    return uuid.uuid4().hex


class State(Base):
    __tablename__ = "states"

    id: Mapped[str] = mapped_column(String(128), primary_key=True, default=_new_id)
    state_name: Mapped[str] = mapped_column(String(200), unique=True, index=True)
    state_code: Mapped[str] = mapped_column(String(16), default="")

    # [{"districtName": ..., "districtCode": ...}] as written by the back office.
    districts: Mapped[list] = mapped_column(JSON, default=list)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)


class School(Base):
    __tablename__ = "schools"

    id: Mapped[str] = mapped_column(String(128), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(300), index=True)
    school_code: Mapped[str] = mapped_column(String(64), index=True, default="")
    district_code: Mapped[str] = mapped_column(String(64), default="")
    district_name: Mapped[str] = mapped_column(String(200), default="")
    state: Mapped[str] = mapped_column(String(200), default="")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)


class Student(Base):
    __tablename__ = "students"

    id: Mapped[str] = mapped_column(String(128), primary_key=True, default=_new_id)
    auth_id: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True, index=True)
    student_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)

    name: Mapped[str] = mapped_column(String(200), default="")

    school_code: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    school: Mapped[str | None] = mapped_column(String(300), nullable=True)
    school_name: Mapped[str | None] = mapped_column(String(300), nullable=True)
    district_code: Mapped[str | None] = mapped_column(String(64), nullable=True)
    district_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    state: Mapped[str | None] = mapped_column(String(200), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
