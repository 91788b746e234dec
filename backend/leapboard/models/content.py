import enum
import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from leapboard.db.base import Base


class ContentKind(str, enum.Enum):
    quiz = "quiz"
    webinar = "webinar"
    workshop = "workshop"


class TargetType(str, enum.Enum):
    all = "all"
    state = "state"
    district = "district"
    school = "school"


class ExpiryType(str, enum.Enum):
    never = "never"
    hours = "hours"
    days = "days"


class TargetedContent(Base):
    __tablename__ = "content_items"

    id: Mapped[str] = mapped_column(String(128), primary_key=True, default=lambda: uuid.uuid4().hex)
    kind: Mapped[ContentKind] = mapped_column(Enum(ContentKind), index=True)
    title: Mapped[str] = mapped_column(String(300), default="")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Webinars and workshops only: "students" or "parents".
    audience: Mapped[str | None] = mapped_column(String(32), nullable=True)

    # Stored as plain strings so a malformed row can still be read and rejected by the resolver.
    target_type: Mapped[str] = mapped_column(String(32), default=TargetType.all.value, index=True)
    target_state_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    target_district_code: Mapped[str | None] = mapped_column(String(64), nullable=True)
    target_school_id: Mapped[str | None] = mapped_column(String(128), nullable=True)

    expiry_type: Mapped[str] = mapped_column(String(16), default=ExpiryType.never.value)
    expiry_value: Mapped[int | None] = mapped_column(Integer, nullable=True)

    scheduled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
