from __future__ import annotations

from pydantic import BaseModel


class ContentItemOut(BaseModel):
    id: str
    kind: str
    title: str
    audience: str | None = None
    target_type: str | None = None
    expiry_type: str | None = None
    expiry_value: int | None = None
    created_at: str
    scheduled_at: str | None = None


class VisibleContentResponse(BaseModel):
    participant_id: str
    items: list[ContentItemOut]
