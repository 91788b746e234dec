from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from leapboard.core.security import Principal, get_current_principal
from leapboard.db.session import get_db
from leapboard.models.content import ContentKind
from leapboard.schemas.content import VisibleContentResponse
from leapboard.services.content import ContentService, content_to_dict

router = APIRouter(prefix="/content", tags=["content"])


@router.get("/visible", response_model=VisibleContentResponse)
def visible_content(
    kind: str | None = Query(default=None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    if kind is not None:
        kind = kind.strip().lower() or None
        if kind is not None and kind not in {k.value for k in ContentKind}:
            raise HTTPException(status_code=400, detail={"error_code": "invalid_kind", "error_message": f"unknown kind: {kind}"})

    service = ContentService(db)
    participant = service.resolve_participant(principal.subject, principal.email)
    items = service.resolve_visible_content(participant, datetime.now(timezone.utc), kind=kind)
    return {"participant_id": participant.id, "items": [content_to_dict(i) for i in items]}
