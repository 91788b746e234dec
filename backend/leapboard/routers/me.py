from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from leapboard.core.config import settings
from leapboard.core.security import Principal, get_current_principal
from leapboard.db.session import get_db
from leapboard.schemas.progress import ProgressResponse
from leapboard.services.content import ContentService
from leapboard.services.progress import ProgressService

router = APIRouter(prefix="/me", tags=["me"])


@router.get("/progress", response_model=ProgressResponse)
def my_progress(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    participant = ContentService(db).resolve_participant(principal.subject, principal.email)
    today = datetime.now(ZoneInfo(settings.report_timezone)).date()
    return ProgressService(db).participant_progress(participant, today)
