from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from leapboard.core.config import settings
from leapboard.core.security import Principal, get_current_principal
from leapboard.db.session import get_db
from leapboard.schemas.leaderboard import LeaderboardResponse
from leapboard.services.leaderboards import LeaderboardService

router = APIRouter(prefix="/leaderboards", tags=["leaderboards"])


@router.get("/{content_id}", response_model=LeaderboardResponse)
def leaderboard(
    content_id: str,
    limit: int | None = Query(default=None, ge=1, le=settings.leaderboard_max_limit),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    rows = LeaderboardService(db).build_leaderboard(content_id, limit=limit)
    return {"content_id": content_id, "rows": rows}
