from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from leapboard.core.config import settings
from leapboard.core.rate_limit import report_quota
from leapboard.core.security import Principal, require_admin
from leapboard.db.session import get_db
from leapboard.engine.aggregation import MonthWindow, parse_month
from leapboard.schemas.reports import OrganizationComparison, OrganizationReport
from leapboard.services.reports import ReportService

router = APIRouter(prefix="/admin/reports", tags=["reports"])


def _month(value: str) -> MonthWindow:
    try:
        return parse_month(value, settings.report_timezone)
    except ValueError as e:
        raise HTTPException(status_code=400, detail={"error_code": "invalid_month", "error_message": str(e)}) from e


@router.get("/organizations/{organization_id}", response_model=OrganizationReport)
def organization_report(
    organization_id: str,
    month: str = Query(...),
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
    _: object = report_quota(),
):
    window = _month(month)
    return ReportService(db).build_organization_report(organization_id, window)


@router.get("/organizations", response_model=OrganizationComparison)
def compare_organizations(
    ids: str = Query(...),
    month: str = Query(...),
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
    _: object = report_quota(),
):
    window = _month(month)
    id_list = [i.strip() for i in str(ids or "").split(",") if i.strip()]
    if not id_list:
        raise HTTPException(status_code=400, detail={"error_code": "invalid_ids", "error_message": "ids must not be empty"})
    return ReportService(db).compare_organizations(id_list, window)
