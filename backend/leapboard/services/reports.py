from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from leapboard.core.config import settings, synthetic_domains
from leapboard.engine.aggregation import MonthWindow, OrganizationSummary, summarize_organization
from leapboard.engine.linking import ParticipantIndex, link
from leapboard.engine.targeting import belongs_to
from leapboard.engine.types import LinkedRecord, Organization, Participant
from leapboard.services.store import DocumentStore

log = logging.getLogger(__name__)

# Figures the back office puts side by side when comparing schools.
COMPARED_METRICS = ("average_score", "active_participants", "total_questions")


def summary_to_dict(summary: OrganizationSummary) -> Dict[str, Any]:
    org = summary.organization
    return {
        "organization": {
            "id": org.id,
            "name": org.name,
            "school_code": org.school_code,
            "district_code": org.district_code,
            "district_name": org.district_name,
            "state": org.state,
        },
        "month": summary.window.label,
        "window_start": summary.window.start.isoformat(),
        "window_end": summary.window.end.isoformat(),
        "total_participants": summary.total_participants,
        "active_participants": summary.active_participants,
        "total_questions": summary.total_questions,
        "correct_answers": summary.correct_answers,
        "total_score": summary.total_score,
        "average_score": summary.average_score,
        "streak_days": summary.streak_days,
        "unresolved_records": summary.unresolved_records,
        "subjects": [s.as_dict() for s in summary.subjects],
        "top_performers": [{"rank": position, **totals.as_dict()} for position, totals in summary.top_performers],
    }


def leader(reports: Sequence[Dict[str, Any]], metric: str) -> Optional[str]:
    """Id of the school strictly ahead on ``metric``; None when the top is shared."""
    if not reports:
        return None
    best = max(r[metric] for r in reports)
    top = [r["organization"]["id"] for r in reports if r[metric] == best]
    return top[0] if len(top) == 1 else None


class ReportService:
    def __init__(self, db: Session):
        self.store = DocumentStore(db)

    def _inputs(self, window: MonthWindow) -> tuple[List[Participant], List[LinkedRecord]]:
        participants = self.store.participants()
        records = self.store.practice_records(window)
        index = ParticipantIndex.build(participants, synthetic_domains=synthetic_domains())
        return participants, link(records, index)

    def _summarize(
        self,
        school: Organization,
        participants: Sequence[Participant],
        linked: Sequence[LinkedRecord],
        window: MonthWindow,
    ) -> Dict[str, Any]:
        members = [p for p in participants if belongs_to(p, school)]
        summary = summarize_organization(school, members, linked, window, top_n=settings.top_performers_limit)
        return summary_to_dict(summary)

    def build_organization_report(self, organization_id: str, month_window: MonthWindow) -> Dict[str, Any]:
        school = self.store.get_school(organization_id)
        participants, linked = self._inputs(month_window)
        return self._summarize(school, participants, linked, month_window)

    def compare_organizations(self, ids: Sequence[str], month_window: MonthWindow) -> Dict[str, Any]:
        """Side-by-side reports for several schools over the same month.

        Every school is looked up before any record is read, so one unknown
        id fails the whole comparison.
        """
        unique_ids = list(dict.fromkeys(i for i in ids if i))
        if not unique_ids:
            raise ValueError("at least one organization id is required")

        schools = [self.store.get_school(i) for i in unique_ids]
        participants, linked = self._inputs(month_window)
        reports = [self._summarize(s, participants, linked, month_window) for s in schools]

        leaders = {metric: leader(reports, metric) for metric in COMPARED_METRICS}

        log.info("compare_organizations: ids=%s month=%s", ",".join(unique_ids), month_window.label)
        return {"month": month_window.label, "organizations": reports, "leaders": leaders}
