from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from leapboard.core.config import settings, synthetic_domains
from leapboard.engine.linking import ParticipantIndex, link
from leapboard.engine.ranking import rank
from leapboard.engine.targeting import TargetingResolver
from leapboard.engine.types import LinkedRecord, Organization, Participant
from leapboard.services.store import DocumentStore

log = logging.getLogger(__name__)


class _AttemptRow:
    """Rankable view over a linked quiz attempt."""

    __slots__ = ("linked",)

    def __init__(self, linked: LinkedRecord):
        self.linked = linked

    @property
    def score(self) -> int:
        return int(self.linked.record.score or 0)

    @property
    def completion_time_seconds(self) -> int:
        return int(self.linked.record.completion_time_seconds or 0)


def _location(participant: Participant, school: Optional[Organization]) -> Dict[str, Any]:
    return {
        "school_name": participant.school_name or participant.school or (school.name if school else None),
        "district_name": participant.district_name or (school.district_name if school else None) or None,
        "district_code": participant.district_code or (school.district_code if school else None) or None,
        "state": participant.state or (school.state if school else None) or None,
    }


class LeaderboardService:
    def __init__(self, db: Session):
        self.store = DocumentStore(db)

    def build_leaderboard(self, content_id: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Ranked rows for one quiz.

        Unresolved attempts never appear. A participant with several attempts
        keeps only the best-ranked one, and ``limit`` applies after ranking.
        """
        content = self.store.get_content(content_id)

        attempts = self.store.quiz_attempts(content.id)
        participants = self.store.participants()
        schools = self.store.schools()

        index = ParticipantIndex.build(participants, synthetic_domains=synthetic_domains())
        linked = [r for r in link(attempts, index) if r.participant is not None]

        best: List[_AttemptRow] = []
        seen: set[str] = set()
        for _, row in rank(_AttemptRow(r) for r in linked):
            pid = row.linked.participant.id
            if pid in seen:
                continue
            seen.add(pid)
            best.append(row)

        if limit is not None:
            best = best[: max(0, min(int(limit), settings.leaderboard_max_limit))]

        resolver = TargetingResolver([], schools)
        rows: List[Dict[str, Any]] = []
        for position, row in enumerate(best, start=1):
            rec = row.linked.record
            p = row.linked.participant
            rows.append(
                {
                    "rank": position,
                    "participant_id": p.id,
                    # The name written on the attempt is what the student saw when submitting.
                    "name": rec.subject_name or p.name or "Unknown Student",
                    "student_id": p.student_id,
                    "score": int(rec.score or 0),
                    "percentage": round(rec.score or 0),
                    "correct_count": int(rec.correct_count or 0),
                    "total_count": int(rec.total_count or 0),
                    "completion_time_seconds": int(rec.completion_time_seconds or 0),
                    "submitted_at": rec.submitted_at.isoformat(),
                    **_location(p, resolver.school_of(p)),
                }
            )

        log.info(
            "build_leaderboard: content_id=%s attempts=%s linked=%s rows=%s",
            content.id,
            len(attempts),
            len(linked),
            len(rows),
        )
        return rows
