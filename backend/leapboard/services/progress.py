from __future__ import annotations

import logging
from datetime import date

from sqlalchemy.orm import Session

from leapboard.core.config import settings, synthetic_domains
from leapboard.engine.aggregation import aggregate_by_subject, classify_medal, current_streak
from leapboard.engine.linking import ParticipantIndex, link
from leapboard.engine.types import Participant
from leapboard.services.store import DocumentStore

log = logging.getLogger(__name__)


class ProgressService:
    def __init__(self, db: Session):
        self.store = DocumentStore(db)

    def participant_progress(self, participant: Participant, today: date) -> dict:
        """Lifetime practice totals for one participant.

        Records are linked with the full strategy chain, so rows written under
        an email or a registry id still count toward the right person.
        """
        index = ParticipantIndex.build(self.store.participants(), synthetic_domains=synthetic_domains())
        records = self.store.practice_records()
        mine = [r for r in link(records, index) if r.participant is not None and r.participant.id == participant.id]

        total_points = sum(r.record.awarded_points for r in mine)
        answered = len(mine)
        correct = sum(1 for r in mine if r.record.is_correct)

        result = {
            "participant_id": participant.id,
            "name": participant.name,
            "total_points": total_points,
            "questions_answered": answered,
            "correct_answers": correct,
            "accuracy": round(correct / answered * 100, 1) if answered else 0.0,
            "current_streak": current_streak(mine, today, settings.report_timezone),
            "medal": classify_medal(total_points).value,
            "subjects": [s.as_dict() for s in aggregate_by_subject(mine)],
        }
        log.info(
            "participant_progress: participant_id=%s answered=%s points=%s streak=%s",
            participant.id,
            answered,
            total_points,
            result["current_streak"],
        )
        return result
