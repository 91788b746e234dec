from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from leapboard.core.config import synthetic_domains
from leapboard.engine.linking import ParticipantIndex, resolve_subject
from leapboard.engine.targeting import TargetingResolver
from leapboard.engine.types import ContentItem, Participant
from leapboard.services.store import DocumentStore

log = logging.getLogger(__name__)


def content_to_dict(item: ContentItem) -> dict:
    return {
        "id": item.id,
        "kind": item.kind,
        "title": item.title,
        "audience": item.audience,
        "target_type": item.scope.kind if item.scope is not None else None,
        "expiry_type": item.expiry.type if item.expiry is not None else None,
        "expiry_value": item.expiry.value if item.expiry is not None else None,
        "created_at": item.created_at.isoformat(),
        "scheduled_at": item.scheduled_at.isoformat() if item.scheduled_at else None,
    }


class ContentService:
    def __init__(self, db: Session):
        self.store = DocumentStore(db)

    def resolve_participant(self, subject: str, email: str | None = None) -> Participant:
        """Find the registry row behind an authenticated caller.

        Uses the same strategy chain as activity records. A caller with no
        registry row gets a bare participant, which only global content matches.
        """
        index = ParticipantIndex.build(self.store.participants(), synthetic_domains=synthetic_domains())
        participant, matched_by = resolve_subject(index, subject, email)
        if participant is None:
            log.info("resolve_participant: unknown caller subject=%s", subject)
            return Participant(id=subject, email=email)
        log.debug("resolve_participant: subject=%s participant_id=%s matched_by=%s", subject, participant.id, matched_by)
        return participant

    def resolve_visible_content(
        self,
        participant: Participant,
        now: datetime,
        kind: str | None = None,
    ) -> list[ContentItem]:
        # Read every input before evaluating anything.
        items = self.store.content_items(kind)
        resolver = TargetingResolver(self.store.regions(), self.store.schools())
        visible = resolver.visible_content(items, participant, now)
        log.info(
            "resolve_visible_content: participant_id=%s kind=%s candidates=%s visible=%s",
            participant.id,
            kind,
            len(items),
            len(visible),
        )
        return visible
