from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable

from leapboard.engine.errors import NotFoundError
from leapboard.engine.types import (
    AllScope,
    ContentItem,
    DistrictScope,
    Organization,
    Participant,
    Region,
    SchoolScope,
    StateScope,
    as_utc,
)

log = logging.getLogger(__name__)

STUDENT_AUDIENCE = "students"


def is_expired(content: ContentItem, now: datetime) -> bool:
    if content.expiry is None:
        return False
    expires_at = content.expiry.expires_at(content.created_at)
    return expires_at is not None and as_utc(now) > expires_at


def belongs_to(participant: Participant, school: Organization) -> bool:
    """Lenient school membership, matching how legacy student rows recorded their school."""
    code = (school.school_code or "").strip()
    name = (school.name or "").strip()
    if code and (participant.school_code == code or participant.school == code):
        return True
    if name and name in (participant.school_code, participant.school, participant.school_name):
        return True
    return False


class TargetingResolver:
    def __init__(self, regions: Iterable[Region], schools: Iterable[Organization]):
        self._regions = {r.id: r for r in regions}
        self._schools = list(schools)

    def region(self, state_id: str) -> Region:
        region = self._regions.get(state_id)
        if region is None:
            raise NotFoundError("region", state_id)
        return region

    def school_of(self, participant: Participant) -> Organization | None:
        if participant.school_code:
            for school in self._schools:
                if school.school_code and school.school_code == participant.school_code:
                    return school
        for school in self._schools:
            if belongs_to(participant, school):
                return school
        return None

    def is_visible(
        self,
        content: ContentItem,
        participant: Participant,
        now: datetime,
        audience: str = STUDENT_AUDIENCE,
    ) -> bool:
        if not content.is_active:
            return False
        # Webinars and workshops may be aimed at parents; quizzes carry no audience.
        if content.audience and content.audience != audience:
            return False
        if content.scope is None or content.expiry is None:
            log.warning("targeting: content_id=%s has inconsistent targeting or expiry, hidden", content.id)
            return False
        if is_expired(content, now):
            return False
        return self._in_scope(content.scope, participant)

    def _in_scope(self, scope, participant: Participant) -> bool:
        if isinstance(scope, AllScope):
            return True

        if not participant.state:
            return False
        region = self.region(scope.state_id)
        if participant.state != region.state_name:
            return False
        if isinstance(scope, StateScope):
            return True

        if not participant.district_code or participant.district_code != scope.district_code:
            return False
        if isinstance(scope, DistrictScope):
            return True

        if isinstance(scope, SchoolScope):
            if participant.school_code and participant.school_code == scope.school_id:
                return True
            school = self.school_of(participant)
            return school is not None and school.id == scope.school_id

        return False

    def visible_content(
        self,
        items: Iterable[ContentItem],
        participant: Participant,
        now: datetime,
        audience: str = STUDENT_AUDIENCE,
    ) -> list[ContentItem]:
        """Everything the participant may see, newest first.

        A listing never fails on one bad row: an item whose region has been
        deleted is hidden and logged, like any other inconsistent item.
        """
        seen: set[str] = set()
        visible: list[ContentItem] = []
        for item in items:
            if item.id in seen:
                continue
            seen.add(item.id)
            try:
                shown = self.is_visible(item, participant, now, audience)
            except NotFoundError as e:
                log.warning("targeting: content_id=%s references missing %s=%s, hidden", item.id, e.kind, e.ref_id)
                continue
            if shown:
                visible.append(item)

        # Newest first; id keeps equal timestamps in a fixed order.
        visible.sort(key=lambda c: c.id)
        visible.sort(key=lambda c: as_utc(c.scheduled_at or c.created_at), reverse=True)
        return visible
