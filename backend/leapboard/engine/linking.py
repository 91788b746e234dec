"""Record linkage: which participant does an activity record belong to.

Historical write paths stored different keys on activity records (auth uid,
registry id, or nothing but an email), so resolution walks an ordered list of
strategies and stops at the first hit. The order is a strict priority: an
auth-id match always beats an email match, even when both would succeed and
point at different participants.

A record no strategy can place is *unresolved*. That is an expected outcome
for partially migrated data, not an error, and nothing here raises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Mapping

from leapboard.engine.types import ActivityRecord, LinkedRecord, Participant

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParticipantIndex:
    by_auth_id: Mapping[str, Participant]
    by_id: Mapping[str, Participant]
    by_email: Mapping[str, Participant]
    synthetic_domains: tuple[str, ...] = ("mindleap.edu",)

    @classmethod
    def build(
        cls,
        participants: Iterable[Participant],
        *,
        synthetic_domains: tuple[str, ...] = ("mindleap.edu",),
    ) -> "ParticipantIndex":
        by_auth_id: dict[str, Participant] = {}
        by_id: dict[str, Participant] = {}
        by_email: dict[str, Participant] = {}
        # First registry entry wins on a duplicate key.
        for p in participants:
            if p.auth_id:
                by_auth_id.setdefault(p.auth_id, p)
            by_id.setdefault(p.id, p)
            if p.student_id:
                by_id.setdefault(p.student_id.upper(), p)
            if p.email:
                by_email.setdefault(p.email, p)
        return cls(
            by_auth_id=by_auth_id,
            by_id=by_id,
            by_email=by_email,
            synthetic_domains=tuple(d.lower() for d in synthetic_domains),
        )


Strategy = Callable[[ParticipantIndex, str | None, str | None], Participant | None]


def _split_email(email: str | None) -> tuple[str, str]:
    if not email or "@" not in email:
        return "", ""
    local, _, domain = email.rpartition("@")
    return local.strip(), domain.strip().lower()


def match_auth_id(index: ParticipantIndex, key: str | None, email: str | None) -> Participant | None:
    return index.by_auth_id.get(key) if key else None


def match_email(index: ParticipantIndex, key: str | None, email: str | None) -> Participant | None:
    return index.by_email.get(email) if email else None


def match_derived_id(index: ParticipantIndex, key: str | None, email: str | None) -> Participant | None:
    # AP2503222002@mindleap.edu -> AP2503222002
    local, domain = _split_email(email)
    if not local or domain not in index.synthetic_domains:
        return None
    return index.by_id.get(local.upper())


def match_storage_id(index: ParticipantIndex, key: str | None, email: str | None) -> Participant | None:
    return index.by_id.get(key) if key else None


STRATEGIES: tuple[tuple[str, Strategy], ...] = (
    ("auth_id", match_auth_id),
    ("email", match_email),
    ("derived_id", match_derived_id),
    ("storage_id", match_storage_id),
)


def resolve_subject(
    index: ParticipantIndex,
    key: str | None,
    email: str | None,
) -> tuple[Participant | None, str | None]:
    key = (key or "").strip() or None
    email = (email or "").strip() or None
    for name, strategy in STRATEGIES:
        participant = strategy(index, key, email)
        if participant is not None:
            return participant, name
    return None, None


def resolve(record: ActivityRecord, index: ParticipantIndex) -> Participant | None:
    participant, _ = resolve_subject(index, record.subject_key, record.subject_email)
    return participant


def link(records: Iterable[ActivityRecord], index: ParticipantIndex) -> list[LinkedRecord]:
    linked: list[LinkedRecord] = []
    unresolved = 0
    for record in records:
        participant, matched_by = resolve_subject(index, record.subject_key, record.subject_email)
        if participant is None:
            unresolved += 1
        linked.append(LinkedRecord(record=record, participant=participant, matched_by=matched_by))

    log.info("link: records=%s unresolved=%s", len(linked), unresolved)
    return linked
