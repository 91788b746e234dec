from datetime import datetime, timezone

from leapboard.engine.linking import STRATEGIES, ParticipantIndex, link, resolve, resolve_subject
from leapboard.engine.types import ActivityRecord, Participant


T0 = datetime(2025, 3, 1, tzinfo=timezone.utc)

ASHA = Participant(id="doc-asha", name="Asha", auth_id="uid-asha", email="asha@example.com", student_id="AP2503222002")
RAVI = Participant(id="doc-ravi", name="Ravi", auth_id="uid-ravi", email="ravi@example.com", student_id="AP2503222003")


def _index(*participants: Participant) -> ParticipantIndex:
    return ParticipantIndex.build(participants or (ASHA, RAVI), synthetic_domains=("mindleap.edu",))


def _record(key=None, email=None, record_id="r1") -> ActivityRecord:
    return ActivityRecord(id=record_id, submitted_at=T0, subject_key=key, subject_email=email)


def test_strategy_order_is_fixed():
    assert [name for name, _ in STRATEGIES] == ["auth_id", "email", "derived_id", "storage_id"]


def test_auth_id_beats_email_when_both_match_different_people():
    participant = resolve(_record(key="uid-asha", email="ravi@example.com"), _index())
    assert participant == ASHA


def test_email_match_when_key_is_unknown():
    participant, matched_by = resolve_subject(_index(), "uid-gone", "ravi@example.com")
    assert participant == RAVI
    assert matched_by == "email"


def test_derived_id_from_synthetic_email_is_case_insensitive():
    participant, matched_by = resolve_subject(_index(), None, "ap2503222002@mindleap.edu")
    assert participant == ASHA
    assert matched_by == "derived_id"


def test_derived_id_ignores_other_domains():
    assert resolve(_record(email="AP2503222002@gmail.com"), _index()) is None


def test_storage_id_is_the_last_fallback():
    participant, matched_by = resolve_subject(_index(), "doc-ravi", None)
    assert participant == RAVI
    assert matched_by == "storage_id"


def test_unresolved_record_is_not_an_error():
    assert resolve(_record(key="nobody", email="nobody@example.com"), _index()) is None
    assert resolve(_record(), _index()) is None


def test_first_registry_entry_wins_on_duplicate_keys():
    dup = Participant(id="doc-dup", auth_id="uid-asha", email="asha@example.com")
    index = _index(ASHA, dup)
    assert resolve(_record(key="uid-asha"), index) == ASHA
    assert resolve(_record(email="asha@example.com"), index) == ASHA


def test_link_keeps_every_record_and_marks_unresolved():
    records = [
        _record(key="uid-asha", record_id="a"),
        _record(key="ghost", record_id="b"),
        _record(email="AP2503222003@mindleap.edu", record_id="c"),
    ]
    linked = link(records, _index())
    assert [l.record.id for l in linked] == ["a", "b", "c"]
    assert [l.is_resolved for l in linked] == [True, False, True]
    assert [l.matched_by for l in linked] == ["auth_id", None, "derived_id"]
    assert linked[2].participant == RAVI
