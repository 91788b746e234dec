from dataclasses import dataclass

from leapboard.engine.ranking import rank


@dataclass
class Row:
    name: str
    score: int
    completion_time_seconds: int


def test_score_desc_then_faster_completion():
    rows = [Row("c", 90, 120), Row("b", 90, 80), Row("a", 95, 999)]
    ranked = rank(rows)
    assert [(position, r.name) for position, r in ranked] == [(1, "a"), (2, "b"), (3, "c")]


def test_full_ties_keep_input_order_and_ranks_stay_contiguous():
    rows = [Row("x", 50, 60), Row("y", 50, 60), Row("z", 10, 5)]
    ranked = rank(rows)
    assert [position for position, _ in ranked] == [1, 2, 3]
    assert [r.name for _, r in ranked] == ["x", "y", "z"]


def test_empty_input():
    assert rank([]) == []
