from __future__ import annotations

from typing import Iterable, Protocol, TypeVar


class Rankable(Protocol):
    @property
    def score(self) -> int: ...

    @property
    def completion_time_seconds(self) -> int: ...


R = TypeVar("R", bound=Rankable)


def ordering_key(row: Rankable) -> tuple[int, int]:
    # Higher score first; on equal score the faster completion wins.
    return (-int(row.score or 0), int(row.completion_time_seconds or 0))


def rank(rows: Iterable[R]) -> list[tuple[int, R]]:
    """Order rows and number them 1..n.

    ``sorted`` is stable, so rows equal on both keys keep their input order.
    """
    ordered = sorted(rows, key=ordering_key)
    return [(position, row) for position, row in enumerate(ordered, start=1)]
