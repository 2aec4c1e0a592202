"""
Module: detailing_engines.participants
Responsibility:
    First-class "distinct staff who qualified" set and the equal-split rule
    shared by every pooled incentive (daily volume, evening piece rate,
    evening profit share, Sunday profit share, premium bonus, washing pool).

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - A staff id appears at most once per ParticipantSet, however many
      qualifying jobs it touched (distinct-staff equal split).
    - Iteration order is first-seen order, so distributions and logs are
      deterministic for identical inputs.
    - ``split_equally`` never divides by zero: an empty set or a zero pool
      distributes nothing.
    - Shares are NOT rounded; the sum of shares equals the pool exactly
      up to Decimal context precision.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from decimal import Decimal


class ParticipantSet:
    """Ordered set of staff ids scoped to one pool (a date, an evening, a job)."""

    __slots__ = ("_ids",)

    def __init__(self, staff_ids: Iterable[str] = ()):
        self._ids: dict[str, None] = dict.fromkeys(staff_ids)

    def add(self, staff_id: str) -> None:
        self._ids.setdefault(staff_id, None)

    def update(self, staff_ids: Iterable[str]) -> None:
        for staff_id in staff_ids:
            self.add(staff_id)

    def __contains__(self, staff_id: object) -> bool:
        return staff_id in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __bool__(self) -> bool:
        return bool(self._ids)

    def __repr__(self) -> str:
        return f"ParticipantSet({list(self._ids)!r})"


def split_equally(pool: Decimal, participants: ParticipantSet) -> dict[str, Decimal]:
    """
    Divide ``pool`` evenly across ``participants``.

    Returns an empty mapping when the pool is zero or there is nobody to
    pay, so callers can apply the result unconditionally.
    """
    if pool == 0 or not participants:
        return {}
    share = pool / len(participants)
    return {staff_id: share for staff_id in participants}
