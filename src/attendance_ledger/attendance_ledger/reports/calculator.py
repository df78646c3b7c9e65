from __future__ import annotations

from collections import Counter
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from ..core.constants import PERCENT_DECIMALS
from ..core.enums import FamilyRelation
from ..ledger.kinds.base import ObservationKind
from ..ledger.model import MeetingMark, Observation
from .model import DayStats, PersonCompletion, RangeStats

_QUANTUM = Decimal(1).scaleb(-PERCENT_DECIMALS)


def percentage(part: int, whole: int) -> float:
    """part/whole as a percentage rounded half-up to one decimal; 0 when whole is 0."""
    if whole <= 0:
        return 0.0
    value = Decimal(part) * 100 / Decimal(whole)
    return float(value.quantize(_QUANTUM, rounding=ROUND_HALF_UP))


def day_stats(observations: Sequence[Observation], kind: ObservationKind) -> DayStats:
    present = sum(1 for o in observations if kind.is_present_equivalent(o.value))
    absent = len(observations) - present
    return DayStats(
        present_equivalent=present,
        absent_equivalent=absent,
        percentage=percentage(present, present + absent),
    )


def person_completions(
    observations: Sequence[Observation],
    kind: ObservationKind,
    *,
    roster: Sequence[str] = (),
) -> list[PersonCompletion]:
    """Per person: present days over days that person has a record.

    Unrecorded days are not counted. Roster members without any record get 0.
    """

    by_person: dict[str, dict] = {}
    for o in observations:
        by_person.setdefault(o.person_id, {})[o.on_date] = kind.is_present_equivalent(o.value)

    ordered = list(dict.fromkeys(roster))
    known = set(ordered)
    ordered += sorted(pid for pid in by_person if pid not in known)

    out: list[PersonCompletion] = []
    for pid in ordered:
        days = by_person.get(pid, {})
        present = sum(1 for v in days.values() if v)
        out.append(
            PersonCompletion(
                person_id=pid,
                days_present=present,
                days_recorded=len(days),
                completion=percentage(present, len(days)),
            )
        )
    return out


def range_stats(
    observations: Sequence[Observation],
    kind: ObservationKind,
    *,
    enrolled: int,
    roster: Sequence[str] = (),
) -> RangeStats:
    """Classroom aggregate: present observations over enrolled x recorded dates."""

    present = sum(1 for o in observations if kind.is_present_equivalent(o.value))
    distinct_dates = len({o.on_date for o in observations})
    return RangeStats(
        present_equivalent=present,
        absent_equivalent=len(observations) - present,
        distinct_dates=distinct_dates,
        enrolled=int(enrolled),
        percentage=percentage(present, int(enrolled) * distinct_dates),
        persons=tuple(person_completions(observations, kind, roster=roster)),
    )


def relation_counts(observations: Sequence[Observation]) -> dict[FamilyRelation, int]:
    counts = Counter(
        o.value.relation
        for o in observations
        if isinstance(o.value, MeetingMark) and o.value.attended and o.value.relation is not None
    )
    return {r: counts.get(r, 0) for r in FamilyRelation}
