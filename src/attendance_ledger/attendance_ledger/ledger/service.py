from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Iterable, Optional, Sequence

from ..common.validators import optional_text
from ..core.enums import Action
from ..core.exceptions import EmptyObservationSet, InvalidDate, ValidationError
from ..people.model import SessionContext
from ..people.visibility import require_permission
from ..subjects.model import Meeting, Subject
from .kinds.base import ObservationKind
from .model import Observation, ObservationSet, Provenance
from .repository import RecordStore

logger = logging.getLogger(__name__)


def ensure_not_future(on_date: date, today: date) -> None:
    if on_date > today:
        raise InvalidDate(f"{on_date.isoformat()} is after today ({today.isoformat()})")


def provenance_of(observations: Sequence[Observation]) -> Optional[Provenance]:
    """Provenance of a stored set: the most recent save wins."""

    stamped = [o for o in observations if o.recorded_at is not None]
    if not stamped:
        return None
    latest = max(stamped, key=lambda o: o.recorded_at)
    return Provenance(
        recorded_by=latest.recorded_by,
        recorded_by_name=latest.recorded_by_name,
        recorded_at=latest.recorded_at,
    )


class AttendanceLedger:
    """Load, edit and save the observation set of one (subject, date).

    The same ledger serves daily attendance and meeting attendance; the
    observation kind supplies value validation and the present value.
    Past dates are loaded and saved exactly like today.
    """

    def __init__(self, store: RecordStore, kind: ObservationKind):
        self._store = store
        self._kind = kind

    @property
    def kind(self) -> ObservationKind:
        return self._kind

    def _check_subject_date(self, subject: Subject, on_date: date) -> None:
        if isinstance(subject, Meeting) and on_date != subject.meeting_date:
            raise ValidationError(
                f"Meeting {subject.meeting_id} takes place on {subject.meeting_date.isoformat()}"
            )

    async def load_observation_set(self, ctx: SessionContext, subject: Subject, on_date: date) -> ObservationSet:
        require_permission(ctx.actor, Action.RECORD_ATTENDANCE, subject)
        ensure_not_future(on_date, ctx.today)
        self._check_subject_date(subject, on_date)

        rows = await self._store.fetch(subject.subject_id, start=on_date, end=on_date)
        return ObservationSet(
            subject_id=subject.subject_id,
            on_date=on_date,
            entries={o.person_id: o for o in rows},
            provenance=provenance_of(rows),
        )

    def set_status(self, obs_set: ObservationSet, person_id: str, value: object, *, note: Optional[str] = None) -> None:
        """Set one person's value in memory; nothing is persisted."""

        value = self._kind.validate(value)
        current = obs_set.entries.get(person_id)
        obs_set.entries[person_id] = Observation(
            subject_id=obs_set.subject_id,
            person_id=person_id,
            on_date=obs_set.on_date,
            value=value,
            note=optional_text(note) if note is not None else (current.note if current else None),
        )

    def unset(self, obs_set: ObservationSet, person_id: str) -> None:
        """Drop one person's entry; the next save removes the stored row."""
        obs_set.entries.pop(person_id, None)

    def mark_all_present(self, obs_set: ObservationSet, person_ids: Iterable[str]) -> None:
        """Replace the in-memory entries with one present value per person."""

        present = self._kind.present_value()
        previous = obs_set.entries
        obs_set.entries = {
            pid: Observation(
                subject_id=obs_set.subject_id,
                person_id=pid,
                on_date=obs_set.on_date,
                value=present,
                note=previous[pid].note if pid in previous else None,
            )
            for pid in person_ids
        }

    async def save(self, ctx: SessionContext, subject: Subject, obs_set: ObservationSet) -> ObservationSet:
        require_permission(ctx.actor, Action.RECORD_ATTENDANCE, subject)
        if obs_set.subject_id != subject.subject_id:
            raise ValidationError("Observation set belongs to another subject")
        ensure_not_future(obs_set.on_date, ctx.today)
        self._check_subject_date(subject, obs_set.on_date)
        if obs_set.is_empty:
            raise EmptyObservationSet("Mark at least one person before saving")

        rows = [
            replace(
                o,
                value=self._kind.validate(o.value),
                recorded_by=ctx.actor.staff_id,
                recorded_by_name=ctx.actor.full_name,
                recorded_at=ctx.now,
            )
            for o in obs_set.entries.values()
        ]

        # entries removed with unset() are deleted from the store
        await self._store.replace_set(obs_set.subject_id, obs_set.on_date, rows)

        obs_set.entries = {o.person_id: o for o in rows}
        obs_set.provenance = Provenance(
            recorded_by=ctx.actor.staff_id,
            recorded_by_name=ctx.actor.full_name,
            recorded_at=ctx.now,
        )
        logger.info(
            "Saved %d %s observations for subject=%s date=%s by=%s",
            len(rows),
            self._kind.name,
            obs_set.subject_id,
            obs_set.on_date.isoformat(),
            ctx.actor.staff_id,
        )
        return obs_set
