from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Observation


class RecordStore(Protocol):
    """Async contract of the remote store holding observations.

    Note (DIP): ledger, reports and navigation depend on this interface only.
    Implementations raise StoreUnavailable when the remote call fails.
    """

    async def fetch(self, subject_id: str, *, start: date, end: Optional[date]) -> Sequence[Observation]:
        """Observations of a subject with start <= date <= end.

        `start == end` selects one day; `end=None` leaves the range open.
        """

        raise NotImplementedError

    async def upsert(self, observations: Sequence[Observation]) -> None:
        """Write all rows in one batch keyed by (subject, person, date).

        Either every row is written or none is.
        """

        raise NotImplementedError

    async def replace_set(self, subject_id: str, on_date: date, observations: Sequence[Observation]) -> None:
        """Make the stored (subject, date) set equal to `observations`.

        Rows of that set whose person is not in the batch are deleted; the
        rest are upserted. Delete and upsert share one transaction.
        """

        raise NotImplementedError

    async def list_marked_dates(self, subject_id: str, *, start: date, end: date) -> set[date]:
        raise NotImplementedError
