from __future__ import annotations

from abc import ABC, abstractmethod

from ..model import ObservationValue


class ObservationKind(ABC):
    """Strategy Pattern: what an observation value looks like for one domain.

    The ledger and the aggregation engine are written once against this
    interface; daily attendance and meeting attendance plug in their rules.
    """

    name: str = ""

    @abstractmethod
    def validate(self, value: object) -> ObservationValue:
        """Return the normalized value or raise ValidationError."""

        raise NotImplementedError

    @abstractmethod
    def present_value(self) -> ObservationValue:
        """Value written by the "mark all present" bulk action."""

        raise NotImplementedError

    @abstractmethod
    def is_present_equivalent(self, value: ObservationValue) -> bool:
        raise NotImplementedError
