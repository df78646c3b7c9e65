"""Bidirectional mappings between domain enums and their stored form.

Only the store adapters use these; the ledger works with enums.
"""

from __future__ import annotations

from typing import Generic, Mapping, TypeVar

from ..core.enums import AttendanceStatus, FamilyRelation, Level
from ..core.exceptions import ValidationError

E = TypeVar("E")
R = TypeVar("R")


class EnumCodec(Generic[E, R]):
    def __init__(self, mapping: Mapping[E, R], *, label: str):
        self._encode = dict(mapping)
        self._decode = {v: k for k, v in self._encode.items()}
        if len(self._decode) != len(self._encode):
            raise ValueError(f"{label} codec is not one-to-one")
        self._label = label

    def encode(self, value: E) -> R:
        try:
            return self._encode[value]
        except KeyError:
            raise ValidationError(f"Unknown {self._label}: {value!r}") from None

    def decode(self, raw: R) -> E:
        try:
            return self._decode[raw]
        except KeyError:
            raise ValidationError(f"Unknown stored {self._label}: {raw!r}") from None


STATUS_CODEC: EnumCodec[AttendanceStatus, int] = EnumCodec(
    {
        AttendanceStatus.PRESENT: 1,
        AttendanceStatus.LATE: 2,
        AttendanceStatus.ABSENT: 3,
        AttendanceStatus.JUSTIFIED: 4,
    },
    label="attendance status",
)

RELATION_CODEC: EnumCodec[FamilyRelation, str] = EnumCodec(
    {
        FamilyRelation.FATHER: "padre",
        FamilyRelation.MOTHER: "madre",
        FamilyRelation.BOTH: "ambos",
        FamilyRelation.OTHER: "otro_familiar",
    },
    label="family relation",
)

LEVEL_CODEC: EnumCodec[Level, str] = EnumCodec(
    {
        Level.INITIAL: "Inicial",
        Level.PRIMARY: "Primaria",
        Level.SECONDARY: "Secundaria",
    },
    label="level",
)
