"""
orderdesk.entities.vat

Value Added Tax (VAT) rates over time.

Responsibilities:
- Map the `vats` table.
- Build validated, immutable `Vat` instances.

Invariants:
- rate and start date are never None.
- if an end date is set, it is strictly after the start date.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import Date, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from orderdesk.db.base import Base
from orderdesk.entities.base import Entity, builder_token, persisted_id, required
from orderdesk.errors import InvariantViolation


class Vat(Entity, Base):
    __tablename__ = "vats"

    _rate: Mapped[Decimal] = mapped_column("rate", Numeric(5, 2), nullable=False)
    _start: Mapped[date] = mapped_column("start_date", Date, nullable=False)
    _end: Mapped[date | None] = mapped_column("end_date", Date, nullable=True)

    def __init__(self, builder: Vat.Builder, token: object) -> None:
        self._check_token(token)
        self._id = builder.id
        self._rate = builder.rate
        self._start = builder.start
        self._end = builder.end

    @property
    def rate(self) -> Decimal:
        # Percentage, e.g. Decimal("20.00").
        return self._rate

    @property
    def start(self) -> date:
        return self._start

    @property
    def end(self) -> date | None:
        # None for the rate currently in force.
        return self._end

    def is_active(self, on: date) -> bool:
        if on < self._start:
            return False
        return self._end is None or on < self._end

    def _natural_key(self) -> tuple[Any, ...]:
        return (self._rate, self._start)

    def __repr__(self) -> str:
        return f"Vat(id={self._id}, rate={self._rate}, start={self._start}, end={self._end})"

    class Builder:
        def __init__(self) -> None:
            self.id: int | None = None
            self.rate: Decimal | None = None
            self.start: date | None = None
            self.end: date | None = None

        @classmethod
        def for_update(cls, original: Vat) -> Vat.Builder:
            builder = cls()
            builder.id = persisted_id(original)
            builder.rate = original.rate
            builder.start = original.start
            builder.end = original.end
            return builder

        def set_rate(self, rate: Decimal) -> Vat.Builder:
            self.rate = rate
            return self

        def set_start(self, start: date) -> Vat.Builder:
            self.start = start
            return self

        def set_end(self, end: date | None) -> Vat.Builder:
            self.end = end
            return self

        def build(self) -> Vat:
            required("Vat", "rate", self.rate)
            start = required("Vat", "start", self.start)
            if self.end is not None and not self.end > start:
                raise InvariantViolation(
                    f"end date [{self.end}] is not after start date [{start}]"
                )
            return Vat(self, builder_token())
