"""
orderdesk.entities.article

Sellable articles.

Responsibilities:
- Map the `articles` table and the `Unit` enumeration.
- Build validated, immutable `Article` instances.

Invariants:
- code, description, price and unit are never None.
"""

from __future__ import annotations

import enum
from decimal import Decimal
from typing import Any

from sqlalchemy import Enum, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from orderdesk.db.base import Base
from orderdesk.entities.base import Entity, builder_token, persisted_id, required
from orderdesk.entities.vat import Vat

_HUNDRED = Decimal(100)


class Unit(enum.StrEnum):
    # Declaration order is not meaningful.
    piece = "PIECE"
    kilogram = "KILOGRAM"
    month = "MONTH"
    day = "DAY"
    hour = "HOUR"


class Article(Entity, Base):
    __tablename__ = "articles"

    _code: Mapped[str] = mapped_column("code", String(64), nullable=False, unique=True)
    _description: Mapped[str] = mapped_column("description", String(255), nullable=False)
    _price: Mapped[Decimal] = mapped_column("price", Numeric(12, 2), nullable=False)
    _unit: Mapped[Unit] = mapped_column("unit", Enum(Unit), nullable=False)
    _vat_id: Mapped[int | None] = mapped_column("vat_id", ForeignKey("vats.id"), nullable=True)

    _vat: Mapped[Vat | None] = relationship(lazy="joined")

    def __init__(self, builder: Article.Builder, token: object) -> None:
        self._check_token(token)
        self._id = builder.id
        self._code = builder.code
        self._description = builder.description
        self._price = builder.price
        self._unit = builder.unit
        self._vat = builder.vat

    @property
    def code(self) -> str:
        return self._code

    @property
    def description(self) -> str:
        return self._description

    @property
    def price(self) -> Decimal:
        # Price without tax.
        return self._price

    @property
    def unit(self) -> Unit:
        return self._unit

    @property
    def vat(self) -> Vat | None:
        # None for articles not subject to VAT.
        return self._vat

    def price_with_vat(self) -> Decimal:
        if self._vat is None:
            return self._price
        return self._price * (1 + self._vat.rate / _HUNDRED)

    def _natural_key(self) -> tuple[Any, ...]:
        return (self._code,)

    def __repr__(self) -> str:
        return (
            f"Article(id={self._id}, code={self._code!r}, desc={self._description!r}, "
            f"price={self._price}, unit={self._unit}, vat={self._vat!r})"
        )

    class Builder:
        def __init__(self) -> None:
            self.id: int | None = None
            self.code: str | None = None
            self.description: str | None = None
            self.price: Decimal | None = None
            self.unit: Unit | None = None
            self.vat: Vat | None = None

        @classmethod
        def for_update(cls, original: Article) -> Article.Builder:
            builder = cls()
            builder.id = persisted_id(original)
            builder.code = original.code
            builder.description = original.description
            builder.price = original.price
            builder.unit = original.unit
            builder.vat = original.vat
            return builder

        def set_code(self, code: str) -> Article.Builder:
            self.code = code
            return self

        def set_description(self, description: str) -> Article.Builder:
            self.description = description
            return self

        def set_price(self, price: Decimal) -> Article.Builder:
            self.price = price
            return self

        def set_unit(self, unit: Unit) -> Article.Builder:
            self.unit = unit
            return self

        def set_vat(self, vat: Vat | None) -> Article.Builder:
            self.vat = vat
            return self

        def build(self) -> Article:
            # VAT is optional.
            required("Article", "code", self.code)
            required("Article", "description", self.description)
            required("Article", "price", self.price)
            required("Article", "unit", self.unit)
            return Article(self, builder_token())
