"""
orderdesk.entities.order

Orders and the entries they own.

Responsibilities:
- Map the `orders` and `order_entries` tables.
- Build validated, immutable `Order` instances together with their `OrderEntry` set.

Invariants:
- reference, address, order date, delivery date and entries are never None.
- the order date is not after today.
- the delivery date is strictly after the order date.
- an order has at least one entry, and at most one entry per article.
- every entry quantity is strictly positive.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import Date, DateTime, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.orm.attributes import set_committed_value

from orderdesk.db.base import Base
from orderdesk.decimals import is_positive
from orderdesk.entities.address import Address
from orderdesk.entities.article import Article
from orderdesk.entities.base import Entity, builder_token, persisted_id, required
from orderdesk.entities.contact import Contact
from orderdesk.errors import DuplicateEntryError, InvariantViolation


class OrderEntry(Entity, Base):
    """
    One article line of an order. Entries are only ever built by `Order.Builder`.
    Two entries are equal when they belong to equal orders and reference equal articles.
    """

    __tablename__ = "order_entries"

    _order_id: Mapped[int] = mapped_column("order_id", ForeignKey("orders.id"), nullable=False)
    _article_id: Mapped[int] = mapped_column(
        "article_id", ForeignKey("articles.id"), nullable=False
    )
    _quantity: Mapped[Decimal] = mapped_column("quantity", Numeric(12, 3), nullable=False)

    _order: Mapped[Order] = relationship(back_populates="_entries", lazy="joined")
    _article: Mapped[Article] = relationship(lazy="joined")

    __table_args__ = (UniqueConstraint("order_id", "article_id"),)

    def __init__(self, builder: OrderEntry.Builder, token: object) -> None:
        self._check_token(token)
        self._id = builder.id
        self._order = builder.order
        self._quantity = builder.quantity
        self._article = builder.article

    @property
    def order(self) -> Order:
        return self._order

    @property
    def quantity(self) -> Decimal:
        return self._quantity

    @property
    def article(self) -> Article:
        return self._article

    def _natural_key(self) -> tuple[Any, ...]:
        return (self._order, self._article)

    def __repr__(self) -> str:
        # The owning order may not be loaded on a detached entry.
        order = self.__dict__.get("_order")
        reference = order.reference if order is not None else None
        return (
            f"OrderEntry(id={self._id}, order.ref={reference!r}, "
            f"article.code={self._article.code!r}, quantity={self._quantity})"
        )

    class Builder:
        def __init__(self) -> None:
            self.id: int | None = None
            self.order: Order | None = None
            self.quantity: Decimal | None = None
            self.article: Article | None = None

        @classmethod
        def for_update(cls, original: OrderEntry) -> OrderEntry.Builder:
            # The owning order is assigned again when the new order is built.
            builder = cls()
            builder.id = persisted_id(original)
            builder.quantity = original.quantity
            builder.article = original.article
            return builder

        def set_order(self, order: Order) -> OrderEntry.Builder:
            self.order = order
            return self

        def set_quantity(self, quantity: Decimal) -> OrderEntry.Builder:
            self.quantity = quantity
            return self

        def set_article(self, article: Article) -> OrderEntry.Builder:
            self.article = article
            return self

        def build(self) -> OrderEntry:
            required("OrderEntry", "order", self.order)
            required("OrderEntry", "article", self.article)
            quantity = required("OrderEntry", "quantity", self.quantity)
            if not is_positive(quantity):
                raise InvariantViolation(f"quantity [{quantity}] is not positive")
            return OrderEntry(self, builder_token())


class Order(Entity, Base):
    __tablename__ = "orders"

    _reference: Mapped[str] = mapped_column("reference", String(64), nullable=False, unique=True)
    _order_date: Mapped[datetime] = mapped_column("order_date", DateTime, nullable=False)
    _delivery_date: Mapped[date] = mapped_column("delivery_date", Date, nullable=False)
    _contact_id: Mapped[int | None] = mapped_column(
        "contact_id", ForeignKey("contacts.id"), nullable=True
    )
    _address_id: Mapped[int] = mapped_column(
        "address_id", ForeignKey("addresses.id"), nullable=False
    )

    _contact: Mapped[Contact | None] = relationship(lazy="joined")
    _address: Mapped[Address] = relationship(lazy="joined")
    _entries: Mapped[list[OrderEntry]] = relationship(
        back_populates="_order", cascade="all, delete-orphan", lazy="selectin"
    )

    def __init__(self, builder: Order.Builder, token: object) -> None:
        self._check_token(token)
        self._id = builder.id
        self._reference = builder.reference
        self._order_date = builder.order_date
        self._delivery_date = builder.delivery_date
        self._contact = builder.contact
        self._address = builder.address

    @property
    def reference(self) -> str:
        return self._reference

    @property
    def entries(self) -> set[OrderEntry]:
        """
        Snapshot of the order entries; changing the returned set leaves the order untouched.
        """

        for entry in self._entries:
            # Eager loading stops at the entry -> order cycle, so entries loaded through
            # their order get the back-reference filled in here.
            if "_order" not in entry.__dict__:
                set_committed_value(entry, "_order", self)
        return set(self._entries)

    @property
    def order_date(self) -> datetime:
        return self._order_date

    @property
    def delivery_date(self) -> date:
        return self._delivery_date

    @property
    def contact(self) -> Contact | None:
        return self._contact

    @property
    def address(self) -> Address:
        # Delivery address.
        return self._address

    def _natural_key(self) -> tuple[Any, ...]:
        return (self._reference,)

    def __repr__(self) -> str:
        return (
            f"Order(id={self._id}, ref={self._reference!r}, order_date={self._order_date}, "
            f"delivery_date={self._delivery_date}, entries={len(self._entries)})"
        )

    class Builder:
        def __init__(self) -> None:
            self.id: int | None = None
            self.reference: str | None = None
            self.order_date: datetime | None = None
            self.delivery_date: date | None = None
            self.contact: Contact | None = None
            self.address: Address | None = None
            self.entry_builders: list[OrderEntry.Builder] = []
            # Seeded entries dropped by remove_entry, revived by add_entry for the same article.
            self._removed: list[OrderEntry.Builder] = []

        @classmethod
        def for_update(cls, original: Order) -> Order.Builder:
            builder = cls()
            builder.id = persisted_id(original)
            builder.reference = original.reference
            builder.order_date = original.order_date
            builder.delivery_date = original.delivery_date
            builder.contact = original.contact
            builder.address = original.address
            builder.entry_builders = [
                OrderEntry.Builder.for_update(entry) for entry in original._entries
            ]
            return builder

        def add_entry(self, article: Article, quantity: Decimal) -> Order.Builder:
            """
            Add an entry for `article`.

            Re-adding an article whose stored entry was removed from this builder keeps that
            entry's identifier, so an update changes the stored row instead of replacing it.
            """

            entry_builder = next((b for b in self._removed if b.article == article), None)
            if entry_builder is None:
                entry_builder = OrderEntry.Builder()
            else:
                self._removed.remove(entry_builder)
            self.entry_builders.append(entry_builder.set_article(article).set_quantity(quantity))
            return self

        def remove_entry(self, article: Article) -> Order.Builder:
            kept: list[OrderEntry.Builder] = []
            for b in self.entry_builders:
                if b.article != article:
                    kept.append(b)
                elif b.id is not None:
                    self._removed.append(b)
            self.entry_builders = kept
            return self

        def set_reference(self, ref: str) -> Order.Builder:
            self.reference = ref
            return self

        def set_order_date(self, value: datetime) -> Order.Builder:
            self.order_date = value
            return self

        def set_delivery_date(self, value: date) -> Order.Builder:
            self.delivery_date = value
            return self

        def set_contact(self, contact: Contact | None) -> Order.Builder:
            self.contact = contact
            return self

        def set_address(self, address: Address) -> Order.Builder:
            self.address = address
            return self

        def build(self) -> Order:
            """
            Build the order and its entries.

            Raises:
            - MissingFieldError if any field but the contact is unset, or an entry lacks
              its article or quantity.
            - InvariantViolation if the order date is after today, the delivery date is not
              after the order date, there are no entries, or an entry quantity is not positive.
            - DuplicateEntryError if two entries reference the same article.
            """

            reference = required("Order", "reference", self.reference)
            required("Order", "address", self.address)
            order_day = required("Order", "order_date", self.order_date).date()
            delivery_date = required("Order", "delivery_date", self.delivery_date)

            today = date.today()
            if order_day > today:
                raise InvariantViolation(f"order date [{order_day}] is after today [{today}]")
            if not delivery_date > order_day:
                raise InvariantViolation(
                    f"delivery date [{delivery_date}] is not after order date [{order_day}]"
                )
            if not self.entry_builders:
                raise InvariantViolation(f"order [{reference}] has no entries")

            result = Order(self, builder_token())
            entries: list[OrderEntry] = []
            seen: set[OrderEntry] = set()
            for entry_builder in self.entry_builders:
                entry = entry_builder.set_order(result).build()
                if entry in seen:
                    raise DuplicateEntryError(f"duplicate entry [{entry!r}]")
                seen.add(entry)
                entries.append(entry)
            result._entries = entries
            return result
