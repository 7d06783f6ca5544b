"""
orderdesk.entities.address

Delivery addresses. Two addresses are the same when all four fields match.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from orderdesk.db.base import Base
from orderdesk.entities.base import Entity, builder_token, persisted_id, required


class Address(Entity, Base):
    __tablename__ = "addresses"

    _name: Mapped[str] = mapped_column("name", String(128), nullable=False)
    _street: Mapped[str] = mapped_column("street", String(255), nullable=False)
    _zip_code: Mapped[str] = mapped_column("zip_code", String(16), nullable=False)
    _town: Mapped[str] = mapped_column("town", String(128), nullable=False)

    __table_args__ = (UniqueConstraint("name", "street", "zip_code", "town"),)

    def __init__(self, builder: Address.Builder, token: object) -> None:
        self._check_token(token)
        self._id = builder.id
        self._name = builder.name
        self._street = builder.street
        self._zip_code = builder.zip_code
        self._town = builder.town

    @property
    def name(self) -> str:
        return self._name

    @property
    def street(self) -> str:
        return self._street

    @property
    def zip_code(self) -> str:
        return self._zip_code

    @property
    def town(self) -> str:
        return self._town

    def _natural_key(self) -> tuple[Any, ...]:
        return (self._name, self._street, self._zip_code, self._town)

    def __repr__(self) -> str:
        return (
            f"Address(id={self._id}, name={self._name!r}, street={self._street!r}, "
            f"zip_code={self._zip_code!r}, town={self._town!r})"
        )

    class Builder:
        def __init__(self) -> None:
            self.id: int | None = None
            self.name: str | None = None
            self.street: str | None = None
            self.zip_code: str | None = None
            self.town: str | None = None

        @classmethod
        def for_update(cls, original: Address) -> Address.Builder:
            builder = cls()
            builder.id = persisted_id(original)
            builder.name = original.name
            builder.street = original.street
            builder.zip_code = original.zip_code
            builder.town = original.town
            return builder

        def set_name(self, name: str) -> Address.Builder:
            self.name = name
            return self

        def set_street(self, street: str) -> Address.Builder:
            self.street = street
            return self

        def set_zip_code(self, code: str) -> Address.Builder:
            self.zip_code = code
            return self

        def set_town(self, town: str) -> Address.Builder:
            self.town = town
            return self

        def build(self) -> Address:
            for field in ("name", "street", "zip_code", "town"):
                required("Address", field, getattr(self, field))
            return Address(self, builder_token())
