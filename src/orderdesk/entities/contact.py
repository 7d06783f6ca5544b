"""
orderdesk.entities.contact

Order contacts, identified by their email address.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from orderdesk.db.base import Base
from orderdesk.entities.base import Entity, builder_token, persisted_id, required


class Contact(Entity, Base):
    __tablename__ = "contacts"

    _firstname: Mapped[str] = mapped_column("firstname", String(128), nullable=False)
    _lastname: Mapped[str] = mapped_column("lastname", String(128), nullable=False)
    _email: Mapped[str] = mapped_column("email", String(255), nullable=False, unique=True)

    def __init__(self, builder: Contact.Builder, token: object) -> None:
        self._check_token(token)
        self._id = builder.id
        self._firstname = builder.firstname
        self._lastname = builder.lastname
        self._email = builder.email

    @property
    def firstname(self) -> str:
        return self._firstname

    @property
    def lastname(self) -> str:
        return self._lastname

    @property
    def email(self) -> str:
        return self._email

    def _natural_key(self) -> tuple[Any, ...]:
        return (self._email,)

    def __repr__(self) -> str:
        return (
            f"Contact(id={self._id}, firstname={self._firstname!r}, "
            f"lastname={self._lastname!r}, email={self._email!r})"
        )

    class Builder:
        def __init__(self) -> None:
            self.id: int | None = None
            self.firstname: str | None = None
            self.lastname: str | None = None
            self.email: str | None = None

        @classmethod
        def for_update(cls, original: Contact) -> Contact.Builder:
            builder = cls()
            builder.id = persisted_id(original)
            builder.firstname = original.firstname
            builder.lastname = original.lastname
            builder.email = original.email
            return builder

        def set_firstname(self, name: str) -> Contact.Builder:
            self.firstname = name
            return self

        def set_lastname(self, name: str) -> Contact.Builder:
            self.lastname = name
            return self

        def set_email(self, email: str) -> Contact.Builder:
            self.email = email
            return self

        def build(self) -> Contact:
            required("Contact", "firstname", self.firstname)
            required("Contact", "lastname", self.lastname)
            required("Contact", "email", self.email)
            return Contact(self, builder_token())
