"""
orderdesk.entities.base

Behaviour shared by every domain entity.

Responsibilities:
- Map the surrogate identifier and expose `id` / `is_persisted`.
- Define equality and hashing over a business natural key (never the id).
- Guard the constructor so that application code builds entities through builders only.
- Provide the small checks builders run at `build()` time.
"""

from __future__ import annotations

from functools import cached_property
from typing import Any, TypeVar

from sqlalchemy.orm import Mapped, mapped_column

from orderdesk.errors import EntityStateError, MissingFieldError

T = TypeVar("T")

# Passed by builders to entity constructors. SQLAlchemy never calls `__init__` when it
# loads rows, so loading stays a separate, framework-only construction path.
_BUILDER_TOKEN = object()


class Entity:
    _id: Mapped[int] = mapped_column("id", primary_key=True, autoincrement=True)

    def _check_token(self, token: object) -> None:
        if token is not _BUILDER_TOKEN:
            name = type(self).__name__
            raise TypeError(f"{name} instances are created with {name}.Builder")

    @property
    def id(self) -> int | None:
        # None until the entity has been persisted.
        return self._id

    @property
    def is_persisted(self) -> bool:
        return self._id is not None

    def _natural_key(self) -> tuple[Any, ...]:
        raise NotImplementedError

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if type(other) is not type(self):
            return NotImplemented
        return self._natural_key() == other._natural_key()  # type: ignore[attr-defined]

    @cached_property
    def _hash(self) -> int:
        # Natural keys never change on an instance, so a single computation suffices.
        return hash((type(self).__name__, self._natural_key()))

    def __hash__(self) -> int:
        return self._hash


def builder_token() -> object:
    return _BUILDER_TOKEN


def required(entity: str, field: str, value: T | None) -> T:
    if value is None:
        raise MissingFieldError(entity, field)
    return value


def persisted_id(original: Entity) -> int:
    """
    Return the identifier a for-update builder is seeded with.
    Raises EntityStateError when `original` was never persisted.
    """

    if original.id is None:
        raise EntityStateError(f"given original {original!r} is not persisted")
    return original.id


# --- Module Notes -----------------------------------------------------------
# Entities subclass `Entity` first and `Base` second so the guarded constructors
# take precedence over SQLAlchemy's keyword constructor.
