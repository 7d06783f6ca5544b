"""
orderdesk.db.dao

Generic data-access object running each operation as one unit of work.

Responsibilities:
- persist / update / remove an entity inside its own transaction.
- find entities by identifier and run raw SQL queries without a transaction.
- Read the batch size persistence property.

Unit of work:
    idle -> begin -> operate -> (commit | rollback) -> closed

The session is always cleared and closed, whichever branch was taken. A failed commit
triggers a single rollback and the commit error is re-raised; nothing is retried.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from sqlalchemy import Result, select, text
from sqlalchemy.orm import Session, selectinload

from orderdesk.db.session import BATCH_SIZE_PROPERTY, PersistenceUnit
from orderdesk.errors import ConfigurationError
from orderdesk.observability.logging import get_logger

log = get_logger(__name__)

E = TypeVar("E")


class EntityDao:
    """
    Atomic operations over a single persistence unit.

    The DAO does not close the unit; that belongs to the code that created it. Once the
    unit is closed, every method raises EntityStateError.
    """

    def __init__(self, unit: PersistenceUnit) -> None:
        if unit is None:
            raise TypeError("unit must not be None")
        self._unit = unit

    @property
    def unit(self) -> PersistenceUnit:
        return self._unit

    def get_batch_size(self) -> int:
        self._unit.ensure_open()
        raw = self._unit.properties.get(BATCH_SIZE_PROPERTY)
        if raw is None:
            raise ConfigurationError(f"{BATCH_SIZE_PROPERTY} is not set")
        try:
            return int(raw)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"{BATCH_SIZE_PROPERTY} [{raw!r}] is not a number") from e

    def persist(self, entity: object) -> None:
        # The generated identifier is available on `entity` once this returns.
        with self._transaction() as session:
            session.add(entity)

    def update(self, entity: object) -> None:
        # Correlated to the stored row by identifier.
        with self._transaction() as session:
            session.merge(entity)

    def remove(self, entity: object) -> None:
        # Accepts tracked and detached instances alike.
        with self._transaction() as session:
            session.delete(entity if entity in session else session.merge(entity))

    def find(self, type_: type[E], id: Any) -> E | None:
        with self._read() as session:
            return session.get(type_, id)

    def select_single(self, query: str, type_: type[E] | None = None) -> Any:
        """
        Execute a raw SQL query expected to return exactly one row.

        Parameters are not bound: callers embed them in `query`. With `type_`, the row
        is loaded as that entity; otherwise a single-column row yields the bare value.
        """

        with self._read() as session:
            if type_ is not None:
                return session.scalars(_entity_statement(type_, query)).unique().one()
            return _row_value(session.execute(text(query)).one())

    def select_multiple(self, query: str, type_: type[E] | None = None) -> list[Any]:
        """
        Execute a raw SQL query and return its rows in result order.

        Parameters are not bound: callers embed them in `query`. With `type_`, rows are
        loaded as that entity; otherwise single-column rows yield bare values and wider
        rows yield tuples.
        """

        with self._read() as session:
            if type_ is not None:
                return list(
                    session.scalars(_entity_statement(type_, query)).unique().all()
                )
            result: Result[Any] = session.execute(text(query))
            return [_row_value(row) for row in result.all()]

    @contextmanager
    def _transaction(self) -> Iterator[Session]:
        session = self._unit.create_session()
        session.begin()
        try:
            yield session
        except BaseException:
            _end(session, commit=False)
            raise
        else:
            _end(session, commit=True)

    @contextmanager
    def _read(self) -> Iterator[Session]:
        session = self._unit.create_session()
        try:
            yield session
        finally:
            # No rollback: it would expire the instances handed back to the caller.
            _close(session)


def _end(session: Session, *, commit: bool) -> None:
    try:
        if not session.in_transaction():
            return
        if commit:
            try:
                session.commit()
                log.debug("unit_of_work.commit")
            except Exception as e:
                log.warning("unit_of_work.commit_failed", error=str(e))
                session.rollback()
                raise
        else:
            session.rollback()
            log.debug("unit_of_work.rollback")
    finally:
        _close(session)


def _close(session: Session) -> None:
    session.expunge_all()
    session.close()


def _entity_statement(type_: type[Any], query: str) -> Any:
    # Joined eager loads cannot be grafted onto a textual statement.
    return select(type_).from_statement(text(query)).options(selectinload("*"))


def _row_value(row: Any) -> Any:
    return row[0] if len(row) == 1 else tuple(row)


# --- Module Notes -----------------------------------------------------------
# Read operations never begin a transaction explicitly; closing the session releases
# the connection SQLAlchemy autobegan for the SELECT.
