"""
orderdesk.db.session

SQLAlchemy engine + session factory, packaged as a closable persistence unit.

Responsibilities:
- Create the engine and sessionmaker from settings.
- Expose string persistence properties (e.g. `jdbc.batch_size`) to DAOs.
- Refuse to hand out sessions once closed.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from orderdesk.errors import EntityStateError
from orderdesk.observability.logging import get_logger
from orderdesk.settings import Settings

log = get_logger(__name__)

BATCH_SIZE_PROPERTY = "jdbc.batch_size"


def create_sessionmaker(engine: Engine) -> sessionmaker[Session]:
    # expire_on_commit=False keeps entities readable after their unit of work closes.
    return sessionmaker(
        bind=engine,
        expire_on_commit=False,
        autoflush=False,
    )


class PersistenceUnit:
    """
    Process-wide session factory handed to DAOs.

    The unit is owned by whoever created it (a composition root, a test fixture);
    DAOs use it but never close it.
    """

    def __init__(self, engine: Engine, *, properties: Mapping[str, Any] | None = None) -> None:
        self._engine = engine
        self._sessionmaker = create_sessionmaker(engine)
        self._properties = MappingProxyType(dict(properties or {}))
        self._open = True

    @classmethod
    def from_settings(cls, settings: Settings) -> PersistenceUnit:
        properties: dict[str, str] = {}
        engine_kwargs: dict[str, Any] = {}
        if settings.jdbc_batch_size is not None:
            properties[BATCH_SIZE_PROPERTY] = str(settings.jdbc_batch_size)
            # Rows per multi-row INSERT when a flush inserts many entities.
            engine_kwargs["insertmanyvalues_page_size"] = settings.jdbc_batch_size

        engine = create_engine(
            settings.database_url,
            echo=settings.echo_sql,
            pool_pre_ping=True,
            **engine_kwargs,
        )
        log.info("persistence_unit.created", dialect=engine.dialect.name, **properties)
        return cls(engine, properties=properties)

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def properties(self) -> Mapping[str, Any]:
        return self._properties

    @property
    def is_open(self) -> bool:
        return self._open

    def ensure_open(self) -> None:
        if not self._open:
            raise EntityStateError("persistence unit is closed")

    def create_session(self) -> Session:
        self.ensure_open()
        return self._sessionmaker()

    def close(self) -> None:
        if not self._open:
            return
        self._open = False
        self._engine.dispose()
        log.info("persistence_unit.closed")


# --- Module Notes -----------------------------------------------------------
# The unit is safe to share across threads: each DAO call creates its own session.
