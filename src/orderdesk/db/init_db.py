"""
orderdesk.db.init_db

DB initialization helpers (dev/test convenience).

Responsibilities:
- Create tables for local development and tests.
"""

from __future__ import annotations

from sqlalchemy import Engine

from orderdesk import entities  # noqa: F401  # ensure entities are registered on Base.metadata
from orderdesk.db.base import Base


def init_db(engine: Engine) -> None:
    """
    Dev/test bootstrap: create tables if they don't exist.
    """

    with engine.begin() as conn:
        Base.metadata.create_all(conn)


def drop_db(engine: Engine) -> None:
    with engine.begin() as conn:
        Base.metadata.drop_all(conn)


# --- Module Notes -----------------------------------------------------------
# Schema migration is out of scope; production databases are provisioned externally.
