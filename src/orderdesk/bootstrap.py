"""
orderdesk.bootstrap

Composition root for processes using the persistence layer.

Responsibilities:
- Configure structured logging once.
- Build the persistence unit from settings and create tables in dev/test.
- Hand back a ready-to-use `EntityDao`.
"""

from __future__ import annotations

from orderdesk.db.dao import EntityDao
from orderdesk.db.init_db import init_db
from orderdesk.db.session import PersistenceUnit
from orderdesk.observability.logging import configure_logging, get_logger
from orderdesk.settings import Settings, get_settings

log = get_logger(__name__)


def create_dao(settings: Settings | None = None) -> EntityDao:
    settings = settings or get_settings()
    configure_logging(
        service_name=settings.service_name,
        level=settings.log_level,
        json=settings.env == "prod",
    )

    unit = PersistenceUnit.from_settings(settings)
    if settings.env in ("dev", "test"):
        # Dev/test convenience; production schemas are provisioned outside this package.
        init_db(unit.engine)
    log.info("bootstrap.ready", env=settings.env)
    return EntityDao(unit)


# --- Module Notes -----------------------------------------------------------
# The caller owns `dao.unit` and must close it at shutdown.
