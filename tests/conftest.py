"""
tests.conftest

Shared fixtures.

Responsibilities:
- Provide a persistence unit over a throwaway SQLite file and an `EntityDao` on top.
- Provide transient entities for builder and DAO tests.
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import date, datetime, timedelta
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import create_engine

from orderdesk.db.dao import EntityDao
from orderdesk.db.init_db import drop_db, init_db
from orderdesk.db.session import PersistenceUnit
from orderdesk.entities import Address, Article, Contact, Order, Unit, Vat


@pytest.fixture
def unit(tmp_path: Path) -> Iterator[PersistenceUnit]:
    engine = create_engine(f"sqlite:///{tmp_path / 'orderdesk.db'}")
    init_db(engine)
    unit = PersistenceUnit(engine, properties={"jdbc.batch_size": "50"})
    try:
        yield unit
    finally:
        if unit.is_open:
            drop_db(engine)
        unit.close()


@pytest.fixture
def dao(unit: PersistenceUnit) -> EntityDao:
    return EntityDao(unit)


@pytest.fixture
def vat() -> Vat:
    return Vat.Builder().set_rate(Decimal("20.00")).set_start(date(2014, 1, 1)).build()


@pytest.fixture
def article(vat: Vat) -> Article:
    return (
        Article.Builder()
        .set_code("ART-001")
        .set_description("Espresso beans")
        .set_price(Decimal("12.50"))
        .set_unit(Unit.kilogram)
        .set_vat(vat)
        .build()
    )


@pytest.fixture
def other_article() -> Article:
    return (
        Article.Builder()
        .set_code("ART-002")
        .set_description("Barista training")
        .set_price(Decimal("80.00"))
        .set_unit(Unit.hour)
        .build()
    )


@pytest.fixture
def contact() -> Contact:
    return (
        Contact.Builder()
        .set_firstname("Ada")
        .set_lastname("Lovelace")
        .set_email("ada@example.org")
        .build()
    )


@pytest.fixture
def address() -> Address:
    return (
        Address.Builder()
        .set_name("Head office")
        .set_street("12 Analytical Street")
        .set_zip_code("75001")
        .set_town("Paris")
        .build()
    )


@pytest.fixture
def order_builder(article: Article, other_article: Article, contact: Contact, address: Address):
    yesterday = datetime.now() - timedelta(days=1)
    return (
        Order.Builder()
        .set_reference("ORD-0001")
        .set_order_date(yesterday)
        .set_delivery_date(date.today() + timedelta(days=7))
        .set_contact(contact)
        .set_address(address)
        .add_entry(article, Decimal("2"))
        .add_entry(other_article, Decimal("1.5"))
    )


@pytest.fixture
def order(order_builder: Order.Builder) -> Order:
    return order_builder.build()


# --- Module Notes -----------------------------------------------------------
# Each test gets its own SQLite file, so identifiers start at 1 in every test.
