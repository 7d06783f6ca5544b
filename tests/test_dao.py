"""
tests.test_dao

CRUD round-trips through `EntityDao` and unit-of-work failure handling.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, NoResultFound
from sqlalchemy.orm import Session

from orderdesk.db.dao import EntityDao
from orderdesk.db.session import PersistenceUnit
from orderdesk.entities import Address, Article, Contact, Order, OrderEntry, Unit, Vat
from orderdesk.errors import ConfigurationError, EntityStateError


def _count(dao: EntityDao, table: str) -> int:
    return dao.select_single(f"SELECT COUNT(*) FROM {table}")


def test_dao_requires_a_unit() -> None:
    with pytest.raises(TypeError):
        EntityDao(None)  # type: ignore[arg-type]


def test_persist_assigns_identifier(dao: EntityDao, vat: Vat) -> None:
    dao.persist(vat)

    assert vat.id is not None
    assert vat.is_persisted


def test_find_returns_equal_entity(dao: EntityDao, vat: Vat) -> None:
    dao.persist(vat)

    found = dao.find(Vat, vat.id)

    assert found is not None
    assert found is not vat
    assert found == vat
    assert found.rate == Decimal("20.00")
    assert found.end is None


def test_find_missing_returns_none(dao: EntityDao) -> None:
    assert dao.find(Vat, 404) is None


def test_update_vat_end_date(dao: EntityDao, vat: Vat) -> None:
    dao.persist(vat)
    today = date.today()
    original = dao.find(Vat, vat.id)

    dao.update(Vat.Builder.for_update(original).set_end(today).build())

    assert dao.find(Vat, vat.id).end == today
    assert _count(dao, "vats") == 1


def test_remove_detached_entity(dao: EntityDao, vat: Vat) -> None:
    dao.persist(vat)
    original = dao.find(Vat, vat.id)

    dao.remove(original)

    assert dao.find(Vat, vat.id) is None


def test_article_round_trip_keeps_vat(dao: EntityDao, article: Article) -> None:
    dao.persist(article)

    found = dao.find(Article, article.id)

    assert found == article
    assert found.unit is Unit.kilogram
    assert found.vat == article.vat
    assert found.vat.id is not None
    assert found.price_with_vat() == Decimal("15.00")


def test_update_article_description(dao: EntityDao, article: Article) -> None:
    dao.persist(article)
    original = dao.find(Article, article.id)

    dao.update(Article.Builder.for_update(original).set_description("Decaf beans").build())

    found = dao.find(Article, article.id)
    assert found.description == "Decaf beans"
    assert found.vat == article.vat
    assert _count(dao, "vats") == 1


def test_contact_and_address_round_trip(dao: EntityDao, contact: Contact, address: Address) -> None:
    dao.persist(contact)
    dao.persist(address)

    assert dao.find(Contact, contact.id) == contact
    assert dao.find(Address, address.id) == address

    moved = Address.Builder.for_update(dao.find(Address, address.id)).set_town("Lyon").build()
    dao.update(moved)
    assert dao.find(Address, address.id).town == "Lyon"


def test_commit_failure_propagates_and_leaves_database_unchanged(
    dao: EntityDao, contact: Contact
) -> None:
    dao.persist(contact)
    duplicate = (
        Contact.Builder()
        .set_firstname("Someone")
        .set_lastname("Else")
        .set_email(contact.email)
        .build()
    )

    with pytest.raises(IntegrityError):
        dao.persist(duplicate)

    assert duplicate.id is None
    assert _count(dao, "contacts") == 1


def _track_sessions(
    monkeypatch: pytest.MonkeyPatch,
    unit: PersistenceUnit,
    patch: dict[str, Callable[[Session], object]],
) -> list[Session]:
    sessions: list[Session] = []
    create_session = unit.create_session

    def tracked() -> Session:
        session = create_session()
        for name, factory in patch.items():
            setattr(session, name, factory(session))
        sessions.append(session)
        return session

    monkeypatch.setattr(unit, "create_session", tracked)
    return sessions


def test_failed_operation_rolls_back_and_propagates(
    monkeypatch: pytest.MonkeyPatch, unit: PersistenceUnit, dao: EntityDao, vat: Vat
) -> None:
    def failing_merge(session: Session):
        def merge(entity: object, **kwargs: object) -> object:
            session.add(vat)
            session.flush()
            raise RuntimeError("merge failed")

        return merge

    sessions = _track_sessions(monkeypatch, unit, {"merge": failing_merge})

    with pytest.raises(RuntimeError, match="merge failed"):
        dao.update(vat)

    (session,) = sessions
    assert not session.in_transaction()
    assert vat not in session
    assert _count(dao, "vats") == 0


def test_non_database_commit_error_still_rolls_back(
    monkeypatch: pytest.MonkeyPatch, unit: PersistenceUnit, dao: EntityDao, vat: Vat
) -> None:
    rollbacks: list[Session] = []

    def failing_commit(session: Session):
        def commit() -> None:
            session.flush()
            raise RuntimeError("commit hook failed")

        return commit

    def counting_rollback(session: Session):
        rollback = session.rollback

        def counted() -> None:
            rollbacks.append(session)
            rollback()

        return counted

    _track_sessions(
        monkeypatch, unit, {"commit": failing_commit, "rollback": counting_rollback}
    )

    with pytest.raises(RuntimeError, match="commit hook failed"):
        dao.persist(vat)

    assert len(rollbacks) == 1
    assert _count(dao, "vats") == 0


def test_order_round_trip(dao: EntityDao, order: Order) -> None:
    dao.persist(order)

    found = dao.find(Order, order.id)

    assert found == order
    assert found.contact == order.contact
    assert found.address == order.address
    assert found.entries == order.entries
    assert all(entry.order is found for entry in found.entries)
    assert all(entry.is_persisted for entry in found.entries)
    assert _count(dao, "order_entries") == 2


def test_order_can_reference_already_persisted_articles(
    dao: EntityDao, order_builder: Order.Builder, article: Article, other_article: Article
) -> None:
    dao.persist(article)
    dao.persist(other_article)
    stored = dao.find(Article, article.id)

    order = order_builder.remove_entry(article).add_entry(stored, Decimal("4")).build()
    dao.persist(order)

    assert _count(dao, "articles") == 2
    found = dao.find(Order, order.id)
    quantities = {entry.article.code: entry.quantity for entry in found.entries}
    assert quantities == {"ART-001": Decimal("4"), "ART-002": Decimal("1.5")}


def test_update_order_entries(dao: EntityDao, order: Order, other_article: Article) -> None:
    dao.persist(order)
    third = (
        Article.Builder()
        .set_code("ART-003")
        .set_description("Milk jug")
        .set_price(Decimal("9.90"))
        .set_unit(Unit.piece)
        .build()
    )
    dao.persist(third)
    original = dao.find(Order, order.id)
    new_delivery = original.delivery_date + timedelta(days=2)

    updated = (
        Order.Builder.for_update(original)
        .set_delivery_date(new_delivery)
        .remove_entry(other_article)
        .add_entry(third, Decimal("6"))
        .build()
    )
    dao.update(updated)

    found = dao.find(Order, order.id)
    assert found.delivery_date == new_delivery
    assert {entry.article.code for entry in found.entries} == {"ART-001", "ART-003"}
    assert _count(dao, "order_entries") == 2


def test_update_entry_quantity_keeps_the_stored_entry(
    dao: EntityDao, order: Order, article: Article
) -> None:
    dao.persist(order)
    original = dao.find(Order, order.id)
    entry_ids = {entry.article.code: entry.id for entry in original.entries}

    updated = (
        Order.Builder.for_update(original)
        .remove_entry(article)
        .add_entry(article, Decimal("9"))
        .build()
    )
    dao.update(updated)

    found = dao.find(Order, order.id)
    assert {entry.article.code: entry.id for entry in found.entries} == entry_ids
    quantities = {entry.article.code: entry.quantity for entry in found.entries}
    assert quantities == {"ART-001": Decimal("9"), "ART-002": Decimal("1.5")}
    assert _count(dao, "order_entries") == 2


def test_remove_order_removes_its_entries(dao: EntityDao, order: Order) -> None:
    dao.persist(order)

    dao.remove(dao.find(Order, order.id))

    assert dao.find(Order, order.id) is None
    assert _count(dao, "order_entries") == 0
    # Referenced, not owned.
    assert _count(dao, "articles") == 2
    assert _count(dao, "addresses") == 1


def test_find_order_entry(dao: EntityDao, order: Order) -> None:
    dao.persist(order)
    entry_id = next(iter(order.entries)).id

    entry = dao.find(OrderEntry, entry_id)

    assert entry is not None
    assert entry.order == order
    assert entry.article.code in {"ART-001", "ART-002"}


def test_select_multiple_returns_values_in_order(dao: EntityDao) -> None:
    starts = [date(2000, 1, 1), date(2010, 1, 1), date(2020, 1, 1)]
    vats = [Vat.Builder().set_rate(Decimal("19.6")).set_start(s).build() for s in starts]
    for vat in vats:
        dao.persist(vat)

    ids = dao.select_multiple("SELECT id FROM vats ORDER BY start_date DESC")
    rows = dao.select_multiple("SELECT id, start_date FROM vats ORDER BY start_date")

    assert ids == [vat.id for vat in reversed(vats)]
    assert rows == [(vat.id, vat.start.isoformat()) for vat in vats]


def test_select_multiple_as_entities(
    dao: EntityDao, article: Article, other_article: Article
) -> None:
    dao.persist(article)
    dao.persist(other_article)

    found = dao.select_multiple("SELECT * FROM articles ORDER BY code DESC", Article)

    assert found == [other_article, article]
    assert found[1].vat == article.vat


def test_select_single_as_entity(dao: EntityDao, vat: Vat) -> None:
    dao.persist(vat)

    found = dao.select_single(f"SELECT * FROM vats WHERE id = {vat.id}", Vat)

    assert found == vat


def test_select_single_without_result_raises(dao: EntityDao) -> None:
    with pytest.raises(NoResultFound):
        dao.select_single("SELECT id FROM vats WHERE id = -1")


def test_batch_size_property(dao: EntityDao) -> None:
    assert dao.get_batch_size() == 50


@pytest.mark.parametrize("properties", [{}, {"jdbc.batch_size": "fifty"}])
def test_batch_size_unset_or_invalid(properties: dict[str, str]) -> None:
    unit = PersistenceUnit(create_engine("sqlite://"), properties=properties)
    try:
        with pytest.raises(ConfigurationError, match="jdbc.batch_size"):
            EntityDao(unit).get_batch_size()
    finally:
        unit.close()


def test_operations_fail_once_unit_is_closed(
    unit: PersistenceUnit, dao: EntityDao, vat: Vat
) -> None:
    unit.close()

    assert not unit.is_open
    with pytest.raises(EntityStateError):
        dao.find(Vat, 1)
    with pytest.raises(EntityStateError):
        dao.persist(vat)
    with pytest.raises(EntityStateError):
        dao.update(vat)
    with pytest.raises(EntityStateError):
        dao.remove(vat)
    with pytest.raises(EntityStateError):
        dao.select_multiple("SELECT id FROM vats")
    with pytest.raises(EntityStateError):
        dao.get_batch_size()
    assert vat.id is None


# --- Module Notes -----------------------------------------------------------
# Queries embed their parameters in the SQL string: the DAO does not bind parameters.
