"""
orderdesk.entities

Domain entities mapped with SQLAlchemy.

Every entity is immutable once built, is created through its companion `Builder`,
and compares equal to another instance with the same natural key, persisted or not.
A None identifier marks a transient (never persisted) instance.
"""

from orderdesk.entities.address import Address
from orderdesk.entities.article import Article, Unit
from orderdesk.entities.contact import Contact
from orderdesk.entities.order import Order, OrderEntry
from orderdesk.entities.vat import Vat

__all__ = ["Address", "Article", "Contact", "Order", "OrderEntry", "Unit", "Vat"]


# --- Module Notes -----------------------------------------------------------
# Importing this package registers every mapped class on `Base.metadata`.
