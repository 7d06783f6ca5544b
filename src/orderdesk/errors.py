"""
orderdesk.errors

Error taxonomy for entity construction and data access.

Responsibilities:
- Signal missing required fields and business-rule breaches at build time.
- Signal operations on non-persisted entities or closed persistence units.
- Signal invalid persistence configuration values.
"""

from __future__ import annotations


class OrderDeskError(Exception):
    pass


class MissingFieldError(OrderDeskError, ValueError):
    """
    A required attribute was never assigned on a builder.
    """

    def __init__(self, entity: str, field: str) -> None:
        super().__init__(f"{entity}.{field} is required")
        self.entity = entity
        self.field = field


class InvariantViolation(OrderDeskError, ValueError):
    """
    A business rule was breached at build time (date ordering, positivity, ...).
    The message names the offending values.
    """


class DuplicateEntryError(InvariantViolation):
    pass


class EntityStateError(OrderDeskError, RuntimeError):
    """
    The target is not in the state the operation requires: a transient entity
    used where a persisted one is expected, or a closed persistence unit.
    """


class ConfigurationError(OrderDeskError, ValueError):
    pass


# --- Module Notes -----------------------------------------------------------
# Database failures are not wrapped; SQLAlchemy exceptions reach callers unchanged.
