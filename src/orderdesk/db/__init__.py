"""
orderdesk.db

Persistence package (SQLAlchemy, synchronous).

Responsibilities:
- Provide the declarative base, the persistence unit and the transactional DAO.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Entities live in `orderdesk.entities`; this package only knows about sessions and
# units of work, never about a specific entity type.
