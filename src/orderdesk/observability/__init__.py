"""
orderdesk.observability

Observability package.

Responsibilities:
- Structured logging configuration shared by the persistence layer.
"""

# Package marker.
