"""
orderdesk

Top-level package for the order desk persistence layer.

Responsibilities:
- Expose package version metadata.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"


# --- Module Notes -----------------------------------------------------------
# Keep this file minimal to avoid import-time side effects (mapper configuration
# happens when `orderdesk.entities` is imported).
