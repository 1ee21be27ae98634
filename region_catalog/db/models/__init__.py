"""
SQLAlchemy models for the region catalog.

Exposes `Base`, `now_utc`, and the ORM classes of the region aggregate.
"""

from .base import Base, now_utc  # re-export

from .regions import Region, RegionLocale

__all__ = [
    # base
    "Base",
    "now_utc",
    # regions
    "Region",
    "RegionLocale",
]
