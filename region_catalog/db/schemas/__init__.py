"""
Pydantic schemas for the region catalog API and service layer.
"""

from .regions import (
    RegionLocaleBase,
    RegionLocaleCreate,
    RegionLocaleUpdate,
    RegionLocale,
    RegionBase,
    RegionCreate,
    RegionUpdate,
    Region,
)

__all__ = [
    # Memberships
    "RegionLocaleBase",
    "RegionLocaleCreate",
    "RegionLocaleUpdate",
    "RegionLocale",
    # Regions
    "RegionBase",
    "RegionCreate",
    "RegionUpdate",
    "Region",
]
