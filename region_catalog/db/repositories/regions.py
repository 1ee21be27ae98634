"""
Region repository functions.

Row-level reads and writes for regions and their locale memberships. These
functions flush but never commit; the catalog service owns the transaction.
"""
from __future__ import annotations

from typing import Iterable, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from region_catalog.db import models, schemas


def get_region(db: Session, code: str, *, for_update: bool = False):
    q = db.query(models.Region).filter(models.Region.code == code)
    if for_update:
        q = q.with_for_update()
    return q.first()


def get_regions(db: Session, *, is_active: Optional[bool] = None) -> List[models.Region]:
    q = db.query(models.Region).options(selectinload(models.Region.locales))
    if is_active is not None:
        q = q.filter(models.Region.is_active == is_active)
    # NULL ranks sort after ranked regions on every dialect
    return q.order_by(
        models.Region.sort_rank.is_(None),
        models.Region.sort_rank.asc(),
        models.Region.code.asc(),
    ).all()


def create_region(db: Session, region: schemas.RegionCreate, locales: Iterable) -> models.Region:
    db_region = models.Region(
        code=region.code,
        name=region.name,
        native_name=region.native_name,
        icon_ref=region.icon_ref,
        default_locale=region.default_locale,
        is_active=region.is_active,
        sort_rank=region.sort_rank,
    )
    for position, locale in enumerate(locales):
        db_region.locales.append(
            models.RegionLocale(
                locale_code=locale.locale_code,
                sort_rank=locale.sort_rank,
                position=position,
            )
        )
    db.add(db_region)
    db.flush()
    return db_region


def update_region(db: Session, db_region: models.Region, changes: dict) -> models.Region:
    for key, value in changes.items():
        setattr(db_region, key, value)
    db.flush()
    return db_region


def delete_region(db: Session, db_region: models.Region) -> None:
    # ORM cascade removes the memberships in the same flush
    db.delete(db_region)
    db.flush()


def get_memberships(db: Session, region_code: str) -> List[models.RegionLocale]:
    return (
        db.query(models.RegionLocale)
        .filter(models.RegionLocale.region_code == region_code)
        .order_by(models.RegionLocale.position.asc())
        .all()
    )


def next_position(db: Session, region_code: str) -> int:
    """Next insertion position for a region; call with the region row locked."""
    current = (
        db.query(func.max(models.RegionLocale.position))
        .filter(models.RegionLocale.region_code == region_code)
        .scalar()
    )
    return 0 if current is None else current + 1


def get_membership(db: Session, region_code: str, locale_code: str):
    return (
        db.query(models.RegionLocale)
        .filter(
            models.RegionLocale.region_code == region_code,
            models.RegionLocale.locale_code == locale_code,
        )
        .first()
    )


def create_membership(db: Session, region_code: str, locale_code: str, sort_rank: int) -> models.RegionLocale:
    db_membership = models.RegionLocale(
        region_code=region_code,
        locale_code=locale_code,
        sort_rank=sort_rank,
        position=next_position(db, region_code),
    )
    db.add(db_membership)
    db.flush()
    return db_membership


def update_membership(db: Session, db_membership: models.RegionLocale, sort_rank: int) -> models.RegionLocale:
    db_membership.sort_rank = sort_rank
    db.flush()
    return db_membership


def delete_membership(db: Session, db_membership: models.RegionLocale) -> None:
    db.delete(db_membership)
    db.flush()
