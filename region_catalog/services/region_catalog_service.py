"""
Region catalog service.

Orchestrates region and locale-membership operations against the store.
Every operation is one unit of work: invariants are checked inside the
transaction, the region row is locked before its memberships change, and the
whole operation either commits or rolls back.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import List, Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from region_catalog.db import models, schemas
from region_catalog.db.database import apply_statement_timeout
from region_catalog.db.repositories import regions as repo_regions
from region_catalog.services import region_invariants
from region_catalog.services.errors import (
    CatalogError,
    DuplicateMembership,
    DuplicateRegion,
    InvalidDefaultLocale,
    MembershipNotFound,
    NotFound,
    RegionNotFound,
)
from region_catalog.utils.settings import get_settings

logger = logging.getLogger(__name__)


def to_region_response(db_region: models.Region, memberships) -> schemas.Region:
    """Project a region row and its memberships to the external shape."""
    return schemas.Region(
        code=db_region.code,
        name=db_region.name,
        native_name=db_region.native_name,
        icon_ref=db_region.icon_ref,
        default_locale=db_region.default_locale,
        is_active=db_region.is_active,
        sort_rank=db_region.sort_rank,
        supported_locales=region_invariants.project_ordering(memberships),
        created_at=db_region.created_at,
        updated_at=db_region.updated_at,
    )


def to_membership_response(db_membership: models.RegionLocale) -> schemas.RegionLocale:
    return schemas.RegionLocale.model_validate(db_membership)


class RegionCatalogService:
    """Region/locale catalog operations bound to one request-scoped session."""

    def __init__(self, db: Session, default_timeout: Optional[float] = None):
        self.db = db
        self.default_timeout = (
            default_timeout if default_timeout is not None else get_settings().store_timeout_seconds
        )

    @contextmanager
    def _unit_of_work(self, operation: str, timeout: Optional[float]):
        try:
            apply_statement_timeout(self.db, self.default_timeout if timeout is None else timeout)
            yield
            self.db.commit()
        except NotFound as e:
            self.db.rollback()
            logger.info("%s: %s", operation, e.message)
            raise
        except CatalogError as e:
            self.db.rollback()
            logger.warning("%s rejected (%s): %s", operation, e.code, e.message)
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"{operation} failed, transaction rolled back: {str(e)}")
            raise

    def _require_region(self, code: str, *, for_update: bool = False) -> models.Region:
        db_region = repo_regions.get_region(self.db, code, for_update=for_update)
        if db_region is None:
            raise RegionNotFound(code)
        return db_region

    def _require_membership(self, code: str, locale_code: str) -> models.RegionLocale:
        db_membership = repo_regions.get_membership(self.db, code, locale_code)
        if db_membership is None:
            raise MembershipNotFound(code, locale_code)
        return db_membership

    def _project(self, db_region: models.Region) -> schemas.Region:
        return to_region_response(db_region, repo_regions.get_memberships(self.db, db_region.code))

    # --- Regions ---

    def create_region(self, region: schemas.RegionCreate, *, timeout: Optional[float] = None) -> schemas.Region:
        with self._unit_of_work("create_region", timeout):
            if repo_regions.get_region(self.db, region.code) is not None:
                raise DuplicateRegion(region.code)
            ranked = region_invariants.validate_create(region, region.supported_locales)
            try:
                db_region = repo_regions.create_region(self.db, region, ranked)
            except IntegrityError as e:
                raise DuplicateRegion(region.code) from e
            self.db.refresh(db_region)
            result = self._project(db_region)
        logger.info("region_created: code=%s locales=%s", result.code, result.supported_locales)
        return result

    def list_regions(self, is_active: Optional[bool] = None, *, timeout: Optional[float] = None) -> List[schemas.Region]:
        with self._unit_of_work("list_regions", timeout):
            regions = repo_regions.get_regions(self.db, is_active=is_active)
            result = [to_region_response(r, r.locales) for r in regions]
        return result

    def get_region(self, code: str, *, timeout: Optional[float] = None) -> schemas.Region:
        with self._unit_of_work("get_region", timeout):
            result = self._project(self._require_region(code))
        return result

    def update_region(
        self,
        code: str,
        changes: Union[schemas.RegionUpdate, dict],
        *,
        timeout: Optional[float] = None,
    ) -> schemas.Region:
        if not isinstance(changes, schemas.RegionUpdate):
            changes = schemas.RegionUpdate.model_validate(changes)
        data = changes.model_dump(exclude_unset=True)
        with self._unit_of_work("update_region", timeout):
            db_region = self._require_region(code, for_update=True)
            if "default_locale" in data:
                region_invariants.validate_default_locale_change(
                    repo_regions.get_memberships(self.db, code), data["default_locale"]
                )
            if data:
                repo_regions.update_region(self.db, db_region, data)
                self.db.refresh(db_region)
            result = self._project(db_region)
        if data:
            logger.info("region_updated: code=%s fields=%s", code, sorted(data))
        return result

    def delete_region(self, code: str, *, timeout: Optional[float] = None) -> None:
        with self._unit_of_work("delete_region", timeout):
            db_region = self._require_region(code, for_update=True)
            repo_regions.delete_region(self.db, db_region)
        logger.info("region_deleted: code=%s", code)

    # --- Locale memberships ---

    def list_memberships(self, code: str, *, timeout: Optional[float] = None) -> List[schemas.RegionLocale]:
        with self._unit_of_work("list_memberships", timeout):
            self._require_region(code)
            memberships = region_invariants.order_memberships(repo_regions.get_memberships(self.db, code))
            result = [to_membership_response(m) for m in memberships]
        return result

    def add_membership(
        self,
        code: str,
        membership: schemas.RegionLocaleCreate,
        *,
        timeout: Optional[float] = None,
    ) -> schemas.RegionLocale:
        locale_code = membership.locale_code
        with self._unit_of_work("add_membership", timeout):
            db_region = self._require_region(code, for_update=True)
            if repo_regions.get_membership(self.db, code, locale_code) is not None:
                raise DuplicateMembership(code, locale_code)
            existing = repo_regions.get_memberships(self.db, code)
            # The first membership of an empty region has to be its default locale
            if not existing and locale_code != db_region.default_locale:
                raise InvalidDefaultLocale(db_region.default_locale, [locale_code])
            rank = membership.sort_rank
            if rank is None:
                rank = region_invariants.next_sort_rank(existing)
            try:
                db_membership = repo_regions.create_membership(self.db, code, locale_code, rank)
            except IntegrityError as e:
                raise DuplicateMembership(code, locale_code) from e
            result = to_membership_response(db_membership)
        logger.info("membership_added: region=%s locale=%s rank=%s", code, locale_code, result.sort_rank)
        return result

    def update_membership(
        self,
        code: str,
        locale_code: str,
        changes: Union[schemas.RegionLocaleUpdate, dict],
        *,
        timeout: Optional[float] = None,
    ) -> schemas.RegionLocale:
        if not isinstance(changes, schemas.RegionLocaleUpdate):
            changes = schemas.RegionLocaleUpdate.model_validate(changes)
        with self._unit_of_work("update_membership", timeout):
            self._require_region(code, for_update=True)
            db_membership = self._require_membership(code, locale_code)
            if "sort_rank" in changes.model_fields_set:
                repo_regions.update_membership(self.db, db_membership, changes.sort_rank)
            result = to_membership_response(db_membership)
        return result

    def remove_membership(self, code: str, locale_code: str, *, timeout: Optional[float] = None) -> None:
        with self._unit_of_work("remove_membership", timeout):
            db_region = self._require_region(code, for_update=True)
            db_membership = self._require_membership(code, locale_code)
            region_invariants.validate_membership_removal(db_region, locale_code)
            repo_regions.delete_membership(self.db, db_membership)
        logger.info("membership_removed: region=%s locale=%s", code, locale_code)
