"""
Translate region API endpoints.

CRUD for regions and their nested locale memberships. Domain errors raised by
the catalog service are mapped to HTTP responses in `region_catalog.api.main`.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status

from region_catalog.db import schemas
from region_catalog.api.deps import get_catalog_service
from region_catalog.services.region_catalog_service import RegionCatalogService

router = APIRouter(prefix="/translate-regions", tags=["translate-regions"])


def _parse_active_filter(is_active: Optional[str]) -> Optional[bool]:
    """Only the literal strings 'true' and 'false' filter; anything else lists all."""
    if is_active == "true":
        return True
    if is_active == "false":
        return False
    return None


@router.post("", response_model=schemas.Region, status_code=status.HTTP_201_CREATED)
def create_region_endpoint(
    region: schemas.RegionCreate,
    service: RegionCatalogService = Depends(get_catalog_service),
):
    return service.create_region(region)


@router.get("", response_model=List[schemas.Region])
def list_regions_endpoint(
    is_active: Optional[str] = None,
    service: RegionCatalogService = Depends(get_catalog_service),
):
    return service.list_regions(_parse_active_filter(is_active))


@router.get("/{code}", response_model=schemas.Region)
def get_region_endpoint(
    code: str,
    service: RegionCatalogService = Depends(get_catalog_service),
):
    return service.get_region(code)


@router.patch("/{code}", response_model=schemas.Region)
def update_region_endpoint(
    code: str,
    region_update: schemas.RegionUpdate,
    service: RegionCatalogService = Depends(get_catalog_service),
):
    return service.update_region(code, region_update)


@router.delete("/{code}", status_code=status.HTTP_204_NO_CONTENT)
def delete_region_endpoint(
    code: str,
    service: RegionCatalogService = Depends(get_catalog_service),
):
    service.delete_region(code)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

# --- Nested: locales for a region ---

@router.get("/{code}/locales", response_model=List[schemas.RegionLocale])
def list_locales_endpoint(
    code: str,
    service: RegionCatalogService = Depends(get_catalog_service),
):
    return service.list_memberships(code)


@router.post("/{code}/locales", response_model=schemas.RegionLocale, status_code=status.HTTP_201_CREATED)
def add_locale_endpoint(
    code: str,
    membership: schemas.RegionLocaleCreate,
    service: RegionCatalogService = Depends(get_catalog_service),
):
    return service.add_membership(code, membership)


@router.patch("/{code}/locales/{locale_code}", response_model=schemas.RegionLocale)
def update_locale_endpoint(
    code: str,
    locale_code: str,
    membership_update: schemas.RegionLocaleUpdate,
    service: RegionCatalogService = Depends(get_catalog_service),
):
    return service.update_membership(code, locale_code, membership_update)


@router.delete("/{code}/locales/{locale_code}", status_code=status.HTTP_204_NO_CONTENT)
def remove_locale_endpoint(
    code: str,
    locale_code: str,
    service: RegionCatalogService = Depends(get_catalog_service),
):
    service.remove_membership(code, locale_code)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
