"""
Shared FastAPI dependencies.
"""
from fastapi import Depends
from sqlalchemy.orm import Session

from region_catalog.db.database import get_db
from region_catalog.services.region_catalog_service import RegionCatalogService


def get_catalog_service(db: Session = Depends(get_db)) -> RegionCatalogService:
    return RegionCatalogService(db)
