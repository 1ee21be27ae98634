from sqlalchemy import Column, String, DateTime, Boolean, Integer, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import relationship
from .base import Base, now_utc


class Region(Base):
    __tablename__ = 'regions'
    code = Column(String(32), primary_key=True)
    name = Column(String(255), nullable=False)
    native_name = Column(String(255), nullable=False)
    icon_ref = Column(String(512), nullable=False)
    default_locale = Column(String(16), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    sort_rank = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)

    # Insertion order; sort rank ordering is applied on top of it (stable)
    locales = relationship(
        'RegionLocale',
        back_populates='region',
        cascade='all, delete-orphan',
        order_by='RegionLocale.position',
    )

    __table_args__ = (
        Index('idx_regions_is_active', 'is_active'),
        CheckConstraint('sort_rank IS NULL OR sort_rank >= 0', name='ck_regions_sort_rank'),
    )


class RegionLocale(Base):
    __tablename__ = 'region_locales'
    region_code = Column(String(32), ForeignKey('regions.code', ondelete='CASCADE'), primary_key=True)
    locale_code = Column(String(16), primary_key=True)
    sort_rank = Column(Integer, nullable=False, default=0)
    # Per-region insertion counter, assigned under the region row lock
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)

    region = relationship('Region', back_populates='locales')

    __table_args__ = (
        Index('idx_region_locales_region_rank', 'region_code', 'sort_rank'),
        Index('idx_region_locales_region_position', 'region_code', 'position'),
        CheckConstraint('sort_rank >= 0', name='ck_region_locales_sort_rank'),
    )
