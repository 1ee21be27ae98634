from datetime import datetime
from typing import List
from pydantic import BaseModel, ConfigDict, Field, model_validator


class RegionLocaleBase(BaseModel):
    locale_code: str = Field(..., min_length=1, max_length=16)


class RegionLocaleCreate(RegionLocaleBase):
    sort_rank: int | None = Field(default=None, ge=0)
    model_config = ConfigDict(extra='forbid')


class RegionLocaleUpdate(BaseModel):
    sort_rank: int | None = Field(default=None, ge=0)
    model_config = ConfigDict(extra='forbid')

    @model_validator(mode='after')
    def _reject_null_rank(self):
        if 'sort_rank' in self.model_fields_set and self.sort_rank is None:
            raise ValueError("sort_rank cannot be null")
        return self


class RegionLocale(RegionLocaleBase):
    region_code: str
    sort_rank: int
    model_config = ConfigDict(from_attributes=True)


class RegionBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    native_name: str = Field(..., min_length=1, max_length=255)
    icon_ref: str = Field(..., min_length=1, max_length=512)
    default_locale: str = Field(..., min_length=1, max_length=16)


class RegionCreate(RegionBase):
    code: str = Field(..., min_length=1, max_length=32)
    is_active: bool = True
    sort_rank: int | None = Field(default=None, ge=0)
    supported_locales: List[RegionLocaleCreate] = Field(default_factory=list)
    model_config = ConfigDict(extra='forbid')


# Only `sort_rank` may be cleared with an explicit null.
_NON_NULLABLE_UPDATE_FIELDS = ('name', 'native_name', 'icon_ref', 'default_locale', 'is_active')


class RegionUpdate(BaseModel):
    """Partial region update.

    Omitted fields are left untouched; read the changes with
    ``model_dump(exclude_unset=True)`` so that an explicit ``false`` or
    ``null`` is kept apart from an absent field.
    """
    name: str | None = Field(default=None, min_length=1, max_length=255)
    native_name: str | None = Field(default=None, min_length=1, max_length=255)
    icon_ref: str | None = Field(default=None, min_length=1, max_length=512)
    default_locale: str | None = Field(default=None, min_length=1, max_length=16)
    is_active: bool | None = None
    sort_rank: int | None = Field(default=None, ge=0)

    model_config = ConfigDict(extra='forbid')

    @model_validator(mode='after')
    def _reject_null_for_required_columns(self):
        for field in _NON_NULLABLE_UPDATE_FIELDS:
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class Region(RegionBase):
    code: str
    is_active: bool
    sort_rank: int | None = None
    supported_locales: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)
