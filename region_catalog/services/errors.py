"""
Catalog error taxonomy.

Three stable kinds reach callers: `NotFound`, `Conflict` and `InvalidState`.
Each concrete error also carries a stable `code` and structured `details`
so the API layer can map them without parsing messages.
"""

from typing import Any, Dict, Optional

KIND_NOT_FOUND = "not_found"
KIND_CONFLICT = "conflict"
KIND_INVALID_STATE = "invalid_state"


class CatalogError(Exception):
    """Base exception for all region catalog errors."""

    kind = "catalog_error"
    code = "CATALOG_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFound(CatalogError):
    kind = KIND_NOT_FOUND
    code = "NOT_FOUND"


class Conflict(CatalogError):
    kind = KIND_CONFLICT
    code = "CONFLICT"


class InvalidState(CatalogError):
    kind = KIND_INVALID_STATE
    code = "INVALID_STATE"


class RegionNotFound(NotFound):
    code = "REGION_NOT_FOUND"

    def __init__(self, region_code: str):
        super().__init__(
            f'Region "{region_code}" not found',
            {"region_code": region_code},
        )


class MembershipNotFound(NotFound):
    code = "MEMBERSHIP_NOT_FOUND"

    def __init__(self, region_code: str, locale_code: str):
        super().__init__(
            f'Locale "{locale_code}" not found for region "{region_code}"',
            {"region_code": region_code, "locale_code": locale_code},
        )


class DuplicateRegion(Conflict):
    code = "DUPLICATE_REGION"

    def __init__(self, region_code: str):
        super().__init__(
            f'Region "{region_code}" already exists',
            {"region_code": region_code},
        )


class DuplicateMembership(Conflict):
    code = "DUPLICATE_MEMBERSHIP"

    def __init__(self, region_code: str, locale_code: str):
        super().__init__(
            f'Locale "{locale_code}" already exists for region "{region_code}"',
            {"region_code": region_code, "locale_code": locale_code},
        )


class InvalidDefaultLocale(InvalidState):
    code = "INVALID_DEFAULT_LOCALE"

    def __init__(self, default_locale: str, supported_locales):
        supported = list(supported_locales)
        super().__init__(
            f'default_locale "{default_locale}" must be one of supported locales: {", ".join(supported)}',
            {"default_locale": default_locale, "supported_locales": supported},
        )


class DefaultLocaleRemovalForbidden(InvalidState):
    code = "DEFAULT_LOCALE_REMOVAL_FORBIDDEN"

    def __init__(self, region_code: str, locale_code: str):
        super().__init__(
            f'Cannot remove default locale "{locale_code}" from region "{region_code}". '
            "Update default_locale first.",
            {"region_code": region_code, "locale_code": locale_code},
        )
