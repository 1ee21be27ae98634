"""
Region/locale invariants.

Pure validation and assembly helpers applied before any region or membership
change reaches the store. Nothing here performs I/O; inputs are any objects
exposing ``locale_code`` / ``sort_rank`` (memberships) and ``code`` /
``default_locale`` (regions).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from region_catalog.services.errors import (
    DefaultLocaleRemovalForbidden,
    DuplicateMembership,
    InvalidDefaultLocale,
)


@dataclass(frozen=True)
class RankedLocale:
    locale_code: str
    sort_rank: int


def _locale_codes(memberships: Iterable) -> List[str]:
    return [m.locale_code for m in memberships]


def validate_create(region, initial_memberships: Sequence) -> List[RankedLocale]:
    """Validate a new region's initial memberships and assign missing ranks.

    Explicit ranks are kept as given. Memberships without a rank take the
    lowest non-negative integers not already used explicitly, in input order.
    """
    codes = _locale_codes(initial_memberships)
    if codes and region.default_locale not in codes:
        raise InvalidDefaultLocale(region.default_locale, codes)

    seen = set()
    for code in codes:
        if code in seen:
            raise DuplicateMembership(region.code, code)
        seen.add(code)

    explicit = {m.sort_rank for m in initial_memberships if m.sort_rank is not None}
    next_rank = 0
    ranked: List[RankedLocale] = []
    for m in initial_memberships:
        rank: Optional[int] = m.sort_rank
        if rank is None:
            while next_rank in explicit:
                next_rank += 1
            rank = next_rank
            next_rank += 1
        ranked.append(RankedLocale(locale_code=m.locale_code, sort_rank=rank))
    return ranked


def validate_default_locale_change(current_memberships: Sequence, new_default_locale: str) -> None:
    codes = _locale_codes(current_memberships)
    if codes and new_default_locale not in codes:
        raise InvalidDefaultLocale(new_default_locale, codes)


def validate_membership_removal(region, target_locale_code: str) -> None:
    if region.default_locale == target_locale_code:
        raise DefaultLocaleRemovalForbidden(region.code, target_locale_code)


def next_sort_rank(existing_memberships: Iterable) -> int:
    ranks = [m.sort_rank for m in existing_memberships]
    if not ranks:
        return 0
    return max(ranks) + 1


def order_memberships(memberships: Iterable) -> list:
    """Memberships by ascending rank; ``sorted`` is stable so ties keep input order."""
    return sorted(memberships, key=lambda m: m.sort_rank)


def project_ordering(memberships: Iterable) -> List[str]:
    """Externally visible locale list: codes ordered by rank, ranks dropped."""
    return [m.locale_code for m in order_memberships(memberships)]
