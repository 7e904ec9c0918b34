"""Compose listing search predicates from typed filters."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.sql.elements import ColumnElement

from ..db.repo import Repo
from ..db.tables import ListingRow
from ..models.filters import ListingFilters
from ..models.listing import Listing
from ..utils.logging import get_logger

LOGGER = get_logger("services.search")

# rooms >= this value match "N or more bedrooms"
ROOMS_OPEN_ENDED = 5

_LIKE_ESCAPE = "\\"


def _escape_like(value: str) -> str:
    return (
        value.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )


def build_predicates(filters: ListingFilters, agency_id: Optional[int] = None) -> List[ColumnElement[bool]]:
    """Translate filters into a list of predicates to be ANDed together.

    Pure function: nothing here touches the database. Criteria left as ``None``
    contribute no predicate.
    """

    predicates: List[ColumnElement[bool]] = []

    if agency_id is not None:
        predicates.append(ListingRow.agency_id == agency_id)

    if filters.location:
        predicates.append(ListingRow.location.ilike(f"%{_escape_like(filters.location)}%", escape=_LIKE_ESCAPE))

    if filters.type:
        predicates.append(ListingRow.type == filters.type)

    if filters.rooms is not None:
        if filters.rooms >= ROOMS_OPEN_ENDED:
            predicates.append(ListingRow.bedrooms >= ROOMS_OPEN_ENDED)
        else:
            predicates.append(ListingRow.bedrooms == filters.rooms)

    if filters.min_price is not None:
        predicates.append(ListingRow.price >= filters.min_price)
    if filters.max_price is not None:
        predicates.append(ListingRow.price <= filters.max_price)

    if filters.transaction_type is not None:
        predicates.append(ListingRow.transaction_type == filters.transaction_type.value)

    if filters.min_surface is not None:
        predicates.append(ListingRow.area >= filters.min_surface)
    if filters.max_surface is not None:
        predicates.append(ListingRow.area <= filters.max_surface)

    return predicates


def search_listings(repo: Repo, filters: ListingFilters, agency_id: Optional[int] = None) -> List[Listing]:
    """Return listings matching every filter, newest first."""

    predicates = build_predicates(filters, agency_id=agency_id)
    LOGGER.debug("search filters=%s agency_id=%s predicates=%d", filters, agency_id, len(predicates))
    return repo.list_listings(predicates)


__all__ = ["build_predicates", "search_listings", "ROOMS_OPEN_ENDED"]
