"""Typed search criteria parsed once from a loose query-parameter bag."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional

from ..errors import InvalidInputError
from ..utils.coerce import to_int, to_str
from .listing import TransactionType


def parse_transaction_type(value: Any) -> Optional[TransactionType]:
    """Return the transaction type for exactly ``sale``/``rent``, else ``None``."""

    try:
        return TransactionType(value)
    except ValueError:
        return None


def require_transaction_type(value: Any) -> TransactionType:
    """Strict variant used for path segments: unknown values are rejected."""

    parsed = parse_transaction_type(value)
    if parsed is None:
        raise InvalidInputError(f"Invalid transaction type: {value!r} (expected 'sale' or 'rent')")
    return parsed


@dataclass(frozen=True)
class ListingFilters:
    location: Optional[str] = None
    type: Optional[str] = None
    rooms: Optional[int] = None
    min_price: Optional[int] = None
    max_price: Optional[int] = None
    transaction_type: Optional[TransactionType] = None
    min_surface: Optional[int] = None
    max_surface: Optional[int] = None

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "ListingFilters":
        """Build filters from raw query parameters.

        Malformed numbers and unknown transaction types are dropped rather than
        rejected, so a bad value behaves exactly like an absent one.
        """

        return cls(
            location=to_str(params.get("location")),
            type=to_str(params.get("type")),
            rooms=to_int(params.get("rooms")),
            min_price=to_int(params.get("minPrice")),
            max_price=to_int(params.get("maxPrice")),
            transaction_type=parse_transaction_type(params.get("transactionType")),
            min_surface=to_int(params.get("minSurface")),
            max_surface=to_int(params.get("maxSurface")),
        )

    def with_transaction_type(self, transaction_type: TransactionType) -> "ListingFilters":
        return replace(self, transaction_type=transaction_type)


__all__ = ["ListingFilters", "parse_transaction_type", "require_transaction_type"]
