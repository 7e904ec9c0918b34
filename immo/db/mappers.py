from typing import Any, Dict, Optional

from ..models.filters import parse_transaction_type
from ..models.listing import Coordinates, Document, Listing, TransactionType
from ..utils.coerce import split_list, to_int, to_str
from .tables import DocumentRow, ListingRow


def row_coordinates(row: ListingRow) -> Optional[Coordinates]:
    # a half-written pair is treated as unresolved
    if row.latitude and row.longitude:
        return Coordinates(lat=row.latitude, lon=row.longitude)
    return None


def map_listing_row(row: ListingRow) -> Listing:
    return Listing(
        id=row.id,
        title=row.title,
        description=row.description,
        price=row.price,
        location=row.location,
        bedrooms=row.bedrooms,
        bathrooms=row.bathrooms,
        area=row.area,
        type=row.type,
        transaction_type=row.transaction_type,
        features=row.features,
        images=row.images,
        agency_id=row.agency_id,
        created_at=row.created_at,
        coordinates=row_coordinates(row),
    )


def map_document_row(row: DocumentRow) -> Document:
    return Document(
        id=row.id,
        name=row.name,
        type=row.type,
        property_id=row.property_id,
        uploaded_by=row.uploaded_by,
        created_at=row.created_at,
    )


def map_seed_row(r: Dict[str, Any]) -> Dict[str, Any]:
    """Map a CSV seed record onto listing column values."""
    latitude = to_str(r.get("latitude"))
    longitude = to_str(r.get("longitude"))
    transaction_type = parse_transaction_type(r.get("transaction_type") or r.get("transactionType"))
    if not (latitude and longitude):
        latitude = longitude = None
    return {
        "title": to_str(r.get("title")) or "",
        "description": to_str(r.get("description")) or "",
        "price": to_int(r.get("price")) or 0,
        "location": to_str(r.get("location")) or "",
        "bedrooms": to_int(r.get("bedrooms")) or 0,
        "bathrooms": to_int(r.get("bathrooms")) or 0,
        "area": to_int(r.get("area")) or 0,
        "type": to_str(r.get("type")) or "apartment",
        "transaction_type": (transaction_type or TransactionType.SALE).value,
        "features": split_list(r.get("features")),
        "images": split_list(r.get("images")),
        "agency_id": to_int(r.get("agency_id") or r.get("agencyId")),
        "latitude": latitude,
        "longitude": longitude,
    }
