"""Listing creation, ownership-checked updates and the coordinates backfill sweep."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Callable, Optional

from ..config import Settings, get_settings
from ..db.repo import Repo
from ..errors import InvalidInputError, NotFoundError
from ..models.listing import Coordinates, Document, DocumentCreate, GeocodeSweepResult, Listing, ListingCreate, ListingUpdate
from ..utils.logging import get_logger
from .geocoding import Geocoder

LOGGER = get_logger("services.listings")

# columns that must never be set to null by an update
_REQUIRED_COLUMNS = {
    "title",
    "description",
    "price",
    "location",
    "bedrooms",
    "bathrooms",
    "area",
    "type",
    "transaction_type",
}


class ListingService:
    def __init__(
        self,
        repository: Repo,
        geocoder: Geocoder,
        settings: Optional[Settings] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.repository = repository
        self.geocoder = geocoder
        self.settings = settings or get_settings()
        self.sleep = sleep

    def create_listing(self, payload: ListingCreate, agency_id: int) -> Listing:
        """Insert a listing owned by ``agency_id`` and try to attach coordinates.

        Geocoding never blocks creation: when every attempt comes back empty
        the listing is kept without coordinates and the backfill sweep picks
        it up later.
        """

        values = payload.model_dump()
        values["transaction_type"] = payload.transaction_type.value
        values["agency_id"] = agency_id
        values["created_at"] = datetime.now(timezone.utc)
        listing = self.repository.create_listing(values)

        coordinates = self._geocode_with_attempts(listing.location)
        if coordinates is None:
            LOGGER.warning("listing_created_without_coordinates id=%s location=%r", listing.id, listing.location)
            return listing

        self.repository.set_coordinates(listing.id, coordinates)
        return listing.model_copy(update={"coordinates": coordinates})

    def update_listing(self, listing_id: int, patch: ListingUpdate, agency_id: int) -> Listing:
        values = patch.model_dump(exclude_unset=True)
        for column, value in values.items():
            if value is None and column in _REQUIRED_COLUMNS:
                raise InvalidInputError(f"{column} cannot be null")
        if values.get("transaction_type") is not None:
            values["transaction_type"] = values["transaction_type"].value

        listing = self.repository.update_listing(listing_id, values, agency_id=agency_id)
        if listing is None:
            raise NotFoundError(f"Property {listing_id} not found")
        return listing

    def get_listing(self, listing_id: int) -> Listing:
        listing = self.repository.get_listing(listing_id)
        if listing is None:
            raise NotFoundError(f"Property {listing_id} not found")
        return listing

    def geocode_missing(self) -> GeocodeSweepResult:
        """Resolve coordinates for every listing that still lacks them."""

        pending = self.repository.listings_missing_coordinates()
        success = 0
        errors = 0
        LOGGER.info("geocode_sweep_started total=%d", len(pending))
        for index, listing in enumerate(pending):
            if index:
                self.sleep(self.settings.geocode_sweep_delay)
            coordinates = self.geocoder.geocode(listing.location)
            if coordinates is not None and self.repository.set_coordinates(listing.id, coordinates):
                success += 1
            else:
                errors += 1
                LOGGER.warning("geocode_sweep_miss id=%s location=%r", listing.id, listing.location)

        LOGGER.info("geocode_sweep_done total=%d success=%d errors=%d", len(pending), success, errors)
        return GeocodeSweepResult(
            message=f"Geocoded {success} of {len(pending)} properties",
            total=len(pending),
            success=success,
            errors=errors,
        )

    def create_document(self, payload: DocumentCreate, agency_id: int) -> Document:
        if self.repository.get_listing(payload.property_id) is None:
            raise NotFoundError(f"Property {payload.property_id} not found")
        values = payload.model_dump()
        values["uploaded_by"] = agency_id
        values["created_at"] = datetime.now(timezone.utc)
        return self.repository.create_document(values)

    # ------------------------------------------------------------------
    def _geocode_with_attempts(self, address: str) -> Optional[Coordinates]:
        attempts = max(1, self.settings.geocode_create_attempts)
        for attempt in range(1, attempts + 1):
            coordinates = self.geocoder.geocode(address)
            if coordinates is not None:
                return coordinates
            LOGGER.info("geocode_attempt_failed attempt=%d/%d address=%r", attempt, attempts, address)
            if attempt < attempts:
                self.sleep(self.settings.geocode_create_retry_delay)
        return None
