from dataclasses import replace

import pytest

from conftest import nominatim_match
from immo.errors import InvalidInputError, NotFoundError
from immo.models.listing import Coordinates, DocumentCreate, ListingCreate, ListingUpdate
from immo.services.listings import ListingService

PAIX = "10 Rue de la Paix, 75002 Paris, France"


def _payload(**overrides):
    data = {
        "title": "Appartement haussmannien",
        "description": "Lumineux",
        "price": 850000,
        "location": PAIX,
        "bedrooms": 3,
        "bathrooms": 1,
        "area": 95,
        "type": "apartment",
        "transactionType": "sale",
        "features": ["Balcon"],
    }
    data.update(overrides)
    return ListingCreate.model_validate(data)


def test_create_persists_geocoded_coordinates(service, session, repo):
    session.results[PAIX] = [{"lat": "48.87", "lon": "2.33", "country_code": "fr"}]
    listing = service.create_listing(_payload(), agency_id=7)
    assert listing.agency_id == 7
    assert listing.coordinates == Coordinates(lat="48.87", lon="2.33")
    stored = repo.get_listing(listing.id)
    assert (stored.latitude, stored.longitude) == ("48.87", "2.33")
    assert stored.created_at is not None


def test_create_without_coordinates_is_kept_for_backfill(service, session, repo, sleeps, settings):
    listing = service.create_listing(_payload(location="Nowhereville"), agency_id=1)
    assert listing.coordinates is None
    assert len(session.calls) == settings.geocode_create_attempts
    assert sleeps.count(settings.geocode_create_retry_delay) >= settings.geocode_create_attempts - 1
    assert [row.id for row in repo.listings_missing_coordinates()] == [listing.id]


def test_update_applies_only_supplied_fields(service, make_listing):
    listing = make_listing(agency_id=1, price=100)
    updated = service.update_listing(listing.id, ListingUpdate(price=150), agency_id=1)
    assert updated.price == 150
    assert updated.title == listing.title


def test_update_rejects_other_agency(service, make_listing):
    listing = make_listing(agency_id=2)
    with pytest.raises(NotFoundError):
        service.update_listing(listing.id, ListingUpdate(price=1), agency_id=1)
    with pytest.raises(NotFoundError):
        service.update_listing(9999, ListingUpdate(price=1), agency_id=1)


def test_update_rejects_null_required_field(service, make_listing):
    listing = make_listing(agency_id=1)
    with pytest.raises(InvalidInputError):
        service.update_listing(listing.id, ListingUpdate.model_validate({"title": None}), agency_id=1)


def test_location_change_clears_both_coordinates(service, make_listing, repo, session):
    listing = make_listing(agency_id=1, latitude="48.87", longitude="2.33")
    updated = service.update_listing(listing.id, ListingUpdate(location="3 Place du Capitole, Toulouse"), agency_id=1)
    assert updated.latitude is None and updated.longitude is None
    assert session.calls == []


def test_unchanged_location_keeps_coordinates(service, make_listing):
    listing = make_listing(agency_id=1, latitude="48.87", longitude="2.33")
    updated = service.update_listing(listing.id, ListingUpdate(location=listing.location, price=5), agency_id=1)
    assert updated.coordinates == Coordinates(lat="48.87", lon="2.33")


def test_geocode_missing_reports_tally_and_is_idempotent(service, make_listing, session, repo):
    make_listing(location=PAIX, latitude="48.87", longitude="2.33")
    lyon = make_listing(location="Lyon")
    make_listing(location="Nowhereville")
    session.results["Lyon, France"] = nominatim_match("45.76", "4.83")

    result = service.geocode_missing()
    assert (result.total, result.success, result.errors) == (2, 1, 1)
    assert repo.get_listing(lyon.id).coordinates == Coordinates(lat="45.76", lon="4.83")

    again = service.geocode_missing()
    assert (again.total, again.success, again.errors) == (1, 0, 1)


def test_create_document_requires_existing_listing(service, make_listing):
    listing = make_listing()
    document = service.create_document(DocumentCreate(name="DPE", type="pdf", property_id=listing.id), agency_id=3)
    assert document.property_id == listing.id
    assert document.uploaded_by == 3
    with pytest.raises(NotFoundError):
        service.create_document(DocumentCreate(name="DPE", type="pdf", property_id=404), agency_id=3)


def test_sweep_waits_between_listings(repo, geocoder, settings, make_listing):
    sweep_sleeps = []
    service = ListingService(repo, geocoder, settings=replace(settings, geocode_sweep_delay=7.5), sleep=sweep_sleeps.append)
    for city in ("Lyon", "Nantes", "Lille"):
        make_listing(location=city)
    result = service.geocode_missing()
    assert result.total == 3
    assert sweep_sleeps == [7.5, 7.5]
