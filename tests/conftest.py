from dataclasses import replace
from datetime import datetime, timedelta
from itertools import count

import pytest
import requests
from fastapi.testclient import TestClient

from immo.api import app, get_listing_service
from immo.config import get_settings
from immo.db.database import make_engine
from immo.db.repo import Repo, get_repository
from immo.services.geocoding import Geocoder
from immo.services.listings import ListingService


class StubResponse:
    def __init__(self, status_code=200, payload=None, headers=None):
        self.status_code = status_code
        self.payload = [] if payload is None else payload
        self.headers = headers or {}

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class StubSession:
    """Stand-in for ``requests.Session``: answers by query string, or from a queue."""

    def __init__(self, results=None, responses=None):
        self.results = results or {}
        self.responses = list(responses or [])
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        params = dict(params or {})
        self.calls.append({"url": url, "params": params, "headers": headers})
        if self.responses:
            response = self.responses.pop(0)
            if isinstance(response, Exception):
                raise response
            return response
        return StubResponse(200, self.results.get(params.get("q"), []))

    @property
    def queries(self):
        return [call["params"].get("q") for call in self.calls]


def nominatim_match(lat, lon, country_code="fr"):
    return [{"lat": lat, "lon": lon, "display_name": "stub", "address": {"country_code": country_code}}]


@pytest.fixture
def settings():
    return replace(
        get_settings(),
        default_agency_id=None,
        geocode_request_delay=1.0,
        geocode_max_retries=3,
        geocode_backoff_base=2.0,
        geocode_max_backoff=30.0,
        geocode_cache_size=16,
        geocode_create_attempts=3,
        geocode_create_retry_delay=1.0,
        geocode_sweep_delay=1.0,
    )


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def session():
    return StubSession()


@pytest.fixture
def geocoder(settings, session, sleeps):
    return Geocoder(settings=settings, session=session, sleep=sleeps.append)


@pytest.fixture
def repo():
    return Repo(make_engine("sqlite://"))


@pytest.fixture
def service(repo, geocoder, settings, sleeps):
    return ListingService(repo, geocoder, settings=settings, sleep=sleeps.append)


@pytest.fixture
def make_listing(repo):
    """Insert listings with strictly increasing creation times."""

    ticks = count()
    start = datetime(2024, 1, 1, 9, 0, 0)

    def _make(**overrides):
        values = {
            "title": "Appartement",
            "description": "Lumineux",
            "price": 200000,
            "location": "1 Rue de Rivoli, 75001 Paris",
            "bedrooms": 2,
            "bathrooms": 1,
            "area": 50,
            "type": "apartment",
            "transaction_type": "sale",
            "features": ["Balcon"],
            "images": None,
            "agency_id": 1,
            "created_at": start + timedelta(minutes=next(ticks)),
        }
        values.update(overrides)
        return repo.create_listing(values)

    return _make


@pytest.fixture
def client(repo, service):
    app.dependency_overrides[get_repository] = lambda: repo
    app.dependency_overrides[get_listing_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
