"""Best-effort address geocoding against a Nominatim-compatible service.

Every outbound request is preceded by a fixed delay and lookups run strictly
one after another, which keeps a single process within the public service's
usage policy. Failures of any kind resolve to ``None``; callers treat "no
coordinates" as an ordinary outcome.
"""

from __future__ import annotations

import re
import time
from typing import Any, Callable, Dict, Iterable, List, Optional

import requests

from ..config import Settings, get_settings
from ..models.listing import Coordinates
from ..utils.caching import LRUCache
from ..utils.logging import get_logger

LOGGER = get_logger("services.geocoding")

_WHITESPACE = re.compile(r"\s+")


class RateLimitedError(Exception):
    """The geocoding service kept answering 429 after all retries."""


def cache_key(address: str) -> str:
    return _WHITESPACE.sub(" ", address.strip()).casefold()


class Geocoder:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
        cache: Optional[LRUCache[str, Coordinates]] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.session = session or requests.Session()
        self.sleep = sleep
        self.cache = cache if cache is not None else LRUCache(self.settings.geocode_cache_size, key_func=cache_key)

    # ------------------------------------------------------------------
    def normalize(self, address: str) -> str:
        """Trim and make sure the expected country is mentioned exactly once."""

        text = address.strip()
        country = self.settings.geocoder_country
        if country.casefold() not in text.casefold():
            text = f"{text}, {country}"
        return text

    def geocode(self, address: str) -> Optional[Coordinates]:
        if not address or not address.strip():
            LOGGER.warning("geocode_skipped reason=empty_address")
            return None

        cached = self.cache.get(address)
        if cached is not None:
            LOGGER.debug("geocode_cache_hit address=%r", address)
            return cached

        query = self.normalize(address)
        try:
            results = self._search(query)
            if not results:
                fallback = self.normalize(query.split(",")[0])
                if fallback == query:
                    LOGGER.info("geocode_no_match query=%r", query)
                    return None
                LOGGER.info("geocode_fallback query=%r fallback=%r", query, fallback)
                results = self._search(fallback)
                if not results:
                    LOGGER.info("geocode_no_match query=%r fallback=%r", query, fallback)
                    return None
            coordinates = self._coordinates_from(results[0], query)
        except RateLimitedError:
            LOGGER.warning("geocode_rate_limited address=%r retries=%d", address, self.settings.geocode_max_retries)
            return None
        except (requests.RequestException, ValueError, KeyError, TypeError) as exc:
            LOGGER.error("geocode_failed address=%r error=%s", address, exc)
            return None

        if coordinates is not None:
            self.cache.set(address, coordinates)
            LOGGER.info("geocode_ok address=%r lat=%s lon=%s", address, coordinates.lat, coordinates.lon)
        return coordinates

    def batch_geocode(self, addresses: Iterable[str]) -> Dict[str, Optional[Coordinates]]:
        """Resolve addresses one after another; order of the input is preserved."""

        results: Dict[str, Optional[Coordinates]] = {}
        for address in addresses:
            results[address] = self.geocode(address)
        return results

    # ------------------------------------------------------------------
    def _search(self, query: str) -> List[Dict[str, Any]]:
        params = {
            "format": "json",
            "q": query,
            "countrycodes": self.settings.geocoder_country_code,
            "addressdetails": 1,
            "limit": 1,
        }
        headers = {
            "User-Agent": self.settings.geocoder_user_agent,
            "Accept-Language": self.settings.geocoder_language,
        }
        retries = self.settings.geocode_max_retries
        for attempt in range(retries + 1):
            self.sleep(self.settings.geocode_request_delay)
            resp = self.session.get(
                self.settings.geocoder_url, params=params, headers=headers, timeout=self.settings.http_timeout
            )
            if resp.status_code == 429:
                if attempt >= retries:
                    raise RateLimitedError(query)
                retry_after = resp.headers.get("Retry-After", "")
                wait = float(retry_after) if retry_after.isdigit() else self.settings.geocode_backoff_base * (2 ** attempt)
                wait = min(wait, self.settings.geocode_max_backoff)
                LOGGER.warning("geocode_429 query=%r attempt=%d wait=%.1f", query, attempt + 1, wait)
                self.sleep(wait)
                continue
            resp.raise_for_status()
            data = resp.json()
            if not isinstance(data, list):
                raise ValueError(f"unexpected geocoder payload: {type(data).__name__}")
            return data
        raise RateLimitedError(query)

    def _coordinates_from(self, match: Dict[str, Any], query: str) -> Optional[Coordinates]:
        details = match.get("address") or {}
        country_code = str(details.get("country_code") or match.get("country_code") or "").lower()
        if country_code != self.settings.geocoder_country_code:
            LOGGER.warning("geocode_wrong_country query=%r country_code=%r", query, country_code)
            return None
        return Coordinates(lat=str(match["lat"]), lon=str(match["lon"]))


_geocoder_singleton: Geocoder | None = None


def get_geocoder() -> Geocoder:
    global _geocoder_singleton
    if _geocoder_singleton is None:
        _geocoder_singleton = Geocoder()
    return _geocoder_singleton


__all__ = ["Geocoder", "RateLimitedError", "cache_key", "get_geocoder"]
