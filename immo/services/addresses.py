"""Address autocompletion backed by the French national address API."""

from __future__ import annotations

from typing import List, Optional

import requests

from ..config import Settings, get_settings
from ..models.listing import AddressSuggestion
from ..utils.logging import get_logger

LOGGER = get_logger("services.addresses")

MIN_QUERY_LENGTH = 2


class AddressSuggester:
    def __init__(self, settings: Optional[Settings] = None, session: Optional[requests.Session] = None) -> None:
        self.settings = settings or get_settings()
        self.session = session or requests.Session()

    def suggest(self, query: str, limit: int = 5) -> List[AddressSuggestion]:
        query = (query or "").strip()
        if len(query) < MIN_QUERY_LENGTH:
            return []
        params = {"q": query, "limit": limit, "type": "housenumber,street"}
        try:
            resp = self.session.get(self.settings.address_api_url, params=params, timeout=self.settings.http_timeout)
            resp.raise_for_status()
            features = resp.json().get("features") or []
        except (requests.RequestException, ValueError, AttributeError) as exc:
            LOGGER.error("address_suggest_failed query=%r error=%s", query, exc)
            return []

        suggestions: List[AddressSuggestion] = []
        for feature in features:
            props = feature.get("properties") or {}
            coords = (feature.get("geometry") or {}).get("coordinates") or []
            if not props.get("label") or len(coords) != 2:
                continue
            suggestions.append(
                AddressSuggestion(
                    label=props["label"],
                    postcode=props.get("postcode"),
                    city=props.get("city"),
                    coordinates=[float(coords[0]), float(coords[1])],
                )
            )
        return suggestions
