"""Environment-driven settings for the listings backend."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[1]

load_dotenv(dotenv_path=ROOT_DIR / ".env", override=False)


def _optional_int(name: str) -> Optional[int]:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return None
    return int(raw)


@dataclass(frozen=True)
class Settings:
    database_url: str
    default_agency_id: Optional[int]
    data_dir: Path

    http_timeout: float

    geocoder_url: str
    geocoder_user_agent: str
    geocoder_country: str
    geocoder_country_code: str
    geocoder_language: str
    geocode_request_delay: float
    geocode_max_retries: int
    geocode_backoff_base: float
    geocode_max_backoff: float
    geocode_cache_size: int
    geocode_create_attempts: int
    geocode_create_retry_delay: float
    geocode_sweep_delay: float

    address_api_url: str


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings(
        database_url=os.getenv("DATABASE_URL", f"sqlite:///{ROOT_DIR / 'immo.db'}"),
        default_agency_id=_optional_int("DEFAULT_AGENCY_ID"),
        data_dir=Path(os.getenv("DATA_DIR", str(ROOT_DIR / "data"))),
        http_timeout=float(os.getenv("HTTP_TIMEOUT", "20")),
        geocoder_url=os.getenv("GEOCODER_URL", "https://nominatim.openstreetmap.org/search"),
        geocoder_user_agent=os.getenv("GEOCODER_USER_AGENT", "IAImmo/1.0"),
        geocoder_country=os.getenv("GEOCODER_COUNTRY", "France"),
        geocoder_country_code=os.getenv("GEOCODER_COUNTRY_CODE", "fr").lower(),
        geocoder_language=os.getenv("GEOCODER_LANGUAGE", "fr"),
        geocode_request_delay=float(os.getenv("GEOCODE_REQUEST_DELAY", "1.0")),
        geocode_max_retries=int(os.getenv("GEOCODE_MAX_RETRIES", "3")),
        geocode_backoff_base=float(os.getenv("GEOCODE_BACKOFF_BASE", "2.0")),
        geocode_max_backoff=float(os.getenv("GEOCODE_MAX_BACKOFF", "30")),
        geocode_cache_size=int(os.getenv("GEOCODE_CACHE_SIZE", "1024")),
        geocode_create_attempts=int(os.getenv("GEOCODE_CREATE_ATTEMPTS", "3")),
        geocode_create_retry_delay=float(os.getenv("GEOCODE_CREATE_RETRY_DELAY", "1.0")),
        geocode_sweep_delay=float(os.getenv("GEOCODE_SWEEP_DELAY", "1.0")),
        address_api_url=os.getenv("ADDRESS_API_URL", "https://api-adresse.data.gouv.fr/search/"),
    )


__all__ = ["Settings", "get_settings", "ROOT_DIR"]
