"""Pydantic models representing listing domain objects."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

from ..utils.coerce import INT_MAX, INT_MIN


class TransactionType(str, Enum):
    SALE = "sale"
    RENT = "rent"


class CamelModel(BaseModel):
    """Models exchanged over HTTP use camelCase keys; Python code uses snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Coordinates(BaseModel):
    """A resolved latitude/longitude pair, kept as the strings the geocoder returned."""

    model_config = ConfigDict(frozen=True)

    lat: str
    lon: str


class ListingBase(CamelModel):
    title: str
    description: str
    price: int = Field(..., ge=0, le=INT_MAX)
    location: str = Field(..., min_length=1)
    bedrooms: int = Field(..., ge=0, le=INT_MAX)
    bathrooms: int = Field(..., ge=0, le=INT_MAX)
    area: int = Field(..., ge=0, le=INT_MAX)
    type: str
    transaction_type: TransactionType = TransactionType.SALE
    features: Optional[List[str]] = None
    images: Optional[List[str]] = None


class ListingCreate(ListingBase):
    pass


class ListingUpdate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[int] = Field(None, ge=0, le=INT_MAX)
    location: Optional[str] = Field(None, min_length=1)
    bedrooms: Optional[int] = Field(None, ge=0, le=INT_MAX)
    bathrooms: Optional[int] = Field(None, ge=0, le=INT_MAX)
    area: Optional[int] = Field(None, ge=0, le=INT_MAX)
    type: Optional[str] = None
    transaction_type: Optional[TransactionType] = None
    features: Optional[List[str]] = None
    images: Optional[List[str]] = None


class Listing(ListingBase):
    id: int
    agency_id: Optional[int] = None
    created_at: datetime
    coordinates: Optional[Coordinates] = Field(None, exclude=True)

    @computed_field  # type: ignore[misc]
    @property
    def latitude(self) -> Optional[str]:
        return self.coordinates.lat if self.coordinates else None

    @computed_field  # type: ignore[misc]
    @property
    def longitude(self) -> Optional[str]:
        return self.coordinates.lon if self.coordinates else None


class GeocodeSweepResult(BaseModel):
    message: str
    total: int
    success: int
    errors: int


class ImageUpload(BaseModel):
    images: List[str]


class ImageUploadResponse(BaseModel):
    urls: List[str]


class DocumentCreate(CamelModel):
    name: str = Field(..., min_length=1)
    type: str
    property_id: int = Field(..., ge=INT_MIN, le=INT_MAX)


class Document(CamelModel):
    id: int
    name: str
    type: str
    property_id: int
    uploaded_by: Optional[int] = None
    created_at: datetime


class AddressSuggestion(BaseModel):
    label: str
    postcode: Optional[str] = None
    city: Optional[str] = None
    # [longitude, latitude], as published by the address API
    coordinates: List[float]
