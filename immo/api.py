from typing import Any, Optional

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Query
from fastapi.encoders import jsonable_encoder

from .config import get_settings
from .db.repo import Repo, get_repository
from .errors import InvalidInputError, NotFoundError, StoreError
from .models.filters import ListingFilters, require_transaction_type
from .models.listing import DocumentCreate, ImageUpload, ImageUploadResponse, ListingCreate, ListingUpdate
from .services.addresses import AddressSuggester
from .services.geocoding import get_geocoder
from .services.images import store_images
from .services.listings import ListingService
from .services.search import search_listings
from .utils.coerce import to_int


app = FastAPI(title="Immo listings API", version="0.1.0")
router = APIRouter(prefix="/api")


def get_listing_service(repo: Repo = Depends(get_repository)) -> ListingService:
    return ListingService(repo, get_geocoder())


def get_address_suggester() -> AddressSuggester:
    return AddressSuggester()


def current_agency(x_agency_id: Optional[str] = Header(None)) -> int:
    """The agency acting on this request, taken from the ``X-Agency-Id`` header."""
    if x_agency_id is None:
        default = get_settings().default_agency_id
        if default is None:
            raise HTTPException(401, detail="Missing X-Agency-Id header")
        return default
    agency_id = to_int(x_agency_id)
    if agency_id is None:
        raise HTTPException(400, detail="Invalid X-Agency-Id header")
    return agency_id


def listing_filters(
    location: Optional[str] = Query(None),
    type: Optional[str] = Query(None),
    rooms: Optional[str] = Query(None),
    min_price: Optional[str] = Query(None, alias="minPrice"),
    max_price: Optional[str] = Query(None, alias="maxPrice"),
    transaction_type: Optional[str] = Query(None, alias="transactionType"),
    min_surface: Optional[str] = Query(None, alias="minSurface"),
    max_surface: Optional[str] = Query(None, alias="maxSurface"),
) -> ListingFilters:
    return ListingFilters.from_params(
        {
            "location": location,
            "type": type,
            "rooms": rooms,
            "minPrice": min_price,
            "maxPrice": max_price,
            "transactionType": transaction_type,
            "minSurface": min_surface,
            "maxSurface": max_surface,
        }
    )


def _parse_id(raw: str) -> int:
    listing_id = to_int(raw)
    if listing_id is None:
        raise HTTPException(400, detail="Invalid property id")
    return listing_id


def _search(repo: Repo, filters: ListingFilters, agency_id: Optional[int] = None) -> Any:
    try:
        rows = search_listings(repo, filters, agency_id=agency_id)
    except StoreError:
        raise HTTPException(500, detail="Failed to fetch properties")
    return jsonable_encoder(rows)


@router.get("/properties")
def list_props(filters: ListingFilters = Depends(listing_filters), repo: Repo = Depends(get_repository)):
    return _search(repo, filters)


@router.get("/properties/transaction/{kind}")
def list_props_by_transaction(
    kind: str,
    filters: ListingFilters = Depends(listing_filters),
    repo: Repo = Depends(get_repository),
):
    try:
        parsed = require_transaction_type(kind)
    except InvalidInputError as exc:
        raise HTTPException(400, detail=str(exc))
    return _search(repo, filters.with_transaction_type(parsed))


@router.get("/properties/agency")
def list_agency_props(
    filters: ListingFilters = Depends(listing_filters),
    agency_id: int = Depends(current_agency),
    repo: Repo = Depends(get_repository),
):
    return _search(repo, filters, agency_id=agency_id)


def _sweep(service: ListingService) -> Any:
    try:
        return jsonable_encoder(service.geocode_missing())
    except StoreError:
        raise HTTPException(500, detail="Failed to geocode properties")


@router.get("/properties/geocode-missing")
def geocode_missing(service: ListingService = Depends(get_listing_service)):
    return _sweep(service)


@router.post("/properties/geocode-all")
def geocode_all(service: ListingService = Depends(get_listing_service)):
    return _sweep(service)


@router.post("/properties/images", response_model=ImageUploadResponse)
def upload_images(req: ImageUpload):
    try:
        urls = store_images(req.images)
    except InvalidInputError as exc:
        raise HTTPException(400, detail=str(exc))
    return ImageUploadResponse(urls=urls)


@router.get("/properties/{listing_id}")
def get_prop(listing_id: str, service: ListingService = Depends(get_listing_service)):
    parsed = _parse_id(listing_id)
    try:
        listing = service.get_listing(parsed)
    except NotFoundError:
        raise HTTPException(404, detail="Property not found")
    except StoreError:
        raise HTTPException(500, detail="Failed to fetch property")
    return jsonable_encoder(listing)


@router.post("/properties", status_code=201)
def create_prop(
    payload: ListingCreate,
    agency_id: int = Depends(current_agency),
    service: ListingService = Depends(get_listing_service),
):
    try:
        listing = service.create_listing(payload, agency_id=agency_id)
    except StoreError:
        raise HTTPException(500, detail="Failed to create property")
    return jsonable_encoder(listing)


@router.put("/properties/{listing_id}")
def update_prop(
    listing_id: str,
    patch: ListingUpdate,
    agency_id: int = Depends(current_agency),
    service: ListingService = Depends(get_listing_service),
):
    parsed = _parse_id(listing_id)
    try:
        listing = service.update_listing(parsed, patch, agency_id=agency_id)
    except InvalidInputError as exc:
        raise HTTPException(400, detail=str(exc))
    except NotFoundError:
        raise HTTPException(404, detail="Property not found")
    except StoreError:
        raise HTTPException(500, detail="Failed to update property")
    return jsonable_encoder(listing)


@router.post("/documents", status_code=201)
def create_document(
    payload: DocumentCreate,
    agency_id: int = Depends(current_agency),
    service: ListingService = Depends(get_listing_service),
):
    try:
        document = service.create_document(payload, agency_id=agency_id)
    except NotFoundError:
        raise HTTPException(404, detail="Property not found")
    except StoreError:
        raise HTTPException(500, detail="Failed to upload document")
    return jsonable_encoder(document)


@router.get("/addresses")
def suggest_addresses(
    q: str = Query(..., min_length=1),
    limit: int = Query(5, ge=1, le=20),
    suggester: AddressSuggester = Depends(get_address_suggester),
):
    return jsonable_encoder(suggester.suggest(q, limit=limit))


@router.get("/health")
def health(): return {"status": "ok"}

app.include_router(router)
