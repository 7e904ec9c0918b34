"""Repository over the relational listings table."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence

from sqlalchemy import and_, or_, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.sql.elements import ColumnElement

from ..errors import StoreError
from ..models.listing import Coordinates, Document, Listing
from ..utils.logging import get_logger
from .database import init_db, make_engine, make_session_factory
from .mappers import map_document_row, map_listing_row
from .tables import DocumentRow, ListingRow

LOGGER = get_logger("db.repo")

# columns a client may change through an update; coordinates are not among them
UPDATABLE_COLUMNS = (
    "title",
    "description",
    "price",
    "location",
    "bedrooms",
    "bathrooms",
    "area",
    "type",
    "transaction_type",
    "features",
    "images",
)


class Repo:
    def __init__(self, engine: Optional[Engine] = None) -> None:
        self.engine = engine or make_engine()
        init_db(self.engine)
        self._session_factory: sessionmaker[Session] = make_session_factory(self.engine)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            LOGGER.error("store_failure error=%s", exc)
            raise StoreError(str(exc)) from exc
        finally:
            session.close()

    # ------------------------------------------------------------------
    # Listings
    def list_listings(self, predicates: Sequence[ColumnElement[bool]] = ()) -> List[Listing]:
        stmt = select(ListingRow)
        if predicates:
            stmt = stmt.where(and_(*predicates))
        stmt = stmt.order_by(ListingRow.created_at.desc(), ListingRow.id.desc())
        with self._session() as session:
            rows = session.scalars(stmt).all()
            return [map_listing_row(row) for row in rows]

    def get_listing(self, listing_id: int) -> Optional[Listing]:
        with self._session() as session:
            row = session.get(ListingRow, listing_id)
            return map_listing_row(row) if row is not None else None

    def create_listing(self, values: Dict[str, Any]) -> Listing:
        with self._session() as session:
            row = ListingRow(**values)
            session.add(row)
            session.flush()
            session.refresh(row)
            LOGGER.info("listing_created id=%s agency_id=%s", row.id, row.agency_id)
            return map_listing_row(row)

    def update_listing(self, listing_id: int, values: Dict[str, Any], agency_id: int) -> Optional[Listing]:
        """Apply ``values`` to a listing owned by ``agency_id``.

        Returns ``None`` when the listing does not exist or belongs to another
        agency. A changed location clears the stored coordinates so the
        backfill sweep resolves the new address.
        """

        with self._session() as session:
            row = session.get(ListingRow, listing_id)
            if row is None or row.agency_id != agency_id:
                return None
            location_changed = "location" in values and values["location"] != row.location
            for column, value in values.items():
                if column in UPDATABLE_COLUMNS:
                    setattr(row, column, value)
            if location_changed:
                row.latitude = None
                row.longitude = None
            session.flush()
            return map_listing_row(row)

    def set_coordinates(self, listing_id: int, coordinates: Coordinates) -> bool:
        with self._session() as session:
            row = session.get(ListingRow, listing_id)
            if row is None:
                return False
            row.latitude = coordinates.lat
            row.longitude = coordinates.lon
            return True

    def listings_missing_coordinates(self) -> List[Listing]:
        stmt = (
            select(ListingRow)
            .where(
                or_(
                    ListingRow.latitude.is_(None),
                    ListingRow.longitude.is_(None),
                    ListingRow.latitude == "",
                    ListingRow.longitude == "",
                )
            )
            .order_by(ListingRow.id)
        )
        with self._session() as session:
            return [map_listing_row(row) for row in session.scalars(stmt).all()]

    # ------------------------------------------------------------------
    # Documents
    def create_document(self, values: Dict[str, Any]) -> Document:
        with self._session() as session:
            row = DocumentRow(**values)
            session.add(row)
            session.flush()
            session.refresh(row)
            return map_document_row(row)


_repo_singleton: Repo | None = None


def get_repository() -> Repo:
    global _repo_singleton
    if _repo_singleton is None:
        _repo_singleton = Repo()
    return _repo_singleton
