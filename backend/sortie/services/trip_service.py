import logging
from typing import Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sortie.models.trip import Trip
from sortie.schemas.trip import TripCard, TripCreate, TripUpdate
from sortie.services.errors import NotFound, PersistenceError

logger = logging.getLogger(__name__)


def list_trips(db: Session, available_only: bool = False) -> List[Trip]:
    query = db.query(Trip)
    if available_only:
        query = query.filter(Trip.is_available == True)  # noqa: E712
    try:
        return query.order_by(Trip.created_at.desc(), Trip.id.desc()).all()
    except SQLAlchemyError as e:
        raise PersistenceError(str(e)) from e


def get_trip(db: Session, trip_id: int) -> Trip:
    trip = db.get(Trip, trip_id)
    if not trip:
        raise NotFound("Trip not found")
    return trip


def to_card(trip: Trip) -> TripCard:
    return TripCard(
        id=trip.id,
        name=trip.title,
        description=trip.description,
        destination=trip.destination,
        region=trip.region,
        duration=trip.duration,
        max_people=trip.max_people or 0,
        price=trip.price or 0,
        image=trip.image,
        features=list(trip.features or []),
    )


def load_catalog(db: Session) -> List[TripCard]:
    """Available trips in the shape public pages render."""
    return [to_card(t) for t in list_trips(db, available_only=True)]


def search_trips(
    trips: Iterable[TripCard],
    term: Optional[str] = None,
    region: Optional[str] = None,
) -> List[TripCard]:
    term = (term or "").strip().lower()
    region = region or "all"

    results = []
    for trip in trips:
        if region != "all" and trip.region != region:
            continue
        if term:
            haystack = [trip.name, trip.destination, *trip.features]
            if not any(term in (text or "").lower() for text in haystack):
                continue
        results.append(trip)
    return results


def _commit(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(str(e)) from e


def create_trip(db: Session, data: TripCreate, image: Optional[str] = None) -> Trip:
    trip = Trip(**data.model_dump())
    if image:
        trip.image = image
    db.add(trip)
    _commit(db)
    db.refresh(trip)
    logger.info("Trip %s created: %s", trip.id, trip.title)
    return trip


def update_trip(db: Session, trip_id: int, data: TripUpdate, image: Optional[str] = None) -> Trip:
    trip = get_trip(db, trip_id)
    for field, value in data.model_dump().items():
        setattr(trip, field, value)
    if image:
        trip.image = image
    _commit(db)
    db.refresh(trip)
    logger.info("Trip %s updated", trip.id)
    return trip


def delete_trip(db: Session, trip_id: int) -> None:
    # bookings keep their trip_id; there is no cascade
    trip = get_trip(db, trip_id)
    db.delete(trip)
    _commit(db)
    logger.info("Trip %s deleted", trip_id)
