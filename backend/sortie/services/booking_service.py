import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from sortie.core.constants import BOOKING_PENDING, BOOKING_STATUSES
from sortie.models.booking import Booking
from sortie.models.trip import Trip
from sortie.schemas.booking import BookingCreate, BookingUpdate
from sortie.services.change_feed import ChangeFeed
from sortie.services.coupon_service import validate_coupon
from sortie.services.errors import NotFound, PersistenceError, ValidationFailed
from sortie.services.pricing import PriceQuote, quote

logger = logging.getLogger(__name__)

ENTITY = "bookings"

TRIP_UNAVAILABLE = "Please select a trip from the catalog."


def _notify(feed: Optional[ChangeFeed], event: str, booking_id: int) -> None:
    if feed is not None:
        feed.publish(ENTITY, event, booking_id)


def _commit(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Booking write failed: %s", e)
        raise PersistenceError(str(e)) from e


def submit_booking(
    db: Session,
    payload: BookingCreate,
    *,
    now: Optional[datetime] = None,
    reveal_inactive: bool = False,
    feed: Optional[ChangeFeed] = None,
) -> Booking:
    """Persist a public booking request.

    The status is always ``pending``; only the admin can confirm. A coupon
    code sent with the form is checked again here and its discount is frozen
    on the booking. Only trips offered in the catalog can be booked.
    """
    trip = db.get(Trip, payload.trip_id)
    if trip is None or not trip.is_available:
        raise ValidationFailed(TRIP_UNAVAILABLE, {"trip_id": "unavailable"})

    coupon_code = None
    discount = None
    if payload.coupon_code:
        check = validate_coupon(db, payload.coupon_code, now=now, reveal_inactive=reveal_inactive)
        if not check.valid:
            raise ValidationFailed(check.message, {"coupon_code": check.reason.value})
        coupon_code, discount = check.code, check.discount

    booking = Booking(
        name=payload.name,
        phone=payload.phone,
        email=payload.email,
        trip_id=payload.trip_id,
        people=payload.people,
        pickup=payload.pickup,
        notes=payload.notes,
        status=BOOKING_PENDING,
        coupon_code=coupon_code,
        discount_percent=discount,
    )
    db.add(booking)
    _commit(db)
    db.refresh(booking)

    logger.info("Booking %s submitted for trip %s (%s people)", booking.id, booking.trip_id, booking.people)
    _notify(feed, "INSERT", booking.id)
    return booking


def price_for(db: Session, booking: Booking) -> Optional[PriceQuote]:
    """Price of a stored booking using its frozen discount; None if the trip is gone."""
    trip = db.get(Trip, booking.trip_id)
    if trip is None:
        return None
    return quote(trip.price, booking.people, booking.discount_percent)


# -------------------------------------------------
# Admin side
# -------------------------------------------------
def bookings_query(db: Session) -> Query:
    return db.query(Booking).order_by(Booking.created_at.desc(), Booking.id.desc())


def list_bookings(db: Session) -> List[Booking]:
    try:
        return bookings_query(db).all()
    except SQLAlchemyError as e:
        raise PersistenceError(str(e)) from e


def get_booking(db: Session, booking_id: int) -> Booking:
    booking = db.get(Booking, booking_id)
    if not booking:
        raise NotFound("Booking not found")
    return booking


def update_booking(
    db: Session,
    booking_id: int,
    data: BookingUpdate,
    *,
    feed: Optional[ChangeFeed] = None,
) -> Booking:
    booking = get_booking(db, booking_id)

    # the coupon is part of the booking history, not editable here
    for field, value in data.model_dump(exclude={"coupon_code"}).items():
        setattr(booking, field, value)

    _commit(db)
    db.refresh(booking)
    logger.info("Booking %s updated (status=%s)", booking.id, booking.status)
    _notify(feed, "UPDATE", booking.id)
    return booking


def set_booking_status(
    db: Session,
    booking_id: int,
    status: str,
    *,
    feed: Optional[ChangeFeed] = None,
) -> Booking:
    if status not in BOOKING_STATUSES:
        raise ValidationFailed(
            f"Status must be one of: {', '.join(BOOKING_STATUSES)}", {"status": status}
        )

    booking = get_booking(db, booking_id)
    booking.status = status
    _commit(db)
    db.refresh(booking)
    logger.info("Booking %s marked %s", booking.id, status)
    _notify(feed, "UPDATE", booking.id)
    return booking


def delete_booking(db: Session, booking_id: int, *, feed: Optional[ChangeFeed] = None) -> None:
    booking = get_booking(db, booking_id)
    db.delete(booking)
    _commit(db)
    logger.info("Booking %s deleted", booking_id)
    _notify(feed, "DELETE", booking_id)
