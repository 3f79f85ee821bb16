import asyncio
from decimal import Decimal

import pytest

from sortie.schemas.booking import BookingCreate, BookingUpdate
from sortie.services import booking_service
from sortie.services.errors import NotFound, ValidationFailed


def booking_payload(trip_id, **overrides):
    values = {
        "name": "Amina Benali",
        "phone": "+213 555 12 34 56",
        "email": "amina@example.com",
        "trip_id": trip_id,
        "people": 2,
        "pickup": "Algiers",
        "notes": "",
        "coupon_code": "",
    }
    values.update(overrides)
    return BookingCreate(**values)


def test_submitted_booking_is_pending(db, make_trip):
    trip = make_trip()

    booking = booking_service.submit_booking(db, booking_payload(trip.id))

    assert booking.id is not None
    assert booking.status == "pending"
    assert booking.notes is None
    assert booking.coupon_code is None
    assert booking.discount_percent is None


def test_blank_email_is_stored_as_null(db, make_trip):
    trip = make_trip()

    booking = booking_service.submit_booking(db, booking_payload(trip.id, email="  "))

    assert booking.email is None


def test_invalid_email_is_rejected(make_trip):
    with pytest.raises(ValueError):
        booking_payload(1, email="not-an-email")


def test_coupon_discount_is_frozen_on_the_booking(db, make_trip, make_coupon):
    trip = make_trip(price=Decimal("15000"))
    coupon = make_coupon("SAVE10", 10)

    booking = booking_service.submit_booking(db, booking_payload(trip.id, coupon_code="SAVE10"))
    coupon.discount = 50
    db.commit()

    assert booking.coupon_code == "SAVE10"
    assert booking.discount_percent == 10
    price = booking_service.price_for(db, booking)
    assert price.total == Decimal("30000")
    assert price.discounted_total == Decimal("27000")


def test_invalid_coupon_blocks_submission(db, make_trip):
    trip = make_trip()

    with pytest.raises(ValidationFailed) as exc:
        booking_service.submit_booking(db, booking_payload(trip.id, coupon_code="BOGUS"))

    assert exc.value.errors == {"coupon_code": "not_found"}
    assert booking_service.list_bookings(db) == []


def test_price_is_unknown_when_trip_is_gone(db, make_trip):
    trip = make_trip()
    trip_id = trip.id
    booking = booking_service.submit_booking(db, booking_payload(trip_id))
    db.delete(trip)
    db.commit()

    assert booking_service.price_for(db, booking) is None
    assert booking_service.get_booking(db, booking.id).trip_id == trip_id


def test_unknown_trip_is_rejected(db):
    with pytest.raises(ValidationFailed) as exc:
        booking_service.submit_booking(db, booking_payload(999))

    assert exc.value.errors == {"trip_id": "unavailable"}
    assert booking_service.list_bookings(db) == []


def test_unavailable_trip_is_rejected(db, make_trip):
    trip = make_trip(is_available=False)

    with pytest.raises(ValidationFailed) as exc:
        booking_service.submit_booking(db, booking_payload(trip.id))

    assert "trip_id" in exc.value.errors
    assert booking_service.list_bookings(db) == []


def test_list_is_newest_first(db, make_trip):
    trip = make_trip()
    first = booking_service.submit_booking(db, booking_payload(trip.id, name="First"))
    second = booking_service.submit_booking(db, booking_payload(trip.id, name="Second"))

    assert [b.id for b in booking_service.list_bookings(db)] == [second.id, first.id]


def test_status_changes(db, make_trip):
    trip = make_trip()
    booking = booking_service.submit_booking(db, booking_payload(trip.id))

    booking_service.set_booking_status(db, booking.id, "confirmed")
    assert booking_service.get_booking(db, booking.id).status == "confirmed"

    with pytest.raises(ValidationFailed):
        booking_service.set_booking_status(db, booking.id, "cancelled")


def test_update_keeps_coupon_history(db, make_trip, make_coupon):
    trip = make_trip()
    make_coupon("SAVE10", 10)
    booking = booking_service.submit_booking(db, booking_payload(trip.id, coupon_code="SAVE10"))

    data = BookingUpdate(
        name="Amina B.",
        phone="0555000000",
        trip_id=trip.id,
        people=4,
        status="confirmed",
    )
    updated = booking_service.update_booking(db, booking.id, data)

    assert updated.name == "Amina B."
    assert updated.people == 4
    assert updated.coupon_code == "SAVE10"
    assert updated.discount_percent == 10


def test_delete(db, make_trip):
    trip = make_trip()
    booking_id = booking_service.submit_booking(db, booking_payload(trip.id)).id

    booking_service.delete_booking(db, booking_id)

    with pytest.raises(NotFound):
        booking_service.get_booking(db, booking_id)


def test_writes_publish_change_events(db, make_trip, feed):
    trip = make_trip()

    async def scenario():
        queue = feed.subscribe(booking_service.ENTITY)
        booking_id = booking_service.submit_booking(db, booking_payload(trip.id), feed=feed).id
        booking_service.set_booking_status(db, booking_id, "confirmed", feed=feed)
        booking_service.delete_booking(db, booking_id, feed=feed)

        events = []
        for _ in range(3):
            events.append(await asyncio.wait_for(queue.get(), timeout=1))
        return booking_id, events

    booking_id, events = asyncio.run(scenario())

    assert [e["event"] for e in events] == ["INSERT", "UPDATE", "DELETE"]
    assert {e["id"] for e in events} == {booking_id}
    assert all(e["entity"] == "bookings" for e in events)


def test_party_of_three_without_coupon(db, make_trip):
    trip = make_trip(price=Decimal("1000"))

    booking = booking_service.submit_booking(db, booking_payload(trip.id, people=3))

    assert booking.status == "pending"
    assert booking.coupon_code is None
    price = booking_service.price_for(db, booking)
    assert price.total == price.discounted_total == Decimal("3000")
