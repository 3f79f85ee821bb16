import csv
import io
from typing import Dict, Iterable, Optional

from sortie.core.constants import BOOKINGS_CSV_HEADER
from sortie.models.booking import Booking


def _cell(value) -> str:
    return "" if value is None else str(value)


def booking_row(booking: Booking, trip_titles: Optional[Dict[int, str]] = None) -> list:
    trip_titles = trip_titles or {}
    created = booking.created_at.isoformat() if booking.created_at else ""
    return [
        _cell(booking.id),
        _cell(booking.name),
        _cell(booking.email),
        _cell(booking.phone),
        _cell(trip_titles.get(booking.trip_id, booking.trip_id)),
        _cell(booking.people),
        _cell(booking.pickup),
        created,
        _cell(booking.status),
    ]


def bookings_to_csv(
    bookings: Iterable[Booking],
    trip_titles: Optional[Dict[int, str]] = None,
) -> str:
    """Bookings as CSV text; values with commas, quotes or newlines get quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(BOOKINGS_CSV_HEADER)
    for booking in bookings:
        writer.writerow(booking_row(booking, trip_titles))
    return buffer.getvalue()
