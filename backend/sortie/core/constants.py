BOOKING_PENDING = "pending"
BOOKING_CONFIRMED = "confirmed"
BOOKING_STATUSES = (BOOKING_PENDING, BOOKING_CONFIRMED)

REGIONS = {
    "north": "North",
    "south": "South",
    "coast": "Coast",
}

PARTY_SIZES = list(range(1, 9))

TRIP_PLACEHOLDER_IMAGE = "/static/img/placeholder.svg"

BOOKINGS_CSV_HEADER = ["ID", "Name", "Email", "Phone", "Trip", "People", "Pickup", "Date", "Status"]

SHEETS_SOURCE = "Sortie Unique Admin Dashboard"

ROLE_ADMIN = "admin"
