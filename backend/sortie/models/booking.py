from sqlalchemy import Column, Integer, String, Text, DateTime
from sortie.utils.dates import utcnow

from sortie.core.constants import BOOKING_PENDING
from sortie.database.base import Base


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String(150), nullable=False)
    phone = Column(String(30), nullable=False)
    email = Column(String(150), nullable=True)

    # soft reference: no foreign key, trips can be deleted under a booking
    trip_id = Column(Integer, nullable=False, index=True)
    people = Column(Integer, nullable=False, default=1)
    pickup = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    status = Column(String(20), nullable=False, default=BOOKING_PENDING)  # pending | confirmed

    coupon_code = Column(String(64), nullable=True)
    # discount resolved when the booking was made, kept even if the coupon changes later
    discount_percent = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
