from sqlalchemy import (
    Column, Integer, String, Text, Numeric,
    Boolean, DateTime, JSON
)
from sortie.utils.dates import utcnow

from sortie.core.constants import TRIP_PLACEHOLDER_IMAGE
from sortie.database.base import Base


class Trip(Base):
    __tablename__ = "trips"

    id = Column(Integer, primary_key=True, index=True)

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    destination = Column(String(200), nullable=False)
    region = Column(String(20), nullable=True)  # north | south | coast
    duration = Column(String(100), nullable=True)  # free text, e.g. "3 days / 2 nights"
    max_people = Column(Integer, nullable=False, default=0)
    price = Column(Numeric(10, 2), nullable=False, default=0)

    image = Column(String(500), nullable=False, default=TRIP_PLACEHOLDER_IMAGE)
    features = Column(JSON, nullable=False, default=list)

    is_available = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
