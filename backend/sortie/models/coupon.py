from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sortie.utils.dates import utcnow

from sortie.database.base import Base


class Coupon(Base):
    __tablename__ = "coupons"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(64), unique=True, index=True, nullable=False)  # case-sensitive
    discount = Column(Integer, nullable=False)  # percentage, 0-100
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    expires_at = Column(DateTime(timezone=True), nullable=True)
