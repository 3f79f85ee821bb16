from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sortie.utils.dates import utcnow

from sortie.database.base import Base


class User(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True)
    email = Column(String(150), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(50), nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
