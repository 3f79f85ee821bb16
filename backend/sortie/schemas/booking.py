from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from sortie.core.constants import BOOKING_STATUSES


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


class BookingCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    phone: str = Field(..., min_length=1, max_length=30)
    email: Optional[EmailStr] = None
    trip_id: int
    people: int = Field(..., ge=1)
    pickup: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None
    coupon_code: Optional[str] = None

    @field_validator("name", "phone", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email", "pickup", "notes", "coupon_code", mode="before")
    @classmethod
    def blank_optional(cls, v):
        return _blank_to_none(v)


class BookingUpdate(BookingCreate):
    status: str

    @field_validator("status")
    @classmethod
    def known_status(cls, v):
        if v not in BOOKING_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(BOOKING_STATUSES)}")
        return v
