from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from sortie.core.constants import REGIONS


def split_features(raw: Optional[str]) -> List[str]:
    """'Camel trekking, Desert camping' -> ['Camel trekking', 'Desert camping']"""
    if not raw:
        return []
    return [f.strip() for f in raw.split(",") if f.strip()]


def parse_int(value, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def parse_price(value) -> Decimal:
    try:
        return Decimal(str(value).strip())
    except (ArithmeticError, ValueError):
        return Decimal("0")


class TripBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    destination: str = Field(..., min_length=1, max_length=200)
    region: Optional[str] = None
    duration: Optional[str] = Field(None, max_length=100)
    max_people: int = Field(0, ge=0)
    price: Decimal = Field(Decimal("0"), ge=0)
    features: List[str] = []
    is_available: bool = True

    @field_validator("title", "description", "destination", mode="before")
    @classmethod
    def strip_required(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("region", mode="before")
    @classmethod
    def known_region(cls, v):
        if not v:
            return None
        if v not in REGIONS:
            raise ValueError("Unknown region")
        return v


class TripCreate(TripBase):
    pass


class TripUpdate(TripBase):
    pass


class TripCard(BaseModel):
    """Catalog shape shown on public pages and the booking form."""

    id: int
    name: str
    description: str
    destination: str
    region: Optional[str] = None
    duration: Optional[str] = None
    max_people: int = 0
    price: Decimal
    image: str
    features: List[str] = []
