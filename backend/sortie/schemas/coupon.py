from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class CouponBase(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)
    discount: int = Field(..., ge=0, le=100)
    is_active: bool = True
    expires_at: Optional[datetime] = None

    @field_validator("code", mode="before")
    @classmethod
    def strip_code(cls, v):
        # case is significant, surrounding whitespace is not
        return v.strip() if isinstance(v, str) else v

    @field_validator("expires_at", mode="before")
    @classmethod
    def blank_expiry(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class CouponCreate(CouponBase):
    pass


class CouponUpdate(CouponBase):
    pass
