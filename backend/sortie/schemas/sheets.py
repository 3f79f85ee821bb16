from typing import Optional

from pydantic import BaseModel, EmailStr, Field, HttpUrl


class SheetsEntry(BaseModel):
    webhook_url: HttpUrl
    name: str = Field(..., min_length=1)
    email: EmailStr
    message: Optional[str] = ""
