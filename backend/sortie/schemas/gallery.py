from pydantic import BaseModel, Field, field_validator


class GalleryUpload(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v):
        return v.strip() if isinstance(v, str) else v
