from typing import Optional
from pydantic import BaseModel, Field


class LandingContentUpdate(BaseModel):
    """Schema for the landing page hero copy"""
    title: str = Field("", max_length=255)
    description: str = Field("", max_length=5000)


class LandingContentResponse(BaseModel):
    id: Optional[int] = None
    title: str = ""
    description: str = ""

    class Config:
        from_attributes = True
