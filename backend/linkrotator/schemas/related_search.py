from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from .common import blank_to_none


class RelatedSearchCreate(BaseModel):
    """Schema for creating a related search"""
    search_text: str = Field(..., min_length=1, max_length=255)
    title: Optional[str] = Field(None, max_length=255)
    web_result_page: int = Field(1, ge=1, le=4)
    position: int = Field(1, ge=1)
    display_order: int = 0
    is_active: bool = True
    blog_id: Optional[int] = None

    @field_validator("title", mode="before")
    @classmethod
    def blank_title(cls, value):
        return blank_to_none(value)

    @field_validator("search_text")
    @classmethod
    def search_text_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Search text is required")
        return value


class RelatedSearchUpdate(BaseModel):
    """Schema for updating a related search"""
    search_text: Optional[str] = Field(None, min_length=1, max_length=255)
    title: Optional[str] = Field(None, max_length=255)
    web_result_page: Optional[int] = Field(None, ge=1, le=4)
    position: Optional[int] = Field(None, ge=1)
    display_order: Optional[int] = None
    is_active: Optional[bool] = None
    blog_id: Optional[int] = None


class RelatedSearchResponse(BaseModel):
    id: int
    search_text: str
    title: Optional[str] = None
    web_result_page: int
    position: int
    display_order: int
    is_active: bool
    blog_id: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PublicRelatedSearch(BaseModel):
    """Related search as shown to visitors"""
    id: int
    search_text: str
    title: Optional[str] = None
    web_result_page: int
    href: str
