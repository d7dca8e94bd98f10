from typing import List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from .common import blank_to_none


class BlogCreate(BaseModel):
    """
    Schema for creating a blog.

    ``related_searches`` holds search phrases (e.g. from AI assist) to
    create as related searches linked to the new blog.
    """
    title: str = Field(..., min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=255, pattern=r"^[a-z0-9_][a-z0-9_-]*$")
    author: Optional[str] = Field(None, max_length=255)
    category: Optional[str] = Field(None, max_length=255)
    content: Optional[str] = None
    featured_image: Optional[str] = None
    status: Literal["draft", "published"] = "draft"
    related_search_id: Optional[int] = None
    related_searches: List[str] = []

    @field_validator("slug", "author", "category", "content", "featured_image", mode="before")
    @classmethod
    def blank_optional(cls, value):
        return blank_to_none(value)


class BlogUpdate(BaseModel):
    """Schema for updating a blog"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, min_length=1, max_length=255, pattern=r"^[a-z0-9_][a-z0-9_-]*$")
    author: Optional[str] = Field(None, max_length=255)
    category: Optional[str] = Field(None, max_length=255)
    content: Optional[str] = None
    featured_image: Optional[str] = None
    status: Optional[Literal["draft", "published"]] = None
    related_search_id: Optional[int] = None


class BlogResponse(BaseModel):
    id: int
    title: str
    slug: str
    author: Optional[str] = None
    category: Optional[str] = None
    content: Optional[str] = None
    featured_image: Optional[str] = None
    status: str
    related_search_id: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
