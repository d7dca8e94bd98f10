from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from .common import blank_to_none


class WebResultCreate(BaseModel):
    """
    Schema for creating a web result.

    The results page is given either directly or through the related
    search whose page the result should join.
    """
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    original_link: str = Field(..., min_length=1, max_length=2048)
    logo_url: Optional[str] = Field(None, max_length=2048)
    backlink: Optional[str] = Field(None, max_length=2048)
    web_result_page: Optional[int] = Field(None, ge=1, le=4)
    related_search_id: Optional[int] = None
    position: int = Field(1, ge=1)
    is_sponsored: bool = False
    prelanding_key: Optional[str] = Field(None, max_length=255)
    worldwide: bool = True
    country_codes: Optional[List[str]] = None
    is_active: bool = True

    @field_validator("description", "logo_url", "backlink", "prelanding_key", mode="before")
    @classmethod
    def blank_optional(cls, value):
        return blank_to_none(value)


class WebResultUpdate(BaseModel):
    """Schema for updating a web result"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    original_link: Optional[str] = Field(None, min_length=1, max_length=2048)
    logo_url: Optional[str] = Field(None, max_length=2048)
    backlink: Optional[str] = Field(None, max_length=2048)
    web_result_page: Optional[int] = Field(None, ge=1, le=4)
    related_search_id: Optional[int] = None
    position: Optional[int] = Field(None, ge=1)
    is_sponsored: Optional[bool] = None
    prelanding_key: Optional[str] = Field(None, max_length=255)
    worldwide: Optional[bool] = None
    country_codes: Optional[List[str]] = None
    is_active: Optional[bool] = None


class WebResultResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    original_link: str
    logo_url: Optional[str] = None
    backlink: Optional[str] = None
    web_result_page: int
    position: int
    is_sponsored: bool
    prelanding_key: Optional[str] = None
    worldwide: bool
    country_codes: List[str] = []
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @field_validator("country_codes", mode="before")
    @classmethod
    def split_country_codes(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [code for code in value.split(",") if code]
        return value


class PublicWebResult(BaseModel):
    """Web result as rendered on a results page"""
    id: int
    title: str
    description: Optional[str] = None
    logo_url: Optional[str] = None
    is_sponsored: bool
    masked_link: Optional[str] = None
    href: str
    opens_new_window: bool = False


class WebResultsPage(BaseModel):
    page: int
    sponsored: List[PublicWebResult]
    organic: List[PublicWebResult]
