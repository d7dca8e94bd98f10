from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from .common import blank_to_none


class PrelandingCreate(BaseModel):
    """Schema for creating a pre-landing page"""
    key: Optional[str] = Field(None, max_length=255, pattern=r"^[a-z0-9][a-z0-9-]*$")
    headline: str = Field(..., min_length=1, max_length=255)
    subtitle: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    logo_url: Optional[str] = Field(None, max_length=2048)
    main_image_url: Optional[str] = Field(None, max_length=2048)
    redirect_description: Optional[str] = Field("You will be redirected to...", max_length=512)
    is_active: bool = True

    @field_validator(
        "key", "subtitle", "description", "logo_url", "main_image_url",
        "redirect_description", mode="before"
    )
    @classmethod
    def blank_optional(cls, value):
        return blank_to_none(value)


class PrelandingUpdate(BaseModel):
    """Schema for updating a pre-landing page (the key is immutable)"""
    headline: Optional[str] = Field(None, min_length=1, max_length=255)
    subtitle: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    logo_url: Optional[str] = Field(None, max_length=2048)
    main_image_url: Optional[str] = Field(None, max_length=2048)
    redirect_description: Optional[str] = Field(None, max_length=512)
    is_active: Optional[bool] = None


class PrelandingResponse(BaseModel):
    id: int
    key: str
    headline: str
    subtitle: Optional[str] = None
    description: Optional[str] = None
    logo_url: Optional[str] = None
    main_image_url: Optional[str] = None
    redirect_description: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EmailSubmission(BaseModel):
    """Email submitted on a pre-landing page"""
    email: str = Field(..., max_length=320)
    redirect: str = Field(..., min_length=1, max_length=2048)
    rid: Optional[str] = None


class EmailCaptureResult(BaseModel):
    redirect: str
    delay_ms: int


class EmailCaptureResponse(BaseModel):
    id: int
    email: str
    prelanding_key: str
    web_result_id: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
