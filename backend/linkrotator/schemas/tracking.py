from typing import Optional
from pydantic import BaseModel, Field


class SessionVisit(BaseModel):
    """Landing visit reported by a script-driven client"""
    session_id: Optional[str] = Field(None, max_length=64)
    source: Optional[str] = Field(None, max_length=255)


class SessionVisitResult(BaseModel):
    session_id: str
    device_type: str


class ClickRequest(BaseModel):
    session_id: Optional[str] = Field(None, max_length=64)


class ClickRedirect(BaseModel):
    """Where the visitor goes after a tracked click"""
    redirect: str
    via_prelanding: bool = False
    opens_new_window: bool = False
