from typing import Any, List, Literal

from pydantic import BaseModel, Field


def blank_to_none(value: Any) -> Any:
    """Treat whitespace-only form input as an absent value"""
    if isinstance(value, str) and not value.strip():
        return None
    return value


class BulkAction(BaseModel):
    """Schema for a bulk toolbar action over selected rows"""
    action: Literal["activate", "deactivate", "delete"]
    ids: List[int] = Field(..., min_length=1)


class BulkActionResult(BaseModel):
    action: str
    affected: int


class SelectedIds(BaseModel):
    """Selected rows for copy/export"""
    ids: List[int] = Field(..., min_length=1)


class CopyText(BaseModel):
    count: int
    text: str
