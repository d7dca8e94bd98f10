from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel


class AnalyticsOverview(BaseModel):
    """Headline counters for the analytics tab"""
    sessions: int
    page_views: int
    total_clicks: int
    search_clicks: int
    web_result_clicks: int
    email_captures: int


class SessionSummary(BaseModel):
    """Session row with its click counts"""
    session_id: str
    ip_address: Optional[str]
    country: Optional[str]
    source: Optional[str]
    device_type: Optional[str]
    last_activity: Optional[datetime]
    page_views: int
    clicks: int
    search_clicks: int


class RelatedSearchStats(BaseModel):
    id: int
    search_text: str
    click_count: int


class WebResultStats(BaseModel):
    id: int
    title: str
    web_result_page: int
    click_count: int
    total_clicks: int
    unique_clicks: int


class ClickDetail(BaseModel):
    id: int
    session_id: str
    click_type: str
    ip_address: Optional[str]
    country: Optional[str]
    device_type: Optional[str]
    timestamp: Optional[datetime]

    class Config:
        from_attributes = True


class ClickBreakdown(BaseModel):
    """Click events for one search, one result, or all of them"""
    label: str
    total: int
    unique_ips: int
    clicks: List[ClickDetail]


class TimeSeriesPoint(BaseModel):
    """Single point in time series data"""
    timestamp: str  # ISO date
    clicks: int


class CountryStats(BaseModel):
    """Country-level statistics"""
    country: Optional[str]
    clicks: int
    percentage: float


class DeviceStats(BaseModel):
    device_type: Optional[str]
    clicks: int
    percentage: float


class ClickTrends(BaseModel):
    """Click distribution over a period"""
    period: str  # "24h", "7d", "30d", "90d"
    total_clicks: int
    clicks_by_time: List[TimeSeriesPoint]
    clicks_by_country: List[CountryStats]
    clicks_by_device: List[DeviceStats]
