from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import RelatedSearch, WebResult
from ..schemas.analytics import (
    AnalyticsOverview, ClickBreakdown, ClickTrends, RelatedSearchStats,
    SessionSummary, WebResultStats,
)
from ..services import analytics
from ..services.content import get_row

router = APIRouter(prefix="/admin/analytics", tags=["analytics"])

PERIOD_PATTERN = "^(24h|7d|30d|90d)$"


@router.get("/overview", response_model=AnalyticsOverview)
async def get_overview(db: Session = Depends(get_db)):
    """Sessions, page views, clicks and captured emails"""
    return analytics.get_overview(db)


@router.get("/sessions", response_model=List[SessionSummary])
async def get_sessions(
    limit: int = Query(analytics.RECENT_SESSIONS_LIMIT, ge=1, le=500),
    db: Session = Depends(get_db)
):
    """Most recently active sessions with their click counts"""
    return analytics.get_session_summaries(db, limit=limit)


@router.get("/related-searches", response_model=List[RelatedSearchStats])
async def get_related_search_stats(db: Session = Depends(get_db)):
    return analytics.get_related_search_stats(db)


@router.get("/related-searches/{search_id}/clicks", response_model=ClickBreakdown)
async def get_related_search_clicks(
    search_id: int,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db)
):
    search = get_row(db, RelatedSearch, search_id, "Related search")
    return analytics.get_click_breakdown(
        db, search.search_text, related_search_id=search_id, skip=skip, limit=limit
    )


@router.get("/web-results", response_model=List[WebResultStats])
async def get_web_result_stats(db: Session = Depends(get_db)):
    return analytics.get_web_result_stats(db)


@router.get("/web-results/{result_id}/clicks", response_model=ClickBreakdown)
async def get_web_result_clicks(
    result_id: int,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db)
):
    result = get_row(db, WebResult, result_id, "Web result")
    return analytics.get_click_breakdown(
        db, result.title, web_result_id=result_id, skip=skip, limit=limit
    )


@router.get("/clicks", response_model=ClickBreakdown)
async def get_all_clicks(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db)
):
    """Every click event, newest first, one page at a time"""
    return analytics.get_click_breakdown(db, "All clicks", skip=skip, limit=limit)


@router.get("/trends", response_model=ClickTrends)
async def get_trends(
    period: str = Query("7d", pattern=PERIOD_PATTERN),
    db: Session = Depends(get_db)
):
    """
    Click distribution over a period.

    Period options: 24h, 7d, 30d, 90d
    """
    return analytics.get_click_trends(db, period)
