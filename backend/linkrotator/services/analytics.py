from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from ..models import ClickEvent, EmailCapture, LinkClickCounter, RelatedSearch, VisitorSession, WebResult
from ..models.click_event import CLICK_TYPE_RELATED_SEARCH, CLICK_TYPE_WEB_RESULT

RECENT_SESSIONS_LIMIT = 50


def get_period_start(period: str) -> datetime:
    """Get start datetime for given period"""
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    if period == "24h":
        return now - timedelta(hours=24)
    elif period == "7d":
        return now - timedelta(days=7)
    elif period == "30d":
        return now - timedelta(days=30)
    elif period == "90d":
        return now - timedelta(days=90)
    return now - timedelta(days=7)  # default


def _percentage(part: int, total: int) -> float:
    return round(part / total * 100, 1) if total > 0 else 0


def _search_click_sum():
    return func.sum(case((ClickEvent.click_type == CLICK_TYPE_RELATED_SEARCH, 1), else_=0))


def get_overview(db: Session) -> dict:
    """Headline counters; every click counts as a page view"""
    sessions = db.query(func.count(VisitorSession.id)).scalar() or 0
    total_clicks = db.query(func.count(ClickEvent.id)).scalar() or 0
    search_clicks = db.query(func.count(ClickEvent.id)).filter(
        ClickEvent.click_type == CLICK_TYPE_RELATED_SEARCH
    ).scalar() or 0
    web_result_clicks = db.query(func.count(ClickEvent.id)).filter(
        ClickEvent.click_type == CLICK_TYPE_WEB_RESULT
    ).scalar() or 0
    email_captures = db.query(func.count(EmailCapture.id)).scalar() or 0

    return {
        "sessions": sessions,
        "page_views": total_clicks,
        "total_clicks": total_clicks,
        "search_clicks": search_clicks,
        "web_result_clicks": web_result_clicks,
        "email_captures": email_captures,
    }


def get_session_summaries(db: Session, limit: int = RECENT_SESSIONS_LIMIT) -> List[dict]:
    """Most recently active sessions with their click counts"""
    click_counts = db.query(
        ClickEvent.session_id.label("session_id"),
        func.count(ClickEvent.id).label("clicks"),
        _search_click_sum().label("search_clicks"),
    ).group_by(ClickEvent.session_id).subquery()

    rows = db.query(
        VisitorSession,
        click_counts.c.clicks,
        click_counts.c.search_clicks,
    ).outerjoin(
        click_counts, click_counts.c.session_id == VisitorSession.session_id
    ).order_by(
        VisitorSession.last_activity.desc(), VisitorSession.id.desc()
    ).limit(limit).all()

    return [
        {
            "session_id": session.session_id,
            "ip_address": session.ip_address,
            "country": session.country,
            "source": session.source,
            "device_type": session.device_type,
            "last_activity": session.last_activity,
            "page_views": clicks or 0,
            "clicks": clicks or 0,
            "search_clicks": search_clicks or 0,
        }
        for session, clicks, search_clicks in rows
    ]


def get_related_search_stats(db: Session) -> List[dict]:
    """Every related search with its click count, busiest first"""
    rows = db.query(
        RelatedSearch.id,
        RelatedSearch.search_text,
        func.count(ClickEvent.id).label("click_count"),
    ).outerjoin(
        ClickEvent, ClickEvent.related_search_id == RelatedSearch.id
    ).group_by(
        RelatedSearch.id, RelatedSearch.search_text
    ).order_by(
        func.count(ClickEvent.id).desc(), RelatedSearch.id
    ).all()

    return [
        {"id": row.id, "search_text": row.search_text, "click_count": row.click_count}
        for row in rows
    ]


def get_web_result_stats(db: Session) -> List[dict]:
    """Every web result with logged clicks and its counter totals"""
    click_counts = db.query(
        ClickEvent.web_result_id.label("web_result_id"),
        func.count(ClickEvent.id).label("clicks"),
    ).filter(
        ClickEvent.web_result_id.isnot(None)
    ).group_by(ClickEvent.web_result_id).subquery()

    rows = db.query(
        WebResult.id,
        WebResult.title,
        WebResult.web_result_page,
        click_counts.c.clicks,
        LinkClickCounter.total_clicks,
        LinkClickCounter.unique_clicks,
    ).outerjoin(
        click_counts, click_counts.c.web_result_id == WebResult.id
    ).outerjoin(
        LinkClickCounter, LinkClickCounter.web_result_id == WebResult.id
    ).order_by(
        WebResult.web_result_page, WebResult.position, WebResult.id
    ).all()

    return [
        {
            "id": row.id,
            "title": row.title,
            "web_result_page": row.web_result_page,
            "click_count": row.clicks or 0,
            "total_clicks": row.total_clicks or 0,
            "unique_clicks": row.unique_clicks or 0,
        }
        for row in rows
    ]


def get_click_breakdown(
    db: Session,
    label: str,
    related_search_id: Optional[int] = None,
    web_result_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
) -> dict:
    """
    One page of click events newest first.

    ``total`` and ``unique_ips`` cover every matching click, not just the page.
    """
    query = db.query(ClickEvent)
    if related_search_id is not None:
        query = query.filter(ClickEvent.related_search_id == related_search_id)
    if web_result_id is not None:
        query = query.filter(ClickEvent.web_result_id == web_result_id)

    total = query.count()
    unique_ips = query.filter(ClickEvent.ip_address.isnot(None)).with_entities(
        func.count(func.distinct(ClickEvent.ip_address))
    ).scalar()
    clicks = query.order_by(
        ClickEvent.timestamp.desc(), ClickEvent.id.desc()
    ).offset(skip).limit(limit).all()

    return {
        "label": label,
        "total": total,
        "unique_ips": unique_ips or 0,
        "clicks": clicks,
    }


def get_clicks_by_day(db: Session, period: str) -> List[dict]:
    """Get clicks aggregated by day"""
    start_date = get_period_start(period)

    results = db.query(
        func.date(ClickEvent.timestamp).label('date'),
        func.count(ClickEvent.id).label('clicks'),
    ).filter(
        ClickEvent.timestamp >= start_date
    ).group_by(
        func.date(ClickEvent.timestamp)
    ).order_by(
        func.date(ClickEvent.timestamp)
    ).all()

    return [
        {
            "timestamp": row.date if isinstance(row.date, str) else row.date.isoformat() if row.date else "",
            "clicks": row.clicks,
        }
        for row in results
    ]


def get_clicks_by_country(db: Session, period: str, limit: int = 20) -> List[dict]:
    """Get clicks aggregated by country"""
    start_date = get_period_start(period)

    results = db.query(
        ClickEvent.country,
        func.count(ClickEvent.id).label('clicks')
    ).filter(
        ClickEvent.timestamp >= start_date
    ).group_by(
        ClickEvent.country
    ).order_by(
        func.count(ClickEvent.id).desc()
    ).limit(limit).all()

    total = sum(row.clicks for row in results)

    return [
        {
            "country": row.country or "Unknown",
            "clicks": row.clicks,
            "percentage": _percentage(row.clicks, total),
        }
        for row in results
    ]


def get_clicks_by_device(db: Session, period: str) -> List[dict]:
    """Get clicks aggregated by device type"""
    start_date = get_period_start(period)

    results = db.query(
        ClickEvent.device_type,
        func.count(ClickEvent.id).label('clicks')
    ).filter(
        ClickEvent.timestamp >= start_date
    ).group_by(
        ClickEvent.device_type
    ).order_by(
        func.count(ClickEvent.id).desc()
    ).all()

    total = sum(row.clicks for row in results)

    return [
        {
            "device_type": row.device_type or "Unknown",
            "clicks": row.clicks,
            "percentage": _percentage(row.clicks, total),
        }
        for row in results
    ]


def get_click_trends(db: Session, period: str) -> dict:
    """Get click distribution over a period"""
    start_date = get_period_start(period)
    total_clicks = db.query(func.count(ClickEvent.id)).filter(
        ClickEvent.timestamp >= start_date
    ).scalar() or 0

    return {
        "period": period,
        "total_clicks": total_clicks,
        "clicks_by_time": get_clicks_by_day(db, period),
        "clicks_by_country": get_clicks_by_country(db, period),
        "clicks_by_device": get_clicks_by_device(db, period),
    }
