import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models import ClickEvent, LinkClickCounter, VisitorSession
from ..models.click_event import CLICK_TYPE_RELATED_SEARCH, CLICK_TYPE_WEB_RESULT

logger = logging.getLogger(__name__)


def record_session_visit(
    db: Session,
    session_id: str,
    device_type: Optional[str],
    user_agent: Optional[str],
    ip_address: Optional[str] = None,
    country: Optional[str] = None,
    source: Optional[str] = None,
) -> VisitorSession:
    """
    Upsert the session row for a landing visit.

    Last write wins on ``session_id``; ``last_activity`` is refreshed on
    every call. ``source`` is only set when one is known, so a later visit
    without a referer keeps the original source.
    """
    values = {
        "device_type": device_type,
        "user_agent": user_agent,
        "ip_address": ip_address,
        "country": country,
    }

    session = db.query(VisitorSession).filter(
        VisitorSession.session_id == session_id
    ).first()

    if session is None:
        session = VisitorSession(session_id=session_id, source=source, **values)
        db.add(session)
        try:
            db.commit()
        except IntegrityError:
            # Another request inserted the same session first
            db.rollback()
            session = db.query(VisitorSession).filter(
                VisitorSession.session_id == session_id
            ).one()
        else:
            db.refresh(session)
            return session

    for field, value in values.items():
        setattr(session, field, value)
    if source:
        session.source = source
    session.last_activity = func.now()

    db.commit()
    db.refresh(session)
    return session


def record_click(
    db: Session,
    session_id: str,
    click_type: str,
    target_id: int,
    device_type: Optional[str] = None,
    ip_address: Optional[str] = None,
    country: Optional[str] = None,
) -> ClickEvent:
    """
    Append one click event.

    ``target_id`` is a related search id for ``related_search`` clicks and a
    web result id for ``web_result`` clicks.
    """
    if click_type == CLICK_TYPE_RELATED_SEARCH:
        target = {"related_search_id": target_id}
    elif click_type == CLICK_TYPE_WEB_RESULT:
        target = {"web_result_id": target_id}
    else:
        raise ValueError(f"Unknown click type: {click_type}")

    click = ClickEvent(
        session_id=session_id,
        click_type=click_type,
        device_type=device_type,
        ip_address=ip_address,
        country=country,
        **target
    )
    db.add(click)
    db.commit()
    db.refresh(click)
    return click


def _bump_counter(db: Session, web_result_id: int) -> int:
    return db.query(LinkClickCounter).filter(
        LinkClickCounter.web_result_id == web_result_id
    ).update(
        {
            LinkClickCounter.total_clicks: LinkClickCounter.total_clicks + 1,
            LinkClickCounter.updated_at: func.now(),
        },
        synchronize_session=False
    )


def increment_link_counter(db: Session, web_result_id: int) -> None:
    """
    Count one click on a web result.

    The increment happens inside the UPDATE statement so concurrent clicks
    never overwrite each other. The first click inserts the counter row;
    if another request wins that insert the increment is applied to its row.
    ``unique_clicks`` is set on insert and not maintained afterwards.
    """
    if _bump_counter(db, web_result_id):
        db.commit()
        return

    db.add(LinkClickCounter(web_result_id=web_result_id, total_clicks=1, unique_clicks=1))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.debug(f"Counter for web result {web_result_id} created concurrently, incrementing")
        _bump_counter(db, web_result_id)
        db.commit()
