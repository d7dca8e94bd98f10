"""
Visitor navigation: landing -> web results -> [pre-landing ->] external site.

Every hop that the visitor takes through a tracked link records a click.
Recording failures are logged and never block the visitor.
"""
import logging
from typing import List, Optional, Tuple
from urllib.parse import quote

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import Settings
from ..core.errors import InvalidInputError, NotFoundError
from ..core.session import Visitor
from ..models import Blog, EmailCapture, LandingContent, Prelanding, RelatedSearch, WebResult
from ..models.blog import BLOG_STATUS_PUBLISHED
from ..models.click_event import CLICK_TYPE_RELATED_SEARCH, CLICK_TYPE_WEB_RESULT
from ..utils.validators import is_valid_url
from .tracking import increment_link_counter, record_click

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1

# Characters encodeURIComponent leaves alone
_URI_COMPONENT_SAFE = "-_.!~*'()"


def search_href(search_id: int) -> str:
    return f"/go/search/{search_id}"


def result_href(result_id: int) -> str:
    return f"/go/result/{result_id}"


def web_results_path(page: int) -> str:
    return f"/webresult/{page}"


def prelanding_path(key: str, redirect_url: str, result_id: int) -> str:
    """Pre-landing URL carrying the destination and the clicked result id"""
    return (
        f"/prelanding/{quote(key, safe='')}"
        f"?redirect={quote(redirect_url, safe=_URI_COMPONENT_SAFE)}&rid={result_id}"
    )


def parse_page_number(raw: Optional[str]) -> int:
    """
    Read a results page number from ``"3"`` or ``"wr=3"``.

    Anything that is not a positive integer falls back to page 1.
    """
    if not raw:
        return DEFAULT_PAGE
    if "=" in raw:
        raw = raw.split("=", 1)[1]
    try:
        page = int(raw.strip())
    except ValueError:
        return DEFAULT_PAGE
    return page if page > 0 else DEFAULT_PAGE


# ---- Landing ----

def get_landing_content(db: Session) -> Optional[LandingContent]:
    return db.query(LandingContent).order_by(LandingContent.id).first()


def list_active_related_searches(db: Session) -> List[RelatedSearch]:
    return db.query(RelatedSearch).filter(
        RelatedSearch.is_active == True
    ).order_by(RelatedSearch.display_order, RelatedSearch.id).all()


def landing_view(db: Session) -> dict:
    """Hero copy plus the active related-search buttons"""
    content = get_landing_content(db)
    searches = list_active_related_searches(db)

    return {
        "title": content.title if content else "",
        "description": content.description if content else "",
        "searches": [
            {
                "id": search.id,
                "search_text": search.search_text,
                "title": search.title,
                "web_result_page": search.web_result_page,
                "href": search_href(search.id),
            }
            for search in searches
        ],
    }


def _safe_record(db: Session, action: str, func, *args, **kwargs) -> None:
    try:
        func(db, *args, **kwargs)
    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Failed to {action}", exc_info=True)


def follow_related_search(db: Session, search_id: int, visitor: Visitor) -> str:
    """
    Record a related-search click and return the results page path.

    Raises:
        NotFoundError: If the search does not exist or is inactive
    """
    search = db.query(RelatedSearch).filter(
        RelatedSearch.id == search_id,
        RelatedSearch.is_active == True
    ).first()

    if not search:
        raise NotFoundError("Related search", search_id)

    page = search.web_result_page
    _safe_record(
        db, f"record click on related search {search_id}", record_click,
        visitor.session_id, CLICK_TYPE_RELATED_SEARCH, search_id,
        device_type=visitor.device_type,
        ip_address=visitor.ip_address,
        country=visitor.country,
    )
    return web_results_path(page)


# ---- Web results ----

def list_page_results(db: Session, page: int) -> List[WebResult]:
    return db.query(WebResult).filter(
        WebResult.web_result_page == page,
        WebResult.is_active == True
    ).order_by(WebResult.position, WebResult.id).all()


def web_results_page(db: Session, page: int, settings: Settings) -> dict:
    """
    Active results for a page, sponsored first.

    Sponsored results carry a masked link label numbered from 1 within the
    sponsored group.
    """
    sponsored, organic = [], []
    for result in list_page_results(db, page):
        item = {
            "id": result.id,
            "title": result.title,
            "description": result.description,
            "logo_url": result.logo_url,
            "is_sponsored": bool(result.is_sponsored),
            "masked_link": None,
            "href": result_href(result.id),
            # Direct links leave the site, pre-landings stay in the same tab
            "opens_new_window": result.prelanding_key is None,
        }
        if result.is_sponsored:
            item["masked_link"] = f"{settings.MASKED_LINK_PREFIX}{len(sponsored) + 1}"
            sponsored.append(item)
        else:
            organic.append(item)

    return {"page": page, "sponsored": sponsored, "organic": organic}


def follow_web_result(db: Session, result_id: int, visitor: Visitor) -> Tuple[str, bool]:
    """
    Record a web-result click, count it and decide where the visitor goes.

    Returns:
        Tuple of (redirect target, passes through a pre-landing)

    Raises:
        NotFoundError: If the result does not exist or is inactive
    """
    result = db.query(WebResult).filter(
        WebResult.id == result_id,
        WebResult.is_active == True
    ).first()

    if not result:
        raise NotFoundError("Web result", result_id)

    original_link = result.original_link
    prelanding_key = result.prelanding_key

    _safe_record(
        db, f"record click on web result {result_id}", record_click,
        visitor.session_id, CLICK_TYPE_WEB_RESULT, result_id,
        device_type=visitor.device_type,
        ip_address=visitor.ip_address,
        country=visitor.country,
    )
    _safe_record(db, f"increment counter for web result {result_id}", increment_link_counter, result_id)

    if prelanding_key:
        return prelanding_path(prelanding_key, original_link, result_id), True
    return original_link, False


# ---- Pre-landing ----

def get_active_prelanding(db: Session, key: str) -> Prelanding:
    """
    Raises:
        NotFoundError: If no active pre-landing has this key
    """
    prelanding = db.query(Prelanding).filter(
        Prelanding.key == key,
        Prelanding.is_active == True
    ).first()

    if not prelanding:
        raise NotFoundError("Pre-landing", key)

    return prelanding


def _parse_result_id(db: Session, rid: Optional[str]) -> Optional[int]:
    if not rid:
        return None
    try:
        result_id = int(rid)
    except ValueError:
        return None
    exists = db.query(WebResult.id).filter(WebResult.id == result_id).first()
    return result_id if exists else None


def capture_email(
    db: Session,
    key: str,
    email: str,
    redirect_url: str,
    rid: Optional[str],
    settings: Settings,
) -> dict:
    """
    Store an email captured on a pre-landing page.

    The email only has to be non-empty. The redirect has to be a public
    http(s) URL.

    Returns:
        Redirect target and the delay before the browser should follow it

    Raises:
        NotFoundError: If the pre-landing is missing or inactive
        InvalidInputError: On an empty email or an unusable redirect
    """
    prelanding = get_active_prelanding(db, key)

    email = (email or "").strip()
    if not email:
        raise InvalidInputError("Please enter your email")

    is_valid, error_msg = is_valid_url(redirect_url)
    if not is_valid:
        raise InvalidInputError(error_msg)

    capture = EmailCapture(
        email=email,
        prelanding_key=prelanding.key,
        web_result_id=_parse_result_id(db, rid),
    )
    db.add(capture)
    db.commit()

    logger.info(f"Captured email on pre-landing {prelanding.key}")

    return {"redirect": redirect_url, "delay_ms": settings.PRELANDING_REDIRECT_DELAY_MS}


# ---- Blog ----

def get_published_blog(db: Session, slug: str) -> Blog:
    """
    Raises:
        NotFoundError: If the blog does not exist or is not published
    """
    blog = db.query(Blog).filter(
        Blog.slug == slug,
        Blog.status == BLOG_STATUS_PUBLISHED
    ).first()

    if not blog:
        raise NotFoundError("Blog", slug)

    return blog


def blog_related_searches(db: Session, blog: Blog) -> List[RelatedSearch]:
    """Active searches linked to a blog, the primary one first"""
    conditions = [RelatedSearch.blog_id == blog.id]
    if blog.related_search_id:
        conditions.append(RelatedSearch.id == blog.related_search_id)

    searches = db.query(RelatedSearch).filter(
        or_(*conditions),
        RelatedSearch.is_active == True
    ).order_by(RelatedSearch.display_order, RelatedSearch.id).all()

    searches.sort(key=lambda search: search.id != blog.related_search_id)
    return searches
