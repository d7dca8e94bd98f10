"""
Content store rules shared by single-row and bulk admin operations.

Deletes clean up dependent rows first (click events, counters, email
captures, references held by other tables) and commit everything at once.
"""
import logging
import time
from typing import Iterable, List, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import Settings
from ..core.errors import InvalidInputError, NotFoundError
from ..core.slugs import generate_blog_slug, generate_prelanding_key, to_base36
from ..models import (
    Blog, ClickEvent, EmailCapture, LandingContent, LinkClickCounter,
    Prelanding, RelatedSearch, WebResult,
)
from ..models.blog import BLOG_STATUS_DRAFT, BLOG_STATUS_PUBLISHED
from ..schemas import (
    BlogCreate, BlogUpdate, LandingContentUpdate, PrelandingCreate, PrelandingUpdate,
    RelatedSearchCreate, RelatedSearchUpdate, WebResultCreate, WebResultUpdate,
)
from ..utils.validators import is_valid_url

logger = logging.getLogger(__name__)

MAX_WEB_RESULT_PAGE = 4

RELATED_SEARCH_COLUMNS = [
    'id', 'search_text', 'title', 'web_result_page', 'position', 'display_order', 'is_active', 'blog_id'
]
WEB_RESULT_COLUMNS = [
    'id', 'title', 'description', 'original_link', 'web_result_page', 'position', 'is_active', 'is_sponsored'
]
PRELANDING_COLUMNS = ['id', 'key', 'headline', 'subtitle', 'is_active']
BLOG_COLUMNS = ['id', 'title', 'slug', 'author', 'category', 'status']
EMAIL_CAPTURE_COLUMNS = ['id', 'email', 'prelanding_key', 'web_result_id', 'created_at']


def get_row(db: Session, model, row_id: int, entity: str):
    """
    Raises:
        NotFoundError: If no row has this id
    """
    row = db.query(model).filter(model.id == row_id).first()
    if not row:
        raise NotFoundError(entity, row_id)
    return row


def get_rows(db: Session, model, ids: Optional[Sequence[int]] = None, order_by=None) -> list:
    query = db.query(model)
    if ids is not None:
        query = query.filter(model.id.in_(ids))
    if order_by is not None:
        query = query.order_by(*order_by)
    return query.all()


def _commit(db: Session, conflict_message: str, generic_message: str, marker: str) -> None:
    """Commit, turning constraint violations into InvalidInputError"""
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Integrity error: {e.orig}")
        if marker in str(e.orig).lower():
            raise InvalidInputError(conflict_message)
        raise InvalidInputError(generic_message)


def set_active(db: Session, model, ids: Sequence[int], is_active: bool) -> int:
    """Flip ``is_active`` on every selected row in one statement"""
    affected = db.query(model).filter(model.id.in_(ids)).update(
        {model.is_active: is_active}, synchronize_session=False
    )
    db.commit()
    return affected


# ---- Landing content ----

def save_landing_content(db: Session, payload: LandingContentUpdate) -> LandingContent:
    """Update the singleton landing row, creating it on first save"""
    content = db.query(LandingContent).order_by(LandingContent.id).first()
    if content is None:
        content = LandingContent(title=payload.title, description=payload.description)
        db.add(content)
    else:
        content.title = payload.title
        content.description = payload.description
    db.commit()
    db.refresh(content)
    return content


# ---- Related searches ----

def _check_blog(db: Session, blog_id: Optional[int]) -> None:
    if blog_id is not None and not db.query(Blog.id).filter(Blog.id == blog_id).first():
        raise InvalidInputError(f"Blog {blog_id} does not exist")


def create_related_search(db: Session, payload: RelatedSearchCreate) -> RelatedSearch:
    _check_blog(db, payload.blog_id)

    data = payload.model_dump()
    data["title"] = data["title"] or data["search_text"]
    search = RelatedSearch(**data)
    db.add(search)
    db.commit()
    db.refresh(search)
    return search


def update_related_search(db: Session, search: RelatedSearch, payload: RelatedSearchUpdate) -> RelatedSearch:
    data = payload.model_dump(exclude_unset=True)
    if "blog_id" in data:
        _check_blog(db, data["blog_id"])
    for field in ("search_text", "web_result_page", "position", "display_order", "is_active"):
        if field in data and data[field] is None:
            data.pop(field)

    for field, value in data.items():
        setattr(search, field, value)
    if not search.title:
        search.title = search.search_text

    db.commit()
    db.refresh(search)
    return search


def delete_related_searches(db: Session, ids: Sequence[int]) -> int:
    """Delete searches along with their click events"""
    db.query(ClickEvent).filter(ClickEvent.related_search_id.in_(ids)).delete(
        synchronize_session=False
    )
    db.query(Blog).filter(Blog.related_search_id.in_(ids)).update(
        {Blog.related_search_id: None}, synchronize_session=False
    )
    deleted = db.query(RelatedSearch).filter(RelatedSearch.id.in_(ids)).delete(
        synchronize_session=False
    )
    db.commit()
    logger.info(f"Deleted {deleted} related searches")
    return deleted


def related_search_copy_lines(searches: Iterable[RelatedSearch], settings: Settings) -> List[str]:
    base_url = settings.BASE_URL.rstrip("/")
    return [f"{base_url}/webresult/{search.web_result_page}" for search in searches]


# ---- Web results ----

def _resolve_page(db: Session, web_result_page: Optional[int], related_search_id: Optional[int]) -> Optional[int]:
    if related_search_id is not None:
        search = db.query(RelatedSearch).filter(RelatedSearch.id == related_search_id).first()
        if not search:
            raise InvalidInputError("Please select a valid related search")
        return search.web_result_page
    return web_result_page


def _check_link(url: str) -> None:
    is_valid, error_msg = is_valid_url(url)
    if not is_valid:
        raise InvalidInputError(error_msg)


def _check_prelanding_key(db: Session, key: Optional[str]) -> None:
    if key is not None and not db.query(Prelanding.id).filter(Prelanding.key == key).first():
        raise InvalidInputError(f"Pre-landing '{key}' does not exist")


def _join_country_codes(codes: Optional[List[str]]) -> Optional[str]:
    if not codes:
        return None
    return ",".join(code.strip().upper() for code in codes if code.strip()) or None


def create_web_result(db: Session, payload: WebResultCreate) -> WebResult:
    page = _resolve_page(db, payload.web_result_page, payload.related_search_id)
    if page is None:
        raise InvalidInputError("Title, link, and related search are required")
    _check_link(payload.original_link)
    _check_prelanding_key(db, payload.prelanding_key)

    data = payload.model_dump(exclude={"related_search_id", "web_result_page", "country_codes"})
    result = WebResult(
        web_result_page=page,
        country_codes=_join_country_codes(payload.country_codes),
        **data
    )
    db.add(result)
    db.commit()
    db.refresh(result)
    return result


def update_web_result(db: Session, result: WebResult, payload: WebResultUpdate) -> WebResult:
    data = payload.model_dump(exclude_unset=True)

    related_search_id = data.pop("related_search_id", None)
    page = _resolve_page(db, data.pop("web_result_page", None), related_search_id)
    if page is not None:
        result.web_result_page = page

    if data.get("original_link") is not None:
        _check_link(data["original_link"])
    if "prelanding_key" in data:
        data["prelanding_key"] = data["prelanding_key"] or None
        _check_prelanding_key(db, data["prelanding_key"])
    if "country_codes" in data:
        data["country_codes"] = _join_country_codes(data["country_codes"])

    for field in ("title", "original_link", "position", "is_sponsored", "worldwide", "is_active"):
        if field in data and data[field] is None:
            data.pop(field)

    for field, value in data.items():
        setattr(result, field, value)

    db.commit()
    db.refresh(result)
    return result


def delete_web_results(db: Session, ids: Sequence[int]) -> int:
    """Delete results with their clicks and counters; captures keep the email"""
    db.query(ClickEvent).filter(ClickEvent.web_result_id.in_(ids)).delete(
        synchronize_session=False
    )
    db.query(LinkClickCounter).filter(LinkClickCounter.web_result_id.in_(ids)).delete(
        synchronize_session=False
    )
    db.query(EmailCapture).filter(EmailCapture.web_result_id.in_(ids)).update(
        {EmailCapture.web_result_id: None}, synchronize_session=False
    )
    deleted = db.query(WebResult).filter(WebResult.id.in_(ids)).delete(
        synchronize_session=False
    )
    db.commit()
    logger.info(f"Deleted {deleted} web results")
    return deleted


def web_result_copy_lines(results: Iterable[WebResult]) -> List[str]:
    return [f"{result.title} - {result.original_link}" for result in results]


# ---- Pre-landings ----

def create_prelanding(db: Session, payload: PrelandingCreate) -> Prelanding:
    key = payload.key or generate_prelanding_key(payload.headline)
    if db.query(Prelanding.id).filter(Prelanding.key == key).first():
        raise InvalidInputError(f"A pre-landing with key '{key}' already exists")

    prelanding = Prelanding(**payload.model_dump(exclude={"key"}), key=key)
    db.add(prelanding)
    _commit(
        db,
        conflict_message=f"A pre-landing with key '{key}' already exists",
        generic_message="Failed to save pre-landing",
        marker="key",
    )
    db.refresh(prelanding)
    return prelanding


def update_prelanding(db: Session, prelanding: Prelanding, payload: PrelandingUpdate) -> Prelanding:
    data = payload.model_dump(exclude_unset=True)
    if "headline" in data and data["headline"] is None:
        raise InvalidInputError("Headline is required")
    if data.get("is_active") is None:
        data.pop("is_active", None)

    for field, value in data.items():
        setattr(prelanding, field, value)

    db.commit()
    db.refresh(prelanding)
    return prelanding


def delete_prelandings(db: Session, ids: Sequence[int]) -> int:
    """Delete pre-landings, their email captures and result references"""
    keys = [row.key for row in db.query(Prelanding.key).filter(Prelanding.id.in_(ids)).all()]

    if keys:
        db.query(EmailCapture).filter(EmailCapture.prelanding_key.in_(keys)).delete(
            synchronize_session=False
        )
        db.query(WebResult).filter(WebResult.prelanding_key.in_(keys)).update(
            {WebResult.prelanding_key: None}, synchronize_session=False
        )
    deleted = db.query(Prelanding).filter(Prelanding.id.in_(ids)).delete(
        synchronize_session=False
    )
    db.commit()
    logger.info(f"Deleted {deleted} pre-landings")
    return deleted


def prelanding_copy_lines(prelandings: Iterable[Prelanding], settings: Settings) -> List[str]:
    base_url = settings.BASE_URL.rstrip("/")
    return [f"{p.headline} - {base_url}/prelanding/{p.key}" for p in prelandings]


# ---- Blogs ----

def _check_related_search(db: Session, search_id: Optional[int]) -> None:
    if search_id is not None and not db.query(RelatedSearch.id).filter(RelatedSearch.id == search_id).first():
        raise InvalidInputError(f"Related search {search_id} does not exist")


def _check_slug_free(db: Session, slug: str, blog_id: Optional[int] = None) -> None:
    query = db.query(Blog.id).filter(Blog.slug == slug)
    if blog_id is not None:
        query = query.filter(Blog.id != blog_id)
    if query.first():
        raise InvalidInputError(f"A blog with slug '{slug}' already exists")


def create_blog(db: Session, payload: BlogCreate) -> Blog:
    """
    Create a blog, optionally with linked related searches.

    Each phrase in ``related_searches`` becomes an active related search
    tied to the blog; pages are assigned round-robin over 1-4.
    """
    slug = payload.slug or generate_blog_slug(payload.title)
    if not slug:
        slug = f"blog-{to_base36(int(time.time() * 1000))}"
    _check_slug_free(db, slug)
    _check_related_search(db, payload.related_search_id)

    blog = Blog(**payload.model_dump(exclude={"slug", "related_searches"}), slug=slug)
    db.add(blog)
    db.flush()

    phrases = [phrase.strip() for phrase in payload.related_searches if phrase.strip()]
    for index, phrase in enumerate(phrases):
        db.add(RelatedSearch(
            search_text=phrase,
            title=phrase,
            web_result_page=(index % MAX_WEB_RESULT_PAGE) + 1,
            position=index + 1,
            display_order=index,
            is_active=True,
            blog_id=blog.id,
        ))

    _commit(
        db,
        conflict_message=f"A blog with slug '{slug}' already exists",
        generic_message="Failed to save blog",
        marker="slug",
    )
    db.refresh(blog)
    return blog


def update_blog(db: Session, blog: Blog, payload: BlogUpdate) -> Blog:
    data = payload.model_dump(exclude_unset=True)
    for field in ("title", "slug", "status"):
        if field in data and data[field] is None:
            data.pop(field)

    if "slug" in data:
        _check_slug_free(db, data["slug"], blog_id=blog.id)
    if "related_search_id" in data:
        _check_related_search(db, data["related_search_id"])

    for field, value in data.items():
        setattr(blog, field, value)

    _commit(
        db,
        conflict_message=f"A blog with slug '{blog.slug}' already exists",
        generic_message="Failed to save blog",
        marker="slug",
    )
    db.refresh(blog)
    return blog


def set_blog_status(db: Session, ids: Sequence[int], publish: bool) -> int:
    """Bulk publish (activate) or return to draft (deactivate)"""
    status = BLOG_STATUS_PUBLISHED if publish else BLOG_STATUS_DRAFT
    affected = db.query(Blog).filter(Blog.id.in_(ids)).update(
        {Blog.status: status}, synchronize_session=False
    )
    db.commit()
    return affected


def delete_blogs(db: Session, ids: Sequence[int]) -> int:
    """Delete blogs; linked related searches survive as global searches"""
    db.query(RelatedSearch).filter(RelatedSearch.blog_id.in_(ids)).update(
        {RelatedSearch.blog_id: None}, synchronize_session=False
    )
    deleted = db.query(Blog).filter(Blog.id.in_(ids)).delete(synchronize_session=False)
    db.commit()
    logger.info(f"Deleted {deleted} blogs")
    return deleted


def blog_copy_lines(blogs: Iterable[Blog]) -> List[str]:
    return [f"{blog.title} - /blog/{blog.slug}" for blog in blogs]
