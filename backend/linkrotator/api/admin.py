from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..config import Settings, get_settings
from ..database import get_db
from ..models import Blog, EmailCapture, LandingContent, Prelanding, RelatedSearch, WebResult
from ..schemas import (
    BlogCreate, BlogResponse, BlogUpdate,
    LandingContentResponse, LandingContentUpdate,
    PrelandingCreate, PrelandingResponse, PrelandingUpdate,
    RelatedSearchCreate, RelatedSearchResponse, RelatedSearchUpdate,
    WebResultCreate, WebResultResponse, WebResultUpdate,
)
from ..schemas.common import BulkAction, BulkActionResult, CopyText, SelectedIds
from ..schemas.prelanding import EmailCaptureResponse
from ..services import content
from ..utils.csv_export import convert_to_csv, csv_response, rows_from_models

router = APIRouter(prefix="/admin", tags=["admin"])

RELATED_SEARCH_ORDER = (RelatedSearch.display_order, RelatedSearch.id)
WEB_RESULT_ORDER = (WebResult.web_result_page, WebResult.position, WebResult.id)
PRELANDING_ORDER = (Prelanding.created_at.desc(), Prelanding.id.desc())
BLOG_ORDER = (Blog.created_at.desc(), Blog.id.desc())
EMAIL_CAPTURE_ORDER = (EmailCapture.created_at.desc(), EmailCapture.id.desc())


def export_rows(db: Session, model, entity: str, columns: List[str], order_by, ids: Optional[List[int]]):
    """CSV download of every row, or only the selected ids"""
    rows = content.get_rows(db, model, ids=ids or None, order_by=order_by)
    suffix = "selected" if ids else "all"
    return csv_response(
        convert_to_csv(rows_from_models(rows, columns), columns),
        f"{entity}_{suffix}.csv",
    )


def copy_text(lines: List[str]) -> dict:
    return {"count": len(lines), "text": "\n".join(lines)}


def run_bulk_action(db: Session, model, bulk: BulkAction, delete) -> dict:
    if bulk.action == "delete":
        affected = delete(db, bulk.ids)
    else:
        affected = content.set_active(db, model, bulk.ids, bulk.action == "activate")
    return {"action": bulk.action, "affected": affected}


# ---- Landing content ----

@router.get("/landing", response_model=LandingContentResponse)
async def get_landing_content(db: Session = Depends(get_db)):
    landing = db.query(LandingContent).order_by(LandingContent.id).first()
    return landing or LandingContentResponse()


@router.put("/landing", response_model=LandingContentResponse)
async def update_landing_content(payload: LandingContentUpdate, db: Session = Depends(get_db)):
    """Save the landing hero copy"""
    return content.save_landing_content(db, payload)


# ---- Related searches ----

@router.get("/related-searches", response_model=List[RelatedSearchResponse])
async def list_related_searches(
    active_only: bool = False,
    db: Session = Depends(get_db)
):
    query = db.query(RelatedSearch)
    if active_only:
        query = query.filter(RelatedSearch.is_active == True)
    return query.order_by(*RELATED_SEARCH_ORDER).all()


@router.post("/related-searches", response_model=RelatedSearchResponse, status_code=201)
async def create_related_search(payload: RelatedSearchCreate, db: Session = Depends(get_db)):
    return content.create_related_search(db, payload)


@router.post("/related-searches/bulk", response_model=BulkActionResult)
async def bulk_related_searches(bulk: BulkAction, db: Session = Depends(get_db)):
    """Activate, deactivate or delete the selected related searches"""
    return run_bulk_action(db, RelatedSearch, bulk, content.delete_related_searches)


@router.get("/related-searches/export")
async def export_related_searches(
    ids: Optional[List[int]] = Query(None),
    db: Session = Depends(get_db)
):
    return export_rows(
        db, RelatedSearch, "related_searches", content.RELATED_SEARCH_COLUMNS, RELATED_SEARCH_ORDER, ids
    )


@router.post("/related-searches/copy", response_model=CopyText)
async def copy_related_searches(
    selection: SelectedIds,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Results page URL of each selected search"""
    searches = content.get_rows(db, RelatedSearch, ids=selection.ids, order_by=RELATED_SEARCH_ORDER)
    return copy_text(content.related_search_copy_lines(searches, settings))


@router.get("/related-searches/{search_id}", response_model=RelatedSearchResponse)
async def get_related_search(search_id: int, db: Session = Depends(get_db)):
    return content.get_row(db, RelatedSearch, search_id, "Related search")


@router.put("/related-searches/{search_id}", response_model=RelatedSearchResponse)
async def update_related_search(
    search_id: int,
    payload: RelatedSearchUpdate,
    db: Session = Depends(get_db)
):
    search = content.get_row(db, RelatedSearch, search_id, "Related search")
    return content.update_related_search(db, search, payload)


@router.delete("/related-searches/{search_id}")
async def delete_related_search(search_id: int, db: Session = Depends(get_db)):
    """Delete a related search and its click events"""
    content.get_row(db, RelatedSearch, search_id, "Related search")
    content.delete_related_searches(db, [search_id])
    return {"message": "Related search deleted successfully"}


# ---- Web results ----

@router.get("/web-results", response_model=List[WebResultResponse])
async def list_web_results(
    page: Optional[int] = Query(None, ge=1, le=content.MAX_WEB_RESULT_PAGE),
    db: Session = Depends(get_db)
):
    query = db.query(WebResult)
    if page is not None:
        query = query.filter(WebResult.web_result_page == page)
    return query.order_by(*WEB_RESULT_ORDER).all()


@router.post("/web-results", response_model=WebResultResponse, status_code=201)
async def create_web_result(payload: WebResultCreate, db: Session = Depends(get_db)):
    return content.create_web_result(db, payload)


@router.post("/web-results/bulk", response_model=BulkActionResult)
async def bulk_web_results(bulk: BulkAction, db: Session = Depends(get_db)):
    return run_bulk_action(db, WebResult, bulk, content.delete_web_results)


@router.get("/web-results/export")
async def export_web_results(
    ids: Optional[List[int]] = Query(None),
    db: Session = Depends(get_db)
):
    return export_rows(db, WebResult, "web_results", content.WEB_RESULT_COLUMNS, WEB_RESULT_ORDER, ids)


@router.post("/web-results/copy", response_model=CopyText)
async def copy_web_results(selection: SelectedIds, db: Session = Depends(get_db)):
    results = content.get_rows(db, WebResult, ids=selection.ids, order_by=WEB_RESULT_ORDER)
    return copy_text(content.web_result_copy_lines(results))


@router.get("/web-results/{result_id}", response_model=WebResultResponse)
async def get_web_result(result_id: int, db: Session = Depends(get_db)):
    return content.get_row(db, WebResult, result_id, "Web result")


@router.put("/web-results/{result_id}", response_model=WebResultResponse)
async def update_web_result(
    result_id: int,
    payload: WebResultUpdate,
    db: Session = Depends(get_db)
):
    result = content.get_row(db, WebResult, result_id, "Web result")
    return content.update_web_result(db, result, payload)


@router.delete("/web-results/{result_id}")
async def delete_web_result(result_id: int, db: Session = Depends(get_db)):
    """Delete a web result with its clicks and counter"""
    content.get_row(db, WebResult, result_id, "Web result")
    content.delete_web_results(db, [result_id])
    return {"message": "Web result deleted successfully"}


# ---- Pre-landings ----

@router.get("/prelandings", response_model=List[PrelandingResponse])
async def list_prelandings(db: Session = Depends(get_db)):
    return db.query(Prelanding).order_by(*PRELANDING_ORDER).all()


@router.post("/prelandings", response_model=PrelandingResponse, status_code=201)
async def create_prelanding(payload: PrelandingCreate, db: Session = Depends(get_db)):
    """Create a pre-landing; the key is derived from the headline when omitted"""
    return content.create_prelanding(db, payload)


@router.post("/prelandings/bulk", response_model=BulkActionResult)
async def bulk_prelandings(bulk: BulkAction, db: Session = Depends(get_db)):
    return run_bulk_action(db, Prelanding, bulk, content.delete_prelandings)


@router.get("/prelandings/export")
async def export_prelandings(
    ids: Optional[List[int]] = Query(None),
    db: Session = Depends(get_db)
):
    return export_rows(db, Prelanding, "prelandings", content.PRELANDING_COLUMNS, PRELANDING_ORDER, ids)


@router.post("/prelandings/copy", response_model=CopyText)
async def copy_prelandings(
    selection: SelectedIds,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    prelandings = content.get_rows(db, Prelanding, ids=selection.ids, order_by=PRELANDING_ORDER)
    return copy_text(content.prelanding_copy_lines(prelandings, settings))


@router.get("/prelandings/{prelanding_id}", response_model=PrelandingResponse)
async def get_prelanding(prelanding_id: int, db: Session = Depends(get_db)):
    return content.get_row(db, Prelanding, prelanding_id, "Pre-landing")


@router.put("/prelandings/{prelanding_id}", response_model=PrelandingResponse)
async def update_prelanding(
    prelanding_id: int,
    payload: PrelandingUpdate,
    db: Session = Depends(get_db)
):
    prelanding = content.get_row(db, Prelanding, prelanding_id, "Pre-landing")
    return content.update_prelanding(db, prelanding, payload)


@router.delete("/prelandings/{prelanding_id}")
async def delete_prelanding(prelanding_id: int, db: Session = Depends(get_db)):
    """Delete a pre-landing, its captured emails and the result references"""
    content.get_row(db, Prelanding, prelanding_id, "Pre-landing")
    content.delete_prelandings(db, [prelanding_id])
    return {"message": "Pre-landing deleted successfully"}


# ---- Email captures ----

@router.get("/email-captures", response_model=List[EmailCaptureResponse])
async def list_email_captures(
    prelanding_key: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db)
):
    query = db.query(EmailCapture)
    if prelanding_key:
        query = query.filter(EmailCapture.prelanding_key == prelanding_key)
    return query.order_by(*EMAIL_CAPTURE_ORDER).offset(skip).limit(limit).all()


@router.get("/email-captures/export")
async def export_email_captures(
    ids: Optional[List[int]] = Query(None),
    db: Session = Depends(get_db)
):
    return export_rows(
        db, EmailCapture, "email_captures", content.EMAIL_CAPTURE_COLUMNS, EMAIL_CAPTURE_ORDER, ids
    )


# ---- Blogs ----

@router.get("/blogs", response_model=List[BlogResponse])
async def list_blogs(
    status: Optional[str] = Query(None, pattern="^(draft|published)$"),
    db: Session = Depends(get_db)
):
    query = db.query(Blog)
    if status:
        query = query.filter(Blog.status == status)
    return query.order_by(*BLOG_ORDER).all()


@router.post("/blogs", response_model=BlogResponse, status_code=201)
async def create_blog(payload: BlogCreate, db: Session = Depends(get_db)):
    """Create a blog and any related searches listed with it"""
    return content.create_blog(db, payload)


@router.post("/blogs/bulk", response_model=BulkActionResult)
async def bulk_blogs(bulk: BulkAction, db: Session = Depends(get_db)):
    """Activate publishes, deactivate returns to draft"""
    if bulk.action == "delete":
        affected = content.delete_blogs(db, bulk.ids)
    else:
        affected = content.set_blog_status(db, bulk.ids, publish=bulk.action == "activate")
    return {"action": bulk.action, "affected": affected}


@router.get("/blogs/export")
async def export_blogs(
    ids: Optional[List[int]] = Query(None),
    db: Session = Depends(get_db)
):
    return export_rows(db, Blog, "blogs", content.BLOG_COLUMNS, BLOG_ORDER, ids)


@router.post("/blogs/copy", response_model=CopyText)
async def copy_blogs(selection: SelectedIds, db: Session = Depends(get_db)):
    blogs = content.get_rows(db, Blog, ids=selection.ids, order_by=BLOG_ORDER)
    return copy_text(content.blog_copy_lines(blogs))


@router.get("/blogs/{blog_id}", response_model=BlogResponse)
async def get_blog(blog_id: int, db: Session = Depends(get_db)):
    return content.get_row(db, Blog, blog_id, "Blog")


@router.put("/blogs/{blog_id}", response_model=BlogResponse)
async def update_blog(blog_id: int, payload: BlogUpdate, db: Session = Depends(get_db)):
    blog = content.get_row(db, Blog, blog_id, "Blog")
    return content.update_blog(db, blog, payload)


@router.delete("/blogs/{blog_id}")
async def delete_blog(blog_id: int, db: Session = Depends(get_db)):
    content.get_row(db, Blog, blog_id, "Blog")
    content.delete_blogs(db, [blog_id])
    return {"message": "Blog deleted successfully"}
