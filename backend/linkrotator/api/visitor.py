from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from ..config import Settings, get_settings
from ..database import get_db
from ..core.session import attach_session_cookie, identify_visitor
from ..schemas.blog import BlogResponse
from ..schemas.prelanding import EmailCaptureResult, EmailSubmission, PrelandingResponse
from ..schemas.related_search import PublicRelatedSearch
from ..schemas.tracking import ClickRedirect, ClickRequest, SessionVisit, SessionVisitResult
from ..schemas.web_result import WebResultsPage
from ..services import redirect_chain
from ..services.tracking import record_session_visit

router = APIRouter()


@router.get("/landing")
async def get_landing(db: Session = Depends(get_db)):
    """Landing copy and the active related searches"""
    return redirect_chain.landing_view(db)


@router.post("/sessions", response_model=SessionVisitResult)
async def start_session(
    request: Request,
    response: Response,
    visit: Optional[SessionVisit] = None,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """
    Record a landing visit.

    The session token comes from the body, the ``X-Session-Id`` header or
    the cookie; a new one is issued when none is present.
    """
    visit = visit or SessionVisit()
    visitor = identify_visitor(request, settings, visit.session_id)

    record_session_visit(
        db,
        visitor.session_id,
        visitor.device_type,
        visitor.user_agent,
        ip_address=visitor.ip_address,
        country=visitor.country,
        source=visit.source or request.headers.get("referer"),
    )

    attach_session_cookie(response, settings, visitor.session_id)
    return {"session_id": visitor.session_id, "device_type": visitor.device_type}


@router.post("/related-searches/{search_id}/click", response_model=ClickRedirect)
async def click_related_search(
    search_id: int,
    request: Request,
    response: Response,
    click: Optional[ClickRequest] = None,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Record a related-search click and return the results page to open"""
    visitor = identify_visitor(request, settings, click.session_id if click else None)
    path = redirect_chain.follow_related_search(db, search_id, visitor)

    attach_session_cookie(response, settings, visitor.session_id)
    return {"redirect": path, "via_prelanding": False, "opens_new_window": False}


@router.get("/webresults/{page}", response_model=WebResultsPage)
async def get_web_results(
    page: str,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Active results for a page, sponsored first"""
    return redirect_chain.web_results_page(db, redirect_chain.parse_page_number(page), settings)


@router.post("/webresults/{result_id}/click", response_model=ClickRedirect)
async def click_web_result(
    result_id: int,
    request: Request,
    response: Response,
    click: Optional[ClickRequest] = None,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Record a web-result click and return the next hop"""
    visitor = identify_visitor(request, settings, click.session_id if click else None)
    target, via_prelanding = redirect_chain.follow_web_result(db, result_id, visitor)

    attach_session_cookie(response, settings, visitor.session_id)
    return {"redirect": target, "via_prelanding": via_prelanding, "opens_new_window": not via_prelanding}


@router.get("/prelandings/{key}", response_model=PrelandingResponse)
async def get_prelanding(key: str, db: Session = Depends(get_db)):
    return redirect_chain.get_active_prelanding(db, key)


@router.post("/prelandings/{key}/emails", response_model=EmailCaptureResult)
async def submit_email(
    key: str,
    submission: EmailSubmission,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Store the visitor's email and hand back the delayed redirect"""
    return redirect_chain.capture_email(
        db, key, submission.email, submission.redirect, submission.rid, settings
    )


@router.get("/blogs/{slug}")
async def get_blog(slug: str, db: Session = Depends(get_db)):
    """Published blog with its linked related searches"""
    blog = redirect_chain.get_published_blog(db, slug)
    searches = redirect_chain.blog_related_searches(db, blog)

    return {
        "blog": BlogResponse.model_validate(blog),
        "related_searches": [
            PublicRelatedSearch(
                id=search.id,
                search_text=search.search_text,
                title=search.title,
                web_result_page=search.web_result_page,
                href=redirect_chain.search_href(search.id),
            )
            for search in searches
        ],
    }
