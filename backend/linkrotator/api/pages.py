"""
Server-rendered visitor pages and the tracked redirect hops between them.
"""
import json
import logging
from html import escape
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import Settings, get_settings
from ..database import get_db
from ..core.errors import NotFoundError
from ..core.session import attach_session_cookie, identify_visitor
from ..services import redirect_chain
from ..services.tracking import record_session_visit

logger = logging.getLogger(__name__)

router = APIRouter()

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate, max-age=0",
    "Pragma": "no-cache",
    "Expires": "0",
}


def render_page(title: str, body: str, site_name: str) -> str:
    return f"""<!DOCTYPE html>
<html lang="en"><head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{escape(title)} | {escape(site_name)}</title>
</head>
<body style="font-family: Arial, sans-serif; max-width: 760px; margin: 0 auto; padding: 32px 16px;">
{body}
</body></html>
"""


def get_404_page(site_name: str) -> str:
    body = """
    <div style="text-align: center; padding: 50px;">
        <h1>404 - Page not found</h1>
        <p>The page you are looking for does not exist or is no longer available.</p>
        <a href="/landing" style="color: #4F46E5;">Go to the home page</a>
    </div>
    """
    return render_page("Not found", body, site_name)


def not_found_response(settings: Settings) -> HTMLResponse:
    return HTMLResponse(content=get_404_page(settings.SITE_NAME), status_code=404, headers=NO_CACHE_HEADERS)


def tracked_redirect(url: str, settings: Settings, session_id: str) -> RedirectResponse:
    response = RedirectResponse(url=url, status_code=302, headers=NO_CACHE_HEADERS)
    attach_session_cookie(response, settings, session_id)
    return response


def _script_value(value) -> str:
    """JSON literal safe to embed inside a <script> block"""
    return json.dumps(value).replace("</", "<\\/")


@router.get("/", include_in_schema=False)
async def root():
    return RedirectResponse(url="/landing", status_code=302)


@router.get("/landing", response_class=HTMLResponse)
async def landing_page(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Landing page; every visit upserts the visitor's session"""
    visitor = identify_visitor(request, settings)
    if visitor.is_new:
        logger.info(f"New visitor session {visitor.session_id} ({visitor.device_type})")
    try:
        record_session_visit(
            db,
            visitor.session_id,
            visitor.device_type,
            visitor.user_agent,
            ip_address=visitor.ip_address,
            country=visitor.country,
            source=request.headers.get("referer"),
        )
    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Failed to record session {visitor.session_id}", exc_info=True)

    view = redirect_chain.landing_view(db)
    buttons = "\n".join(
        f'<li style="margin: 8px 0;"><a href="{escape(item["href"])}">{escape(item["search_text"])}</a></li>'
        for item in view["searches"]
    )
    body = f"""
    <h1>{escape(view["title"])}</h1>
    <p>{escape(view["description"])}</p>
    <h2>Related searches</h2>
    <ul style="list-style: none; padding: 0;">{buttons}</ul>
    """

    response = HTMLResponse(content=render_page(view["title"] or settings.SITE_NAME, body, settings.SITE_NAME))
    attach_session_cookie(response, settings, visitor.session_id)
    return response


@router.get("/go/search/{search_id}")
async def go_related_search(
    search_id: int,
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    visitor = identify_visitor(request, settings)
    try:
        path = redirect_chain.follow_related_search(db, search_id, visitor)
    except NotFoundError:
        return not_found_response(settings)
    return tracked_redirect(path, settings, visitor.session_id)


def _render_result(item: dict) -> str:
    label = ""
    if item["masked_link"]:
        label = f'<div style="color: #6B7280; font-size: 12px;">Sponsored &middot; {escape(item["masked_link"])}</div>'
    logo = ""
    if item["logo_url"]:
        logo = f'<img src="{escape(item["logo_url"])}" alt="" style="width: 32px; height: 32px; float: left; margin-right: 12px;">'
    target = ' target="_blank" rel="noopener"' if item["opens_new_window"] else ""
    return f"""
    <div style="margin: 20px 0; overflow: hidden;">
        {logo}
        {label}
        <a href="{escape(item["href"])}"{target} style="font-size: 18px;">{escape(item["title"])}</a>
        <p style="margin: 4px 0;">{escape(item["description"] or "")}</p>
    </div>
    """


@router.get("/webresult", response_class=HTMLResponse)
@router.get("/webresult/{wr}", response_class=HTMLResponse)
async def web_results_page(
    request: Request,
    wr: Optional[str] = None,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Results page; accepts /webresult/3, /webresult/wr=3 and /webresult?wr=3"""
    page = redirect_chain.parse_page_number(wr or request.query_params.get("wr"))
    view = redirect_chain.web_results_page(db, page, settings)

    sponsored = "".join(_render_result(item) for item in view["sponsored"])
    organic = "".join(_render_result(item) for item in view["organic"])
    if not sponsored and not organic:
        organic = "<p>No results found.</p>"

    body = f"""
    <p><a href="/landing">&larr; Back</a></p>
    <h1>Web results</h1>
    {sponsored}
    {organic}
    """
    return HTMLResponse(content=render_page(f"Results page {page}", body, settings.SITE_NAME))


@router.get("/go/result/{result_id}")
async def go_web_result(
    result_id: int,
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    visitor = identify_visitor(request, settings)
    try:
        target, _ = redirect_chain.follow_web_result(db, result_id, visitor)
    except NotFoundError:
        return not_found_response(settings)
    return tracked_redirect(target, settings, visitor.session_id)


@router.get("/prelanding/{key}", response_class=HTMLResponse)
async def prelanding_page(
    key: str,
    redirect: str = "",
    rid: Optional[str] = None,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Email capture page; the form posts to the JSON API and then redirects"""
    try:
        prelanding = redirect_chain.get_active_prelanding(db, key)
    except NotFoundError:
        return not_found_response(settings)

    logo = ""
    if prelanding.logo_url:
        logo = f'<img src="{escape(prelanding.logo_url)}" alt="" style="max-height: 64px;">'
    endpoint = f"/api/prelandings/{prelanding.key}/emails"
    image = ""
    if prelanding.main_image_url:
        image = f'<img src="{escape(prelanding.main_image_url)}" alt="" style="max-width: 100%;">'

    body = f"""
    <div style="text-align: center;">
        {logo}
        <h1>{escape(prelanding.headline)}</h1>
        <p>{escape(prelanding.subtitle or "")}</p>
        {image}
        <p>{escape(prelanding.description or "")}</p>
        <form id="capture">
            <input id="email" type="email" placeholder="Enter your email" style="padding: 8px; width: 260px;">
            <button type="submit" style="padding: 8px 16px;">Continue</button>
        </form>
        <p id="message" style="color: #B91C1C;"></p>
        <p id="redirecting" style="display: none;">{escape(prelanding.redirect_description or "")}</p>
    </div>
    <script>
    (function () {{
        var endpoint = {_script_value(endpoint)};
        var redirect = {_script_value(redirect)};
        var rid = {_script_value(rid)};
        document.getElementById("capture").addEventListener("submit", function (event) {{
            event.preventDefault();
            var email = document.getElementById("email").value.trim();
            if (!email) {{
                document.getElementById("message").textContent = "Please enter your email";
                return;
            }}
            fetch(endpoint, {{
                method: "POST",
                headers: {{"Content-Type": "application/json"}},
                body: JSON.stringify({{email: email, redirect: redirect, rid: rid}})
            }}).then(function (response) {{
                return response.json().then(function (data) {{ return [response.ok, data]; }});
            }}).then(function (result) {{
                if (!result[0]) {{
                    document.getElementById("message").textContent = result[1].detail || "Failed to submit. Please try again.";
                    return;
                }}
                document.getElementById("redirecting").style.display = "block";
                setTimeout(function () {{ window.location.href = result[1].redirect; }}, result[1].delay_ms);
            }}).catch(function () {{
                document.getElementById("message").textContent = "Failed to submit. Please try again.";
            }});
        }});
    }})();
    </script>
    """
    return HTMLResponse(content=render_page(prelanding.headline, body, settings.SITE_NAME), headers=NO_CACHE_HEADERS)


@router.get("/blog/{slug}", response_class=HTMLResponse)
async def blog_page(
    slug: str,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Published blog post with its related search links"""
    try:
        blog = redirect_chain.get_published_blog(db, slug)
    except NotFoundError:
        return not_found_response(settings)

    searches = redirect_chain.blog_related_searches(db, blog)
    links = "\n".join(
        f'<li><a href="{escape(redirect_chain.search_href(search.id))}">{escape(search.search_text)}</a></li>'
        for search in searches
    )
    image = ""
    if blog.featured_image:
        image = f'<img src="{escape(blog.featured_image)}" alt="" style="max-width: 100%;">'
    related = f"<h2>Related searches</h2><ul>{links}</ul>" if links else ""
    byline = " &middot; ".join(escape(part) for part in (blog.author, blog.category) if part)

    body = f"""
    <article>
        {image}
        <h1>{escape(blog.title)}</h1>
        <p style="color: #6B7280;">{byline}</p>
        <div style="white-space: pre-line;">{escape(blog.content or "")}</div>
    </article>
    {related}
    """
    return HTMLResponse(content=render_page(blog.title, body, settings.SITE_NAME))
