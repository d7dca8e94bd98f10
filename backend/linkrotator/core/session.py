import re
import uuid
from typing import Optional

from fastapi import Request, Response

from ..config import Settings
from ..utils.geo import get_geo_data
from ..utils.validators import get_client_ip

DEVICE_MOBILE = "Mobile"
DEVICE_TABLET = "Tablet"
DEVICE_DESKTOP = "Desktop"

SESSION_HEADER = "X-Session-Id"
MAX_SESSION_ID_LENGTH = 64

_MOBILE_RE = re.compile(r"mobile", re.IGNORECASE)
_TABLET_RE = re.compile(r"tablet", re.IGNORECASE)


def classify_device(user_agent: Optional[str]) -> str:
    """Classify a user agent as Mobile, Tablet or Desktop"""
    ua = user_agent or ""
    if _MOBILE_RE.search(ua):
        return DEVICE_MOBILE
    if _TABLET_RE.search(ua):
        return DEVICE_TABLET
    return DEVICE_DESKTOP


def new_session_id() -> str:
    return str(uuid.uuid4())


def _clean(token: Optional[str]) -> Optional[str]:
    if token is None:
        return None
    token = token.strip()
    if not token:
        return None
    return token[:MAX_SESSION_ID_LENGTH]


def resolve_session_id(request: Request, settings: Settings, supplied: Optional[str] = None) -> tuple[str, bool]:
    """
    Find the visitor's session token.

    An explicitly supplied token wins, then the ``X-Session-Id`` header,
    then the session cookie. Without any of them a new token is issued.
    Client tokens are trusted as-is.

    Returns:
        Tuple of (session_id, is_new)
    """
    for candidate in (
        supplied,
        request.headers.get(SESSION_HEADER),
        request.cookies.get(settings.SESSION_COOKIE_NAME),
    ):
        token = _clean(candidate)
        if token:
            return token, False
    return new_session_id(), True


def attach_session_cookie(response: Response, settings: Settings, session_id: str) -> None:
    """Persist the session token on the client"""
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session_id,
        max_age=settings.SESSION_COOKIE_MAX_AGE,
        httponly=False,
        samesite="lax",
    )


class Visitor:
    """Everything known about the browser behind a request"""
    def __init__(self, session_id: str, is_new: bool, device_type: str,
                 user_agent: str, ip_address: str, country: Optional[str] = None):
        self.session_id = session_id
        self.is_new = is_new
        self.device_type = device_type
        self.user_agent = user_agent
        self.ip_address = ip_address
        self.country = country

    def __repr__(self):
        return f"<Visitor {self.session_id} {self.device_type}>"


def identify_visitor(request: Request, settings: Settings, supplied: Optional[str] = None) -> Visitor:
    """Build a Visitor from the request headers, cookie and geo lookup"""
    session_id, is_new = resolve_session_id(request, settings, supplied)
    user_agent = request.headers.get("user-agent", "")[:512]
    ip_address = get_client_ip(request)
    geo = get_geo_data(
        ip_address,
        enabled=settings.GEO_LOOKUP_ENABLED,
        timeout=settings.GEO_LOOKUP_TIMEOUT,
    )

    return Visitor(
        session_id=session_id,
        is_new=is_new,
        device_type=classify_device(user_agent),
        user_agent=user_agent,
        ip_address=ip_address,
        country=geo.country_name,
    )
