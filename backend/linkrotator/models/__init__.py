from .visitor_session import VisitorSession
from .click_event import ClickEvent
from .related_search import RelatedSearch
from .web_result import WebResult
from .prelanding import Prelanding
from .email_capture import EmailCapture
from .link_click_counter import LinkClickCounter
from .blog import Blog
from .landing_content import LandingContent

__all__ = [
    "VisitorSession", "ClickEvent", "RelatedSearch", "WebResult", "Prelanding",
    "EmailCapture", "LinkClickCounter", "Blog", "LandingContent",
]
