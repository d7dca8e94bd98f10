from .landing import LandingContentUpdate, LandingContentResponse
from .related_search import RelatedSearchCreate, RelatedSearchUpdate, RelatedSearchResponse
from .web_result import WebResultCreate, WebResultUpdate, WebResultResponse, WebResultsPage
from .prelanding import PrelandingCreate, PrelandingUpdate, PrelandingResponse, EmailSubmission
from .blog import BlogCreate, BlogUpdate, BlogResponse

__all__ = [
    "LandingContentUpdate", "LandingContentResponse",
    "RelatedSearchCreate", "RelatedSearchUpdate", "RelatedSearchResponse",
    "WebResultCreate", "WebResultUpdate", "WebResultResponse", "WebResultsPage",
    "PrelandingCreate", "PrelandingUpdate", "PrelandingResponse", "EmailSubmission",
    "BlogCreate", "BlogUpdate", "BlogResponse",
]
