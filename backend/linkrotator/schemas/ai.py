from typing import List
from pydantic import BaseModel, Field


class BlogContentRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    slug: str = ""


class BlogContentResult(BaseModel):
    content: str
    related_searches: List[str]


class WebResultsRequest(BaseModel):
    search_text: str = Field(..., min_length=1, max_length=255)


class GeneratedWebResult(BaseModel):
    title: str
    description: str = ""
    link: str = ""


class GeneratedWebResults(BaseModel):
    results: List[GeneratedWebResult]


class BlogImageRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)


class BlogImageResult(BaseModel):
    image_url: str
