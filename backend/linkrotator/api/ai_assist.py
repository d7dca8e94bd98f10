"""
AI assist for the admin console.

Gateway failures surface as AIGatewayError subclasses and are turned into
429/402/502/503 responses by the application's exception handler.
"""
from fastapi import APIRouter, Depends

from ..schemas.ai import (
    BlogContentRequest, BlogContentResult, BlogImageRequest, BlogImageResult,
    GeneratedWebResults, WebResultsRequest,
)
from ..services.ai_gateway import AIGatewayClient, get_ai_client

router = APIRouter(prefix="/admin/ai", tags=["ai"])


@router.post("/blog-content", response_model=BlogContentResult)
async def generate_blog_content(
    payload: BlogContentRequest,
    client: AIGatewayClient = Depends(get_ai_client)
):
    """Draft blog content and related search phrases from a title"""
    return await client.generate_blog_content(payload.title, payload.slug)


@router.post("/web-results", response_model=GeneratedWebResults)
async def generate_web_results(
    payload: WebResultsRequest,
    client: AIGatewayClient = Depends(get_ai_client)
):
    """Draft web results for a related search phrase"""
    return await client.generate_web_results(payload.search_text)


@router.post("/blog-image", response_model=BlogImageResult)
async def generate_blog_image(
    payload: BlogImageRequest,
    client: AIGatewayClient = Depends(get_ai_client)
):
    image_url = await client.generate_blog_image(payload.title)
    return {"image_url": image_url}
