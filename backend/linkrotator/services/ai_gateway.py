"""
Client for the external chat-completions gateway used by AI assist.

Each call is a single POST with no retry. The model is asked for strict
JSON; replies wrapped in Markdown code fences are unwrapped first.
"""
import json
import logging
from typing import Any, List, Optional

import httpx
from fastapi import Request

from ..config import Settings

logger = logging.getLogger(__name__)

BLOG_CONTENT_PROMPT = """You are a professional blog content writer. Generate content and related searches based on the title.

CRITICAL FORMAT - Return ONLY valid JSON, no markdown, no code blocks:
{
  "content": "Short 50-word blog content here. Simple, tight, direct.",
  "relatedSearches": ["search phrase 1", "search phrase 2", "search phrase 3", "search phrase 4", "search phrase 5", "search phrase 6"]
}

Guidelines:
- content: Exactly 50 words, simple, tight, direct writing
- relatedSearches: 4-6 search phrases, each EXACTLY 5 words, related to the blog topic
- Return ONLY the JSON object, nothing else"""

WEB_RESULTS_PROMPT = """You are a web results generator. Generate 6 web search results based on the search query.

CRITICAL FORMAT - Return ONLY valid JSON, no markdown, no code blocks:
{
  "results": [
    {
      "title": "Result title (5-8 words)",
      "description": "Short description (15-20 words)",
      "link": "https://example.com/path"
    }
  ]
}

Guidelines:
- Generate exactly 6 results
- Each title should be 5-8 words
- Each description should be 15-20 words, engaging and relevant
- Links should be realistic looking URLs related to the topic
- Results should be diverse and relevant to the search query
- Return ONLY the JSON object, nothing else"""

BLOG_IMAGE_PROMPT = (
    'Generate a professional blog featured image for: "{title}". Modern, clean design '
    'with gradients and professional colors. 16:9 aspect ratio blog header.'
)


class AIGatewayError(Exception):
    """Gateway call failed; the message is safe to show to the operator"""
    status_code = 502

    def __init__(self, message: str = "Failed to generate content"):
        self.message = message
        super().__init__(message)


class AIRateLimitError(AIGatewayError):
    status_code = 429

    def __init__(self, message: str = "Rate limit exceeded. Please try again later."):
        super().__init__(message)


class AIPaymentRequiredError(AIGatewayError):
    status_code = 402

    def __init__(self, message: str = "Payment required. Please add funds to your workspace."):
        super().__init__(message)


class AIResponseError(AIGatewayError):
    """Gateway answered but the reply could not be used"""


class AIConfigurationError(AIGatewayError):
    status_code = 503

    def __init__(self, message: str = "API key not configured"):
        super().__init__(message)


def strip_code_fences(text: str) -> str:
    """Remove a leading ```json / ``` fence and a trailing ``` fence"""
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def parse_json_reply(text: str) -> Any:
    """
    Raises:
        AIResponseError: If the reply is not valid JSON
    """
    cleaned = strip_code_fences(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        logger.error(f"Failed to parse AI response: {cleaned[:500]}")
        raise AIResponseError("Failed to parse generated content")


def first_message(data: Any) -> dict:
    """The first choice's message, or an empty dict when the reply has another shape"""
    if not isinstance(data, dict):
        return {}
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return {}
    message = choices[0].get("message")
    return message if isinstance(message, dict) else {}


def extract_image_url(data: Any) -> Optional[str]:
    """Find the generated image in a chat-completions reply"""
    message = first_message(data)

    images = message.get("images")
    if isinstance(images, list) and images:
        first = images[0]
        if isinstance(first, str):
            return first
        if isinstance(first, dict):
            image_url = first.get("image_url")
            if isinstance(image_url, dict) and image_url.get("url"):
                return image_url["url"]
            if first.get("url"):
                return first["url"]

    content = message.get("content")
    if isinstance(content, str) and content.startswith("data:image"):
        return content

    return None


class AIGatewayClient:
    """Text and image completions against the configured gateway"""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.transport = transport

    async def _complete(self, payload: dict) -> Any:
        if not self.settings.AI_GATEWAY_API_KEY:
            logger.error("AI_GATEWAY_API_KEY is not configured")
            raise AIConfigurationError()

        headers = {
            "Authorization": f"Bearer {self.settings.AI_GATEWAY_API_KEY}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.AI_GATEWAY_TIMEOUT,
                transport=self.transport,
            ) as client:
                response = await client.post(self.settings.AI_GATEWAY_URL, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"AI gateway request failed: {e}")
            raise AIGatewayError()

        if response.status_code == 429:
            logger.warning("AI gateway rate limited the request")
            raise AIRateLimitError()
        if response.status_code == 402:
            logger.warning("AI gateway requires payment")
            raise AIPaymentRequiredError()
        if response.is_error:
            logger.error(f"AI gateway error: {response.status_code} {response.text[:500]}")
            raise AIGatewayError()

        try:
            return response.json()
        except ValueError:
            raise AIResponseError("Gateway returned a malformed response")

    async def _complete_text(self, system_prompt: str, user_prompt: str) -> str:
        data = await self._complete({
            "model": self.settings.AI_TEXT_MODEL,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        })

        text = first_message(data).get("content")
        if not text or not isinstance(text, str):
            logger.error(f"No content in AI response: {str(data)[:500]}")
            raise AIResponseError("No content generated")
        return text

    async def generate_blog_content(self, title: str, slug: str = "") -> dict:
        """
        Draft a short blog body plus related search phrases.

        Returns:
            ``{"content": str, "related_searches": [str, ...]}``
        """
        logger.info(f'Generating content for blog: "{title}" (slug: {slug})')
        text = await self._complete_text(BLOG_CONTENT_PROMPT, f'Generate for blog title: "{title}"')
        parsed = parse_json_reply(text)
        if not isinstance(parsed, dict):
            raise AIResponseError("Failed to parse generated content")

        related = parsed.get("relatedSearches")
        if not isinstance(related, list):
            related = []
        return {
            "content": str(parsed.get("content") or ""),
            "related_searches": [str(phrase) for phrase in related if phrase],
        }

    async def generate_web_results(self, search_text: str) -> dict:
        """
        Draft web results for a search phrase.

        Returns:
            ``{"results": [{"title", "description", "link"}, ...]}``
        """
        logger.info(f'Generating web results for: "{search_text}"')
        text = await self._complete_text(WEB_RESULTS_PROMPT, f'Generate web results for search: "{search_text}"')
        parsed = parse_json_reply(text)
        if not isinstance(parsed, dict):
            raise AIResponseError("Failed to parse generated results")

        results: List[dict] = []
        items = parsed.get("results")
        for item in items if isinstance(items, list) else []:
            if not isinstance(item, dict) or not item.get("title"):
                continue
            results.append({
                "title": str(item["title"]),
                "description": str(item.get("description") or ""),
                "link": str(item.get("link") or ""),
            })
        return {"results": results}

    async def generate_blog_image(self, title: str) -> str:
        """Generate a featured image and return its URL (often a data: URI)"""
        logger.info(f"Generating image for title: {title}")
        data = await self._complete({
            "model": self.settings.AI_IMAGE_MODEL,
            "messages": [{"role": "user", "content": BLOG_IMAGE_PROMPT.format(title=title)}],
            "modalities": ["image", "text"],
        })

        image_url = extract_image_url(data)
        if not image_url:
            logger.error(f"No image URL found in response: {str(data)[:500]}")
            raise AIResponseError("No image generated")
        return image_url


def get_ai_client(request: Request) -> AIGatewayClient:
    """Dependency; tests override it with a client on a mock transport"""
    return AIGatewayClient(request.app.state.settings)
