import json

import httpx
import pytest

from linkrotator.services.ai_gateway import (
    AIGatewayClient, extract_image_url, get_ai_client, strip_code_fences,
)


def completion(content=None, images=None):
    message = {"role": "assistant"}
    if content is not None:
        message["content"] = content
    if images is not None:
        message["images"] = images
    return {"choices": [{"message": message}]}


@pytest.fixture
def gateway(app, settings):
    """Route AI assist calls to a scripted gateway; returns the list of captured requests"""
    state = {"status": 200, "body": completion("{}"), "requests": []}

    def handler(request: httpx.Request) -> httpx.Response:
        state["requests"].append(request)
        return httpx.Response(state["status"], json=state["body"])

    app.dependency_overrides[get_ai_client] = lambda: AIGatewayClient(
        settings, transport=httpx.MockTransport(handler)
    )
    yield state
    app.dependency_overrides.clear()


def test_strip_code_fences():
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences(' {"a": 1} ') == '{"a": 1}'


def test_extract_image_url_variants():
    nested = completion(images=[{"type": "image_url", "image_url": {"url": "data:image/png;base64,AAA"}}])
    flat = completion(images=[{"url": "https://cdn.example.com/a.png"}])
    inline = completion(content="data:image/png;base64,BBB")

    assert extract_image_url(nested) == "data:image/png;base64,AAA"
    assert extract_image_url(flat) == "https://cdn.example.com/a.png"
    assert extract_image_url(inline) == "data:image/png;base64,BBB"
    assert extract_image_url(completion(content="no image here")) is None
    assert extract_image_url({"choices": []}) is None


def test_blog_content_from_fenced_reply(client, gateway, settings):
    reply = {"content": "Short post.", "relatedSearches": ["a b c d e", "f g h i j"]}
    gateway["body"] = completion("```json\n" + json.dumps(reply) + "\n```")

    response = client.post("/api/admin/ai/blog-content", json={"title": "Travel tips", "slug": "travel-tips"})

    assert response.status_code == 200
    assert response.json() == {"content": "Short post.", "related_searches": ["a b c d e", "f g h i j"]}

    sent = gateway["requests"][0]
    assert sent.headers["authorization"] == "Bearer test-key"
    payload = json.loads(sent.content)
    assert payload["model"] == settings.AI_TEXT_MODEL
    assert 'Generate for blog title: "Travel tips"' in payload["messages"][1]["content"]


def test_web_results_generation(client, gateway):
    reply = {"results": [
        {"title": "Best cheap flights today", "description": "Find deals.", "link": "https://example.com/f"},
        {"description": "missing title is skipped"},
    ]}
    gateway["body"] = completion(json.dumps(reply))

    response = client.post("/api/admin/ai/web-results", json={"search_text": "cheap flights"})

    assert response.status_code == 200
    assert response.json() == {"results": [
        {"title": "Best cheap flights today", "description": "Find deals.", "link": "https://example.com/f"},
    ]}


def test_blog_image_generation(client, gateway, settings):
    gateway["body"] = completion(images=[{"image_url": {"url": "data:image/png;base64,CCC"}}])

    response = client.post("/api/admin/ai/blog-image", json={"title": "Mountains"})

    assert response.json() == {"image_url": "data:image/png;base64,CCC"}
    payload = json.loads(gateway["requests"][0].content)
    assert payload["model"] == settings.AI_IMAGE_MODEL
    assert payload["modalities"] == ["image", "text"]


def test_rate_limit_maps_to_429(client, gateway):
    gateway["status"] = 429
    gateway["body"] = {"error": "slow down"}

    response = client.post("/api/admin/ai/blog-content", json={"title": "x"})

    assert response.status_code == 429
    assert response.json()["detail"] == "Rate limit exceeded. Please try again later."


def test_payment_required_maps_to_402(client, gateway):
    gateway["status"] = 402
    gateway["body"] = {"error": "no credits"}

    response = client.post("/api/admin/ai/web-results", json={"search_text": "x"})

    assert response.status_code == 402
    assert response.json()["detail"] == "Payment required. Please add funds to your workspace."


def test_gateway_failure_maps_to_502(client, gateway):
    gateway["status"] = 500
    gateway["body"] = {"error": "boom"}

    response = client.post("/api/admin/ai/blog-content", json={"title": "x"})

    assert response.status_code == 502


def test_unparsable_reply_maps_to_502(client, gateway):
    gateway["body"] = completion("Sure! Here is your content: not json")

    response = client.post("/api/admin/ai/blog-content", json={"title": "x"})

    assert response.status_code == 502
    assert response.json()["detail"] == "Failed to parse generated content"


def test_missing_image_maps_to_502(client, gateway):
    gateway["body"] = completion(content="I cannot draw that")

    response = client.post("/api/admin/ai/blog-image", json={"title": "x"})

    assert response.status_code == 502
    assert response.json()["detail"] == "No image generated"


def test_missing_api_key_maps_to_503(client, app, settings):
    unconfigured = settings.model_copy(update={"AI_GATEWAY_API_KEY": ""})
    app.dependency_overrides[get_ai_client] = lambda: AIGatewayClient(unconfigured)

    response = client.post("/api/admin/ai/blog-image", json={"title": "x"})

    app.dependency_overrides.clear()
    assert response.status_code == 503


@pytest.mark.parametrize("body", [
    {"choices": ["x"]},
    {"choices": [{"message": "plain text"}]},
    {"choices": "x"},
    ["not", "an", "object"],
])
def test_unexpected_reply_shape_maps_to_502(client, gateway, body):
    gateway["body"] = body

    content = client.post("/api/admin/ai/blog-content", json={"title": "x"})
    image = client.post("/api/admin/ai/blog-image", json={"title": "x"})

    assert content.status_code == 502
    assert content.json()["detail"] == "No content generated"
    assert image.status_code == 502
    assert image.json()["detail"] == "No image generated"


def test_extract_image_url_ignores_malformed_choices():
    assert extract_image_url({"choices": ["x"]}) is None
    assert extract_image_url({"choices": [{"message": None}]}) is None
    assert extract_image_url([]) is None


def test_web_results_ignores_non_list_results(client, gateway):
    gateway["body"] = completion(json.dumps({"results": 5}))

    response = client.post("/api/admin/ai/web-results", json={"search_text": "x"})

    assert response.status_code == 200
    assert response.json() == {"results": []}
