import pytest
from fastapi.testclient import TestClient

from linkrotator.config import Settings
from linkrotator.main import create_app


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL="sqlite://",
        BASE_URL="https://minglemoody.test",
        GEO_LOOKUP_ENABLED=False,
        AI_GATEWAY_API_KEY="test-key",
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db(app):
    session = app.state.session_factory()
    yield session
    session.close()


@pytest.fixture
def make_search(client):
    def _make(search_text="best running shoes", **fields):
        response = client.post("/api/admin/related-searches", json={"search_text": search_text, **fields})
        assert response.status_code == 201, response.text
        return response.json()
    return _make


@pytest.fixture
def make_result(client):
    def _make(title="Result", original_link="https://example.com/x", **fields):
        fields.setdefault("web_result_page", 1)
        response = client.post(
            "/api/admin/web-results",
            json={"title": title, "original_link": original_link, **fields},
        )
        assert response.status_code == 201, response.text
        return response.json()
    return _make


@pytest.fixture
def make_prelanding(client):
    def _make(headline="Get the deal", **fields):
        response = client.post("/api/admin/prelandings", json={"headline": headline, **fields})
        assert response.status_code == 201, response.text
        return response.json()
    return _make
