from linkrotator.core.session import classify_device
from linkrotator.models import VisitorSession


IPHONE_UA = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) Mobile/15E148 Safari/604.1"
IPAD_UA = "Mozilla/5.0 (Linux; Android 13; SM-X700) Tablet Safari/537.36"
DESKTOP_UA = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 Chrome/120.0 Safari/537.36"


def test_classify_device():
    assert classify_device(IPHONE_UA) == "Mobile"
    assert classify_device(IPAD_UA) == "Tablet"
    assert classify_device(DESKTOP_UA) == "Desktop"
    assert classify_device("") == "Desktop"
    assert classify_device(None) == "Desktop"


def test_mobile_wins_over_tablet():
    assert classify_device("Some TABLET with MOBILE token") == "Mobile"


def test_new_session_issues_token_and_cookie(client, settings):
    response = client.post("/api/sessions", headers={"User-Agent": IPHONE_UA})

    assert response.status_code == 200
    data = response.json()
    assert len(data["session_id"]) == 36
    assert data["device_type"] == "Mobile"
    assert response.cookies.get(settings.SESSION_COOKIE_NAME) == data["session_id"]


def test_cookie_token_is_reused(client):
    first = client.post("/api/sessions").json()["session_id"]
    second = client.post("/api/sessions").json()["session_id"]

    assert first == second


def test_supplied_token_wins_over_header(client):
    response = client.post(
        "/api/sessions",
        json={"session_id": "from-body"},
        headers={"X-Session-Id": "from-header"},
    )

    assert response.json()["session_id"] == "from-body"


def test_header_token_is_trusted(client):
    response = client.post("/api/sessions", headers={"X-Session-Id": "client-made-token"})

    assert response.json()["session_id"] == "client-made-token"


def test_repeat_visits_upsert_one_row(client, db):
    headers = {"X-Session-Id": "repeat-visitor"}
    client.post("/api/sessions", headers={**headers, "User-Agent": DESKTOP_UA}, json={"source": "google"})
    client.post("/api/sessions", headers={**headers, "User-Agent": IPHONE_UA})

    rows = db.query(VisitorSession).filter(VisitorSession.session_id == "repeat-visitor").all()
    assert len(rows) == 1
    assert rows[0].device_type == "Mobile"
    assert rows[0].source == "google"


def test_landing_page_records_session(client, db, settings):
    response = client.get("/landing", headers={"Referer": "https://news.example.org/"})

    assert response.status_code == 200
    session_id = response.cookies.get(settings.SESSION_COOKIE_NAME)
    session = db.query(VisitorSession).filter(VisitorSession.session_id == session_id).one()
    assert session.source == "https://news.example.org/"
