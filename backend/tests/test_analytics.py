from linkrotator.models import ClickEvent, EmailCapture, RelatedSearch, VisitorSession, WebResult
from linkrotator.services import analytics


def seed(db):
    search_a = RelatedSearch(search_text="alpha", web_result_page=1)
    search_b = RelatedSearch(search_text="beta", web_result_page=2)
    result = WebResult(title="Result", original_link="https://example.com", web_result_page=1)
    db.add_all([search_a, search_b, result])
    db.flush()

    db.add_all([
        VisitorSession(session_id="s1", device_type="Desktop", country="Germany"),
        VisitorSession(session_id="s2", device_type="Mobile"),
        ClickEvent(session_id="s1", click_type="related_search", related_search_id=search_b.id,
                   ip_address="203.0.113.1", country="Germany", device_type="Desktop"),
        ClickEvent(session_id="s1", click_type="related_search", related_search_id=search_b.id,
                   ip_address="203.0.113.1", country="Germany", device_type="Desktop"),
        ClickEvent(session_id="s2", click_type="related_search", related_search_id=search_a.id,
                   ip_address="203.0.113.2", device_type="Mobile"),
        ClickEvent(session_id="s1", click_type="web_result", web_result_id=result.id,
                   ip_address="203.0.113.1", country="Germany", device_type="Desktop"),
        EmailCapture(email="a@b.c", prelanding_key="deal"),
    ])
    db.commit()
    return search_a, search_b, result


def test_overview(db):
    seed(db)

    overview = analytics.get_overview(db)

    assert overview == {
        "sessions": 2,
        "page_views": 4,
        "total_clicks": 4,
        "search_clicks": 3,
        "web_result_clicks": 1,
        "email_captures": 1,
    }


def test_session_summaries(db):
    seed(db)

    summaries = {row["session_id"]: row for row in analytics.get_session_summaries(db)}

    assert summaries["s1"]["clicks"] == 3
    assert summaries["s1"]["search_clicks"] == 2
    assert summaries["s2"]["clicks"] == 1
    assert summaries["s2"]["search_clicks"] == 1


def test_session_without_clicks_counts_zero(db):
    db.add(VisitorSession(session_id="idle"))
    db.commit()

    summaries = analytics.get_session_summaries(db)

    assert summaries[0]["clicks"] == 0
    assert summaries[0]["search_clicks"] == 0


def test_related_search_stats_sorted_by_clicks(db):
    seed(db)

    stats = analytics.get_related_search_stats(db)

    assert [(row["search_text"], row["click_count"]) for row in stats] == [("beta", 2), ("alpha", 1)]


def test_web_result_stats(db):
    seed(db)

    stats = analytics.get_web_result_stats(db)

    assert stats[0]["click_count"] == 1
    assert stats[0]["total_clicks"] == 0


def test_click_breakdown_counts_unique_ips(client, db):
    _, search_b, _ = seed(db)

    response = client.get(f"/api/admin/analytics/related-searches/{search_b.id}/clicks")

    data = response.json()
    assert data["label"] == "beta"
    assert data["total"] == 2
    assert data["unique_ips"] == 1


def test_all_clicks(client, db):
    seed(db)

    data = client.get("/api/admin/analytics/clicks").json()

    assert data["total"] == 4
    assert data["unique_ips"] == 2


def test_trends(client, db):
    seed(db)

    response = client.get("/api/admin/analytics/trends", params={"period": "24h"})

    data = response.json()
    assert data["total_clicks"] == 4
    assert sum(point["clicks"] for point in data["clicks_by_time"]) == 4
    countries = {row["country"]: row for row in data["clicks_by_country"]}
    assert countries["Germany"]["clicks"] == 3
    assert countries["Germany"]["percentage"] == 75.0
    assert countries["Unknown"]["clicks"] == 1
    devices = {row["device_type"]: row["clicks"] for row in data["clicks_by_device"]}
    assert devices == {"Desktop": 3, "Mobile": 1}


def test_trends_rejects_unknown_period(client):
    assert client.get("/api/admin/analytics/trends", params={"period": "1y"}).status_code == 422


def test_overview_endpoint(client):
    response = client.get("/api/admin/analytics/overview")

    assert response.status_code == 200
    assert response.json()["sessions"] == 0


def test_all_clicks_paged(client, db):
    seed(db)
    newest_first = [click.id for click in db.query(ClickEvent).order_by(
        ClickEvent.timestamp.desc(), ClickEvent.id.desc()
    )]

    data = client.get("/api/admin/analytics/clicks", params={"skip": 1, "limit": 2}).json()

    assert [click["id"] for click in data["clicks"]] == newest_first[1:3]
    assert data["total"] == 4
    assert data["unique_ips"] == 2


def test_click_breakdown_rejects_bad_paging(client, db):
    _, search_b, _ = seed(db)

    assert client.get("/api/admin/analytics/clicks", params={"limit": 0}).status_code == 422
    response = client.get(f"/api/admin/analytics/related-searches/{search_b.id}/clicks", params={"skip": -1})
    assert response.status_code == 422
