import pytest
from sqlalchemy import event

from linkrotator.models import ClickEvent, LinkClickCounter, RelatedSearch, VisitorSession, WebResult
from linkrotator.services import tracking
from linkrotator.services.tracking import increment_link_counter, record_click, record_session_visit


@pytest.fixture
def web_result(db):
    result = WebResult(title="Shoes", original_link="https://example.com/shoes", web_result_page=1)
    db.add(result)
    db.commit()
    return result


def test_counter_counts_every_click(db, web_result):
    for _ in range(5):
        increment_link_counter(db, web_result.id)

    counter = db.query(LinkClickCounter).filter(LinkClickCounter.web_result_id == web_result.id).one()
    assert counter.total_clicks == 5
    assert counter.unique_clicks == 1


def test_first_click_creates_counter(db, web_result):
    increment_link_counter(db, web_result.id)

    counter = db.query(LinkClickCounter).one()
    assert counter.total_clicks == 1
    assert counter.unique_clicks == 1


def test_record_click_targets(db, web_result):
    search = RelatedSearch(search_text="shoes", web_result_page=2)
    db.add(search)
    db.commit()

    search_click = record_click(db, "s1", "related_search", search.id, device_type="Desktop")
    result_click = record_click(db, "s1", "web_result", web_result.id, ip_address="203.0.113.9")

    assert search_click.related_search_id == search.id
    assert search_click.web_result_id is None
    assert result_click.web_result_id == web_result.id
    assert result_click.related_search_id is None
    assert db.query(ClickEvent).count() == 2


def test_record_click_rejects_unknown_type(db, web_result):
    with pytest.raises(ValueError):
        record_click(db, "s1", "banner", web_result.id)


def test_session_visit_keeps_source_when_missing(db):
    record_session_visit(db, "abc", "Desktop", "ua-1", source="newsletter")
    session = record_session_visit(db, "abc", "Mobile", "ua-2")

    assert session.source == "newsletter"
    assert session.device_type == "Mobile"
    assert session.user_agent == "ua-2"


def test_counter_row_created_by_another_request(app, db, web_result, monkeypatch):
    result_id = web_result.id
    rival = app.state.session_factory()
    original_bump = tracking._bump_counter
    calls = []

    def bump_after_rival_insert(session, web_result_id):
        updated = original_bump(session, web_result_id)
        if not calls:
            rival.add(LinkClickCounter(web_result_id=web_result_id, total_clicks=1, unique_clicks=1))
            rival.commit()
        calls.append(updated)
        return updated

    monkeypatch.setattr(tracking, "_bump_counter", bump_after_rival_insert)
    increment_link_counter(db, result_id)
    rival.close()

    assert calls == [0, 1]
    counter = db.query(LinkClickCounter).filter(LinkClickCounter.web_result_id == result_id).one()
    assert counter.total_clicks == 2
    assert counter.unique_clicks == 1


def test_session_row_created_by_another_request(app, db):
    rival = app.state.session_factory()
    flushes = []

    def insert_rival_first(session, flush_context, instances):
        flushes.append(len(session.new))
        if len(flushes) > 1:
            return
        rival.add(VisitorSession(session_id="shared", device_type="Desktop", source="newsletter"))
        rival.commit()

    event.listen(db, "before_flush", insert_rival_first)
    session = record_session_visit(db, "shared", "Mobile", "ua-2", ip_address="8.8.8.8")
    rival.close()

    assert flushes[0] == 1
    assert db.query(VisitorSession).filter(VisitorSession.session_id == "shared").count() == 1
    assert session.device_type == "Mobile"
    assert session.user_agent == "ua-2"
    assert session.ip_address == "8.8.8.8"
    assert session.source == "newsletter"
