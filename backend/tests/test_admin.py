from linkrotator.models import Blog, ClickEvent, EmailCapture, LinkClickCounter, RelatedSearch, WebResult


def test_related_search_title_defaults_to_search_text(make_search):
    search = make_search("  budget laptops  ", title="  ")

    assert search["search_text"] == "budget laptops"
    assert search["title"] == "budget laptops"


def test_related_search_page_out_of_range(client):
    response = client.post("/api/admin/related-searches", json={"search_text": "x", "web_result_page": 5})

    assert response.status_code == 422


def test_update_and_get_related_search(client, make_search):
    search = make_search("old text", web_result_page=1)

    response = client.put(f"/api/admin/related-searches/{search['id']}", json={"web_result_page": 4})
    assert response.status_code == 200
    assert response.json()["web_result_page"] == 4

    fetched = client.get(f"/api/admin/related-searches/{search['id']}").json()
    assert fetched["search_text"] == "old text"
    assert fetched["web_result_page"] == 4


def test_missing_row_is_404(client):
    assert client.get("/api/admin/web-results/123").status_code == 404
    assert client.put("/api/admin/blogs/123", json={"title": "x"}).status_code == 404
    assert client.delete("/api/admin/prelandings/123").status_code == 404


def test_web_result_page_from_related_search(client, make_search):
    search = make_search("tablets", web_result_page=3)

    response = client.post(
        "/api/admin/web-results",
        json={"title": "Tablets", "original_link": "https://example.com/t", "related_search_id": search["id"]},
    )

    assert response.status_code == 201
    assert response.json()["web_result_page"] == 3


def test_web_result_requires_page_or_search(client):
    response = client.post("/api/admin/web-results", json={"title": "x", "original_link": "https://example.com"})

    assert response.status_code == 400


def test_web_result_rejects_private_link(client):
    response = client.post(
        "/api/admin/web-results",
        json={"title": "x", "original_link": "http://192.168.1.5/admin", "web_result_page": 1},
    )

    assert response.status_code == 400


def test_web_result_unknown_prelanding(client):
    response = client.post(
        "/api/admin/web-results",
        json={"title": "x", "original_link": "https://example.com", "web_result_page": 1, "prelanding_key": "nope"},
    )

    assert response.status_code == 400


def test_web_result_country_codes(make_result):
    result = make_result(worldwide=False, country_codes=["us", " gb "])

    assert result["country_codes"] == ["US", "GB"]
    assert result["worldwide"] is False


def test_prelanding_key_generated_from_headline(make_prelanding):
    prelanding = make_prelanding("Summer Deal!")

    assert prelanding["key"].startswith("summer-deal-")
    assert prelanding["redirect_description"] == "You will be redirected to..."


def test_duplicate_prelanding_key(client, make_prelanding):
    make_prelanding(key="same-key")

    response = client.post("/api/admin/prelandings", json={"headline": "Other", "key": "same-key"})

    assert response.status_code == 400
    assert "same-key" in response.json()["detail"]


def test_blog_slug_generated_and_duplicate_rejected(client):
    first = client.post("/api/admin/blogs", json={"title": "Hello World"})
    assert first.status_code == 201
    assert first.json()["slug"] == "hello-world"
    assert first.json()["status"] == "draft"

    second = client.post("/api/admin/blogs", json={"title": "Hello World"})
    assert second.status_code == 400
    assert "hello-world" in second.json()["detail"]


def test_blog_with_related_search_phrases(client, db):
    response = client.post(
        "/api/admin/blogs",
        json={"title": "Travel", "related_searches": ["one", "two", "three", "four", "five"]},
    )
    blog_id = response.json()["id"]

    searches = db.query(RelatedSearch).filter(RelatedSearch.blog_id == blog_id).order_by(RelatedSearch.id).all()
    assert [search.search_text for search in searches] == ["one", "two", "three", "four", "five"]
    assert [search.web_result_page for search in searches] == [1, 2, 3, 4, 1]


def test_bulk_activate_and_deactivate(client, db, make_search):
    ids = [make_search(f"s{i}")["id"] for i in range(3)]

    response = client.post("/api/admin/related-searches/bulk", json={"action": "deactivate", "ids": ids[:2]})

    assert response.json() == {"action": "deactivate", "affected": 2}
    active = {row.id for row in db.query(RelatedSearch).filter(RelatedSearch.is_active == True).all()}
    assert active == {ids[2]}


def test_bulk_requires_selection(client):
    response = client.post("/api/admin/web-results/bulk", json={"action": "delete", "ids": []})

    assert response.status_code == 422


def test_bulk_blog_publish(client, db):
    ids = [client.post("/api/admin/blogs", json={"title": f"Post {i}"}).json()["id"] for i in range(2)]

    client.post("/api/admin/blogs/bulk", json={"action": "activate", "ids": ids})

    assert {blog.status for blog in db.query(Blog).all()} == {"published"}
    assert client.get("/blog/post-0").status_code == 200

    client.post("/api/admin/blogs/bulk", json={"action": "deactivate", "ids": ids[:1]})
    assert client.get("/blog/post-0").status_code == 404


def test_delete_web_result_cleans_up(client, db, make_result, make_prelanding):
    make_prelanding(key="cleanup")
    result = make_result(prelanding_key="cleanup")
    client.post(f"/api/webresults/{result['id']}/click")
    client.post(f"/api/webresults/{result['id']}/click")
    client.post(
        "/api/prelandings/cleanup/emails",
        json={"email": "a@b.c", "redirect": "https://example.com/x", "rid": str(result["id"])},
    )

    response = client.post("/api/admin/web-results/bulk", json={"action": "delete", "ids": [result["id"]]})

    assert response.json()["affected"] == 1
    assert db.query(WebResult).count() == 0
    assert db.query(ClickEvent).count() == 0
    assert db.query(LinkClickCounter).count() == 0
    capture = db.query(EmailCapture).one()
    assert capture.web_result_id is None


def test_delete_related_search_cleans_up(client, db, make_search):
    search = make_search("to delete")
    client.post(f"/api/related-searches/{search['id']}/click")
    blog = client.post("/api/admin/blogs", json={"title": "Linked", "related_search_id": search["id"]}).json()

    response = client.delete(f"/api/admin/related-searches/{search['id']}")

    assert response.status_code == 200
    assert db.query(ClickEvent).count() == 0
    assert db.query(Blog).filter(Blog.id == blog["id"]).one().related_search_id is None


def test_delete_prelanding_cleans_up(client, db, make_result, make_prelanding):
    prelanding = make_prelanding(key="gone-soon")
    result = make_result(prelanding_key="gone-soon")
    client.post(
        "/api/prelandings/gone-soon/emails",
        json={"email": "a@b.c", "redirect": "https://example.com/x"},
    )

    client.delete(f"/api/admin/prelandings/{prelanding['id']}")

    assert db.query(EmailCapture).count() == 0
    assert db.query(WebResult).filter(WebResult.id == result["id"]).one().prelanding_key is None


def test_export_all_and_selected(client, make_search):
    first = make_search("alpha", web_result_page=2)
    make_search('He said, "hi"')

    response = client.get("/api/admin/related-searches/export")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="related_searches_all.csv"' in response.headers["content-disposition"]
    lines = response.text.split("\n")
    assert lines[0] == "id,search_text,title,web_result_page,position,display_order,is_active,blog_id"
    assert lines[1] == f"{first['id']},alpha,alpha,2,1,0,true,"
    assert '"He said, ""hi"""' in lines[2]

    selected = client.get("/api/admin/related-searches/export", params={"ids": [first["id"]]})
    assert 'filename="related_searches_selected.csv"' in selected.headers["content-disposition"]
    assert len(selected.text.split("\n")) == 2


def test_export_with_no_rows_is_empty(client):
    response = client.get("/api/admin/blogs/export")

    assert response.status_code == 200
    assert response.text == ""


def test_copy_formats(client, make_search, make_result, make_prelanding):
    search = make_search("copy me", web_result_page=4)
    result = make_result("Copy result", "https://example.com/copy")
    prelanding = make_prelanding(key="copy-key", headline="Copy headline")
    blog = client.post("/api/admin/blogs", json={"title": "Copy blog"}).json()

    searches = client.post("/api/admin/related-searches/copy", json={"ids": [search["id"]]}).json()
    assert searches == {"count": 1, "text": "https://minglemoody.test/webresult/4"}

    results = client.post("/api/admin/web-results/copy", json={"ids": [result["id"]]}).json()
    assert results["text"] == "Copy result - https://example.com/copy"

    prelandings = client.post("/api/admin/prelandings/copy", json={"ids": [prelanding["id"]]}).json()
    assert prelandings["text"] == "Copy headline - https://minglemoody.test/prelanding/copy-key"

    blogs = client.post("/api/admin/blogs/copy", json={"ids": [blog["id"]]}).json()
    assert blogs["text"] == "Copy blog - /blog/copy-blog"


def test_landing_content_upsert(client):
    assert client.get("/api/admin/landing").json()["title"] == ""

    client.put("/api/admin/landing", json={"title": "First", "description": "One"})
    client.put("/api/admin/landing", json={"title": "Second", "description": "Two"})

    data = client.get("/api/admin/landing").json()
    assert data["title"] == "Second"
    assert data["description"] == "Two"


def test_email_captures_listing(client, make_prelanding):
    make_prelanding(key="listing")
    for email in ("first@example.com", "second@example.com"):
        client.post("/api/prelandings/listing/emails", json={"email": email, "redirect": "https://example.com/"})

    captures = client.get("/api/admin/email-captures").json()

    assert [capture["email"] for capture in captures] == ["second@example.com", "first@example.com"]
