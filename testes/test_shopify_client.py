import os
import sys

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest
import requests

from blog_migrator.migrators import shopify_client
from blog_migrator.migrators.shopify_client import (
    BlogNotFoundError,
    RateLimiter,
    ShopifyStore,
    create_article,
    find_blog_id_by_handle,
    list_articles_paged,
    next_page_info,
    with_retries,
)

STORE = ShopifyStore(shop="source.myshopify.com", token="tok-123", api_version="2025-01")


class FakeResponse:
    def __init__(self, payload=None, status_code=200, headers=None):
        self._payload = payload or {}
        self.status_code = status_code
        self.headers = headers or {}
        self.text = str(self._payload)

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


@pytest.fixture(autouse=True)
def no_rate_limit(monkeypatch):
    monkeypatch.setattr(shopify_client._limiter, "wait", lambda *a, **k: None)


def test_base_url_and_headers():
    assert STORE.base_url == "https://source.myshopify.com/admin/api/2025-01"
    headers = shopify_client.shopify_headers(STORE)
    assert headers["X-Shopify-Access-Token"] == "tok-123"


def test_next_page_info_reads_next_link_only():
    prev_and_next = (
        '<https://s.myshopify.com/admin/api/2025-01/blogs/1/articles.json?limit=250&page_info=prev1>; rel="previous", '
        '<https://s.myshopify.com/admin/api/2025-01/blogs/1/articles.json?limit=250&page_info=next2>; rel="next"'
    )
    assert next_page_info(prev_and_next) == "next2"
    only_prev = '<https://s.myshopify.com/x.json?page_info=prev1>; rel="previous"'
    assert next_page_info(only_prev) is None
    assert next_page_info(None) is None


def test_list_articles_follows_pagination(monkeypatch):
    calls = []
    pages = [
        FakeResponse(
            {"articles": [{"id": 1}, {"id": 2}]},
            headers={"Link": '<https://source.myshopify.com/admin/api/2025-01/blogs/9/articles.json?limit=250&page_info=abc>; rel="next"'},
        ),
        FakeResponse({"articles": [{"id": 3}]}),
    ]

    def fake_get(url, headers=None, params=None, timeout=None):
        calls.append((url, dict(params or {})))
        return pages[len(calls) - 1]

    monkeypatch.setattr(shopify_client.requests, "get", fake_get)
    articles = list_articles_paged(STORE, 9)

    assert [a["id"] for a in articles] == [1, 2, 3]
    assert calls[0] == ("https://source.myshopify.com/admin/api/2025-01/blogs/9/articles.json", {"limit": 250})
    assert calls[1][1] == {"limit": 250, "page_info": "abc"}


def test_find_blog_id_by_handle(monkeypatch):
    blogs = {"blogs": [{"id": 11, "handle": "news"}, {"id": 12, "handle": "blog"}]}
    monkeypatch.setattr(shopify_client.requests, "get", lambda *a, **k: FakeResponse(blogs))
    assert find_blog_id_by_handle(STORE, "blog") == 12
    with pytest.raises(BlogNotFoundError):
        find_blog_id_by_handle(STORE, "missing")


def test_create_article_posts_payload(monkeypatch):
    seen = {}

    def fake_post(url, headers=None, json=None, timeout=None):
        seen.update(url=url, headers=headers, json=json)
        return FakeResponse({"article": {"id": 77, "title": json["article"]["title"]}}, status_code=201)

    monkeypatch.setattr(shopify_client.requests, "post", fake_post)
    created = create_article(STORE, 5, {"article": {"title": "Hello"}})

    assert created == {"id": 77, "title": "Hello"}
    assert seen["url"] == "https://source.myshopify.com/admin/api/2025-01/blogs/5/articles.json"
    assert seen["headers"]["X-Shopify-Access-Token"] == "tok-123"


def test_with_retries_honours_retry_after():
    responses = [FakeResponse(status_code=429, headers={"Retry-After": "2"}), FakeResponse({"ok": True})]
    sleeps = []
    resp = with_retries(lambda: responses.pop(0), sleep_fn=sleeps.append)
    assert resp.json() == {"ok": True}
    assert sleeps == [2.0]


def test_with_retries_falls_back_to_backoff_on_http_date_retry_after():
    responses = [
        FakeResponse(status_code=429, headers={"Retry-After": "Wed, 21 Oct 2015 07:28:00 GMT"}),
        FakeResponse({"ok": True}),
    ]
    sleeps = []
    resp = with_retries(lambda: responses.pop(0), base_delay=0.5, sleep_fn=sleeps.append)
    assert resp.json() == {"ok": True}
    assert sleeps == [0.5]


def test_with_retries_backs_off_on_server_errors():
    responses = [FakeResponse(status_code=503), FakeResponse(status_code=502), FakeResponse({"ok": True})]
    sleeps = []
    with_retries(lambda: responses.pop(0), base_delay=0.5, sleep_fn=sleeps.append)
    assert sleeps == [0.5, 1.0]


def test_with_retries_does_not_retry_client_errors():
    calls = []

    def fn():
        calls.append(1)
        return FakeResponse(status_code=404)

    with pytest.raises(requests.HTTPError):
        with_retries(fn, sleep_fn=lambda s: None)
    assert len(calls) == 1


def test_with_retries_gives_up_after_max_attempts():
    calls = []

    def fn():
        calls.append(1)
        raise requests.ConnectionError("down")

    with pytest.raises(requests.ConnectionError):
        with_retries(fn, max_attempts=3, sleep_fn=lambda s: None)
    assert len(calls) == 3


def test_rate_limiter_sleeps_between_calls():
    limiter = RateLimiter(rpm=60)
    clock = [100.0]
    sleeps = []
    limiter.wait(time_fn=lambda: clock[0], sleep_fn=sleeps.append)
    clock[0] = 100.25
    limiter.wait(time_fn=lambda: clock[0], sleep_fn=sleeps.append)
    assert sleeps == [0.75]
