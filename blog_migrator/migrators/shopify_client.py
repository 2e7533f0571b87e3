"""
Shopify Admin REST helpers for the blog migration.

This module implements low-level interactions with the Admin REST API of
a Shopify store: finding a blog by handle, paging through its articles,
reading articles and their metafields, and creating articles and
metafields on the target store.  A simple rate limiter keeps the tool
under the store's request budget, and a generic retry wrapper handles
transient network errors and server-side throttling (429 or 5xx).

Usage example::

    from blog_migrator.migrators.shopify_client import (
        ShopifyStore, find_blog_id_by_handle, list_articles_paged, get_article
    )

    store = ShopifyStore(shop="example.myshopify.com", token="shpat_...")
    blog_id = find_blog_id_by_handle(store, "news")
    for summary in list_articles_paged(store, blog_id):
        article = get_article(store, blog_id, summary["id"])

"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import parse_qs, urlparse

import requests

DEFAULT_API_VERSION = "2025-01"
PAGE_LIMIT = 250
REQUEST_TIMEOUT = 30

_NEXT_LINK_RE = re.compile(r'<([^>]+)>;\s*rel="next"')


class BlogNotFoundError(LookupError):
    """Raised when a store has no blog with the requested handle."""


@dataclass(frozen=True)
class ShopifyStore:
    """Connection details for one store."""

    shop: str
    token: str
    api_version: str = DEFAULT_API_VERSION

    @property
    def base_url(self) -> str:
        return f"https://{self.shop}/admin/api/{self.api_version}"


###############################################################################
# Rate limiting and retry utilities
###############################################################################

class RateLimiter:
    """
    Simple time-based rate limiter.  Ensures that no more than ``rpm``
    requests are dispatched per minute.  The limiter is used by all
    network calls in this module so that the REST bucket of a store is
    never drained.
    """

    def __init__(self, rpm: int = 120) -> None:
        self.rpm = max(1, rpm)
        self.interval = 60.0 / float(self.rpm)
        self._last = 0.0

    def wait(self, time_fn: Callable[[], float] = time.time, sleep_fn: Callable[[float], None] = time.sleep) -> None:
        now = time_fn()
        dt = now - self._last
        if dt < self.interval:
            sleep_fn(self.interval - dt)
        self._last = time_fn()


def shopify_headers(store: ShopifyStore) -> Dict[str, str]:
    """
    Construct the headers required for Admin API requests.

    :param store: The store whose access token is used.
    :return: A dictionary of headers including the access token.
    """
    return {
        "X-Shopify-Access-Token": store.token,
        "Content-Type": "application/json",
    }


def with_retries(
    fn: Callable[[], requests.Response],
    *,
    max_attempts: int = 5,
    base_delay: float = 0.7,
    sleep_fn: Callable[[float], None] = time.sleep,
) -> requests.Response:
    """
    Execute a function returning a ``requests.Response``, retrying on
    transient HTTP errors.  Retries are attempted on status codes 429
    (too many requests) and 5xx server errors.  Backoff is exponential
    unless the server sends a ``Retry-After`` header.

    :param fn: A zero-argument callable that performs the HTTP request.
    :param max_attempts: Maximum number of attempts before giving up.
    :param base_delay: Base delay in seconds for exponential backoff.
    :return: The successful ``requests.Response``.
    :raises requests.HTTPError: if all attempts fail.
    """
    attempt = 0
    while True:
        try:
            resp = fn()
            resp.raise_for_status()
            return resp
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            if status not in (429, 500, 502, 503, 504) or attempt >= max_attempts - 1:
                raise
            wait = base_delay * (2 ** attempt)
            retry_after = e.response.headers.get("Retry-After")
            if retry_after:
                try:
                    wait = float(retry_after)
                except ValueError:
                    # HTTP-date form; keep the exponential backoff
                    pass
            sleep_fn(wait)
            attempt += 1
        except requests.RequestException:
            if attempt >= max_attempts - 1:
                raise
            sleep_fn(base_delay * (2 ** attempt))
            attempt += 1


_limiter = RateLimiter(120)


def _get(store: ShopifyStore, path: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
    _limiter.wait()

    def do_request() -> requests.Response:
        return requests.get(
            f"{store.base_url}{path}",
            headers=shopify_headers(store),
            params=params or {},
            timeout=REQUEST_TIMEOUT,
        )

    return with_retries(do_request)


def _post(store: ShopifyStore, path: str, body: Dict[str, Any]) -> requests.Response:
    _limiter.wait()

    def do_request() -> requests.Response:
        return requests.post(
            f"{store.base_url}{path}",
            headers=shopify_headers(store),
            json=body,
            timeout=REQUEST_TIMEOUT,
        )

    return with_retries(do_request)


def next_page_info(link_header: Optional[str]) -> Optional[str]:
    """Return the ``page_info`` cursor of the ``rel="next"`` link, if any."""
    if not link_header:
        return None
    match = _NEXT_LINK_RE.search(link_header)
    if not match:
        return None
    values = parse_qs(urlparse(match.group(1)).query).get("page_info")
    return values[0] if values else None


###############################################################################
# Blog and article helpers
###############################################################################

def find_blog_id_by_handle(store: ShopifyStore, handle: str) -> int:
    """
    Look up the id of the blog with ``handle``.

    :raises BlogNotFoundError: if the store has no such blog.
    """
    blogs = _get(store, "/blogs.json", {"limit": PAGE_LIMIT}).json().get("blogs") or []
    for blog in blogs:
        if blog.get("handle") == handle:
            return blog["id"]
    raise BlogNotFoundError(f"Blog handle not found on {store.shop}: {handle}")


def list_articles_paged(store: ShopifyStore, blog_id: int) -> List[Dict[str, Any]]:
    """
    List every article of a blog, following cursor pagination.

    The Admin API returns at most ``PAGE_LIMIT`` articles per page and
    points to the next page through the ``Link`` response header.
    """
    articles: List[Dict[str, Any]] = []
    page_info: Optional[str] = None
    while True:
        params: Dict[str, Any] = {"limit": PAGE_LIMIT}
        if page_info:
            params["page_info"] = page_info
        resp = _get(store, f"/blogs/{blog_id}/articles.json", params)
        articles.extend(resp.json().get("articles") or [])
        page_info = next_page_info(resp.headers.get("Link"))
        if not page_info:
            return articles


def get_article(store: ShopifyStore, blog_id: int, article_id: Any) -> Dict[str, Any]:
    return _get(store, f"/blogs/{blog_id}/articles/{article_id}.json").json().get("article") or {}


def get_article_metafields(store: ShopifyStore, article_id: Any) -> List[Dict[str, Any]]:
    resp = _get(store, f"/articles/{article_id}/metafields.json", {"limit": PAGE_LIMIT})
    return resp.json().get("metafields") or []


def create_article(store: ShopifyStore, blog_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create an article in ``blog_id``.

    :param payload: The request body, ``{"article": {...}}``.
    :return: The created article as returned by the store.
    :raises requests.HTTPError: on failure.
    """
    return _post(store, f"/blogs/{blog_id}/articles.json", payload).json().get("article") or {}


def create_metafield_for_article(store: ShopifyStore, article_id: Any, payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Attach a metafield to an article.

    :param payload: The request body, ``{"metafield": {...}}``.
    :raises requests.HTTPError: on failure.
    """
    return _post(store, f"/articles/{article_id}/metafields.json", payload).json().get("metafield") or {}
