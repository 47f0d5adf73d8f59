from __future__ import annotations

from collections import Counter

import httpx
import pytest

from classifieds.core.cache import CacheStore
from classifieds.core.fetcher import Fetcher

BASE_URL = "https://irr.test"


def listing_html(page: int, total_pages: int, item_urls: list[str], invalid_items: int = 0) -> str:
    items = "".join(
        f'<div class="listing__item"><a class="listing__itemTitle" href="{url}">Ad</a></div>' for url in item_urls
    )
    items += '<div class="listing__item"><span>banner</span></div>' * invalid_items
    pages = "".join(
        '<li class="pagination__pagesItem{active}">'
        '<a class="pagination__pagesLink" href="/real-estate/rent/page{n}/">{n}</a></li>'.format(
            n=n, active=" pagination__pagesItem_active" if n == page else ""
        )
        for n in range(1, total_pages + 1)
    )
    return f'<html><body><div class="listing">{items}</div><ul class="pagination">{pages}</ul></body></html>'


def detail_html(title: str, date_text: str, address: str = "Москва, ул. Тверская") -> str:
    return (
        "<html><body>"
        f'<h1 class="productPage__title">\n  {title}\n</h1>'
        f'<div class="productPage__mainInfo"><span class="productPage__createDate">\n\t{date_text} </span></div>'
        f'<div class="productPage__infoBlock"><b class="productPage__infoTextBold"> {address} </b></div>'
        "</body></html>"
    )


def page_url(page: int) -> str:
    if page == 1:
        return f"{BASE_URL}/real-estate/rent/"
    return f"{BASE_URL}/real-estate/rent/page{page}/"


class FakeSite:
    base_url = BASE_URL
    listing_html = staticmethod(listing_html)
    detail_html = staticmethod(detail_html)
    page_url = staticmethod(page_url)

    def __init__(self) -> None:
        self.pages: dict[str, bytes] = {}
        self.requests: Counter[str] = Counter()

    def add(self, url: str, body: str | bytes) -> None:
        self.pages[str(httpx.URL(url))] = body.encode("utf-8") if isinstance(body, str) else body

    def add_listing(self, total_pages: int, items_per_page: int, invalid_items: int = 0) -> None:
        for page in range(1, total_pages + 1):
            urls = [f"/ad/{page}-{index}.html" for index in range(items_per_page)]
            self.add(page_url(page), listing_html(page, total_pages, urls, invalid_items=invalid_items))
            for url in urls:
                self.add(BASE_URL + url, detail_html(f"Квартира {url}", "5 марта 2024"))

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests[url] += 1
        if url not in self.pages:
            return httpx.Response(404)
        return httpx.Response(200, content=self.pages[url])

    @property
    def total_requests(self) -> int:
        return sum(self.requests.values())

    def fetcher(self, cache: CacheStore | None = None) -> Fetcher:
        client = httpx.Client(transport=httpx.MockTransport(self.handler))
        return Fetcher(cache=cache, client=client)


@pytest.fixture
def site() -> FakeSite:
    return FakeSite()
