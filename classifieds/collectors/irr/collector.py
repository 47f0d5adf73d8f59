from __future__ import annotations

from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from classifieds.collectors.base import Collector, DetailFields, DetailPageError, PaginationError

LISTING_ITEM_SELECTOR = ".listing .listing__item"
ITEM_TITLE_SELECTOR = ".listing__itemTitle"
ACTIVE_PAGE_SELECTOR = ".pagination .pagination__pagesItem.pagination__pagesItem_active"
PAGE_LINK_SELECTOR = ".pagination__pagesLink"
DETAIL_TITLE_SELECTOR = ".productPage__title"
DETAIL_ADDRESS_SELECTOR = ".productPage__infoBlock .productPage__infoTextBold"
DETAIL_DATE_SELECTOR = ".productPage__mainInfo .productPage__createDate"


class IrrCollector(Collector):
    source_name = "irr"

    def __init__(self, base_url: str = "https://irr.ru") -> None:
        self.base_url = base_url

    def parse(self, content: bytes) -> BeautifulSoup:
        return BeautifulSoup(content, "lxml")

    def listing_items(self, document: BeautifulSoup) -> list[Tag]:
        return document.select(LISTING_ITEM_SELECTOR)

    def is_valid_item(self, item: Tag) -> bool:
        return item.select_one(ITEM_TITLE_SELECTOR) is not None

    def detail_url(self, item: Tag) -> str | None:
        title = item.select_one(ITEM_TITLE_SELECTOR)
        href = _attr(title, "href")
        if not href:
            return None
        try:
            return urljoin(self.base_url, href)
        except ValueError:
            return None

    def next_page_url(self, document: BeautifulSoup) -> str | None:
        active = document.select_one(ACTIVE_PAGE_SELECTOR)
        if active is None:
            raise PaginationError("Cannot find active pagination item")
        following = active.find_next_sibling()
        if following is None:
            return None
        href = _attr(following.select_one(PAGE_LINK_SELECTOR), "href")
        if not href:
            raise PaginationError("Cannot find next page url")
        try:
            return urljoin(self.base_url, href)
        except ValueError as exc:
            raise PaginationError(f"Invalid next page url {href!r}: {exc}") from exc

    def parse_detail(self, document: BeautifulSoup) -> DetailFields:
        title = _joined_text(document, DETAIL_TITLE_SELECTOR)
        if not title:
            raise DetailPageError("Cannot find announcement title")
        date_text = _joined_text(document, DETAIL_DATE_SELECTOR)
        if not date_text:
            raise DetailPageError("Cannot find announcement date")
        return DetailFields(
            title=title,
            address=_joined_text(document, DETAIL_ADDRESS_SELECTOR),
            date_text=date_text,
        )


def trim(text: str) -> str:
    return text.strip()


def _joined_text(document: BeautifulSoup, selector: str) -> str:
    return trim("".join(node.get_text() for node in document.select(selector)))


def _attr(node: Tag | None, name: str) -> str | None:
    if node is None:
        return None
    value = node.get(name)
    if isinstance(value, list):
        value = " ".join(value)
    return value.strip() if value else None
