from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from classifieds.core.fetcher import CrawlError


class ListingPageError(CrawlError):
    pass


class PaginationError(ListingPageError):
    pass


class DetailPageError(CrawlError):
    pass


@dataclass(frozen=True, slots=True)
class DetailFields:
    title: str
    address: str
    date_text: str


class Collector(ABC):
    source_name: str

    @abstractmethod
    def parse(self, content: bytes) -> Any:
        """Parse raw page bytes into a traversable document."""

    @abstractmethod
    def listing_items(self, document: Any) -> list[Any]:
        """Item handles of a listing page, in document order."""

    @abstractmethod
    def is_valid_item(self, item: Any) -> bool:
        """Whether a listing item links to an announcement."""

    @abstractmethod
    def detail_url(self, item: Any) -> str | None:
        """Absolute detail-page URL of a listing item, or None when missing."""

    @abstractmethod
    def next_page_url(self, document: Any) -> str | None:
        """
        Next listing page URL, or None when the listing is exhausted.
        Raises PaginationError when the pagination markup cannot be read.
        """

    @abstractmethod
    def parse_detail(self, document: Any) -> DetailFields:
        """Extract trimmed fields from a detail page, raising DetailPageError on missing markup."""
