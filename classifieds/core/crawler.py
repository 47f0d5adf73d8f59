from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Iterator

from classifieds.collectors.base import Collector
from classifieds.core.builder import AnnouncementBuilder
from classifieds.core.fetcher import Fetcher
from classifieds.core.models import Announcement, CrawlConfig

LOGGER = logging.getLogger(__name__)


class CrawlBudget:
    def __init__(self, limit: int) -> None:
        self.limit = limit
        self._accepted = 0
        self._lock = threading.Lock()

    @property
    def accepted(self) -> int:
        with self._lock:
            return self._accepted

    @property
    def remaining(self) -> int:
        with self._lock:
            return self.limit - self._accepted

    @property
    def exhausted(self) -> bool:
        return self.remaining <= 0

    def try_accept(self) -> bool:
        with self._lock:
            if self._accepted >= self.limit:
                return False
            self._accepted += 1
            return True


class ListingCrawler:
    """
    Walk listing pages from `config.start_url`, yielding announcements until the
    limit is reached or the pagination runs out.

    Listing fetch and markup errors propagate and end the crawl. Items that
    fail to build are skipped by the builder.
    """

    def __init__(
        self,
        config: CrawlConfig,
        fetcher: Fetcher,
        collector: Collector,
        builder: AnnouncementBuilder,
    ) -> None:
        self.config = config
        self.fetcher = fetcher
        self.collector = collector
        self.builder = builder

    def crawl(self) -> Iterator[Announcement]:
        budget = CrawlBudget(self.config.limit)
        page_url: str | None = self.config.start_url
        executor = ThreadPoolExecutor(max_workers=self.config.max_workers) if self.config.max_workers > 1 else None
        try:
            while page_url is not None and not budget.exhausted:
                LOGGER.info("Fetching listing page %s", page_url)
                document = self.collector.parse(self.fetcher.fetch(page_url, use_cache=self.config.use_cache))
                items = [item for item in self.collector.listing_items(document) if self.collector.is_valid_item(item)]

                yield from self._build_page(items, budget, executor)

                if budget.exhausted:
                    break
                page_url = self.collector.next_page_url(document)
                if page_url is None:
                    LOGGER.info("Pagination exhausted after %s announcements", budget.accepted)
        finally:
            if executor is not None:
                executor.shutdown(wait=True, cancel_futures=True)

    def _build_page(
        self,
        items: list[Any],
        budget: CrawlBudget,
        executor: ThreadPoolExecutor | None,
    ) -> Iterator[Announcement]:
        cursor = 0
        while cursor < len(items) and not budget.exhausted:
            if executor is None:
                window = items[cursor : cursor + 1]
                results = [self.builder.build(window[0])]
            else:
                # Window never exceeds the remaining budget.
                window = items[cursor : cursor + min(self.config.max_workers, budget.remaining)]
                results = list(executor.map(self.builder.build, window))
            cursor += len(window)
            for announcement in results:
                if announcement is not None and budget.try_accept():
                    yield announcement
