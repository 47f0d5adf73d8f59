from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from classifieds.collectors.base import Collector, DetailPageError
from classifieds.core.dates import DateNormalizationError, normalize_date
from classifieds.core.fetcher import FetchError, Fetcher
from classifieds.core.geocoding import Geocoder, GeocodingError
from classifieds.core.models import Announcement

LOGGER = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AnnouncementBuilder:
    def __init__(
        self,
        fetcher: Fetcher,
        collector: Collector,
        geocoder: Geocoder,
        use_cache: bool = True,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.fetcher = fetcher
        self.collector = collector
        self.geocoder = geocoder
        self.use_cache = use_cache
        self.clock = clock

    def build(self, item: Any) -> Announcement | None:
        """Build one announcement from a listing item, or log why it was skipped and return None."""
        url = self.collector.detail_url(item)
        if not url:
            LOGGER.warning("Cannot find announcement url")
            return None

        try:
            document = self.collector.parse(self.fetcher.fetch(url, use_cache=self.use_cache))
            fields = self.collector.parse_detail(document)
        except (FetchError, DetailPageError) as exc:
            LOGGER.warning("Skipping %s: %s", url, exc)
            return None

        try:
            location = self.geocoder.resolve(fields.address)
        except GeocodingError as exc:
            LOGGER.warning("Skipping %s: cannot geocode %r: %s", url, fields.address, exc)
            return None

        try:
            published_at = normalize_date(fields.date_text, now=self.clock())
        except DateNormalizationError as exc:
            LOGGER.warning("Skipping %s: %s", url, exc)
            return None

        return Announcement(date=published_at, title=fields.title, location=location, url=url)
