from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence, TextIO

import httpx

from classifieds.collectors.irr.collector import IrrCollector
from classifieds.core.builder import AnnouncementBuilder
from classifieds.core.cache import CacheStore
from classifieds.core.crawler import ListingCrawler
from classifieds.core.fetcher import CrawlError, Fetcher
from classifieds.core.geocoding import StubGeocoder
from classifieds.core.models import CrawlConfig

LOGGER = logging.getLogger(__name__)


def run_crawl(config: CrawlConfig, out: TextIO | None = None, client: httpx.Client | None = None) -> int:
    out = out if out is not None else sys.stdout
    cache = CacheStore(config.cache_dir) if config.use_cache else None
    collector = IrrCollector(base_url=config.base_url)
    emitted = 0
    with Fetcher(cache=cache, client=client, timeout_seconds=config.timeout_seconds) as fetcher:
        builder = AnnouncementBuilder(fetcher, collector, StubGeocoder(), use_cache=config.use_cache)
        crawler = ListingCrawler(config, fetcher, collector, builder)
        try:
            for announcement in crawler.crawl():
                print(announcement, file=out)
                emitted += 1
        except CrawlError as exc:
            LOGGER.error("Crawl halted after %s announcements: %s", emitted, exc)
            return 1
    LOGGER.info("Crawl completed. announcements=%s limit=%s", emitted, config.limit)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Crawl irr.ru rent announcements.")
    cache_group = parser.add_mutually_exclusive_group()
    cache_group.add_argument("--use-cache", dest="use_cache", action="store_true", default=None)
    cache_group.add_argument(
        "--no-cache",
        dest="use_cache",
        action="store_false",
        help="Always download pages. Cached pages are trusted forever otherwise, so use this to pick up changes.",
    )
    parser.add_argument("--limit", type=_non_negative_int, default=None, help="Maximum announcements (default 50).")
    parser.add_argument("--cache-dir", default=None)
    parser.add_argument("--base-url", default=None)
    parser.add_argument("--start-path", default=None)
    parser.add_argument("--timeout", dest="timeout_seconds", type=float, default=None)
    parser.add_argument("--workers", dest="max_workers", type=_positive_int, default=None)
    parser.add_argument("--verbose", action="store_true")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )
    config = CrawlConfig.from_env().with_overrides(
        use_cache=args.use_cache,
        limit=args.limit,
        cache_dir=args.cache_dir,
        base_url=args.base_url,
        start_path=args.start_path,
        timeout_seconds=args.timeout_seconds,
        max_workers=args.max_workers,
    )
    return run_crawl(config)


def _non_negative_int(raw: str) -> int:
    value = int(raw)
    if value < 0:
        raise argparse.ArgumentTypeError("must be >= 0")
    return value


def _positive_int(raw: str) -> int:
    value = int(raw)
    if value < 1:
        raise argparse.ArgumentTypeError("must be >= 1")
    return value


if __name__ == "__main__":
    raise SystemExit(main())
