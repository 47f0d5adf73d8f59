from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator

import httpx

from classifieds.core.cache import CacheStore

LOGGER = logging.getLogger(__name__)


class CrawlError(Exception):
    pass


class FetchError(CrawlError):
    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Cannot download {url}: {reason}")
        self.url = url
        self.reason = reason


class Fetcher:
    """
    Resolve URLs to page bytes, reading through the cache when asked to.

    One GET per call, no retries. Concurrent fetches of the same URL wait on a
    per-URL lock so a cache miss reaches the network once.
    """

    def __init__(
        self,
        cache: CacheStore | None = None,
        client: httpx.Client | None = None,
        timeout_seconds: float = 20.0,
    ) -> None:
        self.cache = cache
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout_seconds, follow_redirects=True)
        # url -> (lock, number of callers holding or waiting on it)
        self._key_locks: dict[str, tuple[threading.Lock, int]] = {}
        self._locks_guard = threading.Lock()

    def __enter__(self) -> Fetcher:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def fetch(self, url: str, use_cache: bool = True) -> bytes:
        if not use_cache or self.cache is None:
            LOGGER.debug("No cache: %s", url)
            return self._download(url)

        with self._locked(url):
            cached = self.cache.get(url)
            if cached is not None:
                LOGGER.debug("Cache hit: %s", url)
                return cached
            LOGGER.debug("Cache miss: %s", url)
            content = self._download(url)
            self.cache.put(url, content)
            return content

    def _download(self, url: str) -> bytes:
        try:
            response = self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise FetchError(url, f"HTTP {exc.response.status_code}") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchError(url, str(exc) or exc.__class__.__name__) from exc
        return response.content

    @contextmanager
    def _locked(self, url: str) -> Iterator[None]:
        with self._locks_guard:
            lock, users = self._key_locks.get(url, (threading.Lock(), 0))
            self._key_locks[url] = (lock, users + 1)
        try:
            with lock:
                yield
        finally:
            with self._locks_guard:
                lock, users = self._key_locks[url]
                if users == 1:
                    del self._key_locks[url]
                else:
                    self._key_locks[url] = (lock, users - 1)
