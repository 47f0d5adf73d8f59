from __future__ import annotations

import os
from dataclasses import dataclass, replace
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Location:
    lat: float
    lng: float

    def __str__(self) -> str:
        return f"{self.lat}, {self.lng}"


@dataclass(frozen=True, slots=True)
class Announcement:
    date: datetime
    title: str
    location: Location
    url: str | None = None
    content: str | None = None  # not extracted yet

    def __post_init__(self) -> None:
        if not self.title or not self.title.strip():
            raise ValueError("Announcement title must not be empty.")
        if self.date.tzinfo is None:
            raise ValueError("Announcement date must be timezone-aware.")

    def __str__(self) -> str:
        return f"Date: {self.date.strftime('%d %b %y %H:%M %z')}\nTitle: {self.title}\nLocation: {self.location}\n"


@dataclass(frozen=True, slots=True)
class CrawlConfig:
    use_cache: bool = True
    limit: int = 50
    base_url: str = "https://irr.ru"
    start_path: str = "/real-estate/rent/"
    cache_dir: str = "cache"
    timeout_seconds: float = 20.0
    max_workers: int = 1

    def __post_init__(self) -> None:
        if self.limit < 0:
            raise ValueError("limit must be >= 0")
        if self.max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")

    @property
    def start_url(self) -> str:
        return self.base_url.rstrip("/") + "/" + self.start_path.lstrip("/")

    @classmethod
    def from_env(cls) -> CrawlConfig:
        defaults = cls()
        return cls(
            use_cache=_read_bool_env("CRAWL_USE_CACHE", defaults.use_cache),
            limit=_read_non_negative_int_env("CRAWL_LIMIT", defaults.limit),
            base_url=os.environ.get("CRAWL_BASE_URL", "").strip() or defaults.base_url,
            start_path=os.environ.get("CRAWL_START_PATH", "").strip() or defaults.start_path,
            cache_dir=os.environ.get("CRAWL_CACHE_DIR", "").strip() or defaults.cache_dir,
            timeout_seconds=_read_positive_float_env("CRAWL_TIMEOUT_SECONDS", defaults.timeout_seconds),
            max_workers=_read_non_negative_int_env("CRAWL_MAX_WORKERS", defaults.max_workers) or 1,
        )

    def with_overrides(self, **changes: object) -> CrawlConfig:
        """Return a copy with every non-None override applied."""
        return replace(self, **{key: value for key, value in changes.items() if value is not None})


def _read_bool_env(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    lowered = raw.strip().lower()
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"0", "false", "no", "off"}:
        return False
    return default


def _read_non_negative_int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        value = int(raw.strip())
    except (TypeError, ValueError):
        return default
    return value if value >= 0 else default


def _read_positive_float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        value = float(raw.strip())
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default
