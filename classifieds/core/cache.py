from __future__ import annotations

import hashlib
import logging
import os
import tempfile
from pathlib import Path
from urllib.parse import quote

LOGGER = logging.getLogger(__name__)

# Entries never expire and are never revalidated: presence alone is authoritative.
# A page that changes upstream is not re-fetched until the cache is disabled or cleared.
UNCONDITIONAL_CACHE_POLICY = "unconditional cache, no TTL"

# Most filesystems cap a single path segment at 255 bytes.
MAX_KEY_LENGTH = 200
_DIGEST_LENGTH = 64


def cache_key(url: str) -> str:
    """
    Escape a URL into a single filesystem path segment.

    Escaped URLs longer than MAX_KEY_LENGTH keep their head and end with the
    sha256 of the full URL, so keys stay bounded and distinct.
    """
    escaped = quote(url, safe="")
    if len(escaped) <= MAX_KEY_LENGTH:
        return escaped
    digest = hashlib.sha256(url.encode("utf-8")).hexdigest()
    return f"{escaped[: MAX_KEY_LENGTH - _DIGEST_LENGTH - 1]}-{digest}"


class CacheStore:
    policy = UNCONDITIONAL_CACHE_POLICY

    def __init__(self, cache_dir: str | Path) -> None:
        self.cache_dir = Path(cache_dir)
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            LOGGER.warning("Cannot create cache dir %s: %s", self.cache_dir, exc)

    def path_for(self, url: str) -> Path:
        return self.cache_dir / cache_key(url)

    def get(self, url: str) -> bytes | None:
        path = self.path_for(url)
        try:
            if not path.is_file():
                return None
            return path.read_bytes()
        except OSError as exc:
            LOGGER.warning("Cannot read cache file %s: %s", path, exc)
            return None

    def put(self, url: str, content: bytes) -> bool:
        """Write an entry atomically; a failed write leaves no entry behind."""
        path = self.path_for(url)
        tmp_name: str | None = None
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self.cache_dir, prefix=".tmp-")
            with os.fdopen(fd, "wb") as handle:
                handle.write(content)
            os.replace(tmp_name, path)
        except OSError as exc:
            LOGGER.warning("Cannot create cache file %s: %s", path, exc)
            if tmp_name is not None:
                _discard(tmp_name)
            return False
        return True


def _discard(tmp_name: str) -> None:
    try:
        os.unlink(tmp_name)
    except FileNotFoundError:
        pass
    except OSError as exc:
        LOGGER.warning("Cannot remove temporary cache file %s: %s", tmp_name, exc)
