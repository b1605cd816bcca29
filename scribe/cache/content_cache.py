"""Content cache - lets large documents be referenced by a short id"""

import hashlib
import logging
import threading
import time
import uuid
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 50
DEFAULT_TTL_SECONDS = 2 * 60 * 60


def content_hash(content: str) -> str:
    """Short content fingerprint used for deduplication only"""
    return hashlib.md5(content.encode("utf-8")).hexdigest()[:16]


def generate_content_id() -> str:
    return f"content_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"


@dataclass
class CacheEntry:
    id: str
    content: str
    content_hash: str
    created_at: float
    last_accessed_at: float


@dataclass
class StoreResult:
    content_id: str
    is_new: bool
    size: int

    def to_dict(self) -> dict:
        return {
            "contentId": self.content_id,
            "isNew": self.is_new,
            "size": self.size,
            "sizeFormatted": f"{self.size / 1024:.1f} KB",
        }


class ContentCache:
    """In-memory, content-addressed document store.

    Entries are kept in an OrderedDict ordered by last access, so the least
    recently used entry is always at the front and eviction is O(1). A second
    index maps content hashes to ids so a repeated ``store`` reuses the
    existing entry. Expired entries are dropped lazily on lookup and swept
    from the front of the LRU order before each insert.
    """

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._by_hash: dict[str, str] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def _expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.last_accessed_at > self.ttl_seconds

    def _remove(self, content_id: str) -> CacheEntry | None:
        entry = self._entries.pop(content_id, None)
        if entry is not None and self._by_hash.get(entry.content_hash) == content_id:
            del self._by_hash[entry.content_hash]
        return entry

    def _touch(self, entry: CacheEntry, now: float):
        entry.last_accessed_at = now
        self._entries.move_to_end(entry.id)

    def _sweep_expired(self, now: float) -> int:
        cleaned = 0
        while self._entries:
            oldest = next(iter(self._entries.values()))
            if not self._expired(oldest, now):
                break
            self._remove(oldest.id)
            cleaned += 1
        if cleaned:
            logger.info(f"Swept {cleaned} expired cache entries")
        return cleaned

    def store(self, content: str) -> StoreResult:
        """Store content, reusing the live entry for identical content"""
        if not isinstance(content, str) or not content:
            raise ValueError("content must be a non-empty string")

        digest = content_hash(content)
        with self._lock:
            now = self._clock()

            existing_id = self._by_hash.get(digest)
            if existing_id is not None:
                entry = self._entries[existing_id]
                if not self._expired(entry, now):
                    self._touch(entry, now)
                    logger.info(f"Reusing cached content {existing_id} ({len(content) / 1024:.1f} KB)")
                    return StoreResult(content_id=existing_id, is_new=False, size=len(content))
                self._remove(existing_id)
                logger.info(f"Cached content expired: {existing_id}")

            self._sweep_expired(now)

            if len(self._entries) >= self.max_entries:
                evicted_id = next(iter(self._entries))
                self._remove(evicted_id)
                logger.info(f"Cache full, evicted least recently used entry {evicted_id}")

            content_id = generate_content_id()
            while content_id in self._entries:
                content_id = generate_content_id()
            self._entries[content_id] = CacheEntry(
                id=content_id,
                content=content,
                content_hash=digest,
                created_at=now,
                last_accessed_at=now,
            )
            self._by_hash[digest] = content_id

        logger.info(f"Stored new content {content_id} ({len(content) / 1024:.1f} KB)")
        return StoreResult(content_id=content_id, is_new=True, size=len(content))

    def get(self, content_id: str | None) -> str | None:
        """Return cached content, or None if missing or expired"""
        if not content_id:
            return None

        with self._lock:
            entry = self._entries.get(content_id)
            if entry is None:
                logger.info(f"Cached content not found: {content_id}")
                return None

            now = self._clock()
            if self._expired(entry, now):
                self._remove(content_id)
                logger.info(f"Cached content expired: {content_id}")
                return None

            self._touch(entry, now)
            return entry.content

    def stats(self) -> dict:
        with self._lock:
            now = self._clock()
            items = []
            total_bytes = 0
            for entry in self._entries.values():
                size = len(entry.content.encode("utf-8"))
                total_bytes += size
                items.append({
                    "id": entry.id,
                    "size": size,
                    "age_seconds": round(now - entry.created_at, 3),
                    "idle_seconds": round(now - entry.last_accessed_at, 3),
                })
            return {
                "count": len(self._entries),
                "max_entries": self.max_entries,
                "ttl_seconds": self.ttl_seconds,
                "total_bytes": total_bytes,
                "items": items,
            }

    def clear(self):
        with self._lock:
            self._entries.clear()
            self._by_hash.clear()
        logger.info("Content cache cleared")
