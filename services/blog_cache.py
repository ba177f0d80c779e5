"""Incremental blog cache: object-store listing -> published posts.

BlogCache keeps an internal map of storage key -> (last_modified, post) that
survives across sync cycles, so only new or modified documents are fetched.
Every cycle rebuilds the published view wholesale from that map.

Only documents whose front-matter tags include "blog" (any case) are published.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import UTC, datetime

from services.frontmatter import (
    DEFAULT_EXCERPT_LENGTH,
    calculate_read_time,
    generate_excerpt,
    split_front_matter,
)
from services.identity import generate_post_id, logical_path
from services.ignore import IgnoreFilter
from services.models import Post, PublishedView
from services.store import ObjectStore, StorageEntry

log = logging.getLogger(__name__)

PUBLISH_TAG = "blog"
DEFAULT_TTL_SECONDS = 5 * 60
DEFAULT_MAX_WORKERS = 8


@dataclass(frozen=True)
class CacheEntry:
    last_modified: float
    post: Post
    fallback_date: datetime


class _Flight:
    """One in-progress sync that concurrent callers can wait on."""

    def __init__(self):
        self.done = threading.Event()
        self.view: PublishedView | None = None
        self.error: BaseException | None = None


def _iso(dt: datetime) -> str:
    return dt.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _parse_date(value: str) -> datetime | None:
    try:
        dt = datetime.fromisoformat(value.strip())
    except (ValueError, AttributeError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def _is_published(tags: list[str] | None) -> bool:
    return bool(tags) and any(t.lower() == PUBLISH_TAG for t in tags)


class BlogCache:
    def __init__(
        self,
        store: ObjectStore,
        *,
        ignore: IgnoreFilter | None = None,
        ttl: float = DEFAULT_TTL_SECONDS,
        clock=time.time,
        excerpt_length: int = DEFAULT_EXCERPT_LENGTH,
        transformer=None,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ):
        self._store = store
        self._ignore = ignore or IgnoreFilter()
        self._ttl = ttl
        self._clock = clock
        self._excerpt_length = excerpt_length
        self._transformer = transformer
        self._max_workers = max(1, max_workers)

        self._entries: dict[str, CacheEntry] = {}
        self._view: PublishedView | None = None
        self._last_synced: float | None = None
        self._lock = threading.Lock()
        self._flight: _Flight | None = None
        self._queued: _Flight | None = None

    # ── Public API ────────────────────────────────────────────────────────

    @property
    def snapshot(self) -> PublishedView | None:
        """Last published view, without syncing."""
        return self._view

    def sync(self, force: bool = False) -> PublishedView:
        """Return the published view, reconciling with the store when stale or forced.

        Only one sync runs at a time. Unforced callers arriving mid-sync wait for
        it and share its result. Forced callers arriving mid-sync share one
        follow-up cycle that starts after the running one, so they always see a
        listing taken after they asked.
        """
        if not force and self._is_fresh():
            return self._view

        with self._lock:
            if self._flight is None:
                if not force and self._is_fresh():
                    return self._view
                flight = self._flight = _Flight()
                leader = True
            elif force:
                if self._queued is None:
                    self._queued = _Flight()
                flight = self._queued
                leader = False
            else:
                flight = self._flight
                leader = False

        if leader:
            return self._lead(flight)

        flight.done.wait()
        if flight.error is not None:
            raise flight.error
        return flight.view

    def refresh(self) -> PublishedView:
        return self.sync(force=True)

    @property
    def status(self) -> dict:
        view = self._view
        return {
            "posts": len(view.posts) if view else 0,
            "tags": len(view.available_tags) if view else 0,
            "entries": len(self._entries),
            "last_synced": (
                datetime.fromtimestamp(self._last_synced, UTC).isoformat()
                if self._last_synced is not None
                else None
            ),
            "ttl_seconds": self._ttl,
            "ignore_patterns": self._ignore.patterns,
        }

    # ── Sync cycle ────────────────────────────────────────────────────────

    def _is_fresh(self) -> bool:
        view = self._view
        return view is not None and self._clock() - view.created_at < self._ttl

    def _lead(self, flight: _Flight) -> PublishedView:
        """Run *flight*, then any follow-up cycle queued by forced callers meanwhile."""
        while True:
            try:
                flight.view = self._run_cycle()
            except BaseException as e:
                flight.error = e

            fatal = flight.error is not None and not isinstance(flight.error, Exception)
            with self._lock:
                queued = self._queued
                self._queued = None
                self._flight = None if fatal else queued
            if fatal and queued is not None:
                queued.error = flight.error
                queued.done.set()
            flight.done.set()

            if queued is None or fatal:
                if flight.error is not None:
                    raise flight.error
                return flight.view
            flight = queued

    def _run_cycle(self) -> PublishedView:
        log.info("Checking object store for blog updates...")

        try:
            listing = self._store.list_entries()
        except Exception:
            log.exception("Listing object store failed")
            listing = None
        if not listing:
            log.warning("Object store listing unavailable; serving last known view")
            return self._view or PublishedView.empty()

        log.info("Loaded document list: %d keys", len(listing))

        current: dict[str, StorageEntry] = {}
        ignored = 0
        for entry in listing:
            if not entry.key:
                continue
            if self._ignore.is_ignored(entry.key):
                ignored += 1
                continue
            current[entry.key] = entry
        if ignored:
            log.info("Ignored %d keys matching CACHE_IGNORE", ignored)

        changed = False
        for key in [k for k in self._entries if k not in current]:
            log.info("Removing deleted post: %s", key)
            del self._entries[key]
            changed = True

        pending = [
            entry
            for entry in current.values()
            if entry.key not in self._entries
            or self._entries[entry.key].last_modified != entry.timestamp
        ]
        if pending:
            changed |= self._apply_fetches(pending)

        view = self._build_view()
        self._view = view
        self._last_synced = view.created_at
        log.info(
            "Cache updated. Total: %d posts, %d tags. %s",
            len(view.posts),
            len(view.available_tags),
            "Changes applied." if changed else "No changes detected.",
        )
        return view

    def _apply_fetches(self, pending: list[StorageEntry]) -> bool:
        """Fetch and parse pending keys concurrently, then update entries in listing order."""
        workers = min(self._max_workers, len(pending))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="blog-fetch") as pool:
            futures = [pool.submit(self._load_entry, entry) for entry in pending]

        changed = False
        for entry, future in zip(pending, futures):
            try:
                loaded = future.result()
            except Exception:
                log.exception("Error processing %s", entry.key)
                continue

            if loaded is not None:
                self._entries[entry.key] = loaded
                changed = True
            elif entry.key in self._entries:
                log.info("Removing unpublished post: %s", entry.key)
                del self._entries[entry.key]
                changed = True
        return changed

    def _load_entry(self, entry: StorageEntry) -> CacheEntry | None:
        """Fetch one document. None when it is not a published blog post."""
        log.info(
            "Fetching %s file: %s",
            "modified" if entry.key in self._entries else "new",
            entry.key,
        )
        raw = self._store.read_text(entry.key)
        fm, body = split_front_matter(raw)
        if fm is None:
            return None
        tags = fm.get_list("tags")
        if not _is_published(tags):
            return None

        if entry.last_modified is not None:
            fallback = entry.last_modified
            if fallback.tzinfo is None:
                fallback = fallback.replace(tzinfo=UTC)
        else:
            fallback = datetime.fromtimestamp(self._clock(), UTC)

        path = logical_path(entry.key)
        content = self._transformer.rewrite(body) if self._transformer else body
        post = Post(
            id=generate_post_id(path),
            post_path=path,
            title=fm.get_str("title") or entry.key,
            excerpt=generate_excerpt(raw, self._excerpt_length),
            content=content,
            date=fm.get_str("date") or _iso(fallback),
            tags=tuple(tags),
            read_time=calculate_read_time(body),
        )
        return CacheEntry(last_modified=entry.timestamp, post=post, fallback_date=fallback)

    def _build_view(self) -> PublishedView:
        ranked = sorted(
            self._entries.values(),
            key=lambda e: _parse_date(e.post.date) or e.fallback_date,
            reverse=True,
        )
        posts = tuple(e.post for e in ranked)
        tags = tuple(dict.fromkeys(tag for post in posts for tag in post.tags))
        return PublishedView(posts=posts, available_tags=tags, created_at=self._clock())
