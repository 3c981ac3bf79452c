"""Bulk audio migration.

Scans a storage prefix for objects with a source suffix (``.mp3``), re-encodes
each one, uploads it under the same key with the target suffix (``.opus``),
points the database at the new key and optionally deletes the original.

Work is processed in batches of ``concurrency`` objects. Every member of a
batch runs to completion before the next batch starts, a failing object is
logged and counted without affecting the others, and a stop request is only
honoured between batches.
"""
import asyncio
import logging
from collections import deque
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field

from subdeck.core.timeutil import now_ms
from subdeck.services.audio_codec import convert_to_opus
from subdeck.services.media_paths import PathUpdater
from subdeck.services.storage_service import StorageBackend, StorageObject

logger = logging.getLogger(__name__)

MAX_LOG_ENTRIES = 1000
MAX_CONCURRENCY = 50
SCAN_PAGE_SIZE = 1000
SCAN_LOG_EVERY_PAGES = 5
ITEM_LOG_EVERY = 10
PROGRESS_LOG_EVERY = 50
DRY_RUN_DELAY = 0.01

CONVERTED = "converted"
SKIPPED = "skipped"
FAILED = "failed"

Converter = Callable[[bytes, int], Awaitable[bytes]]


@dataclass
class MigrationOptions:
    prefix: str = "items/"
    source_suffix: str = ".mp3"
    target_suffix: str = ".opus"
    target_content_type: str = "audio/opus"
    bitrate_kbps: int = 64
    concurrency: int = 20
    dry_run: bool = True
    delete_original: bool = False
    update_database: bool = True
    max_objects: int = 10_000

    def __post_init__(self) -> None:
        if not 1 <= self.concurrency <= MAX_CONCURRENCY:
            raise ValueError(f"concurrency must be between 1 and {MAX_CONCURRENCY}")
        if self.max_objects < 1:
            raise ValueError("max_objects must be positive")

    def matches(self, key: str) -> bool:
        return key.lower().endswith(self.source_suffix.lower())

    def target_key(self, key: str) -> str:
        if not self.matches(key):
            raise ValueError(f"{key} does not end with {self.source_suffix}")
        return key[: len(key) - len(self.source_suffix)] + self.target_suffix


@dataclass
class MigrationStats:
    total: int = 0
    processed: int = 0
    converted: int = 0
    failed: int = 0
    skipped: int = 0
    cancelled: bool = False

    def record(self, outcome: object) -> None:
        self.processed += 1
        if outcome == CONVERTED:
            self.converted += 1
        elif outcome == SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1


@dataclass
class MigrationLogEntry:
    timestamp: int
    level: str  # info | success | warning | error
    message: str
    details: str | None = None


_LOG_LEVELS = {"error": logging.ERROR, "warning": logging.WARNING}


class MigrationLog:
    """Bounded log buffer, newest entry first. The oldest entries are evicted."""

    def __init__(self, max_entries: int = MAX_LOG_ENTRIES):
        self._entries: deque[MigrationLogEntry] = deque(maxlen=max_entries)

    def add(self, level: str, message: str, details: str | None = None) -> MigrationLogEntry:
        entry = MigrationLogEntry(timestamp=now_ms(), level=level, message=message, details=details)
        self._entries.appendleft(entry)
        logger.log(_LOG_LEVELS.get(level, logging.INFO), "%s%s", message, f": {details}" if details else "")
        return entry

    def entries(self, limit: int | None = None) -> list[MigrationLogEntry]:
        items = list(self._entries)
        return items if limit is None else items[:limit]

    def __len__(self) -> int:
        return len(self._entries)


class MediaMigrator:
    def __init__(
        self,
        storage: StorageBackend,
        options: MigrationOptions | None = None,
        *,
        converter: Converter | None = None,
        path_updater: PathUpdater | None = None,
        should_stop: Callable[[], Awaitable[bool]] | None = None,
        on_batch: Callable[[MigrationStats], Awaitable[None]] | None = None,
        log: MigrationLog | None = None,
    ):
        self.storage = storage
        self.options = options or MigrationOptions()
        self.converter = converter or convert_to_opus
        self.path_updater = path_updater
        self.should_stop = should_stop
        self.on_batch = on_batch
        self.log = log or MigrationLog()
        self.stats = MigrationStats()
        self._stop_requested = False

    def request_stop(self) -> None:
        """Stop before the next batch. Objects already in flight finish normally."""
        self._stop_requested = True
        self.log.add("warning", "Stopping migration...")

    async def _stopping(self) -> bool:
        if not self._stop_requested and self.should_stop is not None and await self.should_stop():
            self._stop_requested = True
        return self._stop_requested

    async def scan(self) -> list[StorageObject]:
        """Collect objects under the prefix that carry the source suffix."""
        opts = self.options
        self.log.add("info", f"Scanning {opts.prefix} for *{opts.source_suffix} files (recursive)")
        matches: list[StorageObject] = []
        cursor: str | None = None
        pages = 0
        while True:
            if await self._stopping():
                self.log.add("warning", "Scan stopped by user")
                break
            page = await asyncio.to_thread(self.storage.list_page, opts.prefix, cursor, SCAN_PAGE_SIZE)
            matches.extend(obj for obj in page.objects if opts.matches(obj.key))
            cursor = page.cursor
            pages += 1
            if pages % SCAN_LOG_EVERY_PAGES == 0 or not cursor:
                self.log.add("info", f"Page {pages}: found {len(matches)} {opts.source_suffix} files so far")
            if len(matches) >= opts.max_objects:
                self.log.add("warning", f"Reached safety limit of {opts.max_objects} files. Stopping scan.")
                del matches[opts.max_objects:]
                break
            if not cursor:
                break

        self.stats.total = len(matches)
        if matches:
            total_mb = sum(obj.size for obj in matches) / (1024 * 1024)
            self.log.add("success", f"Scan complete: found {len(matches)} files ({total_mb:.2f} MB)")
        else:
            self.log.add("warning", f"No {opts.source_suffix} files found under {opts.prefix}")
        return matches

    async def _update_database(self, key: str, target: str, verbose: bool) -> None:
        try:
            outcome = await self.path_updater(key, target)
        except Exception as e:
            self.log.add("warning", f"Database update failed for {key}", str(e))
            return
        if outcome == "skipped":
            if verbose:
                self.log.add("info", f"Skipping DB update for non-preview/non-card audio: {key}")
        elif verbose:
            self.log.add("success", f"Database updated ({outcome}): {key} -> {target}")

    async def migrate_one(self, key: str, verbose: bool = False) -> str:
        """Migrate one object. Returns "converted", "skipped" or "failed"; never raises."""
        opts = self.options
        try:
            target = opts.target_key(key)
            if opts.dry_run:
                if verbose:
                    self.log.add("warning", f"[DRY RUN] Would convert: {key} -> {target}")
                    self.log.add("info", f"   Settings: {opts.bitrate_kbps} kbps")
                await asyncio.sleep(DRY_RUN_DELAY)
                return CONVERTED

            already_migrated = await asyncio.to_thread(self.storage.exists, target)
            if already_migrated:
                if verbose:
                    self.log.add("info", f"Target already exists, not re-encoding: {target}")
            else:
                if verbose:
                    self.log.add("info", f"Downloading: {key}")
                original = await asyncio.to_thread(self.storage.get, key)
                if not original:
                    raise ValueError("Downloaded file is empty")
                encoded = await self.converter(original, opts.bitrate_kbps)
                await asyncio.to_thread(self.storage.put, target, encoded, opts.target_content_type)
                if verbose:
                    savings = (1 - len(encoded) / len(original)) * 100
                    self.log.add(
                        "success",
                        f"Uploaded: {target} ({savings:.1f}% smaller)",
                        f"{len(original) / 1024:.1f} KB -> {len(encoded) / 1024:.1f} KB",
                    )

            if opts.update_database and self.path_updater is not None:
                await self._update_database(key, target, verbose)

            if opts.delete_original:
                await asyncio.to_thread(self.storage.delete, key)
                if verbose:
                    self.log.add("success", f"Deleted original: {key}")

            return SKIPPED if already_migrated else CONVERTED
        except Exception as e:
            self.log.add("error", f"Failed to migrate: {key}", str(e) or type(e).__name__)
            return FAILED

    def _summary(self, mode: str, headline: str) -> None:
        stats = self.stats
        self.log.add("success" if not stats.cancelled else "warning", f"{mode} {headline}")
        self.log.add(
            "info",
            f"   Processed: {stats.processed}/{stats.total}  Converted: {stats.converted}  "
            f"Skipped: {stats.skipped}  Failed: {stats.failed}",
        )

    async def run(self, keys: Sequence[str] | None = None) -> MigrationStats:
        """Migrate `keys` (or everything `scan()` finds) in bounded batches."""
        if keys is None:
            keys = [obj.key for obj in await self.scan()]
        opts = self.options
        total = len(keys)
        self.stats = MigrationStats(total=total)
        mode = "[DRY RUN]" if opts.dry_run else "[LIVE]"
        self.log.add("info", f"{mode} Starting migration of {total} files ({opts.concurrency} concurrent)")

        index = 0
        while index < total:
            if await self._stopping():
                self.stats.cancelled = True
                break
            batch = keys[index:index + opts.concurrency]
            results = await asyncio.gather(
                *(
                    self.migrate_one(key, verbose=self._should_log(index + offset, total))
                    for offset, key in enumerate(batch)
                ),
                return_exceptions=True,
            )
            before = self.stats.processed
            for result in results:
                self.stats.record(result)
            index += len(batch)

            if self.stats.processed // PROGRESS_LOG_EVERY > before // PROGRESS_LOG_EVERY:
                pct = self.stats.processed / total * 100
                self.log.add("info", f"Progress: {self.stats.processed}/{total} ({pct:.1f}%)")
            if self.on_batch is not None:
                await self.on_batch(self.stats)

        self._summary(mode, "Migration stopped by user" if self.stats.cancelled else "Migration complete")
        return self.stats

    @staticmethod
    def _should_log(index: int, total: int) -> bool:
        return index % ITEM_LOG_EVERY == 0 or index == total - 1
