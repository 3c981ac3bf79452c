import argparse
import asyncio
import logging
import sys
import os

# Add project root to sys.path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from subdeck.core.config import settings
from subdeck.db.session import async_session_maker, engine
from subdeck.services.media_migration import MAX_CONCURRENCY, MediaMigrator, MigrationOptions
from subdeck.services.media_paths import make_path_updater
from subdeck.services.storage_service import get_storage


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Re-encode stored audio and repoint database paths")
    parser.add_argument("--prefix", default="items/", help="storage prefix to scan (default: items/)")
    parser.add_argument("--from", dest="source_suffix", default=".mp3", help="source suffix (default: .mp3)")
    parser.add_argument("--to", dest="target_suffix", default=".opus", help="target suffix (default: .opus)")
    parser.add_argument("--bitrate", type=int, default=64, help="target bitrate in kbps (default: 64)")
    parser.add_argument(
        "--concurrency", type=int, default=20, help=f"objects per batch, 1-{MAX_CONCURRENCY} (default: 20)"
    )
    parser.add_argument("--max-objects", type=int, default=10_000, help="scan safety cap (default: 10000)")
    parser.add_argument("--live", action="store_true", help="actually convert (default is a dry run)")
    parser.add_argument("--delete-original", action="store_true", help="delete the source object after upload")
    parser.add_argument("--no-db", action="store_true", help="do not rewrite database paths")
    return parser.parse_args(argv)


async def migrate(args) -> int:
    options = MigrationOptions(
        prefix=args.prefix,
        source_suffix=args.source_suffix,
        target_suffix=args.target_suffix,
        bitrate_kbps=args.bitrate,
        concurrency=args.concurrency,
        dry_run=not args.live,
        delete_original=args.delete_original,
        update_database=not args.no_db,
        max_objects=args.max_objects,
    )
    migrator = MediaMigrator(get_storage(), options, path_updater=make_path_updater(async_session_maker))
    try:
        stats = await migrator.run()
    finally:
        await engine.dispose()
    print(
        f"Processed {stats.processed}/{stats.total}: "
        f"converted={stats.converted} skipped={stats.skipped} failed={stats.failed}"
    )
    return 1 if stats.failed else 0


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(message)s")
    sys.exit(asyncio.run(migrate(parse_args())))
