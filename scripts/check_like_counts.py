import argparse
import asyncio
import sys
import os

# Add project root to sys.path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import func, select
from subdeck.core.timeutil import now_ms
from subdeck.db.session import async_session_maker
from subdeck.models.content import ContentItem
from subdeck.models.engagement import ContentLike, ContentLikeCount


async def check_like_counts(fix: bool = False):
    """Compare content_like_counts with the actual number of like rows."""
    async with async_session_maker() as db:
        total_likes = await db.scalar(select(func.count(ContentLike.id)))
        print(f"Total likes in database: {total_likes}")

        actual = dict(
            (await db.execute(
                select(ContentLike.content_item_id, func.count(ContentLike.id)).group_by(ContentLike.content_item_id)
            )).all()
        )
        stored = dict((await db.execute(select(ContentLikeCount.content_item_id, ContentLikeCount.like_count))).all())
        slugs = dict((await db.execute(select(ContentItem.id, ContentItem.slug))).all())

        drifted = sorted(
            (item_id for item_id in set(actual) | set(stored) if actual.get(item_id, 0) != stored.get(item_id, 0)),
            key=lambda item_id: slugs.get(item_id, item_id),
        )
        if not drifted:
            print("\nAll like counters match.")
            return

        print(f"\n{len(drifted)} counter(s) out of sync:")
        for item_id in drifted:
            print(f"  - {slugs.get(item_id, item_id)}: stored={stored.get(item_id, 0)} actual={actual.get(item_id, 0)}")

        if fix:
            for item_id in drifted:
                row = await db.get(ContentLikeCount, item_id)
                if row is None:
                    row = ContentLikeCount(content_item_id=item_id)
                    db.add(row)
                row.like_count = actual.get(item_id, 0)
                row.updated_at = now_ms()
            await db.commit()
            print(f"\nRepaired {len(drifted)} counter(s).")
        else:
            print("\nRun with --fix to repair.")

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Audit content like counters")
    parser.add_argument("--fix", action="store_true", help="rewrite drifted counters")
    args = parser.parse_args()
    asyncio.run(check_like_counts(fix=args.fix))
