"""
Seed the sample feed posts and comments into a database.

Like counts are replayed through toggle_like so the seeded rows go through the
same update path as live traffic.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from anonfeed.db import DbClient, SqlDbClient
from anonfeed.dependencies import get_db_client
from anonfeed.fixtures import FixtureDataProvider

logger = logging.getLogger(__name__)


def seed(db: DbClient, fixtures: FixtureDataProvider, with_likes: bool = False) -> int:
    """Insert sample posts (and their comments). Returns the number of posts."""
    count = 0
    for sample in fixtures.posts():
        post = db.create_post(sample.content)
        if with_likes:
            for _ in range(sample.like_count):
                post = db.toggle_like(post.id, "like")
        for comment in fixtures.comments_for(sample.id):
            db.create_comment(post.id, comment.content, comment.emoji_id)
        logger.info("Seeded post %s (like_count=%d)", post.id, post.like_count)
        count += 1
    return count


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed sample feed data")
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="SQLAlchemy URL; defaults to DATABASE_URL from settings",
    )
    parser.add_argument(
        "--with-likes",
        action="store_true",
        help="Replay the sample like counts",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")
    db = SqlDbClient(args.database_url) if args.database_url else get_db_client()
    seeded = seed(db, FixtureDataProvider(), with_likes=args.with_likes)
    logger.info("Seeded %d posts", seeded)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
