"""
Sample posts and comments for the client's offline/demo mode.
"""

from __future__ import annotations

import itertools
import time
from datetime import datetime, timezone

from anonfeed.schemas import Comment, Post

SAMPLE_POSTS = (
    Post(
        id=1,
        content=(
            "Just discovered the most amazing coffee shop downtown! ☕ The "
            "atmosphere is perfect for reading and the barista makes "
            "incredible latte art. Anyone else been there?"
        ),
        like_count=12,
        created_at=datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc),
    ),
    Post(
        id=2,
        content=(
            "Watching the sunset from my balcony and feeling grateful for "
            "these peaceful moments. Sometimes we forget to appreciate the "
            "simple beauty around us 🌅"
        ),
        like_count=24,
        created_at=datetime(2024, 1, 15, 9, 15, tzinfo=timezone.utc),
    ),
    Post(
        id=3,
        content=(
            "Does anyone else think that pineapple on pizza is actually "
            "delicious? I'm ready to defend this hill! 🍕🍍"
        ),
        like_count=8,
        created_at=datetime(2024, 1, 15, 8, 45, tzinfo=timezone.utc),
    ),
)

SAMPLE_COMMENTS = (
    Comment(
        id=1,
        post_id=1,
        content="I think I know which one you mean! Is it the one with the brick walls?",
        emoji_id="🐱",
        created_at=datetime(2024, 1, 15, 11, 0, tzinfo=timezone.utc),
    ),
    Comment(
        id=2,
        post_id=1,
        content="Yes! Their croissants are amazing too",
        emoji_id="🌟",
        created_at=datetime(2024, 1, 15, 11, 15, tzinfo=timezone.utc),
    ),
)


class FixtureDataProvider:
    """Hands out sample data and locally synthesized stub records."""

    def __init__(self, posts=SAMPLE_POSTS, comments=SAMPLE_COMMENTS):
        self._posts = tuple(posts)
        self._comments = tuple(comments)
        # Millisecond clock ids, kept strictly increasing within a process.
        self._ids = itertools.count(int(time.time() * 1000))

    def posts(self) -> list[Post]:
        return [post.model_copy() for post in self._posts]

    def comments_for(self, post_id: int) -> list[Comment]:
        return [
            comment.model_copy()
            for comment in self._comments
            if comment.post_id == post_id
        ]

    def stub_post(self, content: str) -> Post:
        return Post(
            id=next(self._ids),
            content=content,
            like_count=0,
            created_at=datetime.now(timezone.utc),
        )

    def stub_comment(self, post_id: int, content: str, emoji_id: str) -> Comment:
        return Comment(
            id=next(self._ids),
            post_id=post_id,
            content=content,
            emoji_id=emoji_id,
            created_at=datetime.now(timezone.utc),
        )
