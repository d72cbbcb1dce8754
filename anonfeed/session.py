"""
Client-side feed state: one post at a time, likes, and the open comment thread.

Without demo mode every RPC failure propagates as ``RpcError``. With demo
mode on, failures (and an empty feed) are answered from a
``FixtureDataProvider`` so the feed stays usable while disconnected.
"""

from __future__ import annotations

import logging
from typing import Optional

from anonfeed.client import FeedRpcClient, RpcError
from anonfeed.fixtures import FixtureDataProvider
from anonfeed.identity import IdentityBook
from anonfeed.schemas import Comment, Post

logger = logging.getLogger(__name__)


class FeedSession:
    def __init__(
        self,
        client: FeedRpcClient,
        *,
        demo_mode: bool = False,
        fixtures: Optional[FixtureDataProvider] = None,
        identities: Optional[IdentityBook] = None,
    ):
        self.client = client
        self.demo_mode = demo_mode
        self.fixtures = fixtures or FixtureDataProvider()
        self.identities = identities or IdentityBook()
        self.posts: list[Post] = []
        self.index = 0
        self.liked: set[int] = set()
        self.comments: list[Comment] = []
        self.comments_post_id: Optional[int] = None

    def _fallback(self, what: str, exc: RpcError) -> None:
        if not self.demo_mode:
            raise exc
        logger.warning("%s failed (%s); using demo data", what, exc)

    @property
    def current_post(self) -> Optional[Post]:
        if 0 <= self.index < len(self.posts):
            return self.posts[self.index]
        return None

    def _resolve_post_id(self, post_id: Optional[int]) -> int:
        if post_id is not None:
            return post_id
        post = self.current_post
        if post is None:
            raise LookupError("No post is selected")
        return post.id

    def load_posts(self) -> list[Post]:
        try:
            posts = self.client.get_posts()
            if not posts and self.demo_mode:
                posts = self.fixtures.posts()
        except RpcError as exc:
            self._fallback("Loading posts", exc)
            posts = self.fixtures.posts()
        self.posts = posts
        self.index = min(self.index, max(len(posts) - 1, 0))
        return self.posts

    def next_post(self) -> Optional[Post]:
        if self.posts:
            self.index = min(self.index + 1, len(self.posts) - 1)
        return self.current_post

    def previous_post(self) -> Optional[Post]:
        self.index = max(self.index - 1, 0)
        return self.current_post

    def is_liked(self, post_id: int) -> bool:
        return post_id in self.liked

    def toggle_like(self, post_id: Optional[int] = None) -> Optional[Post]:
        """Like the post if this user has not liked it yet, otherwise unlike."""
        post_id = self._resolve_post_id(post_id)
        was_liked = post_id in self.liked
        action = "unlike" if was_liked else "like"
        try:
            updated = self.client.toggle_like(post_id, action)
        except RpcError as exc:
            self._fallback("Toggling like", exc)
            updated = None
            for post in self.posts:
                if post.id == post_id:
                    delta = -1 if was_liked else 1
                    updated = post.model_copy(
                        update={"like_count": max(post.like_count + delta, 0)}
                    )
                    break
        if updated is not None:
            self.posts = [updated if p.id == post_id else p for p in self.posts]
        if was_liked:
            self.liked.discard(post_id)
        else:
            self.liked.add(post_id)
        return updated

    def load_comments(self, post_id: Optional[int] = None) -> list[Comment]:
        post_id = self._resolve_post_id(post_id)
        try:
            comments = self.client.get_comments(post_id)
            if not comments and self.demo_mode:
                comments = self.fixtures.comments_for(post_id)
        except RpcError as exc:
            self._fallback("Loading comments", exc)
            comments = self.fixtures.comments_for(post_id)
        self.comments = comments
        self.comments_post_id = post_id
        return self.comments

    def create_post(self, content: str) -> Optional[Post]:
        content = content.strip()
        if not content:
            return None
        try:
            post = self.client.create_post(content)
        except RpcError as exc:
            self._fallback("Creating post", exc)
            post = self.fixtures.stub_post(content)
        self.posts = [post] + self.posts
        return post

    def identity_for(self, post_id: int) -> str:
        used = [c.emoji_id for c in self.comments if c.post_id == post_id]
        return self.identities.identity_for(post_id, used)

    def add_comment(self, content: str) -> Optional[Comment]:
        """Comment on the current post under this user's identity for it."""
        content = content.strip()
        post = self.current_post
        if not content or post is None:
            return None
        emoji_id = self.identity_for(post.id)
        try:
            comment = self.client.create_comment(post.id, content, emoji_id)
        except RpcError as exc:
            self._fallback("Creating comment", exc)
            comment = self.fixtures.stub_comment(post.id, content, emoji_id)
        if self.comments_post_id != post.id:
            self.comments = []
            self.comments_post_id = post.id
        self.comments = self.comments + [comment]
        return comment
