"""
Request handlers for posts and comments.

Each handler takes an already-validated input model and performs at most one
storage round trip. Errors are not recovered here; they surface to the RPC
layer unchanged.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from anonfeed.db import DbClient
from anonfeed.schemas import (
    Comment,
    CreateCommentInput,
    CreatePostInput,
    GetCommentsInput,
    GetPostInput,
    HealthcheckResponse,
    Post,
    ToggleLikeInput,
)

logger = logging.getLogger(__name__)


def healthcheck() -> HealthcheckResponse:
    return HealthcheckResponse(
        status="ok", timestamp=datetime.now(timezone.utc).isoformat()
    )


def create_post(db: DbClient, payload: CreatePostInput) -> Post:
    record = db.create_post(payload.content)
    logger.info("Created post %s", record.id)
    return Post.model_validate(record)


def get_posts(db: DbClient) -> list[Post]:
    """Most liked first; newer posts win ties."""
    return [Post.model_validate(record) for record in db.list_posts()]


def get_post(db: DbClient, payload: GetPostInput) -> Optional[Post]:
    """Return the post, or None when it does not exist."""
    record = db.get_post(payload.id)
    if record is None:
        return None
    return Post.model_validate(record)


def toggle_like(db: DbClient, payload: ToggleLikeInput) -> Post:
    """
    Apply a like or unlike to a post.

    Raises PostNotFoundError when the post does not exist. Unlike never takes
    the count below zero.
    """
    record = db.toggle_like(payload.post_id, payload.action)
    logger.info(
        "Post %s %sd, like_count=%d", record.id, payload.action, record.like_count
    )
    return Post.model_validate(record)


def create_comment(db: DbClient, payload: CreateCommentInput) -> Comment:
    # The post is not looked up; comments on unknown post ids are stored as-is.
    record = db.create_comment(payload.post_id, payload.content, payload.emoji_id)
    logger.info("Created comment %s on post %s", record.id, record.post_id)
    return Comment.model_validate(record)


def get_comments(db: DbClient, payload: GetCommentsInput) -> list[Comment]:
    """Oldest first."""
    records = db.list_comments(payload.post_id)
    return [Comment.model_validate(record) for record in records]
