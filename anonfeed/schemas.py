"""
Pydantic schemas for RPC inputs and outputs.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt

MAX_CONTENT_LENGTH = 500


class Post(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    content: str
    like_count: int = Field(..., ge=0)
    created_at: datetime


class Comment(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    post_id: int
    content: str
    emoji_id: str
    created_at: datetime


class CreatePostInput(BaseModel):
    content: str = Field(..., min_length=1, max_length=MAX_CONTENT_LENGTH)


class GetPostInput(BaseModel):
    id: StrictInt


class ToggleLikeInput(BaseModel):
    post_id: StrictInt
    action: Literal["like", "unlike"]


class CreateCommentInput(BaseModel):
    post_id: StrictInt
    content: str = Field(..., min_length=1, max_length=MAX_CONTENT_LENGTH)
    # Opaque to the server; the client picks it per post.
    emoji_id: str


class GetCommentsInput(BaseModel):
    post_id: StrictInt


class HealthcheckResponse(BaseModel):
    status: Literal["ok"]
    timestamp: str
