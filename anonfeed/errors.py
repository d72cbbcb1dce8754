"""
Error types raised by the storage layer and handlers.
"""

from __future__ import annotations


class StorageError(RuntimeError):
    """Underlying persistence failure. The original exception is chained."""


class PostNotFoundError(LookupError):
    """Raised when a mutation references a post id that does not exist."""

    def __init__(self, post_id: int):
        super().__init__(f"Post with id {post_id} not found")
        self.post_id = post_id
