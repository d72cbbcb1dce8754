"""
Anonymous per-post commenter identities.

An identity is an emoji picked from a fixed pool, avoiding the emoji already
used on the post's comments. Nothing on the server enforces uniqueness; two
commenters can still end up with the same emoji (e.g. when the pool is
exhausted or two clients pick concurrently).
"""

from __future__ import annotations

import random
from typing import Iterable, Optional

EMOJI_POOL = (
    "🐱", "🌟", "🦋", "🌸", "🎨", "🎭", "🦄", "🌈",
    "⭐", "🌙", "🍀", "🌺", "🎪", "🎯", "🎲",
)


def pick_emoji_id(
    used: Iterable[str], rng: Optional[random.Random] = None
) -> str:
    """Pick an emoji not in ``used``; fall back to the first pool entry."""
    taken = set(used)
    available = [emoji for emoji in EMOJI_POOL if emoji not in taken]
    if not available:
        return EMOJI_POOL[0]
    return (rng or random).choice(available)


class IdentityBook:
    """Remembers which emoji this user commented under on each post."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng
        self._by_post: dict[int, str] = {}

    def get(self, post_id: int) -> Optional[str]:
        return self._by_post.get(post_id)

    def identity_for(self, post_id: int, used: Iterable[str] = ()) -> str:
        emoji_id = self._by_post.get(post_id)
        if emoji_id is None:
            emoji_id = pick_emoji_id(used, self._rng)
            self._by_post[post_id] = emoji_id
        return emoji_id
