"""
HTTP client for the feed's RPC endpoint.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Literal, Optional

import requests

from anonfeed.schemas import Comment, Post

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10


class RpcError(Exception):
    """A call the server rejected, or one that never reached it."""

    def __init__(self, code: str, message: str, status_code: Optional[int] = None):
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message
        self.status_code = status_code


class FeedRpcClient:
    """Calls procedures under ``{base_url}/rpc``."""

    def __init__(
        self,
        base_url: str,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _url(self, procedure: str) -> str:
        return f"{self.base_url}/rpc/{procedure}"

    def query(self, procedure: str, payload: Optional[dict] = None) -> Any:
        params = {"input": json.dumps(payload)} if payload is not None else None
        return self._send("GET", procedure, params=params)

    def mutate(self, procedure: str, payload: dict) -> Any:
        return self._send("POST", procedure, json=payload)

    def _send(self, method: str, procedure: str, **kwargs) -> Any:
        try:
            response = self.session.request(
                method, self._url(procedure), timeout=self.timeout, **kwargs
            )
        except requests.RequestException as exc:
            raise RpcError("NETWORK_ERROR", str(exc)) from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise RpcError(
                "PARSE_ERROR",
                f"{procedure} returned a non-JSON body",
                response.status_code,
            ) from exc

        error = body.get("error") if isinstance(body, dict) else None
        if error:
            raise RpcError(
                error.get("code", "INTERNAL_SERVER_ERROR"),
                error.get("message", ""),
                response.status_code,
            )
        if not response.ok or not isinstance(body, dict) or "result" not in body:
            raise RpcError(
                "HTTP_ERROR",
                f"{procedure} failed with status {response.status_code}",
                response.status_code,
            )
        return body["result"].get("data")

    def healthcheck(self) -> dict:
        return self.query("healthcheck")

    def create_post(self, content: str) -> Post:
        return Post.model_validate(self.mutate("createPost", {"content": content}))

    def get_posts(self) -> list[Post]:
        return [Post.model_validate(item) for item in self.query("getPosts")]

    def get_post(self, post_id: int) -> Optional[Post]:
        data = self.query("getPost", {"id": post_id})
        return Post.model_validate(data) if data is not None else None

    def toggle_like(self, post_id: int, action: Literal["like", "unlike"]) -> Post:
        data = self.mutate("toggleLike", {"post_id": post_id, "action": action})
        return Post.model_validate(data)

    def create_comment(self, post_id: int, content: str, emoji_id: str) -> Comment:
        data = self.mutate(
            "createComment",
            {"post_id": post_id, "content": content, "emoji_id": emoji_id},
        )
        return Comment.model_validate(data)

    def get_comments(self, post_id: int) -> list[Comment]:
        data = self.query("getComments", {"post_id": post_id})
        return [Comment.model_validate(item) for item in data]
