import json
import unittest
from unittest.mock import MagicMock

import requests

from anonfeed.client import FeedRpcClient, RpcError

POST_JSON = {
    "id": 1,
    "content": "Hello world",
    "like_count": 3,
    "created_at": "2024-01-15T10:30:00+00:00",
}


def _response(body, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.json.return_value = body
    return response


class FeedRpcClientTests(unittest.TestCase):
    def setUp(self):
        self.session = MagicMock()
        self.client = FeedRpcClient("http://feed.test/api/", session=self.session)

    def test_query_sends_json_input(self):
        self.session.request.return_value = _response({"result": {"data": POST_JSON}})

        post = self.client.get_post(1)

        self.assertEqual(post.like_count, 3)
        method, url = self.session.request.call_args.args
        self.assertEqual(method, "GET")
        self.assertEqual(url, "http://feed.test/api/rpc/getPost")
        params = self.session.request.call_args.kwargs["params"]
        self.assertEqual(json.loads(params["input"]), {"id": 1})

    def test_get_post_absent(self):
        self.session.request.return_value = _response({"result": {"data": None}})
        self.assertIsNone(self.client.get_post(999))

    def test_mutation_posts_body(self):
        self.session.request.return_value = _response({"result": {"data": POST_JSON}})

        post = self.client.toggle_like(1, "like")

        self.assertEqual(post.id, 1)
        method, url = self.session.request.call_args.args
        self.assertEqual(method, "POST")
        self.assertEqual(url, "http://feed.test/api/rpc/toggleLike")
        self.assertEqual(
            self.session.request.call_args.kwargs["json"],
            {"post_id": 1, "action": "like"},
        )

    def test_lists(self):
        comment = {
            "id": 5,
            "post_id": 1,
            "content": "nice",
            "emoji_id": "🌈",
            "created_at": "2024-01-15T11:00:00Z",
        }
        self.session.request.side_effect = [
            _response({"result": {"data": [POST_JSON]}}),
            _response({"result": {"data": [comment]}}),
        ]
        self.assertEqual([p.id for p in self.client.get_posts()], [1])
        self.assertEqual([c.emoji_id for c in self.client.get_comments(1)], ["🌈"])

    def test_error_envelope(self):
        self.session.request.return_value = _response(
            {"error": {"code": "NOT_FOUND", "message": "Post with id 9 not found"}},
            status_code=404,
        )
        with self.assertRaises(RpcError) as ctx:
            self.client.toggle_like(9, "like")
        self.assertEqual(ctx.exception.code, "NOT_FOUND")
        self.assertEqual(ctx.exception.status_code, 404)

    def test_network_error(self):
        self.session.request.side_effect = requests.ConnectionError("refused")
        with self.assertRaises(RpcError) as ctx:
            self.client.get_posts()
        self.assertEqual(ctx.exception.code, "NETWORK_ERROR")
        self.assertIsNone(ctx.exception.status_code)

    def test_non_json_body(self):
        response = _response(None, status_code=502)
        response.json.side_effect = ValueError("no json")
        self.session.request.return_value = response
        with self.assertRaises(RpcError) as ctx:
            self.client.healthcheck()
        self.assertEqual(ctx.exception.code, "PARSE_ERROR")


if __name__ == "__main__":
    unittest.main()
