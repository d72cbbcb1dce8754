import os
import tempfile
import threading
import unittest

from anonfeed.db import Base, SqlDbClient
from anonfeed.errors import PostNotFoundError, StorageError


class SqlDbClientTests(unittest.TestCase):
    """
    Uses SQLite via SQLAlchemy URL for fast/local testing of the SQL client logic.
    """

    def setUp(self):
        self.db = SqlDbClient("sqlite+pysqlite:///:memory:")

    def test_create_and_get_post(self):
        post = self.db.create_post("Hello world")
        self.assertEqual(post.content, "Hello world")
        self.assertEqual(post.like_count, 0)
        self.assertIsNotNone(post.created_at.tzinfo)

        fetched = self.db.get_post(post.id)
        self.assertIsNotNone(fetched)
        self.assertEqual(fetched.id, post.id)
        self.assertEqual(fetched.created_at, post.created_at)

    def test_get_missing_post(self):
        self.assertIsNone(self.db.get_post(999))

    def test_ids_are_issued_in_order(self):
        ids = [self.db.create_post(f"post {i}").id for i in range(3)]
        self.assertEqual(ids, sorted(ids))
        self.assertEqual(len(set(ids)), 3)

    def test_like_and_unlike(self):
        post = self.db.create_post("likeable")
        self.assertEqual(self.db.toggle_like(post.id, "like").like_count, 1)
        self.assertEqual(self.db.toggle_like(post.id, "like").like_count, 2)
        self.assertEqual(self.db.toggle_like(post.id, "unlike").like_count, 1)
        self.assertEqual(self.db.get_post(post.id).like_count, 1)

    def test_unlike_is_floored_at_zero(self):
        post = self.db.create_post("nobody likes me")
        for _ in range(3):
            self.assertEqual(self.db.toggle_like(post.id, "unlike").like_count, 0)
        self.assertEqual(self.db.toggle_like(post.id, "like").like_count, 1)

    def test_toggle_like_missing_post(self):
        with self.assertRaises(PostNotFoundError) as ctx:
            self.db.toggle_like(999, "like")
        self.assertEqual(ctx.exception.post_id, 999)
        self.assertIn("999", str(ctx.exception))

    def test_list_posts_order(self):
        old = self.db.create_post("old")
        middle = self.db.create_post("middle")
        new = self.db.create_post("new")
        self.db.toggle_like(old.id, "like")
        self.db.toggle_like(old.id, "like")
        self.db.toggle_like(middle.id, "like")

        self.assertEqual(
            [p.id for p in self.db.list_posts()], [old.id, middle.id, new.id]
        )

        self.db.toggle_like(new.id, "like")
        self.assertEqual(
            [p.id for p in self.db.list_posts()], [old.id, new.id, middle.id]
        )

    def test_comments(self):
        post = self.db.create_post("discuss")
        self.assertEqual(self.db.list_comments(post.id), [])

        first = self.db.create_comment(post.id, "first", "🦋")
        second = self.db.create_comment(post.id, "second", "🦋")
        self.db.create_comment(post.id + 1, "elsewhere", "🌸")

        self.assertNotEqual(first.id, second.id)
        comments = self.db.list_comments(post.id)
        self.assertEqual([c.content for c in comments], ["first", "second"])
        self.assertEqual([c.emoji_id for c in comments], ["🦋", "🦋"])

    def test_comment_on_missing_post_is_kept(self):
        comment = self.db.create_comment(12345, "orphan", "🎲")
        self.assertEqual(
            [c.id for c in self.db.list_comments(12345)], [comment.id]
        )

    def test_storage_failure_is_wrapped(self):
        Base.metadata.drop_all(self.db.engine)
        with self.assertRaises(StorageError) as ctx:
            self.db.list_posts()
        self.assertIsNotNone(ctx.exception.__cause__)

    def test_setup_failure_is_wrapped(self):
        with self.assertRaises(StorageError) as ctx:
            SqlDbClient("sqlite+pysqlite:////nonexistent-dir/nested/feed.db")
        self.assertIsNotNone(ctx.exception.__cause__)


class SqlDbClientConcurrencyTests(unittest.TestCase):
    """Concurrent toggles against a file-backed SQLite database."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        path = os.path.join(self.tmpdir.name, "feed.db")
        self.db = SqlDbClient(f"sqlite+pysqlite:///{path}")

    def tearDown(self):
        self.db.engine.dispose()
        self.tmpdir.cleanup()

    def _run(self, post_id, action, threads, per_thread):
        errors = []

        def worker():
            try:
                for _ in range(per_thread):
                    self.db.toggle_like(post_id, action)
            except Exception as exc:  # surfaced via the assertion below
                errors.append(exc)

        pool = [threading.Thread(target=worker) for _ in range(threads)]
        for thread in pool:
            thread.start()
        for thread in pool:
            thread.join()
        self.assertEqual(errors, [])

    def test_concurrent_likes_are_not_lost(self):
        post = self.db.create_post("popular")
        self._run(post.id, "like", threads=4, per_thread=10)
        self.assertEqual(self.db.get_post(post.id).like_count, 40)

        self._run(post.id, "unlike", threads=4, per_thread=15)
        self.assertEqual(self.db.get_post(post.id).like_count, 0)


if __name__ == "__main__":
    unittest.main()
