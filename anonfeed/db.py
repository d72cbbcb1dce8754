"""
Database abstraction for Postgres and an in-memory test implementation.
"""

from __future__ import annotations

import itertools
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterator, Literal, Optional, Protocol

from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    Text,
    case,
    create_engine,
    select,
    update,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from anonfeed.errors import PostNotFoundError, StorageError

LikeAction = Literal["like", "unlike"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DbClient(Protocol):
    """Interface for database access."""

    def create_post(self, content: str) -> "PostRecord":
        ...

    def list_posts(self) -> list["PostRecord"]:
        ...

    def get_post(self, post_id: int) -> Optional["PostRecord"]:
        ...

    def toggle_like(self, post_id: int, action: LikeAction) -> "PostRecord":
        ...

    def create_comment(
        self, post_id: int, content: str, emoji_id: str
    ) -> "CommentRecord":
        ...

    def list_comments(self, post_id: int) -> list["CommentRecord"]:
        ...


@dataclass
class PostRecord:
    id: int
    content: str
    like_count: int = 0
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class CommentRecord:
    id: int
    post_id: int
    content: str
    emoji_id: str
    created_at: datetime = field(default_factory=utcnow)


def _post_sort_key(post: PostRecord) -> tuple:
    return (post.like_count, post.created_at, post.id)


def _comment_sort_key(comment: CommentRecord) -> tuple:
    return (comment.created_at, comment.id)


class InMemoryDbClient:
    """Simple in-memory database for development and tests."""

    def __init__(self):
        self.posts: Dict[int, PostRecord] = {}
        self.comments: Dict[int, CommentRecord] = {}
        self._post_ids = itertools.count(1)
        self._comment_ids = itertools.count(1)
        # Guards id issuance and like_count read-modify-write.
        self._lock = threading.Lock()

    def create_post(self, content: str) -> PostRecord:
        with self._lock:
            record = PostRecord(id=next(self._post_ids), content=content)
            self.posts[record.id] = record
        return _copy_post(record)

    def list_posts(self) -> list[PostRecord]:
        with self._lock:
            posts = [_copy_post(post) for post in self.posts.values()]
        return sorted(posts, key=_post_sort_key, reverse=True)

    def get_post(self, post_id: int) -> Optional[PostRecord]:
        with self._lock:
            post = self.posts.get(post_id)
            return _copy_post(post) if post else None

    def toggle_like(self, post_id: int, action: LikeAction) -> PostRecord:
        with self._lock:
            post = self.posts.get(post_id)
            if post is None:
                raise PostNotFoundError(post_id)
            if action == "like":
                post.like_count += 1
            else:
                post.like_count = max(post.like_count - 1, 0)
            return _copy_post(post)

    def create_comment(
        self, post_id: int, content: str, emoji_id: str
    ) -> CommentRecord:
        with self._lock:
            record = CommentRecord(
                id=next(self._comment_ids),
                post_id=post_id,
                content=content,
                emoji_id=emoji_id,
            )
            self.comments[record.id] = record
        return _copy_comment(record)

    def list_comments(self, post_id: int) -> list[CommentRecord]:
        with self._lock:
            comments = [
                _copy_comment(comment)
                for comment in self.comments.values()
                if comment.post_id == post_id
            ]
        return sorted(comments, key=_comment_sort_key)

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        with self._lock:
            self.posts.clear()
            self.comments.clear()
            self._post_ids = itertools.count(1)
            self._comment_ids = itertools.count(1)


def _copy_post(post: PostRecord) -> PostRecord:
    return PostRecord(
        id=post.id,
        content=post.content,
        like_count=post.like_count,
        created_at=post.created_at,
    )


def _copy_comment(comment: CommentRecord) -> CommentRecord:
    return CommentRecord(
        id=comment.id,
        post_id=comment.post_id,
        content=comment.content,
        emoji_id=comment.emoji_id,
        created_at=comment.created_at,
    )


def _engine_options(database_url: str) -> dict:
    options: dict = {"future": True, "pool_pre_ping": True}
    if database_url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url or database_url.rstrip("/") == "sqlite:":
            # A single shared connection, otherwise each thread sees its own
            # empty in-memory database.
            options["poolclass"] = StaticPool
    else:
        options["pool_recycle"] = 1800
    return options


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back out.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SqlDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlDbClient")
        try:
            self.engine = create_engine(
                database_url, **_engine_options(database_url)
            )
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise StorageError(f"Database setup failed: {exc}") from exc
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self.Session()
        try:
            yield session
        except SQLAlchemyError as exc:
            session.rollback()
            raise StorageError(f"Database operation failed: {exc}") from exc
        finally:
            session.close()

    def _to_post_record(self, row: "PostRow") -> PostRecord:
        return PostRecord(
            id=row.id,
            content=row.content,
            like_count=row.like_count,
            created_at=_as_utc(row.created_at),
        )

    def _to_comment_record(self, row: "CommentRow") -> CommentRecord:
        return CommentRecord(
            id=row.id,
            post_id=row.post_id,
            content=row.content,
            emoji_id=row.emoji_id,
            created_at=_as_utc(row.created_at),
        )

    def create_post(self, content: str) -> PostRecord:
        with self._session() as session:
            row = PostRow(content=content, like_count=0, created_at=utcnow())
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._to_post_record(row)

    def list_posts(self) -> list[PostRecord]:
        with self._session() as session:
            stmt = select(PostRow).order_by(
                PostRow.like_count.desc(),
                PostRow.created_at.desc(),
                PostRow.id.desc(),
            )
            rows = session.execute(stmt).scalars().all()
            return [self._to_post_record(row) for row in rows]

    def get_post(self, post_id: int) -> Optional[PostRecord]:
        with self._session() as session:
            row = session.get(PostRow, post_id)
            if not row:
                return None
            return self._to_post_record(row)

    def toggle_like(self, post_id: int, action: LikeAction) -> PostRecord:
        if action == "like":
            new_count = PostRow.like_count + 1
        else:
            new_count = case(
                (PostRow.like_count > 0, PostRow.like_count - 1), else_=0
            )
        with self._session() as session:
            # One conditional UPDATE: existence check and floor clamp happen
            # in the same statement, so concurrent toggles cannot lose updates.
            result = session.execute(
                update(PostRow)
                .where(PostRow.id == post_id)
                .values(like_count=new_count)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                session.rollback()
                raise PostNotFoundError(post_id)
            row = session.get(PostRow, post_id)
            record = self._to_post_record(row)
            session.commit()
            return record

    def create_comment(
        self, post_id: int, content: str, emoji_id: str
    ) -> CommentRecord:
        with self._session() as session:
            row = CommentRow(
                post_id=post_id,
                content=content,
                emoji_id=emoji_id,
                created_at=utcnow(),
            )
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._to_comment_record(row)

    def list_comments(self, post_id: int) -> list[CommentRecord]:
        with self._session() as session:
            stmt = (
                select(CommentRow)
                .where(CommentRow.post_id == post_id)
                .order_by(CommentRow.created_at.asc(), CommentRow.id.asc())
            )
            rows = session.execute(stmt).scalars().all()
            return [self._to_comment_record(row) for row in rows]


Base = declarative_base()


class PostRow(Base):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    content = Column(Text, nullable=False)
    like_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class CommentRow(Base):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Not a ForeignKey: comments on unknown posts are accepted.
    post_id = Column(Integer, nullable=False, index=True)
    content = Column(Text, nullable=False)
    emoji_id = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
