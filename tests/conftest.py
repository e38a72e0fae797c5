from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

import httpx
import pytest

from feedcore.core.time_format import TimeFormatter
from feedcore.modules.home_feed.services.remote import PostListClient
from feedcore.modules.home_feed.services.store import FeedStore
from feedcore.modules.home_feed.services.sync import FeedSyncService
from feedcore.modules.posts.schemas.post import Post

FEED_URL = "https://feed.test/posts"
NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def make_post(post_id: int, *, created_at: datetime = NOW, title: str = "Hello there", **extra) -> Post:
    return Post(
        id=post_id,
        title=title,
        content="Some long enough content",
        author_id=extra.pop("author_id", 7),
        created_at=created_at,
        **extra,
    )


def wire_post(post_id: int, **overrides) -> dict:
    payload = {
        "id": post_id,
        "title": f"Post {post_id}",
        "content": "Content from the server",
        "likes": 3,
        "comments": 1,
        "author_id": 42,
        "created_at": "2024-06-14T12:00:00Z",
        "updated_at": None,
    }
    payload.update(overrides)
    return payload


class FeedServer:
    """Scripted stand-in for the remote post list endpoint"""

    def __init__(self) -> None:
        self.responses: List[httpx.Response] = []
        self.requests: List[httpx.Request] = []
        self.error: Optional[Exception] = None

    def respond_with(self, posts: list, status_code: int = 200) -> None:
        self.responses.append(httpx.Response(status_code, json=posts))

    def fail_with(self, error: Exception) -> None:
        self.error = error

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if not self.responses:
            return httpx.Response(200, json=[])
        return self.responses.pop(0)


@pytest.fixture()
def feed_server() -> FeedServer:
    return FeedServer()


@pytest.fixture()
def post_client(feed_server: FeedServer) -> PostListClient:
    transport = httpx.MockTransport(feed_server.handler)
    return PostListClient(endpoint_url=FEED_URL, client=httpx.AsyncClient(transport=transport))


@pytest.fixture()
def store() -> FeedStore:
    return FeedStore()


@pytest.fixture()
def service(post_client: PostListClient, store: FeedStore) -> FeedSyncService:
    return FeedSyncService(client=post_client, store=store, submit_delay=0, default_author_id=1)


@pytest.fixture()
def formatter() -> TimeFormatter:
    return TimeFormatter(locale="en_US", time_zone="UTC")
