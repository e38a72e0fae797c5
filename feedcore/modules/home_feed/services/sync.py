"""
Keeps the session feed in step with the server and with local authoring.

``refresh`` fetches the whole post list and swaps it into the store.
``submit`` validates input, builds a post with a placeholder id and inserts
it at the head of the feed after a fixed delay. Neither coordinates with
the other: whichever mutation lands last decides what the feed holds.
"""

import asyncio
import itertools
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional, Set, Tuple

from feedcore.core.config import settings
from feedcore.core.exceptions import FeedNetworkError, PostValidationError
from feedcore.modules.home_feed.services.remote import PostListClient
from feedcore.modules.home_feed.services.store import FeedStore
from feedcore.modules.posts.schemas.post import Post
from feedcore.modules.posts.services.validation import PostValidator

logger = logging.getLogger(__name__)


class RefreshState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class FeedEvent:
    kind: str  # 'replaced' | 'inserted'
    posts: Tuple[Post, ...]
    post: Optional[Post] = None


FeedListener = Callable[[FeedEvent], None]


class PendingSubmission:
    """Handle on a post waiting for its deferred insertion"""

    def __init__(self, post: Post, task: "asyncio.Task[Post]"):
        self.post = post
        self._task = task

    def cancel(self) -> bool:
        return self._task.cancel()

    def cancelled(self) -> bool:
        return self._task.cancelled()

    def done(self) -> bool:
        return self._task.done()

    async def wait(self) -> Post:
        return await self._task


class FeedSyncService:
    def __init__(
        self,
        client: Optional[PostListClient] = None,
        store: Optional[FeedStore] = None,
        validator: Optional[PostValidator] = None,
        submit_delay: Optional[float] = None,
        default_author_id: Optional[int] = None,
    ):
        self.client = client or PostListClient()
        self.store = store or FeedStore()
        self.validator = validator or PostValidator()
        self.submit_delay = settings.SUBMIT_DELAY_SECONDS if submit_delay is None else submit_delay
        self.default_author_id = settings.DEFAULT_AUTHOR_ID if default_author_id is None else default_author_id

        self.last_refresh_outcome: Optional[RefreshState] = None
        self.last_refreshed_at: Optional[datetime] = None
        self.last_error: Optional[FeedNetworkError] = None

        self._refreshes_in_flight = 0
        self._pending: Set[PendingSubmission] = set()
        self._listeners: List[FeedListener] = []
        self._placeholder_ids = itertools.count(-1, -1)

    # --- state -----------------------------------------------------------

    @property
    def state(self) -> RefreshState:
        if self._refreshes_in_flight:
            return RefreshState.FETCHING
        return RefreshState.IDLE

    @property
    def is_submitting(self) -> bool:
        return bool(self._pending)

    def snapshot(self) -> Tuple[Post, ...]:
        return self.store.snapshot()

    # --- subscriptions ---------------------------------------------------

    def subscribe(self, listener: FeedListener) -> Callable[[], None]:
        """Call ``listener`` after every feed mutation. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: FeedEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"Feed listener {listener!r} failed on {event.kind} event")

    # --- refresh ---------------------------------------------------------

    async def refresh(self) -> Tuple[Post, ...]:
        """
        Replace the feed with the server's post list.

        Raises FeedNetworkError and leaves the feed untouched when the fetch
        fails. Nothing is retried.
        """
        self._refreshes_in_flight += 1
        logger.info("Refreshing feed")
        try:
            posts = await self.client.fetch_posts()
        except FeedNetworkError as e:
            self.last_refresh_outcome = RefreshState.FAILURE
            self.last_error = e
            logger.error(f"Feed refresh failed: {e}")
            raise
        finally:
            self._refreshes_in_flight -= 1

        posts = _drop_duplicate_ids(posts)
        self.store.replace(posts)
        self.last_refresh_outcome = RefreshState.SUCCESS
        self.last_refreshed_at = datetime.now(timezone.utc)
        self.last_error = None
        logger.info(f"Feed replaced with {len(posts)} posts")

        snapshot = self.store.snapshot()
        self._notify(FeedEvent(kind="replaced", posts=snapshot))
        return snapshot

    # --- submit ----------------------------------------------------------

    def schedule_submission(self, title: str, content: str, author_id: Optional[int] = None) -> PendingSubmission:
        """
        Validate input and schedule the deferred insertion of the new post.

        Raises PostValidationError before anything is scheduled. Must be
        called with a running event loop.
        """
        result = self.validator.validate(title, content)
        if not result:
            raise PostValidationError(result.reason.value)

        post = Post(
            id=next(self._placeholder_ids),
            title=title,
            content=content,
            author_id=self.default_author_id if author_id is None else author_id,
            created_at=datetime.now(timezone.utc),
            updated_at=None,
            likes=0,
            comments=0,
        )
        task = asyncio.get_running_loop().create_task(self._insert_later(post))
        pending = PendingSubmission(post, task)
        self._pending.add(pending)
        task.add_done_callback(lambda _: self._pending.discard(pending))
        logger.info(f"Scheduled post {post.id} for insertion in {self.submit_delay}s")
        return pending

    async def submit(self, title: str, content: str, author_id: Optional[int] = None) -> Post:
        """Validate, wait out the submit delay, insert at head and return the post"""
        pending = self.schedule_submission(title, content, author_id)
        try:
            return await pending.wait()
        except asyncio.CancelledError:
            pending.cancel()
            raise

    async def _insert_later(self, post: Post) -> Post:
        try:
            await asyncio.sleep(self.submit_delay)
        except asyncio.CancelledError:
            logger.info(f"Submission of post {post.id} cancelled before insertion")
            raise
        self.store.insert_at_head(post)
        logger.info(f"Inserted post {post.id} at head of feed")
        self._notify(FeedEvent(kind="inserted", posts=self.store.snapshot(), post=post))
        return post

    def cancel_pending(self) -> int:
        pending = list(self._pending)
        for submission in pending:
            submission.cancel()
        if pending:
            logger.info(f"Cancelled {len(pending)} pending submissions")
        return len(pending)

    async def aclose(self) -> None:
        self.cancel_pending()
        await self.client.aclose()


def _drop_duplicate_ids(posts: List[Post]) -> List[Post]:
    seen = set()
    unique = []
    for post in posts:
        if post.id in seen:
            logger.warning(f"Dropping duplicate post id {post.id} from feed response")
            continue
        seen.add(post.id)
        unique.append(post)
    return unique
