import threading
from typing import Iterable, List, Optional, Tuple

from feedcore.modules.posts.schemas.post import Post

class FeedStore:
    """
    Ordered in-memory feed for one session, head first.

    Every operation holds the same lock so each one is atomic on its own.
    Nothing ties a ``replace`` to earlier ``insert_at_head`` calls: a local
    post missing from the next server response is dropped by that refresh.
    """

    def __init__(self, posts: Iterable[Post] = ()) -> None:
        self._posts: List[Post] = list(posts)
        self._lock = threading.Lock()

    def replace(self, posts: Iterable[Post]) -> None:
        new_posts = list(posts)
        with self._lock:
            self._posts = new_posts

    def insert_at_head(self, post: Post) -> None:
        with self._lock:
            self._posts.insert(0, post)

    def snapshot(self) -> Tuple[Post, ...]:
        with self._lock:
            return tuple(self._posts)

    def get(self, post_id: int) -> Optional[Post]:
        with self._lock:
            return next((post for post in self._posts if post.id == post_id), None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._posts)
