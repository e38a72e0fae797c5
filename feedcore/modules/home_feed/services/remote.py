from typing import List, Optional
import logging

import httpx
from pydantic import TypeAdapter, ValidationError

from feedcore.core.config import settings
from feedcore.core.exceptions import FeedNetworkError
from feedcore.modules.posts.schemas.post import Post

logger = logging.getLogger(__name__)

_post_list = TypeAdapter(List[Post])

class PostListClient:
    """
    Fetches the full post list from the remote feed endpoint.

    One GET per call, no retries. Transport errors, non-2xx responses and
    bodies that are not a list of posts all surface as FeedNetworkError.
    """

    def __init__(
        self,
        endpoint_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.endpoint_url = endpoint_url or settings.FEED_ENDPOINT_URL
        self.timeout = settings.REQUEST_TIMEOUT_SECONDS if timeout is None else timeout
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def fetch_posts(self) -> List[Post]:
        logger.info(f"Fetching posts from {self.endpoint_url}")
        try:
            resp = await self._get_client().get(self.endpoint_url)
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPError as e:
            raise FeedNetworkError(f"Error fetching posts: {e}", cause=e) from e
        except ValueError as e:
            raise FeedNetworkError("Feed endpoint returned a non-JSON body", cause=e) from e

        try:
            posts = _post_list.validate_python(payload)
        except ValidationError as e:
            raise FeedNetworkError(f"Feed endpoint returned malformed posts: {e.error_count()} errors", cause=e) from e

        logger.info(f"Fetched {len(posts)} posts")
        return posts

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
