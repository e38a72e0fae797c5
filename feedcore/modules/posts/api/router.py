from typing import Any
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from feedcore.core.exceptions import PostValidationError
from feedcore.core.time_format import TimeFormatter
from feedcore.deps import get_feed_service, get_time_formatter
from feedcore.modules.home_feed.schemas.feed import PostDetail
from feedcore.modules.home_feed.services.presenter import create_post_detail
from feedcore.modules.home_feed.services.sync import FeedSyncService
from feedcore.modules.posts.schemas.post import Post, PostCreate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="")

@router.post("/", response_model=Post, status_code=status.HTTP_201_CREATED)
@router.post("", response_model=Post, status_code=status.HTTP_201_CREATED)
async def create_new_post(
    *,
    post_in: PostCreate,
    service: FeedSyncService = Depends(get_feed_service),
) -> Any:
    """
    Create a new post. It is added to the head of the feed once the
    submission delay has passed.
    """
    try:
        return await service.submit(post_in.title, post_in.content, post_in.author_id)
    except PostValidationError as e:
        logger.info(f"Rejected post: {e.reason}")
        raise HTTPException(
            status_code=422,
            detail=e.reason,
        )

@router.get("/{post_id}", response_model=PostDetail)
def read_post_by_id(
    *,
    post_id: int,
    service: FeedSyncService = Depends(get_feed_service),
    formatter: TimeFormatter = Depends(get_time_formatter),
) -> Any:
    """
    Get post detail by ID.
    """
    post = service.store.get(post_id)
    if not post:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Post not found",
        )
    return create_post_detail(post, formatter)
