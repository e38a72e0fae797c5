from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from feedcore.core.exceptions import FeedNetworkError
from feedcore.core.time_format import TimeFormatter
from feedcore.deps import get_feed_service, get_time_formatter
from feedcore.modules.home_feed.schemas.feed import FeedResponse
from feedcore.modules.home_feed.services.presenter import create_feed_response
from feedcore.modules.home_feed.services.sync import FeedSyncService

router = APIRouter()

def _feed_response(service: FeedSyncService, formatter: TimeFormatter, posts) -> FeedResponse:
    return create_feed_response(
        posts,
        formatter,
        is_submitting=service.is_submitting,
        last_refreshed_at=service.last_refreshed_at,
    )

@router.get("/", response_model=FeedResponse)
@router.get("", response_model=FeedResponse)
def read_feed(
    *,
    service: FeedSyncService = Depends(get_feed_service),
    formatter: TimeFormatter = Depends(get_time_formatter),
) -> Any:
    """Current feed, head first"""
    return _feed_response(service, formatter, service.snapshot())

@router.post("/refresh", response_model=FeedResponse)
async def refresh_feed(
    *,
    service: FeedSyncService = Depends(get_feed_service),
    formatter: TimeFormatter = Depends(get_time_formatter),
) -> Any:
    """
    Replace the feed with the server's post list.
    On failure the feed keeps its previous contents; call again to retry.
    """
    try:
        posts = await service.refresh()
    except FeedNetworkError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Could not fetch posts: {e}",
        )
    return _feed_response(service, formatter, posts)
