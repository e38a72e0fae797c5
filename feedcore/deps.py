from fastapi import Request

from feedcore.core.time_format import TimeFormatter
from feedcore.modules.home_feed.services.sync import FeedSyncService

def get_feed_service(request: Request) -> FeedSyncService:
    """
    Dependency for getting the session's feed service
    """
    return request.app.state.feed_service

def get_time_formatter(request: Request) -> TimeFormatter:
    """
    Dependency for getting the display time formatter
    """
    return request.app.state.time_formatter
