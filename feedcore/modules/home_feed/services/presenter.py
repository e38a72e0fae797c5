from typing import Iterable, Optional
from datetime import datetime

from feedcore.core.config import settings
from feedcore.core.time_format import DateStyle, TimeFormatter
from feedcore.modules.home_feed.schemas.feed import FeedItem, FeedResponse, PostDetail
from feedcore.modules.posts.schemas.post import Post
from feedcore.modules.user_management.schemas.user import User

def avatar_url(author_id: int) -> str:
    """URL handed to the image loader; fetching and caching happen client side"""
    return settings.AVATAR_URL_TEMPLATE.format(author_id=author_id)

def create_feed_item(post: Post, formatter: TimeFormatter, now: Optional[datetime] = None) -> FeedItem:
    """Transform a post into the row shown in the feed list"""
    return FeedItem(
        post=post,
        display_date=formatter.format_absolute(post.created_at, DateStyle.SHORT),
        relative_age=formatter.format_relative(post.created_at, now),
        avatar_url=avatar_url(post.author_id),
        likes_label=f"❤️ {post.likes}",
        comments_label=f"💬 {post.comments}",
    )

def create_feed_response(
    posts: Iterable[Post],
    formatter: TimeFormatter,
    *,
    is_submitting: bool = False,
    last_refreshed_at: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> FeedResponse:
    items = [create_feed_item(post, formatter, now) for post in posts]
    return FeedResponse(
        items=items,
        total=len(items),
        is_submitting=is_submitting,
        last_refreshed_at=last_refreshed_at,
    )

def create_post_detail(
    post: Post,
    formatter: TimeFormatter,
    author: Optional[User] = None,
    now: Optional[datetime] = None,
) -> PostDetail:
    """Transform a post (and its author, when known) into the detail screen model"""
    author_name = author.display_name if author else f"User {post.author_id}"
    return PostDetail(
        post=post,
        author_name=author_name,
        avatar_url=(author.profile_image_url if author and author.profile_image_url else avatar_url(post.author_id)),
        display_date=formatter.format_absolute(post.created_at, DateStyle.MEDIUM),
        relative_age=formatter.format_relative(post.created_at, now),
        last_updated=formatter.format_last_update(post.updated_at),
        like_label=f"Like ({post.likes})",
        comment_label=f"Comment ({post.comments})",
    )
