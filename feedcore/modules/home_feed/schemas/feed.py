from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel

from feedcore.modules.posts.schemas.post import Post

class FeedItem(BaseModel):
    """Feed row returned to client"""
    post: Post
    display_date: str
    relative_age: str
    avatar_url: str
    likes_label: str
    comments_label: str

class FeedResponse(BaseModel):
    """Feed response model returned to client"""
    items: List[FeedItem]
    total: int
    is_submitting: bool
    last_refreshed_at: Optional[datetime] = None

class PostDetail(BaseModel):
    """Everything the post detail screen shows"""
    post: Post
    author_name: str
    avatar_url: str
    display_date: str
    relative_age: str
    last_updated: str
    like_label: str
    comment_label: str
