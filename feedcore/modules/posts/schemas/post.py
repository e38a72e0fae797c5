from typing import Optional
from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field, field_validator

class PostBase(BaseModel):
    title: str
    content: str

class PostCreate(BaseModel):
    """Post input as typed by the user; checked by PostValidator, not here"""
    title: Optional[str] = None
    content: Optional[str] = None
    author_id: Optional[int] = None

class Post(PostBase):
    """
    Post entity as it appears in the feed.

    Field names match the snake_case keys of the remote post list. Ids of
    locally authored posts are negative placeholders until the server
    returns the real post on a later refresh.
    """
    id: int
    author_id: int
    created_at: datetime
    updated_at: Optional[datetime] = None
    likes: int = Field(0, ge=0)
    comments: int = Field(0, ge=0)

    model_config = ConfigDict(extra="ignore")

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def is_pending(self) -> bool:
        return self.id < 0
