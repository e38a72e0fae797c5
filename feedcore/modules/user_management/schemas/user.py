import re
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict

EMAIL_PATTERN = re.compile(r"[A-Z0-9a-z._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,64}")

class User(BaseModel):
    """Author referenced by posts; the feed core never mutates users"""
    id: int
    username: str
    email: str
    is_active: bool = True
    created_at: datetime
    profile_image_url: Optional[str] = None

    model_config = ConfigDict(extra="ignore")

    @property
    def display_name(self) -> str:
        return self.username

    @property
    def has_valid_email(self) -> bool:
        return EMAIL_PATTERN.fullmatch(self.email) is not None
