from enum import Enum
from typing import Optional

import regex

MIN_TITLE_LENGTH = 3
MIN_CONTENT_LENGTH = 10

_GRAPHEME = regex.compile(r"\X")

def character_count(text: str) -> int:
    """User-perceived characters: an emoji sequence or a letter with accents counts once"""
    return len(_GRAPHEME.findall(text))

class ValidationReason(str, Enum):
    MISSING_TITLE = "Please enter a title"
    MISSING_CONTENT = "Please enter some content"
    TITLE_TOO_SHORT = f"Title must be at least {MIN_TITLE_LENGTH} characters"
    CONTENT_TOO_SHORT = f"Content must be at least {MIN_CONTENT_LENGTH} characters"

class ValidationResult:
    """Ok, or Error carrying the first rule that failed"""

    __slots__ = ("reason",)

    def __init__(self, reason: Optional[ValidationReason] = None):
        self.reason = reason

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls()

    @classmethod
    def error(cls, reason: ValidationReason) -> "ValidationResult":
        return cls(reason)

    @property
    def is_ok(self) -> bool:
        return self.reason is None

    def __bool__(self) -> bool:
        return self.is_ok

    def __eq__(self, other) -> bool:
        return isinstance(other, ValidationResult) and self.reason == other.reason

    def __hash__(self) -> int:
        return hash(self.reason)

    def __repr__(self) -> str:
        if self.is_ok:
            return "ValidationResult.ok()"
        return f"ValidationResult.error({self.reason.value!r})"

class PostValidator:
    """Checks candidate post input. Rules run in order and the first failure wins."""

    def validate(self, title: Optional[str], content: Optional[str]) -> ValidationResult:
        if not title:
            return ValidationResult.error(ValidationReason.MISSING_TITLE)
        if not content:
            return ValidationResult.error(ValidationReason.MISSING_CONTENT)
        if character_count(title) < MIN_TITLE_LENGTH:
            return ValidationResult.error(ValidationReason.TITLE_TOO_SHORT)
        if character_count(content) < MIN_CONTENT_LENGTH:
            return ValidationResult.error(ValidationReason.CONTENT_TOO_SHORT)
        return ValidationResult.ok()
