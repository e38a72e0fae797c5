class FeedCoreError(Exception):
    """Base class for errors raised by the feed core"""


class PostValidationError(FeedCoreError):
    """Candidate post input was rejected before anything was scheduled"""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class FeedNetworkError(FeedCoreError):
    """
    Fetching the remote post list failed.

    The underlying httpx or decoding error is kept on ``cause`` and chained
    as ``__cause__``. The feed is left at its last-known-good contents.
    """

    def __init__(self, message: str, cause: Exception = None):
        super().__init__(message)
        self.cause = cause
