from typing import Optional


class MarkstreamError(Exception):
    """Base exception for stream sanitizing errors."""


class StreamClosedError(MarkstreamError):
    """Raised when a cleaner is used after its stream was finished."""


class StreamEventError(MarkstreamError):
    """Raised when the chat backend reports an error event mid-stream."""
    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code
