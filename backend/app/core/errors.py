"""
Error types shared by the conversion stages.

Every terminal failure of a conversion derives from ConversionError so the
API layer and the job adapter can report it as a single failure value.
"""

from typing import Optional


class ConversionError(Exception):
    """Base class for fatal conversion failures."""


class ConversionCanceled(ConversionError):
    """Raised at the next suspension point after cancellation was signaled."""

    def __init__(self, message: str = "Operation was canceled"):
        super().__init__(message)


class TruncatedInput(ConversionError):
    """The byte stream ended before the declared total size was reached."""

    def __init__(self, expected: int, received: int, message: Optional[str] = None):
        self.expected = expected
        self.received = received
        super().__init__(
            message or f"Input ended after {received} of {expected} bytes."
        )
