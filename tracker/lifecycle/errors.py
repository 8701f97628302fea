"""
Exception classes for the transaction lifecycle tracker.
"""

from typing import Any, Optional


class TrackerError(Exception):
    """Base class for all tracker errors."""

    def __init__(self, message: str, data: Optional[Any] = None):
        self.message = message
        self.data = data
        super().__init__(self.message)


class InvalidEventError(TrackerError):
    """An incoming event could not be decoded."""

    def __init__(self, message: str, event: Optional[Any] = None):
        super().__init__(message, data=event)


class ChainQueryError(TrackerError):
    """A query against the chain API raised.

    Never leaves the reducer: the affected transaction stays pending and the
    block is left unscanned so it can be retried.
    """

    def __init__(self, method: str, block_hash: str, cause: BaseException):
        self.method = method
        self.block_hash = block_hash
        self.cause = cause
        super().__init__(
            f"{method}({block_hash}) failed: {cause}",
            data={"method": method, "block_hash": block_hash},
        )
