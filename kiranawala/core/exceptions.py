# kiranawala/core/exceptions.py
"""
Error taxonomy shared by every engine.

Reads never raise RemoteUnavailable to their callers (they fall back to the
cache); writes that cannot be reconciled raise one of these.
"""

from typing import Optional


class KiranaError(Exception):
    """Base class for all engine errors"""


class RemoteUnavailable(KiranaError):
    """Network, auth, timeout or decode failure talking to the remote store"""

    def __init__(self, message: str, table: Optional[str] = None):
        super().__init__(message)
        self.table = table


class ConflictError(KiranaError):
    """A business invariant would be violated (e.g. cart pinned to another store)"""


class NotFoundError(KiranaError):
    """Entity absent from both the remote store and the cache"""


class PartialWriteError(KiranaError):
    """Order header was persisted remotely but its items were not"""

    def __init__(self, message: str, order_id: str):
        super().__init__(message)
        self.order_id = order_id


class ValidationError(KiranaError):
    """Caller supplied an invalid value (quantity < 1, rating outside 1-5, ...)"""
