"""
Exception hierarchy for schedule synchronisation

Only store failures unwind through the run transaction. Feed failures stop a
run before any reconciliation starts. Channel mismatches are not exceptions at
all, they are reported as diagnostics.
"""


class ScheduleSyncError(Exception):
    """Base class for all errors raised by a reconciliation run"""
    pass


class FeedRetrievalError(ScheduleSyncError):
    """Raised when the feed cannot be downloaded or read"""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to retrieve feed from {source}: {reason}")


class FeedParseError(ScheduleSyncError):
    """Raised when the feed content cannot be turned into channels and programmes"""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to parse feed from {source}: {reason}")


class StoreOperationError(ScheduleSyncError):
    """Raised when a schedule store query or mutation fails"""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Store operation '{operation}' failed: {reason}")
