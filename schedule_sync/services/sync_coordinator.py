"""
Sync Coordination

Keeps reconciliation runs in one process from overlapping.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Any


logger = logging.getLogger(__name__)


class SyncCoordinator:
    """
    Coordinates schedule sync runs to prevent concurrent executions.

    Two overlapping runs would interleave their window replacements on the same
    store, so a request arriving while a run is active is skipped, not queued.
    """

    def __init__(self):
        self._sync_lock = asyncio.Lock()

    async def execute(self, sync_func: Callable[[], Awaitable[Any]]) -> Any:
        """
        Execute a sync run with concurrency protection.

        Args:
            sync_func: Async function performing the run

        Returns:
            Result from sync_func, or a skip response if a run is already active

        Raises:
            Any exception raised by sync_func
        """
        if self._sync_lock.locked():
            logger.warning("Schedule sync already in progress, skipping this request")
            return {
                "status": "skipped",
                "message": "Schedule sync already in progress"
            }

        async with self._sync_lock:
            return await sync_func()

    def is_running(self) -> bool:
        """True while a run holds the lock."""
        return self._sync_lock.locked()


# Global singleton instance
_coordinator: SyncCoordinator | None = None


def get_sync_coordinator() -> SyncCoordinator:
    """
    Get or create the global sync coordinator singleton.

    Returns:
        The global SyncCoordinator instance
    """
    global _coordinator
    if _coordinator is None:
        _coordinator = SyncCoordinator()
    return _coordinator


def reset_sync_coordinator() -> None:
    """
    Reset the sync coordinator (mainly for testing).

    WARNING: Only use this in test environments!
    """
    global _coordinator
    _coordinator = None
