"""
Structured logging helpers for consistent log formatting.
"""
import logging
from datetime import datetime, timezone


def log_sync_start(logger: logging.Logger, source: str) -> None:
    """Log reconciliation run start."""
    logger.info(f"Schedule sync started at {datetime.now(timezone.utc).isoformat()} (source: {source})")


def log_sync_end(logger: logging.Logger) -> None:
    """Log reconciliation run end."""
    logger.info(f"Schedule sync completed at {datetime.now(timezone.utc).isoformat()}")


def log_feed_summary(logger: logging.Logger, channels_count: int, programmes_count: int) -> None:
    """
    Log what the feed snapshot contains.

    Args:
        logger: Logger instance
        channels_count: Number of feed channels
        programmes_count: Number of feed programmes
    """
    logger.info(f"Feed summary - Channels: {channels_count}, Programmes: {programmes_count}")


def log_diagnostic_summary(logger: logging.Logger, counts: dict[str, int]) -> None:
    """
    Log one line per diagnostic kind raised during the run.

    Args:
        logger: Logger instance
        counts: Diagnostic kind -> number of occurrences
    """
    if not counts:
        logger.info("No diagnostics raised")
        return
    for kind, count in sorted(counts.items()):
        logger.warning(f"Diagnostics - {kind}: {count}")
