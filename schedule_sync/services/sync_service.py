"""
Schedule Sync Service

Runs one reconciliation: load the feed, then resolve channels and reconcile
programmes inside a single transaction against the schedule store.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from schedule_sync.config import settings
from schedule_sync.database import session_scope
from schedule_sync.exceptions import ScheduleSyncError
from schedule_sync.services.channel_resolver import (
    ChannelKeyMap,
    ChannelMatchMode,
    build_channel_map,
)
from schedule_sync.services.diagnostics import DiagnosticCollector
from schedule_sync.services.feed_loader_service import load_feed, sanitize_source_for_logging
from schedule_sync.services.feed_types import Feed
from schedule_sync.services.reconciler import ReconcileStats, ScheduleReconciler
from schedule_sync.services.store_service import SqlScheduleStore
from schedule_sync.services.sync_coordinator import get_sync_coordinator
from schedule_sync.utils.logging_helpers import (
    log_diagnostic_summary,
    log_feed_summary,
    log_sync_end,
    log_sync_start,
)


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SyncOutcome:
    channel_map: ChannelKeyMap
    stats: ReconcileStats
    diagnostics: DiagnosticCollector = field(default_factory=DiagnosticCollector)


async def reconcile_feed(
    feed: Feed,
    *,
    match_mode: ChannelMatchMode = "exact",
    sort_programmes: bool = True,
    insert_new_slots: bool = False,
    diagnostics: DiagnosticCollector | None = None,
) -> SyncOutcome:
    """
    Resolve channels and reconcile programmes in one all-or-nothing transaction.

    Raises:
        StoreOperationError: If the store fails; nothing from the run is committed
        RuntimeError: If the database has not been initialized
    """
    diagnostics = diagnostics if diagnostics is not None else DiagnosticCollector()

    async with session_scope() as session:
        store = SqlScheduleStore(session)
        channel_map = await build_channel_map(
            store,
            feed.channels,
            diagnostics=diagnostics,
            match_mode=match_mode,
        )
        reconciler = ScheduleReconciler(
            store,
            diagnostics,
            sort_programmes=sort_programmes,
            insert_new_slots=insert_new_slots,
        )
        stats = await reconciler.reconcile(feed.programmes, channel_map)

    return SyncOutcome(channel_map=channel_map, stats=stats, diagnostics=diagnostics)


class SchedulePipeline:
    """Coordinates feed loading and reconciliation for one run."""

    def __init__(
        self,
        source: str,
        *,
        fetch_timeout: float | None = None,
        parse_timeout: int | None = None,
        match_mode: ChannelMatchMode | None = None,
        sort_programmes: bool | None = None,
        insert_new_slots: bool | None = None,
    ) -> None:
        self.source = source
        self.sanitized_source = sanitize_source_for_logging(source)
        self._fetch_timeout = fetch_timeout if fetch_timeout is not None else settings.feed_fetch_timeout_sec
        self._parse_timeout = parse_timeout if parse_timeout is not None else settings.feed_parse_timeout_sec
        self._match_mode = match_mode or settings.channel_match_mode
        self._sort_programmes = settings.sort_feed_programmes if sort_programmes is None else sort_programmes
        self._insert_new_slots = settings.insert_new_slots if insert_new_slots is None else insert_new_slots

    async def run(self) -> dict:
        started_at = datetime.now(timezone.utc)
        log_sync_start(logger, self.sanitized_source)

        feed = await load_feed(
            self.source,
            fetch_timeout_seconds=self._fetch_timeout,
            parse_timeout_seconds=self._parse_timeout,
        )
        log_feed_summary(logger, len(feed.channels), len(feed.programmes))

        outcome = await reconcile_feed(
            feed,
            match_mode=self._match_mode,
            sort_programmes=self._sort_programmes,
            insert_new_slots=self._insert_new_slots,
        )
        log_diagnostic_summary(logger, outcome.diagnostics.counts())
        log_sync_end(logger)

        return self._build_result(started_at, feed, outcome)

    def _build_result(self, started_at: datetime, feed: Feed, outcome: SyncOutcome) -> dict:
        completed_at = datetime.now(timezone.utc)
        unresolved = outcome.diagnostics.of_kind("unresolved_channel")
        return {
            "status": "success",
            "timestamp": completed_at.isoformat(),
            "source": self.sanitized_source,
            "started_at": started_at.isoformat(),
            "completed_at": completed_at.isoformat(),
            "duration_seconds": max(0.0, (completed_at - started_at).total_seconds()),
            "feed_channels": len(feed.channels),
            "feed_programmes": len(feed.programmes),
            "channels_resolved": len(outcome.channel_map),
            "channels_unresolved": [item.context["channel_name"] for item in unresolved],
            **outcome.stats.to_dict(),
            "diagnostics": outcome.diagnostics.counts(),
        }


async def _run_pipeline(source: str | None) -> dict:
    source = source or settings.guide_url
    if not source:
        logger.warning("GUIDE_URL not configured - sync aborted")
        return {"status": "error", "error": "GUIDE_URL not configured"}

    pipeline = SchedulePipeline(source)
    try:
        result = await pipeline.run()
        logger.info("Schedule sync completed successfully")
        return result
    except ScheduleSyncError as exc:
        logger.error("Schedule sync failed: %s", exc, exc_info=True)
        return {"status": "error", "error": str(exc), "error_type": type(exc).__name__}
    except RuntimeError as exc:
        logger.error("Schedule sync failed: %s", exc, exc_info=True)
        return {"status": "error", "error": str(exc), "error_type": type(exc).__name__}


async def run_sync(source: str | None = None) -> dict:
    """
    Main entry point for one reconciliation run with concurrency protection.

    Args:
        source: Feed location overriding GUIDE_URL

    Returns:
        Dictionary with run statistics, or an error/skip message.
    """
    return await get_sync_coordinator().execute(lambda: _run_pipeline(source))
