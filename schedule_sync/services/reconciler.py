"""
Schedule reconciliation

Brings the stored schedule in line with one feed snapshot. Each feed programme
is looked up by its natural key (channel, start). When the stored row disagrees
on title or end time, the rest of that channel's UTC broadcast day is replaced:
every stored row from the programme's start until 23:59:59 is deleted and the
feed's entries for the same span are inserted in their place.

Programmes occupying a slot with no stored row are left alone unless
``insert_new_slots`` is enabled; they only reach the store when a window
replacement triggered by a neighbouring changed row covers them.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, replace

from schedule_sync.services.diagnostics import DiagnosticCollector
from schedule_sync.services.feed_types import FeedProgramme
from schedule_sync.services.store_service import ScheduleStore
from schedule_sync.utils.timezone import end_of_utc_day, ensure_utc


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ReconcileStats:
    programmes_seen: int = 0
    programmes_malformed: int = 0
    programmes_unmapped: int = 0
    programmes_unchanged: int = 0
    programmes_unmatched: int = 0
    windows_replaced: int = 0
    programmes_deleted: int = 0
    programmes_inserted: int = 0
    new_slots_inserted: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.programmes_deleted or self.programmes_inserted)

    def to_dict(self) -> dict:
        return asdict(self)


class ScheduleReconciler:
    """Applies one feed snapshot to the schedule store."""

    def __init__(
        self,
        store: ScheduleStore,
        diagnostics: DiagnosticCollector,
        *,
        sort_programmes: bool = True,
        insert_new_slots: bool = False,
    ) -> None:
        self.store = store
        self.diagnostics = diagnostics
        self.sort_programmes = sort_programmes
        self.insert_new_slots = insert_new_slots

    async def reconcile(
        self,
        programmes: Iterable[FeedProgramme],
        channel_map: Mapping[str, int],
    ) -> ReconcileStats:
        """
        Reconcile feed programmes against the store.

        The look-ahead re-scan relies on each channel's programmes being in
        ascending start order. With ``sort_programmes`` disabled an unordered
        feed silently truncates window replacement.

        Args:
            programmes: Feed programmes in source order
            channel_map: Resolved feed channel id -> channel key

        Returns:
            Counters describing what the run did

        Raises:
            StoreOperationError: If any store query or mutation fails
        """
        stats = ReconcileStats()
        ordered = self._prepare(programmes, stats)

        for index, programme in enumerate(ordered):
            channel_key = channel_map.get(programme.channel_feed_id)
            if channel_key is None:
                stats.programmes_unmapped += 1
                self.diagnostics.emit(
                    "unmapped_programme_channel",
                    f"Channel ID '{programme.channel_feed_id}' not found in channel mapping",
                    feed_id=programme.channel_feed_id,
                    title=programme.title,
                    start=programme.start.isoformat(),
                )
                continue

            existing = await self.store.find_programme(channel_key, programme.start)
            if existing is None:
                stats.programmes_unmatched += 1
                if self.insert_new_slots:
                    await self.store.insert_programme(
                        channel_key, programme.title, programme.start, programme.end
                    )
                    stats.programmes_inserted += 1
                    stats.new_slots_inserted += 1
                continue

            if existing.title == programme.title and existing.end == programme.end:
                stats.programmes_unchanged += 1
                continue

            logger.info(
                "Schedule diverged on channel %s at %s: stored '%s' (ends %s), feed '%s' (ends %s)",
                channel_key,
                programme.start.isoformat(),
                existing.title,
                existing.end.isoformat(),
                programme.title,
                programme.end.isoformat(),
            )
            await self._replace_window(ordered, index, channel_key, channel_map, stats)

        logger.info(
            "Reconciliation finished: %s programmes, %s windows replaced, %s deleted, %s inserted",
            stats.programmes_seen,
            stats.windows_replaced,
            stats.programmes_deleted,
            stats.programmes_inserted,
        )
        return stats

    def _prepare(
        self, programmes: Iterable[FeedProgramme], stats: ReconcileStats
    ) -> list[FeedProgramme]:
        prepared: list[FeedProgramme] = []
        for programme in programmes:
            stats.programmes_seen += 1
            programme = replace(
                programme, start=ensure_utc(programme.start), end=ensure_utc(programme.end)
            )
            if not programme.is_well_formed:
                stats.programmes_malformed += 1
                self.diagnostics.emit(
                    "malformed_programme",
                    f"Programme '{programme.title}' on '{programme.channel_feed_id}' does not end after it starts",
                    feed_id=programme.channel_feed_id,
                    title=programme.title,
                    start=programme.start.isoformat(),
                    end=programme.end.isoformat(),
                )
                continue
            prepared.append(programme)

        if self.sort_programmes:
            # stable, so equal starts keep their feed order
            prepared.sort(key=lambda item: item.start)
        return prepared

    async def _replace_window(
        self,
        ordered: list[FeedProgramme],
        index: int,
        channel_key: int,
        channel_map: Mapping[str, int],
        stats: ReconcileStats,
    ) -> None:
        window_start = ordered[index].start
        window_end = end_of_utc_day(window_start)

        deleted = await self.store.delete_programmes_in_range(channel_key, window_start, window_end)

        inserted = 0
        for candidate in ordered[index:]:
            if channel_map.get(candidate.channel_feed_id) != channel_key:
                continue
            if candidate.start < window_start:
                continue
            if candidate.start > window_end:
                break
            await self.store.insert_programme(
                channel_key, candidate.title, candidate.start, candidate.end
            )
            inserted += 1

        stats.windows_replaced += 1
        stats.programmes_deleted += deleted
        stats.programmes_inserted += inserted
        logger.info(
            "Replaced window %s -> %s on channel %s: %s deleted, %s inserted",
            window_start.isoformat(),
            window_end.isoformat(),
            channel_key,
            deleted,
            inserted,
        )


__all__ = ["ReconcileStats", "ScheduleReconciler"]
