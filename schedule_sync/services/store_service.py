"""
Schedule store operations

This module contains every query and mutation the reconciliation core performs
against the channel and programme tables. All operations go through the one
session (and therefore the one transaction) owned by the current run.
"""
import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from schedule_sync.exceptions import StoreOperationError
from schedule_sync.models import StoredProgramme, TvChannel
from schedule_sync.utils.timezone import ensure_utc


logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class StoreChannelRef:
    """Known channel: internal key plus the display name used for matching."""
    key: int
    name: str


class ScheduleStore(Protocol):
    async def find_channels_by_name(
        self, names: Iterable[str], *, normalized: bool = False
    ) -> list[StoreChannelRef]: ...

    async def find_programme(self, channel_key: int, start: datetime) -> StoredProgramme | None: ...

    async def delete_programmes_in_range(
        self, channel_key: int, start_inclusive: datetime, end_inclusive: datetime
    ) -> int: ...

    async def insert_programme(
        self, channel_key: int, title: str, start: datetime, end: datetime
    ) -> StoredProgramme: ...


def normalize_channel_name(name: str) -> str:
    """Whitespace-trimmed, lowercased channel name used by normalized matching."""
    return name.strip().lower()


@contextmanager
def _store_operation(operation: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Store operation %s failed: %s", operation, exc)
        raise StoreOperationError(operation, str(exc)) from exc


class SqlScheduleStore:
    """Schedule store backed by a SQLAlchemy async session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_channels_by_name(
        self, names: Iterable[str], *, normalized: bool = False
    ) -> list[StoreChannelRef]:
        """
        Load the known channels whose names appear in ``names``.

        Args:
            names: Display names announced by the feed
            normalized: Compare trimmed, lowercased names on both sides

        Returns:
            Matching channels (key and stored name)
        """
        wanted = {name for name in names if name}
        if not wanted:
            return []

        query = select(TvChannel.id, TvChannel.channel_name)
        if not normalized:
            query = query.where(TvChannel.channel_name.in_(wanted))

        with _store_operation("find_channels_by_name"):
            result = await self.session.execute(query)
            rows = result.all()

        # SQL lower() only folds ASCII on SQLite, so normalise in Python
        if normalized:
            wanted = {normalize_channel_name(name) for name in wanted}
            rows = [row for row in rows if normalize_channel_name(row.channel_name) in wanted]

        logger.debug("Matched %s of %s requested channel names", len(rows), len(wanted))
        return [StoreChannelRef(key=row.id, name=row.channel_name) for row in rows]

    async def find_programme(self, channel_key: int, start: datetime) -> StoredProgramme | None:
        """Return the stored programme occupying ``(channel_key, start)``, if any."""
        with _store_operation("find_programme"):
            result = await self.session.execute(
                select(StoredProgramme)
                .where(
                    StoredProgramme.channel_id == channel_key,
                    StoredProgramme.start == ensure_utc(start),
                )
                .order_by(StoredProgramme.id)
                .limit(1)
            )
            return result.scalars().first()

    async def delete_programmes_in_range(
        self, channel_key: int, start_inclusive: datetime, end_inclusive: datetime
    ) -> int:
        """
        Delete programmes of one channel whose start lies in the closed range.

        Returns:
            Number of deleted programmes
        """
        conditions = (
            StoredProgramme.channel_id == channel_key,
            StoredProgramme.start >= ensure_utc(start_inclusive),
            StoredProgramme.start <= ensure_utc(end_inclusive),
        )
        with _store_operation("delete_programmes_in_range"):
            result = await self.session.execute(
                select(func.count(StoredProgramme.id)).where(*conditions)
            )
            deleted_count = result.scalar_one_or_none() or 0

            stmt = delete(StoredProgramme).where(*conditions).execution_options(
                synchronize_session="fetch"
            )
            await self.session.execute(stmt)

        logger.debug(
            "Deleted %s programmes on channel %s (%s -> %s)",
            deleted_count,
            channel_key,
            start_inclusive.isoformat(),
            end_inclusive.isoformat(),
        )
        return deleted_count

    async def insert_programme(
        self, channel_key: int, title: str, start: datetime, end: datetime
    ) -> StoredProgramme:
        """Insert one programme row and flush it so later lookups in the run see it."""
        programme = StoredProgramme(
            channel_id=channel_key,
            title=title,
            start=ensure_utc(start),
            end=ensure_utc(end),
        )
        with _store_operation("insert_programme"):
            self.session.add(programme)
            await self.session.flush()
        return programme


__all__ = [
    "ScheduleStore",
    "SqlScheduleStore",
    "StoreChannelRef",
    "normalize_channel_name",
]
