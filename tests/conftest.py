"""
Shared pytest fixtures: a file-backed SQLite schedule store per test.
"""
from datetime import datetime
from typing import AsyncGenerator

import pytest
from sqlalchemy import select

from schedule_sync.database import close_db, init_db, session_scope
from schedule_sync.models import StoredProgramme, TvChannel
from schedule_sync.services.sync_coordinator import reset_sync_coordinator


class ScheduleDb:
    """Small helper around the initialized test database."""

    async def add_channels(self, *names: str) -> dict[str, int]:
        async with session_scope() as session:
            rows = [TvChannel(channel_name=name) for name in names]
            session.add_all(rows)
            await session.flush()
            return {row.channel_name: row.id for row in rows}

    async def add_programmes(self, channel_id: int, entries: list[tuple[str, datetime, datetime]]) -> list[int]:
        async with session_scope() as session:
            rows = [
                StoredProgramme(channel_id=channel_id, title=title, start=start, end=end)
                for title, start, end in entries
            ]
            session.add_all(rows)
            await session.flush()
            return [row.id for row in rows]

    async def programmes(self, channel_id: int | None = None) -> list[tuple[str, datetime, datetime]]:
        rows = await self.programme_rows(channel_id)
        return [(row.title, row.start, row.end) for row in rows]

    async def programme_rows(self, channel_id: int | None = None) -> list[StoredProgramme]:
        async with session_scope() as session:
            stmt = select(StoredProgramme).order_by(
                StoredProgramme.channel_id, StoredProgramme.start, StoredProgramme.id
            )
            if channel_id is not None:
                stmt = stmt.where(StoredProgramme.channel_id == channel_id)
            result = await session.execute(stmt)
            return list(result.scalars().all())


@pytest.fixture(autouse=True)
def _reset_coordinator():
    reset_sync_coordinator()
    yield
    reset_sync_coordinator()


@pytest.fixture(scope="function")
async def schedule_db(tmp_path) -> AsyncGenerator[ScheduleDb, None]:
    """
    Initializes an empty schedule database for one test and disposes it afterwards.
    """
    await init_db(f"sqlite+aiosqlite:///{tmp_path / 'schedule.db'}")
    try:
        yield ScheduleDb()
    finally:
        await close_db()
