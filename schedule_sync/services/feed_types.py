"""
Shared dataclasses describing one parsed feed snapshot.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(slots=True, frozen=True)
class FeedChannel:
    """Channel as announced by the feed. ``feed_id`` is only stable within one snapshot."""
    feed_id: str
    display_name: str
    icon_url: str | None = None


@dataclass(slots=True, frozen=True)
class FeedProgramme:
    """Programme entry as announced by the feed (times are UTC-aware)."""
    channel_feed_id: str
    title: str
    start: datetime
    end: datetime

    @property
    def is_well_formed(self) -> bool:
        return self.start < self.end


@dataclass(slots=True)
class Feed:
    """Channels and programmes in the order they appeared in the source."""
    channels: list[FeedChannel] = field(default_factory=list)
    programmes: list[FeedProgramme] = field(default_factory=list)


__all__ = ["Feed", "FeedChannel", "FeedProgramme"]
