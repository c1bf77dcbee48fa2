"""
Channel resolution

Feed channel ids are renumbered freely between snapshots, so they are mapped to
internal channel keys through the channel display name.
"""
import logging
from collections.abc import Iterable, Sequence
from typing import Literal

from schedule_sync.services.diagnostics import DiagnosticCollector
from schedule_sync.services.feed_types import FeedChannel
from schedule_sync.services.store_service import (
    ScheduleStore,
    StoreChannelRef,
    normalize_channel_name,
)


logger = logging.getLogger(__name__)

ChannelMatchMode = Literal["exact", "normalized"]
ChannelKeyMap = dict[str, int]


def resolve_channels(
    store_channels: Iterable[StoreChannelRef],
    feed_channels: Sequence[FeedChannel],
    *,
    diagnostics: DiagnosticCollector,
    match_mode: ChannelMatchMode = "exact",
) -> ChannelKeyMap:
    """
    Map feed channel ids to internal channel keys.

    Args:
        store_channels: Known channels of the store
        feed_channels: Channels announced by the feed
        diagnostics: Receives one ``unresolved_channel`` entry per unmatched feed channel
        match_mode: ``"exact"`` compares names as-is (case-sensitive);
            ``"normalized"`` trims and lowercases both sides

    Returns:
        Mapping containing only the resolved feed ids
    """
    def as_lookup(name: str) -> str:
        return normalize_channel_name(name) if match_mode == "normalized" else name

    name_to_key: dict[str, int] = {}
    for channel in store_channels:
        lookup = as_lookup(channel.name)
        if lookup in name_to_key and name_to_key[lookup] != channel.key:
            logger.warning(
                "Channel name '%s' matches several store channels; using key %s",
                channel.name,
                channel.key,
            )
        name_to_key[lookup] = channel.key

    channel_map: ChannelKeyMap = {}
    for feed_channel in feed_channels:
        key = name_to_key.get(as_lookup(feed_channel.display_name))
        if key is None:
            diagnostics.emit(
                "unresolved_channel",
                f"Channel '{feed_channel.display_name}' ({feed_channel.feed_id}) not found in the store",
                channel_name=feed_channel.display_name,
                feed_id=feed_channel.feed_id,
            )
            continue
        channel_map[feed_channel.feed_id] = key

    logger.info("Resolved %s of %s feed channels", len(channel_map), len(feed_channels))
    return channel_map


async def build_channel_map(
    store: ScheduleStore,
    feed_channels: Sequence[FeedChannel],
    *,
    diagnostics: DiagnosticCollector,
    match_mode: ChannelMatchMode = "exact",
) -> ChannelKeyMap:
    """Query the store for the feed's channel names and resolve them."""
    store_channels = await store.find_channels_by_name(
        {channel.display_name for channel in feed_channels},
        normalized=match_mode == "normalized",
    )
    return resolve_channels(
        store_channels,
        feed_channels,
        diagnostics=diagnostics,
        match_mode=match_mode,
    )


__all__ = ["ChannelKeyMap", "ChannelMatchMode", "build_channel_map", "resolve_channels"]
