import pytest

from schedule_sync.database import session_scope
from schedule_sync.services.channel_resolver import build_channel_map, resolve_channels
from schedule_sync.services.diagnostics import DiagnosticCollector
from schedule_sync.services.feed_types import FeedChannel
from schedule_sync.services.store_service import SqlScheduleStore, StoreChannelRef


STORE = [StoreChannelRef(key=1, name="BBC One"), StoreChannelRef(key=2, name="BBC Two")]


def test_resolve_maps_feed_ids_through_display_names():
    diagnostics = DiagnosticCollector(log=False)
    feed = [FeedChannel("101", "BBC One"), FeedChannel("102", "BBC Two")]

    assert resolve_channels(STORE, feed, diagnostics=diagnostics) == {"101": 1, "102": 2}
    assert len(diagnostics) == 0


def test_resolve_skips_unknown_channel_with_diagnostic():
    diagnostics = DiagnosticCollector(log=False)
    feed = [FeedChannel("101", "BBC One"), FeedChannel("999", "Mystery TV")]

    channel_map = resolve_channels(STORE, feed, diagnostics=diagnostics)

    assert channel_map == {"101": 1}
    [diagnostic] = diagnostics.items
    assert diagnostic.kind == "unresolved_channel"
    assert diagnostic.context == {"channel_name": "Mystery TV", "feed_id": "999"}
    assert "Mystery TV" in diagnostic.message


def test_exact_matching_is_case_sensitive():
    diagnostics = DiagnosticCollector(log=False)

    channel_map = resolve_channels(STORE, [FeedChannel("101", "bbc one")], diagnostics=diagnostics)

    assert channel_map == {}
    assert diagnostics.counts() == {"unresolved_channel": 1}


def test_normalized_matching_ignores_case_and_surrounding_whitespace():
    diagnostics = DiagnosticCollector(log=False)

    channel_map = resolve_channels(
        STORE,
        [FeedChannel("101", "  bbc ONE ")],
        diagnostics=diagnostics,
        match_mode="normalized",
    )

    assert channel_map == {"101": 1}


def test_renumbered_feed_ids_resolve_to_the_same_key():
    first = resolve_channels(STORE, [FeedChannel("101", "BBC One")], diagnostics=DiagnosticCollector(log=False))
    second = resolve_channels(STORE, [FeedChannel("7", "BBC One")], diagnostics=DiagnosticCollector(log=False))

    assert first["101"] == second["7"] == 1


@pytest.mark.asyncio
async def test_build_channel_map_queries_store(schedule_db):
    keys = await schedule_db.add_channels("BBC One", "ITV1", "Channel 4")
    diagnostics = DiagnosticCollector(log=False)
    feed = [FeedChannel("a", "BBC One"), FeedChannel("b", "ITV1"), FeedChannel("c", "Sky News")]

    async with session_scope() as session:
        channel_map = await build_channel_map(SqlScheduleStore(session), feed, diagnostics=diagnostics)

    assert channel_map == {"a": keys["BBC One"], "b": keys["ITV1"]}
    assert [d.context["feed_id"] for d in diagnostics.of_kind("unresolved_channel")] == ["c"]


@pytest.mark.asyncio
async def test_build_channel_map_normalized_mode(schedule_db):
    keys = await schedule_db.add_channels("BBC One", "ČT1", "Das Erste ÜBER")
    diagnostics = DiagnosticCollector(log=False)

    async with session_scope() as session:
        channel_map = await build_channel_map(
            SqlScheduleStore(session),
            [FeedChannel("a", "bbc one"), FeedChannel("b", "čt1"), FeedChannel("c", " das erste über ")],
            diagnostics=diagnostics,
            match_mode="normalized",
        )

    assert channel_map == {"a": keys["BBC One"], "b": keys["ČT1"], "c": keys["Das Erste ÜBER"]}
    assert diagnostics.items == []
