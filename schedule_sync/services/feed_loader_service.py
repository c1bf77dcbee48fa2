"""
Feed Loader Service

Retrieves the XMLTV feed (remote URL or local file) and parses it into a Feed.
Separated from the reconciliation pipeline for better testability.
"""
import asyncio
import logging
from pathlib import Path
from uuid import uuid4

import httpx
from lxml import etree # type: ignore

from schedule_sync.exceptions import FeedParseError, FeedRetrievalError
from schedule_sync.services.feed_types import Feed
from schedule_sync.services.xmltv_parser_service import parse_xmltv_file
from schedule_sync.utils.file_operations import cleanup_temp_file, download_file, is_remote_source


logger = logging.getLogger(__name__)


async def load_feed(
    source: str,
    *,
    fetch_timeout_seconds: float = 120.0,
    parse_timeout_seconds: int | None = None,
) -> Feed:
    """
    Retrieve and parse one feed snapshot

    Args:
        source: HTTP/HTTPS URL or local path of the XMLTV document

    Keyword Args:
        fetch_timeout_seconds: HTTP timeout for remote sources
        parse_timeout_seconds: Timeout in seconds for parsing (0/None disables timeout)

    Returns:
        Parsed feed

    Raises:
        FeedRetrievalError: If the feed cannot be downloaded or read
        FeedParseError: If the feed is malformed, times out or holds no data
    """
    sanitized = sanitize_source_for_logging(source)
    temp_file: Path | None = None
    try:
        if is_remote_source(source):
            try:
                temp_file = await download_file(
                    source,
                    f"schedule_feed_{uuid4().hex}.xml",
                    timeout=fetch_timeout_seconds,
                )
            except (httpx.HTTPError, OSError) as exc:
                logger.error("Feed download failed for %s: %s", sanitized, exc)
                raise FeedRetrievalError(sanitized, str(exc)) from exc
            feed_path = temp_file
        else:
            feed_path = Path(source)
            if not feed_path.is_file():
                raise FeedRetrievalError(sanitized, "file not found")

        return await parse_feed_async(feed_path, sanitized, parse_timeout_seconds=parse_timeout_seconds)
    finally:
        if temp_file:
            cleanup_temp_file(temp_file)


async def parse_feed_async(
    file_path: Path,
    source_label: str,
    *,
    parse_timeout_seconds: int | None = None,
) -> Feed:
    """
    Parse XMLTV file asynchronously with timeout protection.

    File parsing is offloaded to thread pool to avoid blocking event loop.

    Raises:
        FeedParseError: If parsing fails, times out, or yields no channels/programmes
        FeedRetrievalError: If the file cannot be read
    """
    logger.info(f"Parsing XMLTV file: {file_path}")
    logger.debug(f"  File size: {file_path.stat().st_size / 1024 / 1024:.2f} MB")

    effective_timeout = parse_timeout_seconds if parse_timeout_seconds and parse_timeout_seconds > 0 else None
    timeout_display = f"{effective_timeout}s" if effective_timeout else "disabled"

    loop = asyncio.get_running_loop()
    parse_task = loop.run_in_executor(None, parse_xmltv_file, str(file_path))
    try:
        if effective_timeout:
            feed = await asyncio.wait_for(parse_task, timeout=effective_timeout)
        else:
            feed = await parse_task
    except asyncio.TimeoutError as exc:
        logger.error("XML parsing timed out after %s for %s", timeout_display, file_path)
        raise FeedParseError(source_label, f"parsing timed out after {timeout_display}") from exc
    except etree.XMLSyntaxError as exc:
        raise FeedParseError(source_label, f"malformed XML: {exc}") from exc
    except OSError as exc:
        raise FeedRetrievalError(source_label, str(exc)) from exc

    if not feed.channels:
        logger.warning("No channels found in XMLTV file")
        raise FeedParseError(source_label, "no channels found")

    if not feed.programmes:
        logger.warning("No programmes found in XMLTV file")
        raise FeedParseError(source_label, "no programmes found")

    logger.info(
        "XMLTV parsing validation passed: %s channels, %s programmes",
        len(feed.channels),
        len(feed.programmes),
    )
    return feed


def sanitize_source_for_logging(source: str) -> str:
    """Remove credentials from URL for safe logging."""
    if "://" not in source:
        return source
    try:
        protocol, rest = source.split("://", 1)
        if "@" in rest:
            rest = rest.split("@", 1)[1]
            return f"{protocol}://***:***@{rest}"
        return source
    except (ValueError, IndexError):
        return source
