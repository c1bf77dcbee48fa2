from typing import Optional
import logging

from lxml import etree # type: ignore

from schedule_sync.services.feed_types import Feed, FeedChannel, FeedProgramme
from schedule_sync.utils.timezone import DateFormatError, parse_xmltv_time

logger = logging.getLogger(__name__)


def parse_xmltv_file(file_path: str) -> Feed:
    """
    Parse XMLTV file into channels and programmes

    Args:
        file_path: Path to XMLTV file

    Returns:
        Feed with channels and programmes in document order

    Raises:
        etree.XMLSyntaxError: If XML is malformed
        OSError: If file can't be read
    """
    logger.debug(f"Parsing XMLTV file: {file_path}")

    try:
        tree = etree.parse(file_path)
        root = tree.getroot()
        logger.debug(f"  XML document loaded (root tag: {root.tag})")
    except etree.XMLSyntaxError as e:
        logger.error(f"  XML parsing error: {e}")
        raise

    channels = _parse_channels(root)
    programmes = _parse_programmes(root)

    logger.info(f"XMLTV parsing complete: {len(channels)} channels, {len(programmes)} programmes")

    return Feed(channels=channels, programmes=programmes)


def _parse_channels(root: etree._Element) -> list[FeedChannel]:
    """Extract channels from XMLTV root element"""
    channels = []

    for channel in root.findall('channel'):
        feed_id = channel.get('id')
        if not feed_id:
            logger.debug("Skipping channel with missing ID attribute")
            continue

        # First display-name wins; fall back to the id
        display_name = _get_text(channel, 'display-name', default=feed_id)

        icon_url = None
        icon_elem = channel.find('icon')
        if icon_elem is not None:
            icon_url = icon_elem.get('src')

        channels.append(FeedChannel(
            feed_id=feed_id,
            display_name=display_name or feed_id,
            icon_url=icon_url
        ))

    return channels


def _parse_programmes(root: etree._Element) -> list[FeedProgramme]:
    """Extract programmes from XMLTV root element"""
    programmes = []
    skipped = 0

    for element in root.findall('programme'):
        programme = _parse_single_programme(element)
        if programme is None:
            skipped += 1
            continue
        programmes.append(programme)

    if skipped:
        logger.warning(f"Skipped {skipped} malformed programme entries")

    return programmes


def _parse_single_programme(element: etree._Element) -> Optional[FeedProgramme]:
    """Parse single programme element, None when required data is missing or invalid"""
    channel_id = element.get('channel')
    start_str = element.get('start')
    stop_str = element.get('stop')
    title = _get_text(element, 'title')

    if not channel_id or not start_str or not stop_str or title is None:
        logger.debug(f"Skipping programme with missing fields (channel={channel_id}, start={start_str})")
        return None

    try:
        start = parse_xmltv_time(start_str)
        end = parse_xmltv_time(stop_str)
    except DateFormatError as e:
        logger.debug(f"Skipping programme '{title}' on {channel_id}: {e}")
        return None

    if start >= end:
        logger.debug(f"Skipping programme '{title}' on {channel_id}: stop {stop_str} is not after start {start_str}")
        return None

    return FeedProgramme(
        channel_feed_id=channel_id,
        title=title,
        start=start,
        end=end,
    )


def _get_text(element: etree._Element, tag: str, default: Optional[str] = None) -> Optional[str]:
    """Safely extract text from XML element"""
    child = element.find(tag)
    if child is None or not child.text:
        return default
    return child.text.strip()
