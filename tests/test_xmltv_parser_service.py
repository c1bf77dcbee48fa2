from datetime import datetime, timezone

import pytest
from lxml import etree # type: ignore

from schedule_sync.services.xmltv_parser_service import parse_xmltv_file


SAMPLE = """<?xml version="1.0" encoding="UTF-8"?>
<tv generator-info-name="test">
  <channel id="bbc1.uk">
    <display-name>BBC One</display-name>
    <display-name>BBC1</display-name>
    <icon src="http://example.com/bbc1.png"/>
  </channel>
  <channel id="noname.tv"/>
  <channel>
    <display-name>No Id</display-name>
  </channel>
  <programme start="20240301200000 +0100" stop="20240301203000 +0100" channel="bbc1.uk">
    <title lang="en">  News at Seven </title>
    <desc>Headlines</desc>
  </programme>
  <programme start="20240301190000 +0000" stop="20240301193000 +0000" channel="bbc1.uk">
    <title>Earlier In File Order</title>
  </programme>
  <programme start="20240301200000 +0000" stop="20240301203000 +0000" channel="bbc1.uk"/>
  <programme start="20240301210000 +0000" stop="20240301200000 +0000" channel="bbc1.uk">
    <title>Backwards</title>
  </programme>
  <programme start="not a time" stop="20240301200000 +0000" channel="bbc1.uk">
    <title>Bad Time</title>
  </programme>
  <programme start="20240301220000" stop="20240301230000" channel="noname.tv">
    <title>Late Show</title>
  </programme>
</tv>
"""


@pytest.fixture
def sample_file(tmp_path):
    path = tmp_path / "guide.xml"
    path.write_text(SAMPLE, encoding="utf-8")
    return path


def test_parses_channels(sample_file):
    feed = parse_xmltv_file(str(sample_file))

    assert [(c.feed_id, c.display_name, c.icon_url) for c in feed.channels] == [
        ("bbc1.uk", "BBC One", "http://example.com/bbc1.png"),
        ("noname.tv", "noname.tv", None),
    ]


def test_parses_programmes_in_document_order(sample_file):
    feed = parse_xmltv_file(str(sample_file))

    assert [(p.channel_feed_id, p.title) for p in feed.programmes] == [
        ("bbc1.uk", "News at Seven"),
        ("bbc1.uk", "Earlier In File Order"),
        ("noname.tv", "Late Show"),
    ]


def test_programme_times_are_converted_to_utc(sample_file):
    news = parse_xmltv_file(str(sample_file)).programmes[0]

    assert news.start == datetime(2024, 3, 1, 19, 0, tzinfo=timezone.utc)
    assert news.end == datetime(2024, 3, 1, 19, 30, tzinfo=timezone.utc)


def test_malformed_xml_raises(tmp_path):
    path = tmp_path / "broken.xml"
    path.write_text("<tv><channel id='x'>", encoding="utf-8")

    with pytest.raises(etree.XMLSyntaxError):
        parse_xmltv_file(str(path))
