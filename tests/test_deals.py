"""Tests for RSS parsing and the deal keyword filter."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from nutrimind.db.models.schemas import Article
from nutrimind.services import deals
from nutrimind.services.deals import (
    fetch_news,
    filter_deals,
    looks_like_deal,
    parse_feed,
)

FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"><channel><title>Health</title>
<item><title><![CDATA[Save 20% on grocery delivery]]></title><link>https://ex.com/a</link>
<source url="https://ex.com">Example News</source></item>
<item><title>Local team wins championship</title><link>https://ex.com/b</link></item>
<item><title>Gym &amp; spa membership prices drop</title><link>https://ex.com/c</link>
<source url="https://x.com"><![CDATA[X Daily]]></source></item>
<item><title>No link here, big sale</title></item>
<item><title></title><link>https://ex.com/e</link></item>
</channel></rss>
"""


def _rss(*items):
    return '<?xml version="1.0"?><rss version="2.0"><channel>' + "".join(items) + "</channel></rss>"


def test_keyword_match():
    assert looks_like_deal("Save 20% on grocery delivery")
    assert looks_like_deal("NEW FITNESS TRACKER")
    assert not looks_like_deal("Local team wins championship")


def test_parse_feed_drops_items_without_title_or_link():
    items = parse_feed(FEED)

    assert [i.url for i in items] == ["https://ex.com/a", "https://ex.com/b", "https://ex.com/c"]
    assert items[0].title == "Save 20% on grocery delivery"
    assert items[0].source == "Example News"
    assert items[1].source == "Health news"
    assert items[2].title == "Gym & spa membership prices drop"
    assert items[2].source == "X Daily"


def test_parse_feed_keeps_multiline_titles():
    items = parse_feed(_rss("<item><title>Save 20% on\ngym membership</title><link>https://ex.com/m</link></item>"))
    assert len(items) == 1
    assert looks_like_deal(items[0].title)


def test_parse_feed_accepts_title_attributes():
    items = parse_feed(_rss('<item><title type="text">Grocery sale</title><link>https://ex.com/t</link></item>'))
    assert [i.title for i in items] == ["Grocery sale"]


def test_filter_keeps_deal_like_titles():
    kept = filter_deals(parse_feed(FEED))
    assert [i.url for i in kept] == ["https://ex.com/a", "https://ex.com/c"]


def test_filter_caps_at_ten():
    items = [Article(title=f"Deal {i}", url=f"https://ex.com/{i}") for i in range(25)]
    assert len(filter_deals(items)) == 10


def test_malformed_feed_yields_nothing():
    assert parse_feed("<html>not rss") == []
    assert parse_feed("") == []


@pytest.mark.asyncio
async def test_fetch_news_filters_feed():
    with patch.object(deals, "fetch_feed_xml", AsyncMock(return_value=FEED)):
        res = await fetch_news()
    assert res.ok is True
    assert len(res.items) == 2


@pytest.mark.asyncio
async def test_fetch_news_empty_feed_is_ok():
    with patch.object(deals, "fetch_feed_xml", AsyncMock(return_value=_rss())):
        res = await fetch_news()
    assert res.ok is True
    assert res.items == []


@pytest.mark.asyncio
async def test_fetch_news_non_feed_body_reports_error():
    with patch.object(deals, "fetch_feed_xml", AsyncMock(return_value="<html>503 Service busy</html>")):
        res = await fetch_news()
    assert res.ok is False
    assert res.items == []
    assert res.error


@pytest.mark.asyncio
async def test_fetch_news_network_failure_is_not_raised():
    boom = AsyncMock(side_effect=httpx.ConnectError("down"))
    with patch.object(deals, "fetch_feed_xml", boom):
        res = await fetch_news()
    assert res.ok is False
    assert res.items == []
    assert res.error


@pytest.mark.asyncio
async def test_fetch_deals_without_key(monkeypatch):
    monkeypatch.setattr(deals.settings, "NEWSAPI_KEY", None)
    res = await deals.fetch_deals()
    assert res.ok is False
    assert res.items == []
