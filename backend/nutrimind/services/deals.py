# 목적: 건강/피트니스 RSS에서 "딜" 같은 헤드라인만 골라내기 + NewsAPI 헬스 헤드라인
# 의존: httpx (가져오기), feedparser (RSS/Atom 파싱, CDATA/엔티티 처리 포함)
# 실패(네트워크/HTTP/피드 아님)는 예외 대신 ok=False + 빈 목록으로 반환 (운영 안전)

from __future__ import annotations
import io
import logging
from typing import Iterable, List, Optional

import feedparser
import httpx
from pydantic import BaseModel

from nutrimind.core.config import settings
from nutrimind.db.models.schemas import Article

log = logging.getLogger(__name__)

NEWSAPI_URL = "https://newsapi.org/v2/top-headlines"
MAX_ITEMS = 10
DEFAULT_SOURCE = "Health news"

DEAL_KEYWORDS = [
    "discount", "deal", "save", "off", "%", "membership", "sale", "promo",
    "offer", "coupon", "price", "grocery", "supermarket", "subscription",
    "gym", "fitness",
]

# httpx가 이미 str로 디코딩했으므로 utf-8로 다시 넘기고 charset을 못박음
_FEED_HEADERS = {"content-type": "application/rss+xml; charset=utf-8"}

class NewsResult(BaseModel):
    ok: bool
    items: List[Article] = []
    error: Optional[str] = None

def _parse(xml: str) -> feedparser.FeedParserDict:
    # 문자열을 그대로 넘기면 feedparser가 경로/URL로 열어보려 하므로 파일 객체로 감쌈
    return feedparser.parse(io.BytesIO((xml or "").encode("utf-8")), response_headers=_FEED_HEADERS)

def _is_feed(parsed: feedparser.FeedParserDict) -> bool:
    # 항목이 하나라도 있으면 피드. 없으면 RSS/Atom 루트를 알아봤고 문서가 멀쩡해야 함
    if parsed.entries:
        return True
    return bool(parsed.get("version")) and not parsed.get("bozo")

def _articles(parsed: feedparser.FeedParserDict) -> List[Article]:
    # 제목/링크 없는 항목은 버림
    out: List[Article] = []
    for entry in parsed.entries:
        title = (entry.get("title") or "").strip()
        url = (entry.get("link") or "").strip()
        if not title or not url:
            continue
        source = ((entry.get("source") or {}).get("title") or "").strip() or DEFAULT_SOURCE
        out.append(Article(title=title, url=url, source=source))
    return out

def parse_feed(xml: str) -> List[Article]:
    return _articles(_parse(xml))

def looks_like_deal(title: str) -> bool:
    lower = (title or "").lower()
    return any(k in lower for k in DEAL_KEYWORDS)

def filter_deals(items: Iterable[Article], limit: int = MAX_ITEMS) -> List[Article]:
    out: List[Article] = []
    for it in items:
        if len(out) >= limit:
            break
        if looks_like_deal(it.title):
            out.append(it)
    return out

async def fetch_feed_xml(url: str) -> str:
    async with httpx.AsyncClient(timeout=settings.NEWS_TIMEOUT_SECONDS, follow_redirects=True) as cli:
        r = await cli.get(url)
        r.raise_for_status()
        return r.text

async def fetch_news() -> NewsResult:
    try:
        xml = await fetch_feed_xml(settings.NEWS_FEED_URL)
    except httpx.HTTPError as e:
        log.warning("news feed fetch failed: %s", e)
        return NewsResult(ok=False, items=[], error="Failed to fetch news feed")

    parsed = _parse(xml)
    if not _is_feed(parsed):
        # 200인데 HTML 에러 페이지 등이 온 경우
        log.warning("news feed response is not RSS/Atom (bozo=%s)", parsed.get("bozo"))
        return NewsResult(ok=False, items=[], error="News feed returned an unreadable document")

    return NewsResult(ok=True, items=filter_deals(_articles(parsed)))

def _article_from_newsapi(a: dict) -> Optional[Article]:
    title = (a.get("title") or "").strip()
    url = (a.get("url") or "").strip()
    if not title or not url:
        return None
    source = ((a.get("source") or {}).get("name") or DEFAULT_SOURCE).strip()
    return Article(title=title, url=url, source=source)

async def fetch_deals(page_size: int = 5) -> NewsResult:
    # NewsAPI 헬스 카테고리 헤드라인 (키 없으면 빈 목록)
    if not settings.NEWSAPI_KEY:
        return NewsResult(ok=False, items=[], error="News source not configured")

    params = {
        "category": "health",
        "language": "en",
        "pageSize": page_size,
        "apiKey": settings.NEWSAPI_KEY,
    }
    try:
        async with httpx.AsyncClient(timeout=settings.NEWS_TIMEOUT_SECONDS) as cli:
            r = await cli.get(NEWSAPI_URL, params=params)
            r.raise_for_status()
            data = r.json()
    except (httpx.HTTPError, ValueError) as e:
        # 키가 URL 파라미터에 있으니 요청 URL은 로그에 남기지 않음
        log.warning("NewsAPI request failed: %s", type(e).__name__)
        return NewsResult(ok=False, items=[], error="Server error")

    articles = data.get("articles") if isinstance(data, dict) else None
    items = [a for a in (_article_from_newsapi(x) for x in (articles or []) if isinstance(x, dict)) if a]
    return NewsResult(ok=True, items=items)
