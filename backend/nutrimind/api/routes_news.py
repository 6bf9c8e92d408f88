# nutrimind/api/routes_news.py
# 딜/뉴스 목록: 실패해도 200 + ok:false + 빈 목록

from fastapi import APIRouter

from nutrimind.services.deals import fetch_deals, fetch_news

router = APIRouter(prefix="/api", tags=["news"])

@router.get("/deals")
async def list_deals():
    res = await fetch_deals()
    body = {"ok": res.ok, "deals": [a.model_dump() for a in res.items]}
    if res.error:
        body["error"] = res.error
    return body

@router.get("/news")
async def list_news():
    # 딜/멤버십/피트니스 키워드가 들어간 헤드라인만 (최대 10개)
    res = await fetch_news()
    body = {"ok": res.ok, "items": [a.model_dump() for a in res.items]}
    if res.error:
        body["error"] = res.error
    return body
