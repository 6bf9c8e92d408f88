# 환경변수 로딩 (.env)
from typing import List

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # OpenAI (키 없으면 코치/추정 라우트는 500 "Server misconfigured.")
    OPENAI_API_KEY: str | None = None
    OPENAI_CHAT_MODEL: str = "gpt-4o-mini"
    OPENAI_MEAL_MODEL: str = "gpt-4.1-mini"
    OPENAI_VISION_MODEL: str = "gpt-4o-mini"
    OPENAI_QUICK_MODEL: str = "gpt-4.1-mini"
    AI_TIMEOUT_SECONDS: float = 20.0

    # 뉴스/딜 피드
    NEWS_FEED_URL: str = (
        "https://news.google.com/rss/search?q=health+fitness+nutrition+grocery"
        "+discount+gym+membership&hl=en-US&gl=US&ceid=US:en"
    )
    NEWSAPI_KEY: str | None = None
    NEWS_TIMEOUT_SECONDS: float = 15.0

    # 저장소: memory(기본, 재시작 시 초기화) | mongo
    STORAGE_BACKEND: str = "memory"
    MONGO_URI: str = "mongodb://localhost:27017"  # 필요 시 prod/staging로 분리
    MONGO_DB: str = "nutrimind"
    MONGO_TIMEOUT_MS: int = 3000  # 서버 선택 대기 (startup 재시도 1회당)

    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    MAX_PHOTO_BYTES: int = 10 * 1024 * 1024  # 10MB

    class Config:
        env_file = ".env"

settings = Settings()
