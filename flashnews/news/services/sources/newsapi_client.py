"""
newsapi.org client
Fetches headlines for the read-through cache
"""

from typing import Any, Dict, List, Optional

import httpx
import structlog

from ....config import Settings, get_settings
from ....exceptions import FetchError
from ..mappers.newsapi_mapper import NewsAPIMapper
from .base import NewsFetcher, RawArticle

logger = structlog.get_logger(__name__)

MAX_PAGE_SIZE = 100


class NewsAPIClient(NewsFetcher):
    """Synchronous newsapi.org client"""

    name = "NewsAPI"

    def __init__(self, settings: Optional[Settings] = None, client: Optional[httpx.Client] = None):
        settings = settings or get_settings()
        self.api_key = settings.news_api_key or ""
        self.base_url = settings.news_api_base_url.rstrip("/")
        self.language = settings.news_api_language
        self.client = client or httpx.Client(
            timeout=settings.news_api_timeout_seconds,
            headers={"User-Agent": settings.news_api_user_agent},
        )
        self.mapper = NewsAPIMapper()

    def fetch(self, category: Optional[str] = None, country_code: Optional[str] = None,
              limit: int = 20) -> List[RawArticle]:
        if not self.api_key.strip():
            logger.warning("News API key not configured, returning empty list")
            return []

        path, params = self._build_request(category, country_code, limit)
        logger.info("Fetching news from provider", path=path, category=category,
                    country=params.get("country"), page_size=params["pageSize"])

        try:
            response = self.client.get(
                f"{self.base_url}{path}",
                params={**params, "apiKey": self.api_key},
            )
        except httpx.HTTPError as e:
            raise FetchError(f"News provider request failed: {type(e).__name__}") from e

        if response.status_code != 200:
            logger.error("News provider request failed", status_code=response.status_code)
            raise FetchError(
                f"News provider returned status {response.status_code}",
                status_code=response.status_code
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise FetchError("News provider returned a malformed body") from e

        articles = self._parse_articles(payload)
        logger.info("Fetched articles from provider", count=len(articles))
        return articles

    def _build_request(self, category: Optional[str], country_code: Optional[str],
                       limit: int) -> tuple:
        params: Dict[str, Any] = {}
        if category and category.strip():
            path = "/top-headlines"
            params["category"] = category
        else:
            path = "/everything"
            params["q"] = "news"

        if country_code and country_code.strip():
            params["country"] = country_code.lower()

        params["pageSize"] = min(max(limit, 1), MAX_PAGE_SIZE)
        params["sortBy"] = "publishedAt"
        params["language"] = self.language
        return path, params

    def _parse_articles(self, payload: Any) -> List[RawArticle]:
        items = payload.get("articles") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            return []

        articles = []
        for item in items:
            article = self.mapper.map_article(item)
            if self.mapper.is_valid(article):
                articles.append(article)
            else:
                logger.debug("Discarding invalid provider item", title=item.get("title") if isinstance(item, dict) else None)
        return articles

    def test_connection(self) -> bool:
        try:
            return len(self.fetch(limit=1)) > 0
        except FetchError as e:
            logger.error("News provider connection test failed", error=str(e))
            return False

    def close(self) -> None:
        self.client.close()
