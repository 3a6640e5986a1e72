from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query

from ....news.schemas.news import (
    Article,
    ArticleListResponse,
    CategoryInfo,
    LocationInfo,
    NewsStatisticsResponse,
    RefreshResponse,
)
from ....news.services.news_service import NewsService
from ....utils.datetime_utils import utc_now
from ...dependencies import get_news_service

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/", response_model=ArticleListResponse)
def get_news_list(
    filter: str = Query("latest", description="latest, trending or local"),
    category_id: Optional[int] = Query(None, description="Filter by category"),
    location_id: Optional[int] = Query(None, description="Filter by location"),
    limit: Optional[int] = Query(None, description="Number of articles (clamped to 1-100)"),
    news_service: NewsService = Depends(get_news_service)
):
    """Latest or trending news, refreshed from the provider when the cache is short"""
    articles = news_service.get_news_by_filter(filter, category_id, location_id, limit)
    return ArticleListResponse(articles=articles, count=len(articles), filter=filter)


@router.get("/trending", response_model=ArticleListResponse)
def get_trending_news(
    category_id: Optional[int] = Query(None),
    location_id: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    news_service: NewsService = Depends(get_news_service)
):
    articles = news_service.get_trending_news(category_id, location_id, limit)
    return ArticleListResponse(articles=articles, count=len(articles), filter="trending")


@router.get("/search", response_model=ArticleListResponse)
def search_news(
    keyword: str = Query("", description="Matched against titles and descriptions"),
    category_id: Optional[int] = Query(None),
    location_id: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    news_service: NewsService = Depends(get_news_service)
):
    """Search cached articles only"""
    articles = news_service.search_news(keyword, category_id, location_id, limit)
    return ArticleListResponse(articles=articles, count=len(articles), filter="search")


@router.post("/refresh", response_model=RefreshResponse)
def refresh_news(
    category_id: Optional[int] = Query(None),
    location_id: Optional[int] = Query(None),
    news_service: NewsService = Depends(get_news_service)
):
    inserted = news_service.refresh_news_cache(category_id, location_id)
    return RefreshResponse(
        new_articles=inserted,
        category_id=category_id,
        location_id=location_id,
        refreshed_at=utc_now()
    )


@router.get("/categories", response_model=List[CategoryInfo])
def get_categories(news_service: NewsService = Depends(get_news_service)):
    return news_service.get_all_categories()


@router.get("/locations", response_model=List[LocationInfo])
def get_locations(news_service: NewsService = Depends(get_news_service)):
    return news_service.get_all_locations()


@router.get("/statistics", response_model=NewsStatisticsResponse)
def get_statistics(news_service: NewsService = Depends(get_news_service)):
    return NewsStatisticsResponse(**news_service.get_news_statistics())


@router.get("/by-url", response_model=Article)
def get_article_by_url(
    url: str = Query(..., description="Canonical article URL"),
    news_service: NewsService = Depends(get_news_service)
):
    article = news_service.get_article(url=url)
    if not article:
        raise HTTPException(status_code=404, detail="News article not found")
    return article


@router.get("/{article_id}", response_model=Article)
def get_article(article_id: int, news_service: NewsService = Depends(get_news_service)):
    """Single article; counts a view in the background"""
    article = news_service.get_article(article_id=article_id)
    if not article:
        raise HTTPException(status_code=404, detail="News article not found")
    return article
