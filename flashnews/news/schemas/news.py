"""News domain schemas shared by repositories, the cache service and the API"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class Article(BaseModel):
    """A cached article. Unsaved articles have ``id=None``."""
    id: Optional[int] = None
    title: str
    url: str
    description: Optional[str] = None
    content: Optional[str] = None
    image_url: Optional[str] = None
    source_name: Optional[str] = None
    source_url: Optional[str] = None
    category_id: Optional[int] = None
    location_id: Optional[int] = None
    published_at: Optional[datetime] = None
    cached_at: Optional[datetime] = None
    is_trending: bool = False
    view_count: int = Field(default=0, ge=0)

    class Config:
        from_attributes = True


class CategoryInfo(BaseModel):
    id: Optional[int] = None
    name: str
    display_name: str
    description: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LocationInfo(BaseModel):
    id: Optional[int] = None
    name: str
    country_code: str
    timezone: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ============================================================================
# API responses
# ============================================================================

class ArticleListResponse(BaseModel):
    articles: List[Article]
    count: int
    filter: str = "latest"


class RefreshResponse(BaseModel):
    new_articles: int
    category_id: Optional[int] = None
    location_id: Optional[int] = None
    refreshed_at: datetime


class NewsStatisticsResponse(BaseModel):
    """Counts over the cache; the keys mirror ``NewsService.get_news_statistics``."""
    totalArticles: int = 0
    trendingArticles: int = 0
    recentArticles: int = 0
    totalViews: int = 0
    categoriesCount: int = 0
    locationsCount: int = 0
