"""
News Service
============

Read-through cache over the article store:

- Latest/trending reads fall back to a refresh from the news provider when
  the store holds fewer articles than requested, then read again.
- A refresh maps the category/location filters to the provider's vocabulary,
  fetches once, skips URLs already cached, marks the first share of new
  articles as trending and writes the rest through the repositories.
- Point lookups by id count a view in the background.

Store and provider failures degrade to empty or partial results.
ResourceUnavailable from the connection pool is the one error that reaches
the caller.
"""

from typing import Any, Callable, Dict, List, Optional

import structlog

from ...config import Settings, get_settings
from ...exceptions import FetchError, ResourceUnavailable, StoreAccessError
from ..repositories.article_repository import ArticleRepository
from ..repositories.category_repository import CategoryRepository
from ..repositories.location_repository import LocationRepository
from ..schemas.news import Article, CategoryInfo, LocationInfo
from .provider_mapping import map_category_name, map_country_code
from .sources.base import NewsFetcher, RawArticle
from .view_counter import ViewCountDispatcher

logger = structlog.get_logger(__name__)


class NewsService:

    def __init__(
        self,
        articles: ArticleRepository,
        categories: CategoryRepository,
        locations: LocationRepository,
        fetcher: NewsFetcher,
        view_counter: Optional[ViewCountDispatcher] = None,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        self.articles = articles
        self.categories = categories
        self.locations = locations
        self.fetcher = fetcher
        self.view_counter = view_counter or ViewCountDispatcher(articles, settings.view_count_workers)

        self.default_limit = settings.default_limit
        self.max_limit = settings.max_limit
        self.refresh_fetch_limit = settings.refresh_fetch_limit
        self.trending_percent = settings.trending_percent

    def clamp_limit(self, limit: Optional[int]) -> int:
        if limit is None:
            limit = self.default_limit
        return min(max(limit, 1), self.max_limit)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_latest_news(self, category_id: Optional[int] = None, location_id: Optional[int] = None,
                        limit: Optional[int] = None) -> List[Article]:
        limit = self.clamp_limit(limit)
        logger.info("Fetching latest news", category_id=category_id, location_id=location_id, limit=limit)
        return self._read_through(self.articles.find_latest, category_id, location_id, limit)

    def get_trending_news(self, category_id: Optional[int] = None, location_id: Optional[int] = None,
                          limit: Optional[int] = None) -> List[Article]:
        limit = self.clamp_limit(limit)
        logger.info("Fetching trending news", category_id=category_id, location_id=location_id, limit=limit)
        return self._read_through(self.articles.find_trending, category_id, location_id, limit)

    def search_news(self, keyword: Optional[str], category_id: Optional[int] = None,
                    location_id: Optional[int] = None, limit: Optional[int] = None) -> List[Article]:
        """Substring search over cached titles and descriptions. Never refreshes."""
        if keyword is None or not keyword.strip():
            return []

        limit = self.clamp_limit(limit)
        logger.info("Searching news", keyword=keyword, category_id=category_id,
                    location_id=location_id, limit=limit)
        return self._read(self.articles.search_by_keyword, keyword.strip(), category_id, location_id, limit)

    def get_news_by_filter(self, filter_type: Optional[str], category_id: Optional[int] = None,
                           location_id: Optional[int] = None, limit: Optional[int] = None) -> List[Article]:
        filter_type = (filter_type or "").strip().lower() or "latest"
        if filter_type == "trending":
            return self.get_trending_news(category_id, location_id, limit)
        # "local" has no dedicated query; the location filter already narrows it
        return self.get_latest_news(category_id, location_id, limit)

    def get_article(self, article_id: Optional[int] = None, url: Optional[str] = None) -> Optional[Article]:
        if article_id is not None:
            return self.get_article_by_id(article_id)
        if url:
            return self.get_article_by_url(url)
        return None

    def get_article_by_id(self, article_id: int) -> Optional[Article]:
        logger.info("Fetching article by id", article_id=article_id)
        try:
            article = self.articles.find_by_id(article_id)
        except StoreAccessError as e:
            logger.error("Error fetching article by id", article_id=article_id, error=str(e))
            return None

        if article is not None:
            self.view_counter.dispatch(article.id)
        return article

    def get_article_by_url(self, url: str) -> Optional[Article]:
        logger.info("Fetching article by url", url=url)
        try:
            return self.articles.find_by_url(url)
        except StoreAccessError as e:
            logger.error("Error fetching article by url", url=url, error=str(e))
            return None

    def get_all_categories(self) -> List[CategoryInfo]:
        return self._read(self.categories.find_all)

    def get_all_locations(self) -> List[LocationInfo]:
        return self._read(self.locations.find_all)

    def get_news_statistics(self) -> Dict[str, int]:
        counters = [
            ("totalArticles", self.articles.count_total),
            ("trendingArticles", self.articles.count_trending),
            ("recentArticles", lambda: self.articles.count_recent(hours=24)),
            ("totalViews", self.articles.total_views),
            ("categoriesCount", self.categories.count),
            ("locationsCount", self.locations.count),
        ]

        stats: Dict[str, int] = {}
        try:
            for key, counter in counters:
                stats[key] = counter()
        except StoreAccessError as e:
            logger.error("Error fetching news statistics", error=str(e), collected=list(stats))
        return stats

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def save_article(self, article: Article) -> Optional[Article]:
        logger.info("Saving article", title=article.title)
        try:
            return self.articles.save(article)
        except StoreAccessError as e:
            logger.error("Error saving article", url=article.url, error=str(e))
            return None

    def increment_view_count(self, article_id: int) -> bool:
        try:
            return self.articles.increment_view_count(article_id)
        except StoreAccessError as e:
            logger.error("Error incrementing view count", article_id=article_id, error=str(e))
            return False

    def set_trending_status(self, article_id: int, trending: bool) -> bool:
        logger.info("Setting trending status", article_id=article_id, trending=trending)
        try:
            return self.articles.set_trending(article_id, trending)
        except StoreAccessError as e:
            logger.error("Error setting trending status", article_id=article_id, error=str(e))
            return False

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    def refresh_news_cache(self, category_id: Optional[int] = None, location_id: Optional[int] = None) -> int:
        """
        Pull fresh articles from the provider.

        Returns:
            Number of newly cached articles. Zero also means every fetched
            article was already cached.
        """
        logger.info("Refreshing news cache", category_id=category_id, location_id=location_id)
        inserted = self._fetch_and_cache(category_id, location_id, self.refresh_fetch_limit)
        logger.info("News cache refresh completed", new_articles=inserted)
        return inserted

    def preload_if_empty(self) -> int:
        try:
            total = self.articles.count_total()
        except StoreAccessError as e:
            logger.error("Could not count cached articles", error=str(e))
            return 0

        if total > 0:
            logger.info("Cache already populated", total_articles=total)
            return 0

        logger.info("No articles cached, fetching from provider")
        return self.refresh_news_cache()

    def shutdown(self) -> None:
        self.view_counter.shutdown()

    def _read_through(self, finder: Callable[..., List[Article]], category_id: Optional[int],
                      location_id: Optional[int], limit: int) -> List[Article]:
        articles = self._read(finder, category_id, location_id, limit)
        if len(articles) < limit:
            logger.info("Insufficient cached articles, fetching from provider",
                        cached=len(articles), limit=limit)
            self._fetch_and_cache(category_id, location_id, limit)
            articles = self._read(finder, category_id, location_id, limit)
        return articles

    def _read(self, finder: Callable[..., List[Any]], *args) -> List[Any]:
        try:
            return finder(*args)
        except StoreAccessError as e:
            logger.error("Store read failed", operation=getattr(finder, "__name__", str(finder)), error=str(e))
            return []

    def _fetch_and_cache(self, category_id: Optional[int], location_id: Optional[int], limit: int) -> int:
        try:
            category = self.categories.find_by_id(category_id) if category_id else None
            location = self.locations.find_by_id(location_id) if location_id else None
        except StoreAccessError as e:
            logger.error("Could not resolve refresh filters", error=str(e))
            return 0

        provider_category = map_category_name(category.name) if category else None
        country_code = map_country_code(location.country_code) if location else None

        try:
            candidates = self.fetcher.fetch(provider_category, country_code, limit)
        except ResourceUnavailable:
            raise
        except FetchError as e:
            logger.error("Error fetching news from provider", error=str(e))
            return 0
        except Exception as e:
            logger.error("Unexpected error fetching news from provider", error=str(e), exc_info=True)
            return 0

        if not candidates:
            logger.warning("No articles fetched from provider",
                           category=provider_category, country=country_code)
            return 0

        # Only resolved filters are attached; unknown ids leave the article unclassified
        category_ref = category.id if category else None
        location_ref = location.id if location else None

        # Positional heuristic: the first share of each batch is "trending".
        # It carries no popularity signal and is a candidate for a real ranking.
        trending_quota = limit * self.trending_percent // 100

        inserted = 0
        duplicates = 0
        for candidate in candidates:
            try:
                if self.articles.find_by_url(candidate.url) is not None:
                    duplicates += 1
                    continue

                article = self._to_article(candidate, category_ref, location_ref,
                                           trending=inserted < trending_quota)
                self.articles.insert(article)
                inserted += 1
            except ResourceUnavailable:
                raise
            except StoreAccessError as e:
                logger.warning("Error caching article from provider", url=candidate.url, error=str(e))
            except Exception as e:
                logger.error("Unexpected error caching article from provider",
                             url=getattr(candidate, "url", None), error=str(e), exc_info=True)

        logger.info("Cached new articles from provider", inserted=inserted, duplicates=duplicates,
                    fetched=len(candidates))
        return inserted

    @staticmethod
    def _to_article(raw: RawArticle, category_id: Optional[int], location_id: Optional[int],
                    trending: bool) -> Article:
        return Article(
            title=raw.title,
            url=raw.url,
            description=raw.description,
            content=raw.content,
            image_url=raw.image_url,
            source_name=raw.source_name,
            source_url=raw.source_url,
            category_id=category_id,
            location_id=location_id,
            published_at=raw.published_at,
            cached_at=raw.cached_at,
            is_trending=trending,
        )
