from datetime import timedelta
from typing import List, Optional

from sqlalchemy import asc, desc, func, or_, update
from sqlalchemy.engine import Connection
from sqlalchemy.orm import Query, Session

from ...core.database import session_scope
from ...core.pool import ConnectionPool
from ...utils.datetime_utils import utc_now
from ..models.news_article import NewsArticle
from ..schemas.news import Article


class ArticleRepository:
    """
    Article reads and writes. Every call borrows one pooled connection for a
    single query or read-modify-write and returns it before going back.

    Raises StoreAccessError on database failures and ResourceUnavailable when
    the pool cannot supply a connection.
    """

    def __init__(self, pool: ConnectionPool[Connection]):
        self.pool = pool

    def find_latest(self, category_id: Optional[int] = None, location_id: Optional[int] = None,
                    limit: int = 20) -> List[Article]:
        with session_scope(self.pool) as session:
            query = self._filtered(session.query(NewsArticle), category_id, location_id)
            return self._to_articles(self._ordered(query).limit(limit).all())

    def find_trending(self, category_id: Optional[int] = None, location_id: Optional[int] = None,
                      limit: int = 20) -> List[Article]:
        with session_scope(self.pool) as session:
            query = session.query(NewsArticle).filter(NewsArticle.is_trending.is_(True))
            query = self._filtered(query, category_id, location_id)
            return self._to_articles(self._ordered(query).limit(limit).all())

    def search_by_keyword(self, keyword: str, category_id: Optional[int] = None,
                          location_id: Optional[int] = None, limit: int = 20) -> List[Article]:
        with session_scope(self.pool) as session:
            query = session.query(NewsArticle).filter(
                or_(
                    NewsArticle.title.icontains(keyword, autoescape=True),
                    NewsArticle.description.icontains(keyword, autoescape=True)
                )
            )
            query = self._filtered(query, category_id, location_id)
            return self._to_articles(self._ordered(query).limit(limit).all())

    def find_by_id(self, article_id: int) -> Optional[Article]:
        with session_scope(self.pool) as session:
            row = session.query(NewsArticle).filter(NewsArticle.id == article_id).first()
            return Article.model_validate(row) if row else None

    def find_by_url(self, url: str) -> Optional[Article]:
        with session_scope(self.pool) as session:
            row = session.query(NewsArticle).filter(NewsArticle.url == url).first()
            return Article.model_validate(row) if row else None

    def insert(self, article: Article) -> Article:
        now = utc_now()
        with session_scope(self.pool) as session:
            row = NewsArticle(
                title=article.title,
                url=article.url,
                description=article.description,
                content=article.content,
                image_url=article.image_url,
                source_name=article.source_name,
                source_url=article.source_url,
                category_id=article.category_id or None,
                location_id=article.location_id or None,
                published_at=article.published_at or now,
                cached_at=article.cached_at or now,
                is_trending=article.is_trending,
                view_count=article.view_count,
            )
            session.add(row)
            session.flush()
            return Article.model_validate(row)

    def update(self, article: Article) -> Optional[Article]:
        with session_scope(self.pool) as session:
            row = session.query(NewsArticle).filter(NewsArticle.id == article.id).first()
            if not row:
                return None

            row.title = article.title
            row.url = article.url
            row.description = article.description
            row.content = article.content
            row.image_url = article.image_url
            row.source_name = article.source_name
            row.source_url = article.source_url
            row.category_id = article.category_id or None
            row.location_id = article.location_id or None
            if article.published_at:
                row.published_at = article.published_at
            row.is_trending = article.is_trending
            row.view_count = article.view_count
            session.flush()
            return Article.model_validate(row)

    def save(self, article: Article) -> Optional[Article]:
        if article.id:
            return self.update(article)
        return self.insert(article)

    def increment_view_count(self, article_id: int) -> bool:
        with session_scope(self.pool) as session:
            result = session.execute(
                update(NewsArticle)
                .where(NewsArticle.id == article_id)
                .values(view_count=NewsArticle.view_count + 1)
            )
            return result.rowcount > 0

    def set_trending(self, article_id: int, trending: bool) -> bool:
        with session_scope(self.pool) as session:
            result = session.execute(
                update(NewsArticle)
                .where(NewsArticle.id == article_id)
                .values(is_trending=trending)
            )
            return result.rowcount > 0

    def count_total(self) -> int:
        with session_scope(self.pool) as session:
            return session.query(func.count(NewsArticle.id)).scalar() or 0

    def count_trending(self) -> int:
        with session_scope(self.pool) as session:
            return session.query(func.count(NewsArticle.id)).filter(
                NewsArticle.is_trending.is_(True)
            ).scalar() or 0

    def count_recent(self, hours: int = 24) -> int:
        cutoff = utc_now() - timedelta(hours=hours)
        with session_scope(self.pool) as session:
            return session.query(func.count(NewsArticle.id)).filter(
                NewsArticle.published_at >= cutoff
            ).scalar() or 0

    def total_views(self) -> int:
        with session_scope(self.pool) as session:
            return session.query(func.coalesce(func.sum(NewsArticle.view_count), 0)).scalar() or 0

    @staticmethod
    def _filtered(query: Query, category_id: Optional[int], location_id: Optional[int]) -> Query:
        if category_id:
            query = query.filter(NewsArticle.category_id == category_id)
        if location_id:
            query = query.filter(NewsArticle.location_id == location_id)
        return query

    @staticmethod
    def _ordered(query: Query) -> Query:
        # Equal publish times fall back to storage order
        return query.order_by(desc(NewsArticle.published_at), asc(NewsArticle.id))

    @staticmethod
    def _to_articles(rows: List[NewsArticle]) -> List[Article]:
        return [Article.model_validate(row) for row in rows]
