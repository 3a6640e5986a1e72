from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.sql import func

from ...core.database import Base


class NewsArticle(Base):
    """
    A cached article. ``url`` is the canonical identity: a refresh never
    stores two rows for the same URL and never overwrites an existing one.
    """
    __tablename__ = "news_articles"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Core article info
    title = Column(String(500), nullable=False)
    url = Column(String(1000), nullable=False, unique=True)
    description = Column(Text)
    content = Column(Text)
    image_url = Column(String(1000))

    # Source tracking
    source_name = Column(String(200))
    source_url = Column(String(1000))

    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    location_id = Column(Integer, ForeignKey("locations.id"), nullable=True)

    is_trending = Column(Boolean, nullable=False, default=False)
    view_count = Column(Integer, nullable=False, default=0)

    # Timestamps
    published_at = Column(DateTime, nullable=False)
    cached_at = Column(DateTime, nullable=False, default=func.now())

    __table_args__ = (
        Index("idx_news_articles_published_at", "published_at"),
        Index("idx_news_articles_category_id", "category_id"),
        Index("idx_news_articles_location_id", "location_id"),
        Index("idx_news_articles_is_trending", "is_trending"),
    )

    def __repr__(self):
        return f"<NewsArticle(id={self.id}, title='{(self.title or '')[:50]}...', url='{self.url}')>"
