from .category import Category
from .location import Location
from .news_article import NewsArticle

__all__ = ["Category", "Location", "NewsArticle"]
