from .article_repository import ArticleRepository
from .category_repository import CategoryRepository
from .location_repository import LocationRepository

__all__ = ["ArticleRepository", "CategoryRepository", "LocationRepository"]
