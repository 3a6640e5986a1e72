from .base import NewsFetcher, RawArticle
from .newsapi_client import NewsAPIClient

__all__ = ["NewsFetcher", "RawArticle", "NewsAPIClient"]
