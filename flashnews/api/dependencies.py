from fastapi import Request
from sqlalchemy.engine import Connection

from ..core.pool import ConnectionPool
from ..news.services.news_service import NewsService


def get_news_service(request: Request) -> NewsService:
    return request.app.state.news_service


def get_connection_pool(request: Request) -> ConnectionPool[Connection]:
    return request.app.state.connection_pool
