import pytest
from unittest.mock import MagicMock

from flashnews.config import Settings
from flashnews.core.database import create_connection_pool, create_db_engine, create_tables, drop_tables
from flashnews.news.repositories import ArticleRepository, CategoryRepository, LocationRepository
from flashnews.news.schemas.news import CategoryInfo, LocationInfo
from flashnews.news.services.news_service import NewsService
from flashnews.news.services.sources.base import NewsFetcher
from flashnews.news.services.view_counter import ViewCountDispatcher


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        database_url=f"sqlite:///{tmp_path / 'flashnews.db'}",
        pool_initial_size=2,
        pool_max_size=5,
        pool_acquire_timeout_seconds=0.5,
        news_api_key="test-key",
        default_limit=20,
        max_limit=100,
        refresh_fetch_limit=100,
        trending_percent=30,
        view_count_workers=2,
        preload_on_startup=False,
        seed_reference_data=False,
    )


@pytest.fixture
def engine(settings):
    engine = create_db_engine(settings)
    create_tables(engine)
    yield engine
    drop_tables(engine)
    engine.dispose()


@pytest.fixture
def pool(engine, settings):
    pool = create_connection_pool(engine, settings)
    pool.initialize()
    yield pool
    pool.shutdown()


@pytest.fixture
def article_repo(pool):
    return ArticleRepository(pool)


@pytest.fixture
def category_repo(pool):
    return CategoryRepository(pool)


@pytest.fixture
def location_repo(pool):
    return LocationRepository(pool)


@pytest.fixture
def technology(category_repo):
    return category_repo.save(CategoryInfo(name="Technology", display_name="Technology"))


@pytest.fixture
def politics(category_repo):
    return category_repo.save(CategoryInfo(name="politics", display_name="Politics"))


@pytest.fixture
def usa(location_repo):
    return location_repo.save(LocationInfo(name="United States", country_code="usa"))


@pytest.fixture
def mock_fetcher():
    fetcher = MagicMock(spec=NewsFetcher)
    fetcher.fetch.return_value = []
    return fetcher


@pytest.fixture
def news_service(article_repo, category_repo, location_repo, mock_fetcher, settings):
    view_counter = ViewCountDispatcher(article_repo, max_workers=settings.view_count_workers)
    service = NewsService(
        article_repo, category_repo, location_repo, mock_fetcher,
        view_counter=view_counter, settings=settings
    )
    yield service
    service.shutdown()


@pytest.fixture
def mock_repositories():
    articles = MagicMock(spec=ArticleRepository)
    categories = MagicMock(spec=CategoryRepository)
    locations = MagicMock(spec=LocationRepository)
    articles.find_latest.return_value = []
    articles.find_trending.return_value = []
    articles.find_by_url.return_value = None
    categories.find_by_id.return_value = None
    categories.find_by_name.return_value = None
    locations.find_by_id.return_value = None
    locations.find_by_country_code.return_value = None
    return articles, categories, locations


@pytest.fixture
def mocked_service(mock_repositories, mock_fetcher, settings):
    """NewsService over mocked repositories and a mocked view counter"""
    articles, categories, locations = mock_repositories
    view_counter = MagicMock(spec=ViewCountDispatcher)
    return NewsService(
        articles, categories, locations, mock_fetcher,
        view_counter=view_counter, settings=settings
    )
