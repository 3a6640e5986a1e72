import logging
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.v1 import api_router
from .config import get_settings
from .core.database import create_connection_pool, create_db_engine, create_tables
from .exceptions import FlashNewsError, ResourceUnavailable, StoreAccessError
from .news.repositories import ArticleRepository, CategoryRepository, LocationRepository
from .news.services.news_service import NewsService
from .news.services.reference_data import seed_reference_data
from .news.services.sources.newsapi_client import NewsAPIClient


def apply_logging_preferences(settings):
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    if not settings.db_echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(message)s"
)

apply_logging_preferences(settings)

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer() if settings.log_format == "json" else structlog.dev.ConsoleRenderer(),
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting FlashNews API", version="0.1.0")
    engine = create_db_engine(settings)
    pool = create_connection_pool(engine, settings)
    try:
        pool.initialize()
        if not pool.test_connection():
            raise ResourceUnavailable("Database connection test failed")
        create_tables(engine)
        logger.info("Database tables created/verified")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        pool.shutdown()
        engine.dispose()
        raise

    articles = ArticleRepository(pool)
    categories = CategoryRepository(pool)
    locations = LocationRepository(pool)
    fetcher = NewsAPIClient(settings)
    news_service = NewsService(articles, categories, locations, fetcher, settings=settings)

    app.state.connection_pool = pool
    app.state.news_service = news_service

    if settings.seed_reference_data:
        try:
            await run_in_threadpool(seed_reference_data, categories, locations)
        except StoreAccessError as e:
            logger.error("Failed to seed reference data", error=str(e))

    if settings.preload_on_startup:
        # Provider call and store writes are blocking; keep them off the event loop
        preloaded = await run_in_threadpool(news_service.preload_if_empty)
        logger.info("Startup preload finished", new_articles=preloaded)

    yield

    logger.info("Shutting down FlashNews API")
    news_service.shutdown()
    fetcher.close()
    pool.shutdown()
    engine.dispose()


def create_application() -> FastAPI:
    app = FastAPI(
        title="FlashNews",
        description="News aggregation API with a pooled read-through article cache",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/api/v1/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ResourceUnavailable)
    async def resource_unavailable_handler(request: Request, exc: ResourceUnavailable):
        logger.error("Backing store unavailable", path=request.url.path, error=exc.message)
        return JSONResponse(status_code=503, content=exc.to_dict())

    @app.exception_handler(FlashNewsError)
    async def flashnews_error_handler(request: Request, exc: FlashNewsError):
        logger.error("Request failed", path=request.url.path, error_code=exc.error_code, error=exc.message)
        return JSONResponse(status_code=500, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        logger.error(
            "Unhandled exception occurred",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "message": "An unexpected error occurred. Please try again later.",
            }
        )

    # Health check at root
    from .api.v1.endpoints import health
    app.include_router(health.router, tags=["health"])

    # Include API router
    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "flashnews.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level="info",
        access_log=False,
    )
