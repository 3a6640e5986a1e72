from contextlib import contextmanager
from typing import Iterator

import structlog
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base
from sqlalchemy.pool import NullPool

from ..config import Settings
from ..exceptions import StoreAccessError
from .pool import ConnectionPool

logger = structlog.get_logger(__name__)

Base = declarative_base()


def create_db_engine(settings: Settings) -> Engine:
    # ConnectionPool does the pooling, so the engine must not keep its own.
    connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}
    return create_engine(
        settings.database_url,
        echo=settings.db_echo or settings.debug,
        poolclass=NullPool,
        connect_args=connect_args,
    )


def _connection_is_alive(connection: Connection, pre_ping: bool = False) -> bool:
    if connection.closed or connection.invalidated:
        return False
    if pre_ping:
        connection.exec_driver_sql("SELECT 1")
        connection.rollback()
    return True


def create_connection_pool(engine: Engine, settings: Settings) -> ConnectionPool[Connection]:
    return ConnectionPool(
        factory=engine.connect,
        is_alive=lambda conn: _connection_is_alive(conn, settings.pool_pre_ping),
        close=lambda conn: conn.close(),
        initial_size=settings.pool_initial_size,
        max_size=settings.pool_max_size,
        acquire_timeout=settings.pool_acquire_timeout_seconds,
    )


@contextmanager
def session_scope(pool: ConnectionPool[Connection]) -> Iterator[Session]:
    """
    One unit of work on one borrowed connection.

    Commits on success, rolls back on error and always returns the connection.
    Database errors surface as StoreAccessError; ResourceUnavailable from the
    pool passes through untouched.
    """
    connection = pool.acquire()
    session = Session(bind=connection, autoflush=False, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise StoreAccessError(str(e), error_code="STORE_ACCESS_FAILED") from e
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
        pool.release(connection)


def create_tables(engine: Engine) -> None:
    # Import models to register them with Base
    from ..news.models import category, location, news_article  # noqa: F401
    Base.metadata.create_all(bind=engine)


def drop_tables(engine: Engine) -> None:
    Base.metadata.drop_all(bind=engine)


def ping(pool: ConnectionPool[Connection]) -> bool:
    try:
        with session_scope(pool) as session:
            session.execute(text("SELECT 1"))
        return True
    except StoreAccessError as e:
        logger.error("Database ping failed", error=str(e))
        return False
