"""
PostgreSQL database module with SQLAlchemy 2.0 async support.
"""
import asyncio
import functools
from typing import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Numeric,
    DateTime,
    Index,
    func,
    literal_column,
    text,
)
from sqlalchemy import exc
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    AsyncSession,
    async_sessionmaker,
)
from sqlalchemy.orm import DeclarativeBase
from loguru import logger

from catalog.config import settings
from catalog.errors import CatalogError, StoreUnavailableError, StoreQueryFailureError


# Text search configuration used by both the index and the queries.
# Must stay identical in both places or the index is not used.
TEXT_SEARCH_CONFIG = "english"


# Base class for SQLAlchemy models
class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


class Product(Base):
    """Product record with JSONB attributes and an array of tags."""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=True)
    price = Column(Numeric(10, 2), nullable=True)
    image_url = Column(Text, nullable=True)
    attributes = Column(JSONB, nullable=True)
    tags = Column(ARRAY(Text), nullable=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name='{self.name}', category='{self.category}')>"


def description_document():
    """`to_tsvector` expression over the description column."""
    return func.to_tsvector(literal_column(f"'{TEXT_SEARCH_CONFIG}'"), Product.description)


def text_search_query(query: str):
    """`plainto_tsquery` expression for a user supplied search string."""
    return func.plainto_tsquery(literal_column(f"'{TEXT_SEARCH_CONFIG}'"), query)


# Create indexes
Index("idx_products_category", Product.category)
Index("idx_products_attributes", Product.attributes, postgresql_using="gin")
Index("idx_products_tags", Product.tags, postgresql_using="gin")
Index("idx_products_search", description_document(), postgresql_using="gin")


# Database engine and session management
_engine = None
_async_session_maker = None


def get_async_database_url() -> str:
    """
    Construct async PostgreSQL connection URL.

    Returns:
        Async database URL for asyncpg
    """
    return settings.async_database_url


def _connect_args() -> dict:
    args = {"timeout": settings.db_connect_timeout}
    if settings.postgres_ssl:
        args["ssl"] = "require"
    return args


def get_engine(force_new: bool = False):
    """
    Get or create async database engine.

    The engine owns the process-wide connection pool. Waiting for a free
    connection is bounded by ``db_pool_timeout`` and connections are replaced
    after ``db_pool_recycle`` seconds.

    Args:
        force_new: If True, create a new engine even if one exists

    Returns:
        AsyncEngine instance
    """
    global _engine
    if _engine is None or force_new:
        _engine = create_async_engine(
            get_async_database_url(),
            echo=settings.debug,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
            pool_recycle=settings.db_pool_recycle,
            pool_pre_ping=True,
            connect_args=_connect_args(),
        )
        logger.info(f"Created async database engine: {settings.postgres_host}:{settings.postgres_port}/{settings.postgres_db}")
    return _engine


def get_session_maker(force_new: bool = False):
    """
    Get or create async session maker.

    Args:
        force_new: If True, create a new session maker even if one exists

    Returns:
        async_sessionmaker instance
    """
    global _async_session_maker
    if _async_session_maker is None or force_new:
        engine = get_engine(force_new=force_new)
        _async_session_maker = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info("Created async session maker")
    return _async_session_maker


async def reset_engine():
    """
    Reset the global engine and session maker.
    Useful for testing to avoid event loop issues.
    """
    global _engine, _async_session_maker

    if _engine is not None:
        await _engine.dispose()
        _engine = None

    _async_session_maker = None
    logger.info("Reset database engine and session maker")


_UNAVAILABLE_ERRORS = (
    exc.OperationalError,
    exc.InterfaceError,
    exc.DisconnectionError,
    exc.TimeoutError,
    asyncio.TimeoutError,
    OSError,
)


def _error_message(error: Exception) -> str:
    if isinstance(error, exc.DBAPIError) and error.orig is not None:
        return str(error.orig)
    return str(error)


def translate_store_errors(func):
    """
    Decorator mapping SQLAlchemy and driver failures to catalog errors.

    Connection, pool and timeout failures become ``StoreUnavailableError``;
    any other SQLAlchemy error becomes ``StoreQueryFailureError``.
    """
    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except CatalogError:
            raise
        except _UNAVAILABLE_ERRORS as e:
            message = _error_message(e)
            logger.error(f"❌ Database unavailable in {func.__name__}: {message}")
            raise StoreUnavailableError(f"Database unavailable: {message}") from e
        except exc.SQLAlchemyError as e:
            message = _error_message(e)
            logger.error(f"❌ Database query failed in {func.__name__}: {message}")
            raise StoreQueryFailureError(f"Database query failed: {message}") from e

    return wrapper


@translate_store_errors
async def init_db() -> None:
    """
    Create the products table and its indexes.

    Existing tables and indexes are left untouched.
    """
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("✅ Database tables created successfully")


@translate_store_errors
async def drop_db() -> None:
    """Drop the products table and its indexes."""
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.warning("🗑️  Dropped database tables")


@translate_store_errors
async def check_connection() -> None:
    """
    Run a trivial statement to make sure the pool can reach PostgreSQL.

    Raises:
        StoreUnavailableError: If no connection can be established
    """
    engine = get_engine()
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    logger.info("✅ PostgreSQL connection pool established")


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Async context manager for database sessions.

    Usage:
        async with get_session() as session:
            # Use session here
            pass

    Yields:
        AsyncSession instance
    """
    session_maker = get_session_maker()
    session = session_maker()
    try:
        yield session
        await session.commit()
    except CatalogError:
        await session.rollback()
        raise
    except Exception as e:
        await session.rollback()
        logger.error(f"Session error: {e}")
        raise
    finally:
        await session.close()


async def close_db() -> None:
    """
    Close database engine and drain pooled connections.
    """
    global _engine, _async_session_maker
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _async_session_maker = None
        logger.info("Database engine closed")
