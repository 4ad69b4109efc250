"""
Source database engine management with SQLAlchemy async
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine
from sqlalchemy.pool import NullPool
from core.config import settings
import logging

logger = logging.getLogger(__name__)


def create_source_engine(connection_string: str) -> AsyncEngine:
    """
    Create an engine for the staff source database.

    One export run opens a single connection, so pooling is disabled and
    the caller disposes the engine when the query is done.
    """
    return create_async_engine(
        connection_string,
        echo=settings.ENVIRONMENT == "development" and settings.LOG_LEVEL.upper() == "DEBUG",
        poolclass=NullPool,
        future=True
    )
