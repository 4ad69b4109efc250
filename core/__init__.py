"""
Core utilities and configuration for the staff export.

This package provides foundational components used throughout the pipeline:

Modules:
    config: Application configuration and environment variable management
    database: Source database engine creation
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration and utilities

Usage:
    from core.config import settings
    from core.database import create_source_engine
    from core.exceptions import FetchError, TransferError
    from core.logging import setup_logging

Example:
    # Initialize logging
    setup_logging()

    # Engine for the configured source
    engine = create_source_engine(settings.DATABASE_URL)
"""

__all__ = [
    "settings",
    "create_source_engine",
    "setup_logging",
    # Exceptions
    "ExportException",
    "ConfigurationError",
    "FetchError",
    "RenderError",
    "TransferError",
    "ArchiveError",
    "ExportCancelledError",
]
