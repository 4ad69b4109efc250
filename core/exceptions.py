"""
Custom exceptions for the staff export pipeline with structured error context.

Each exception carries context information for debugging and a link to the
original exception, so a failed run can be diagnosed from the log alone.

Exception Hierarchy:
    ExportException (base)
    ├── ConfigurationError
    ├── FetchError
    ├── RenderError
    ├── TransferError
    ├── ArchiveError
    └── ExportCancelledError
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone


class ExportException(Exception):
    """
    Base exception for all export-related errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (path, host, attempt, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[BaseException] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now(timezone.utc)

        # Add timestamp to context
        self.context["error_timestamp"] = self.timestamp.isoformat()

        # Chain original exception if provided
        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


class ConfigurationError(ExportException):
    """
    Raised when a required setting is missing or invalid.

    Context should include:
        - setting: Name of the offending setting
    """
    pass


class FetchError(ExportException):
    """
    Raised when reading staff records from the source database fails.

    Context should include:
        - query: The procedure name or a truncated SQL text
    """
    pass


class RenderError(ExportException):
    """Raised when the CSV artifact cannot be written."""
    pass


class TransferError(ExportException):
    """
    Raised when a single upload attempt fails.

    Context should include:
        - host: Remote host
        - remote_path: Destination path on the remote server
    """
    pass


class ArchiveError(ExportException):
    """
    Raised when the artifact cannot be moved into its terminal folder.

    Context should include:
        - file_path: The artifact being moved
        - destination: Archive or Failed folder
    """
    pass


class ExportCancelledError(ExportException):
    """Raised when the run is cancelled by the host before it completes."""
    pass
