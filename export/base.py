"""
Abstract base classes for the export pipeline collaborators
"""

from abc import ABC, abstractmethod
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class TransferClient(ABC):
    """
    Blocking file-transfer client used by the upload stage.

    Implementations wrap one protocol (SFTP, FTP). The upload stage calls
    them from a worker thread, one connection per attempt.
    """

    def __init__(
        self,
        host: Optional[str],
        port: int,
        username: Optional[str],
        password: Optional[str],
        timeout: float = 30.0
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.timeout = timeout

    @abstractmethod
    def connect(self) -> None:
        """Open the connection and authenticate"""
        pass

    @abstractmethod
    def path_exists(self, path: str) -> bool:
        """Check whether a remote file or directory exists"""
        pass

    @abstractmethod
    def create_directory(self, path: str) -> None:
        """Create a single remote directory"""
        pass

    @abstractmethod
    def upload_file(self, local_path: str, remote_path: str, overwrite: bool = True) -> None:
        """Upload a local file to remote_path"""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Close the connection; safe to call when not connected"""
        pass

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        pass

    def ensure_directory(self, path: str) -> None:
        """
        Create every missing segment of a remote directory path.

        Absolute paths stay absolute; relative paths are created relative to
        the login directory.
        """
        prefix = "/" if path.startswith("/") else ""
        current = ""
        for segment in [p for p in path.strip("/").split("/") if p]:
            current = f"{current}/{segment}" if current else f"{prefix}{segment}"
            if not self.path_exists(current):
                logger.info(f"Creating remote directory {current}")
                self.create_directory(current)
