"""
Plain FTP transfer client backed by ftplib
"""

from typing import Optional
import ftplib
import posixpath
import logging

from export.base import TransferClient
from core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class FTPTransferClient(TransferClient):
    """Blocking FTP client for servers that do not speak SFTP."""

    def __init__(
        self,
        host: Optional[str],
        port: int = 21,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = 30.0
    ):
        super().__init__(host, port, username, password, timeout)
        self._ftp: Optional[ftplib.FTP] = None

    def connect(self) -> None:
        if not self.host:
            raise ConfigurationError("SFTP_HOST missing", context={"setting": "SFTP_HOST"})

        ftp = ftplib.FTP()
        try:
            ftp.connect(self.host, self.port, timeout=self.timeout)
            ftp.login(self.username or "anonymous", self.password or "")
        except Exception:
            ftp.close()
            raise
        self._ftp = ftp
        logger.info(f"Connected to FTP {self.host}:{self.port}")

    def path_exists(self, path: str) -> bool:
        ftp = self._client()
        if self._is_directory(path):
            return True
        parent = posixpath.dirname(path.rstrip("/")) or "."
        try:
            names = ftp.nlst(parent)
        except ftplib.error_perm:
            return False
        name = posixpath.basename(path.rstrip("/"))
        return any(posixpath.basename(n.rstrip("/")) == name for n in names)

    def create_directory(self, path: str) -> None:
        self._client().mkd(path)

    def upload_file(self, local_path: str, remote_path: str, overwrite: bool = True) -> None:
        if not overwrite and self.path_exists(remote_path):
            raise FileExistsError(remote_path)
        with open(local_path, "rb") as fh:
            self._client().storbinary(f"STOR {remote_path}", fh)

    def disconnect(self) -> None:
        if self._ftp is None:
            return
        try:
            self._ftp.quit()
        except ftplib.all_errors:
            self._ftp.close()
        finally:
            self._ftp = None

    @property
    def is_connected(self) -> bool:
        return self._ftp is not None and self._ftp.sock is not None

    def _is_directory(self, path: str) -> bool:
        ftp = self._client()
        current_dir = ftp.pwd()
        try:
            ftp.cwd(path)
            return True
        except ftplib.error_perm:
            return False
        finally:
            ftp.cwd(current_dir)

    def _client(self) -> ftplib.FTP:
        if self._ftp is None:
            raise RuntimeError("FTP client is not connected")
        return self._ftp
