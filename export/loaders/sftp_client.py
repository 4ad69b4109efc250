"""
SFTP transfer client backed by paramiko
"""

from typing import Optional
import errno
import logging

import paramiko

from export.base import TransferClient
from core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class SFTPTransferClient(TransferClient):
    """
    Blocking SFTP client.

    Host keys not found in the system known_hosts file are accepted with a
    warning, matching how the export server has always been reached.
    """

    def __init__(
        self,
        host: Optional[str],
        port: int = 22,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = 30.0
    ):
        super().__init__(host, port, username, password, timeout)
        self._ssh: Optional[paramiko.SSHClient] = None
        self._sftp: Optional[paramiko.SFTPClient] = None

    def connect(self) -> None:
        for name, value in (
            ("SFTP_HOST", self.host),
            ("SFTP_USERNAME", self.username),
            ("SFTP_PASSWORD", self.password),
        ):
            if not value:
                raise ConfigurationError(f"{name} missing", context={"setting": name})

        ssh = paramiko.SSHClient()
        ssh.load_system_host_keys()
        ssh.set_missing_host_key_policy(paramiko.WarningPolicy())
        try:
            ssh.connect(
                hostname=self.host,
                port=self.port,
                username=self.username,
                password=self.password,
                timeout=self.timeout,
                allow_agent=False,
                look_for_keys=False
            )
            sftp = ssh.open_sftp()
        except Exception:
            # SSHClient.connect leaves the transport open when auth fails
            ssh.close()
            raise
        self._ssh = ssh
        self._sftp = sftp
        logger.info(f"Connected to SFTP {self.host}:{self.port}")

    def path_exists(self, path: str) -> bool:
        try:
            self._client().stat(path)
            return True
        except IOError as e:
            if getattr(e, "errno", None) == errno.ENOENT:
                return False
            raise

    def create_directory(self, path: str) -> None:
        self._client().mkdir(path)

    def upload_file(self, local_path: str, remote_path: str, overwrite: bool = True) -> None:
        if not overwrite and self.path_exists(remote_path):
            raise FileExistsError(remote_path)
        with open(local_path, "rb") as fh:
            self._client().putfo(fh, remote_path)

    def disconnect(self) -> None:
        if self._sftp is not None:
            self._sftp.close()
            self._sftp = None
        if self._ssh is not None:
            self._ssh.close()
            self._ssh = None

    @property
    def is_connected(self) -> bool:
        if self._ssh is None:
            return False
        transport = self._ssh.get_transport()
        return transport is not None and transport.is_active()

    def _client(self) -> paramiko.SFTPClient:
        if self._sftp is None:
            raise RuntimeError("SFTP client is not connected")
        return self._sftp
