"""
Upload the CSV artifact with fixed-delay retries.

The retry policy is a small state machine:

    ATTEMPTING(1) -> SUCCEEDED
                  -> ATTEMPTING(2) -> ... -> ATTEMPTING(max) -> SUCCEEDED
                                                             -> EXHAUSTED

advance_upload_state() is the pure transition; upload_with_retry() drives it
with real transfers and waits. The wait happens only between attempts.
"""

import asyncio
import enum
from datetime import date
from pathlib import Path
from typing import Awaitable, Callable, NamedTuple, Optional, Union
from core.config import Settings
from core.exceptions import ConfigurationError, ExportCancelledError, TransferError
from export.base import TransferClient
from export.loaders.ftp_client import FTPTransferClient
from export.loaders.sftp_client import SFTPTransferClient
from schemas.transfer import UploadResult
import logging

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class UploadPhase(str, enum.Enum):
    ATTEMPTING = "attempting"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


class UploadState(NamedTuple):
    phase: UploadPhase
    attempt: int

    @property
    def is_terminal(self) -> bool:
        return self.phase != UploadPhase.ATTEMPTING


def initial_upload_state() -> UploadState:
    return UploadState(UploadPhase.ATTEMPTING, 1)


def advance_upload_state(state: UploadState, attempt_succeeded: bool, max_attempts: int) -> UploadState:
    """Next state after the attempt recorded in state has finished."""
    if state.is_terminal:
        raise ValueError(f"Upload already finished ({state.phase.value})")
    if attempt_succeeded:
        return UploadState(UploadPhase.SUCCEEDED, state.attempt)
    if state.attempt >= max_attempts:
        return UploadState(UploadPhase.EXHAUSTED, state.attempt)
    return UploadState(UploadPhase.ATTEMPTING, state.attempt + 1)


def current_quarter(today: date) -> str:
    """Q1..Q4 for the month of today"""
    return f"Q{(today.month - 1) // 3 + 1}"


def remote_directory_for(template: str, today: date) -> str:
    """
    Fill the quarter into the remote directory template.

    The template may use "{0}" or "{quarter}", e.g. "TEST/Sharenote/{0}".
    """
    quarter = current_quarter(today)
    return template.format(quarter, quarter=quarter).rstrip("/")


def create_transfer_client(config: Settings) -> TransferClient:
    """Build a client for TRANSFER_PROTOCOL ("sftp" or "ftp")."""
    protocol = config.TRANSFER_PROTOCOL.strip().lower()
    if protocol == "sftp":
        client_cls = SFTPTransferClient
    elif protocol == "ftp":
        client_cls = FTPTransferClient
    else:
        raise ConfigurationError(
            f"Unsupported transfer protocol '{config.TRANSFER_PROTOCOL}'",
            context={"setting": "TRANSFER_PROTOCOL"}
        )
    return client_cls(
        host=config.SFTP_HOST,
        port=config.SFTP_PORT,
        username=config.SFTP_USERNAME,
        password=config.SFTP_PASSWORD,
        timeout=config.SFTP_TIMEOUT_SECONDS
    )


class RemoteTransferService:
    """
    One upload attempt: connect, ensure directory, upload, disconnect.

    Protocol clients are blocking, so the whole attempt runs in a worker
    thread. A fresh client is built per attempt.
    """

    def __init__(self, client_factory: Callable[[], TransferClient]):
        self.client_factory = client_factory

    async def upload_file(
        self,
        local_path: Union[str, Path],
        remote_directory: str,
        remote_name: str
    ) -> bool:
        if not str(local_path).strip():
            raise ValueError("local_path must be provided")
        if not remote_name or not remote_name.strip():
            raise ValueError("remote_name must be provided")
        if not Path(local_path).is_file():
            raise FileNotFoundError(f"Local file not found: {local_path}")

        return await asyncio.to_thread(
            self._upload_blocking, str(local_path), remote_directory, remote_name
        )

    def _upload_blocking(self, local_path: str, remote_directory: str, remote_name: str) -> bool:
        client = self.client_factory()
        remote_path = f"{remote_directory.rstrip('/')}/{remote_name}" if remote_directory else remote_name

        logger.info(f"Connecting to {client.host}:{client.port}")
        try:
            client.connect()

            if remote_directory and not client.path_exists(remote_directory):
                logger.info(f"Remote directory {remote_directory} does not exist. Creating...")
                client.ensure_directory(remote_directory)

            logger.info(f"Uploading file to {remote_path}")
            client.upload_file(local_path, remote_path, overwrite=True)
            logger.info("Upload complete.")
            return True

        except ConfigurationError:
            raise
        except Exception as e:
            raise TransferError(
                "Error uploading file",
                context={"host": client.host, "remote_path": remote_path},
                original_exception=e
            )
        finally:
            client.disconnect()


async def upload_with_retry(
    transfer: RemoteTransferService,
    local_path: Union[str, Path],
    remote_directory: str,
    remote_name: str,
    max_attempts: int,
    delay: float,
    sleep: Sleep = asyncio.sleep,
    cancel_event: Optional[asyncio.Event] = None
) -> UploadResult:
    """
    Upload with up to max_attempts tries, waiting delay seconds between them.

    A False result and a raised exception both count as a failed attempt;
    the last raised exception is kept for the result.

    Raises:
        ValueError: max_attempts < 1
        ExportCancelledError: cancel_event set before a retry wait
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    state = initial_upload_state()
    last_exception: Optional[BaseException] = None

    while True:
        attempt = state.attempt
        logger.info(f"Upload attempt {attempt}/{max_attempts} for file {remote_name}")

        uploaded = False
        try:
            uploaded = bool(await transfer.upload_file(local_path, remote_directory, remote_name))
            if not uploaded:
                logger.warning(f"Upload attempt {attempt} returned false for file {remote_name}")
        except Exception as e:
            last_exception = e
            logger.error(
                f"Upload attempt {attempt} threw exception for file {remote_name}: {str(e)}",
                exc_info=e
            )

        state = advance_upload_state(state, uploaded, max_attempts)

        if state.phase == UploadPhase.SUCCEEDED:
            logger.info(f"Upload succeeded on attempt {attempt} for file {remote_name}")
            return UploadResult(success=True, attempts_made=attempt)

        if state.phase == UploadPhase.EXHAUSTED:
            return UploadResult(
                success=False,
                attempts_made=max_attempts,
                last_exception=last_exception
            )

        if cancel_event is not None and cancel_event.is_set():
            raise ExportCancelledError(
                "Export cancelled between upload attempts",
                context={"attempts_made": attempt, "file": remote_name},
                original_exception=last_exception
            )

        await sleep(delay)
