# ============================================================================
# File: export/runner.py
# Description: Quarterly staff export orchestrator
# ============================================================================
"""
Staff Export Runner - Orchestrates the quarterly Gainsight export.

Pipeline stages, each short-circuiting the run on failure:
1. Gate      - only quarter-start dates run
2. Fetch     - staff records from the source database
3. Render    - fixed-layout CSV in the Reports folder
4. Transfer  - upload with fixed-delay retries
5. Route     - move the CSV to Archive (uploaded) or Failed (retries spent)

Only the transfer stage retries. Outcomes are reported through the log and
the final location of the CSV; nothing else is persisted.
"""

import asyncio
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, Optional
import logging

from core.config import Settings, settings
from core.exceptions import ConfigurationError, ExportCancelledError
from export.extractors.staff_extractor import StaffExtractor, resolve_staff_query
from export.loaders.csv_renderer import CsvRenderer
from export.loaders.file_router import FileRouter
from export.loaders.transfer import (
    RemoteTransferService,
    Sleep,
    create_transfer_client,
    remote_directory_for,
    upload_with_retry,
)
from export.run_gate import artifact_file_name, is_eligible_run_date
from export.transformers.column_mapping import ColumnMapping

logger = logging.getLogger(__name__)


class StaffExportRunner:
    """
    Quarterly staff export orchestrator

    Responsibilities:
    - Decide whether today is a run date
    - Validate required configuration
    - Fetch, render, upload
    - File the CSV into Archive or Failed
    - Log every decision point
    """

    def __init__(
        self,
        config: Settings,
        extractor: StaffExtractor,
        renderer: CsvRenderer,
        transfer: RemoteTransferService,
        clock: Callable[[], date] = date.today,
        sleep: Sleep = asyncio.sleep
    ):
        self.config = config
        self.extractor = extractor
        self.renderer = renderer
        self.transfer = transfer
        self.clock = clock
        self.sleep = sleep

    async def execute(self, cancel_event: Optional[asyncio.Event] = None) -> Dict[str, Any]:
        """
        Run the export once.

        Returns:
            Dictionary describing the outcome:
            - status: "skipped", "not_configured", "no_data", "render_failed",
              "archived" or "failed"
            - run_date, plus records/file/attempt details where reached

        Raises:
            ConfigurationError: ROOT_PATH is missing
            FetchError: the source query failed
            ExportCancelledError: cancel_event was set mid-run
            Exception: anything unexpected, after logging
        """
        try:
            today = self.clock()
            result: Dict[str, Any] = {"run_date": today.isoformat()}

            # --------------------------------------------------
            # GATE
            # --------------------------------------------------
            if not is_eligible_run_date(today):
                logger.info("Today is not configured as a run date. Exiting.")
                return {**result, "status": "skipped"}

            logger.info("Starting ShareNote Staff Export...")

            # --------------------------------------------------
            # CONFIGURATION
            # --------------------------------------------------
            root_path = self.config.ROOT_PATH
            if not root_path or not root_path.strip():
                raise ConfigurationError(
                    "ROOT_PATH is not configured",
                    context={"setting": "ROOT_PATH"}
                )

            try:
                query = resolve_staff_query(self.config)
            except ConfigurationError as e:
                logger.error(f"Staff query misconfigured: {e.message}")
                return {**result, "status": "not_configured", "setting": e.context.get("setting")}

            if query is None:
                logger.error("Staff query not configured (STAFF_STORED_PROCEDURE or STAFF_QUERY_PATH)")
                return {**result, "status": "not_configured", "setting": "STAFF_STORED_PROCEDURE"}

            connection_string = self.config.DATABASE_URL
            if not connection_string or not connection_string.strip():
                logger.error("SQL connection string not configured (DATABASE_URL)")
                return {**result, "status": "not_configured", "setting": "DATABASE_URL"}

            # --------------------------------------------------
            # FETCH
            # --------------------------------------------------
            records = await self.extractor.fetch_records(query, connection_string, cancel_event)
            if not records:
                logger.warning("No staff records returned. Exiting.")
                return {**result, "status": "no_data", "records_fetched": 0}

            logger.info(f"Fetched {len(records)} staff records.")
            result["records_fetched"] = len(records)

            self._raise_if_cancelled(cancel_event, "render")

            # --------------------------------------------------
            # RENDER
            # --------------------------------------------------
            root = Path(root_path)
            reports_folder = (root / self.config.REPORTS_PATH).resolve()
            file_name = artifact_file_name(today)
            local_path = reports_folder / file_name

            if not self.renderer.render(records, local_path):
                logger.error(f"Failed to write CSV to {local_path}")
                return {**result, "status": "render_failed", "file": str(local_path)}

            logger.info(f"CSV file written to {local_path}")

            # --------------------------------------------------
            # TRANSFER
            # --------------------------------------------------
            remote_directory = remote_directory_for(self.config.SFTP_REMOTE_DIRECTORY, today)

            upload_result = await upload_with_retry(
                self.transfer,
                local_path,
                remote_directory,
                file_name,
                max_attempts=self.config.UPLOAD_MAX_ATTEMPTS,
                delay=self.config.UPLOAD_RETRY_DELAY_SECONDS,
                sleep=self.sleep,
                cancel_event=cancel_event
            )
            result["attempts_made"] = upload_result.attempts_made
            result["remote_directory"] = remote_directory

            # --------------------------------------------------
            # ROUTE
            # --------------------------------------------------
            router = FileRouter(
                archive_folder=root / self.config.ARCHIVE_FOLDER,
                failed_folder=root / self.config.FAILED_FOLDER
            )

            if upload_result.success:
                logger.info(
                    f"Upload successful after {upload_result.attempts_made} attempt(s). "
                    f"Moving file to Archive."
                )
                final_path = router.route(local_path, succeeded=True)
                logger.info(f"File {file_name} uploaded and archived to {router.archive_folder}")
                result["status"] = "archived"
            else:
                logger.error(
                    f"Upload failed after {upload_result.attempts_made} attempts. Moving file to Failed."
                )
                if upload_result.last_exception is not None:
                    logger.error(
                        f"Last exception during upload for file {file_name}",
                        exc_info=upload_result.last_exception
                    )
                final_path = router.route(local_path, succeeded=False)
                logger.info(f"File {file_name} moved to Failed folder {router.failed_folder}")
                result["status"] = "failed"

            result["file"] = str(final_path)
            logger.info("Staff export job finished.")
            return result

        except ExportCancelledError as e:
            logger.warning(f"Staff export cancelled: {e.message}")
            raise

        except Exception:
            logger.exception("Unhandled exception in StaffExportRunner.execute")
            raise

    @staticmethod
    def _raise_if_cancelled(cancel_event: Optional[asyncio.Event], stage: str) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise ExportCancelledError(f"Export cancelled before {stage}")


def build_runner(
    column_mapping: ColumnMapping,
    config: Optional[Settings] = None,
    clock: Callable[[], date] = date.today
) -> StaffExportRunner:
    """
    Wire a runner from settings.

    The column mapping is built once by the host and shared by every runner
    it creates.
    """
    config = config or settings
    extractor = StaffExtractor(
        column_mapping=column_mapping,
        command_timeout=config.SQL_COMMAND_TIMEOUT_SECONDS
    )
    transfer = RemoteTransferService(client_factory=lambda: create_transfer_client(config))
    return StaffExportRunner(
        config=config,
        extractor=extractor,
        renderer=CsvRenderer(),
        transfer=transfer,
        clock=clock
    )
