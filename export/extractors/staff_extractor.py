"""
Staff record extractor for the source SQL database
"""

import asyncio
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine
from core.config import Settings
from core.database import create_source_engine
from core.exceptions import ConfigurationError, ExportCancelledError, FetchError
from export.transformers.column_mapping import ColumnMapping
from schemas.staff import StaffRecord, StoredProcedure
import logging

logger = logging.getLogger(__name__)

StaffQuery = Union[StoredProcedure, str]

DEFAULT_COMMAND_TIMEOUT_SECONDS = 180.0


def resolve_stored_procedure(identifier: str) -> StoredProcedure:
    """Look a procedure up by member name or by database object name."""
    token = identifier.strip()
    for procedure in StoredProcedure:
        if token in (procedure.name, procedure.value):
            return procedure
    raise ConfigurationError(
        f"Unsupported stored procedure '{identifier}'",
        context={"setting": "STAFF_STORED_PROCEDURE"}
    )


def resolve_staff_query(config: Settings) -> Optional[StaffQuery]:
    """
    Work out which query the export runs.

    A SQL file at STAFF_QUERY_PATH wins over STAFF_STORED_PROCEDURE.

    Returns:
        SQL text, a StoredProcedure, or None when nothing is configured

    Raises:
        ConfigurationError: file missing/empty or procedure unknown
    """
    if config.STAFF_QUERY_PATH and config.STAFF_QUERY_PATH.strip():
        path = Path(config.STAFF_QUERY_PATH)
        if not path.is_file():
            raise ConfigurationError(
                f"SQL file not found: {path}",
                context={"setting": "STAFF_QUERY_PATH"}
            )
        sql = path.read_text(encoding="utf-8").strip()
        if not sql:
            raise ConfigurationError(
                f"SQL file is empty: {path}",
                context={"setting": "STAFF_QUERY_PATH"}
            )
        return sql

    if config.STAFF_STORED_PROCEDURE and config.STAFF_STORED_PROCEDURE.strip():
        return resolve_stored_procedure(config.STAFF_STORED_PROCEDURE)

    return None


class StaffExtractor:
    """
    Run the staff query and map its rows to StaffRecord.

    Features:
    - Stored procedure or raw SQL
    - Column-name tolerant mapping (shared ColumnMapping)
    - Command timeout
    - Cancellation of the in-flight query

    Errors from the database are wrapped in FetchError and never retried here.
    """

    def __init__(
        self,
        column_mapping: ColumnMapping,
        engine_factory: Callable[[str], AsyncEngine] = create_source_engine,
        command_timeout: float = DEFAULT_COMMAND_TIMEOUT_SECONDS
    ):
        self.column_mapping = column_mapping
        self.engine_factory = engine_factory
        self.command_timeout = command_timeout

    async def fetch_records(
        self,
        query: Optional[StaffQuery],
        connection_string: Optional[str],
        cancel_event: Optional[asyncio.Event] = None
    ) -> List[StaffRecord]:
        """
        Fetch staff records in source row order.

        Args:
            query: StoredProcedure or SQL text
            connection_string: SQLAlchemy async database URL
            cancel_event: Set by the host to abandon the query

        Returns:
            List of StaffRecord (empty when the query returns no rows)

        Raises:
            ConfigurationError: query or connection string missing
            FetchError: any data-access failure
            ExportCancelledError: cancel_event was set
        """
        if query is None or (isinstance(query, str) and not query.strip()):
            raise ConfigurationError("Staff query must be provided", context={"setting": "query"})
        if not connection_string or not connection_string.strip():
            raise ConfigurationError(
                "Connection string must be provided",
                context={"setting": "DATABASE_URL"}
            )
        if cancel_event is not None and cancel_event.is_set():
            raise ExportCancelledError("Export cancelled before fetch")

        sql = self._to_sql(query)
        label = self._describe(query)

        try:
            logger.info(f"Executing {label}")
            rows = await self._run_cancellable(self._execute(sql, connection_string), cancel_event)
            records = self.column_mapping.map_rows(rows)
        except ExportCancelledError:
            logger.warning(f"Fetch cancelled while executing {label}")
            raise
        except Exception as e:
            raise FetchError(
                f"Error occurred while executing '{label}'",
                context={"query": label},
                original_exception=e
            )

        if rows:
            ignored = self.column_mapping.unmapped_columns(rows[0].keys())
            if ignored:
                logger.debug(f"Ignoring unmapped source columns: {ignored}")

        logger.info(f"Fetched {len(records)} staff records")
        return records

    async def _execute(self, sql: str, connection_string: str) -> List[Dict[str, Any]]:
        engine = self.engine_factory(connection_string)
        try:
            async with engine.connect() as conn:
                result = await asyncio.wait_for(
                    conn.execute(text(sql)),
                    timeout=self.command_timeout
                )
                return [dict(row) for row in result.mappings().all()]
        finally:
            await engine.dispose()

    @staticmethod
    async def _run_cancellable(
        operation: Awaitable[List[Dict[str, Any]]],
        cancel_event: Optional[asyncio.Event]
    ) -> List[Dict[str, Any]]:
        if cancel_event is None:
            return await operation

        query_task = asyncio.ensure_future(operation)
        cancel_task = asyncio.ensure_future(cancel_event.wait())
        try:
            await asyncio.wait({query_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            cancel_task.cancel()
            if not query_task.done():
                query_task.cancel()

        if query_task.done() and not query_task.cancelled():
            return query_task.result()

        try:
            await query_task
        except asyncio.CancelledError:
            pass
        raise ExportCancelledError("Export cancelled during fetch")

    @staticmethod
    def _to_sql(query: StaffQuery) -> str:
        if isinstance(query, StoredProcedure):
            return f"EXEC {query.value}"
        return query

    @staticmethod
    def _describe(query: StaffQuery) -> str:
        if isinstance(query, StoredProcedure):
            return query.value
        flat = " ".join(query.split())
        return flat if len(flat) <= 80 else flat[:77] + "..."
