import logging
from typing import Callable, Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from core.config import settings, Settings
from export.run_gate import QUARTER_START_MONTHS
from export.runner import StaffExportRunner, build_runner
from export.transformers.column_mapping import ColumnMapping, build_column_mapping

logger = logging.getLogger(__name__)

QUARTERLY_JOB_ID = "staff_export_job"


def quarter_start_trigger(hour: int = 6, minute: int = 0, timezone=None) -> CronTrigger:
    """Cron trigger firing on the first day of each quarter"""
    return CronTrigger(
        month=",".join(str(m) for m in QUARTER_START_MONTHS),
        day=1,
        hour=hour,
        minute=minute,
        timezone=timezone
    )


class ExportScheduler:
    """Keeps the process alive and runs the export on quarter-start dates."""

    def __init__(
        self,
        config: Optional[Settings] = None,
        column_mapping: Optional[ColumnMapping] = None,
        runner_factory: Callable[[ColumnMapping, Settings], StaffExportRunner] = None
    ):
        self.config = config or settings
        self.column_mapping = column_mapping or build_column_mapping()
        self.runner_factory = runner_factory or (lambda mapping, cfg: build_runner(mapping, cfg))
        self.scheduler = AsyncIOScheduler()

    async def run_export_job(self):
        """Job to run the staff export"""
        logger.info("Scheduler: Starting staff export job")
        try:
            runner = self.runner_factory(self.column_mapping, self.config)
            result = await runner.execute()
            logger.info(f"Scheduler: Staff export job finished with status {result.get('status')}")
        except Exception as e:
            logger.error(f"Scheduler: Staff export job failed - {e}")

    def start(self):
        """Start the scheduler"""
        self.scheduler.add_job(
            self.run_export_job,
            trigger=quarter_start_trigger(self.config.SCHEDULE_HOUR, self.config.SCHEDULE_MINUTE),
            id=QUARTERLY_JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True
        )
        self.scheduler.start()
        logger.info("Staff export scheduler started")

    def stop(self):
        self.scheduler.shutdown()
        logger.info("Staff export scheduler stopped")
