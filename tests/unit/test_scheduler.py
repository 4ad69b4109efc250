import pytest
from datetime import date, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock
from export.run_gate import artifact_file_name, is_eligible_run_date
from export.scheduler import ExportScheduler, QUARTERLY_JOB_ID, quarter_start_trigger


def _every_day(year):
    day = date(year, 1, 1)
    while day.year == year:
        yield day
        day += timedelta(days=1)


@pytest.mark.parametrize("year", [2023, 2024, 2100])
def test_only_quarter_starts_are_eligible(year):
    eligible = [d for d in _every_day(year) if is_eligible_run_date(d)]
    assert eligible == [date(year, 1, 1), date(year, 4, 1), date(year, 7, 1), date(year, 10, 1)]


@pytest.mark.parametrize("day", [
    date(2024, 2, 29),
    date(2024, 7, 2),
    date(2024, 6, 30),
    date(2024, 2, 1),
    date(2024, 12, 1),
])
def test_other_dates_are_not_eligible(day):
    assert is_eligible_run_date(day) is False


def test_artifact_file_name():
    assert artifact_file_name(date(2024, 7, 1)) == "ShareNote-2024-07-01.csv"


def test_trigger_fires_on_quarter_starts():
    trigger = quarter_start_trigger(hour=6, minute=30, timezone="UTC")
    start = datetime(2024, 1, 15, tzinfo=trigger.timezone)

    fires = []
    previous = None
    now = start
    for _ in range(4):
        fire = trigger.get_next_fire_time(previous, now)
        fires.append(fire)
        previous = fire
        now = fire + timedelta(seconds=1)

    assert [(f.year, f.month, f.day, f.hour, f.minute) for f in fires] == [
        (2024, 4, 1, 6, 30),
        (2024, 7, 1, 6, 30),
        (2024, 10, 1, 6, 30),
        (2025, 1, 1, 6, 30),
    ]


@pytest.mark.asyncio
async def test_scheduler_initialization(export_settings, column_mapping):
    scheduler = ExportScheduler(export_settings, column_mapping)
    assert scheduler.scheduler is not None
    assert scheduler.column_mapping is column_mapping


@pytest.mark.asyncio
async def test_scheduler_job_execution(export_settings, column_mapping):
    mock_runner = MagicMock()
    mock_runner.execute = AsyncMock(return_value={"status": "skipped"})
    runner_factory = MagicMock(return_value=mock_runner)

    scheduler = ExportScheduler(export_settings, column_mapping, runner_factory=runner_factory)
    await scheduler.run_export_job()

    runner_factory.assert_called_once_with(column_mapping, export_settings)
    mock_runner.execute.assert_awaited_once()


@pytest.mark.asyncio
async def test_scheduler_job_failure_is_logged(export_settings, column_mapping, caplog):
    mock_runner = MagicMock()
    mock_runner.execute = AsyncMock(side_effect=RuntimeError("boom"))

    scheduler = ExportScheduler(
        export_settings, column_mapping, runner_factory=MagicMock(return_value=mock_runner)
    )
    await scheduler.run_export_job()

    assert "Staff export job failed - boom" in caplog.text


@pytest.mark.asyncio
async def test_scheduler_start_registers_quarterly_job(export_settings, column_mapping):
    scheduler = ExportScheduler(export_settings, column_mapping)
    scheduler.start()
    try:
        job = scheduler.scheduler.get_job(QUARTERLY_JOB_ID)
        assert job is not None
        assert str(job.trigger.fields[1]) == "1,4,7,10"
    finally:
        scheduler.stop()
