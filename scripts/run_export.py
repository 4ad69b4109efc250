"""
Script to run the quarterly staff export
"""

import argparse
import asyncio
import signal
import sys
import os
import logging

# Add current directory to path to allow imports from core, export, etc.
sys.path.append(os.getcwd())

from core.config import settings
from core.logging import setup_logging
from export.runner import build_runner
from export.scheduler import ExportScheduler
from export.transformers.column_mapping import build_column_mapping

logger = logging.getLogger(__name__)


def _install_signal_handlers(loop: asyncio.AbstractEventLoop, stop_event: asyncio.Event) -> None:
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except (NotImplementedError, RuntimeError):
            # Not supported on this platform's event loop
            pass


async def run_once() -> int:
    """Run the export a single time; returns the process exit code"""
    stop_event = asyncio.Event()
    _install_signal_handlers(asyncio.get_running_loop(), stop_event)

    column_mapping = build_column_mapping()
    runner = build_runner(column_mapping, settings)

    try:
        result = await runner.execute(stop_event)
    except Exception as e:
        logger.error(f"Staff export failed: {str(e)}")
        return 1

    logger.info(f"Staff export result: {result}")
    return 1 if result["status"] in ("failed", "render_failed") else 0


async def run_scheduled() -> int:
    """Keep running and export on each quarter-start date"""
    stop_event = asyncio.Event()
    _install_signal_handlers(asyncio.get_running_loop(), stop_event)

    scheduler = ExportScheduler(settings, build_column_mapping())
    scheduler.start()
    try:
        await stop_event.wait()
    finally:
        scheduler.stop()
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="ShareNote staff export to Gainsight")
    parser.add_argument(
        "--schedule",
        action="store_true",
        help="stay running and export on the first day of each quarter"
    )
    args = parser.parse_args(argv)

    setup_logging(settings)
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    if args.schedule:
        return asyncio.run(run_scheduled())
    return asyncio.run(run_once())


if __name__ == "__main__":
    sys.exit(main())
