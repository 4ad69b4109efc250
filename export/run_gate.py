"""
Run-date rules for the quarterly export
"""

from datetime import date
from typing import Tuple

# The export runs on the first day of each calendar quarter.
QUARTER_START_MONTHS: Tuple[int, ...] = (1, 4, 7, 10)

ARTIFACT_PREFIX = "ShareNote"


def is_eligible_run_date(day: date) -> bool:
    """True only for Jan 1, Apr 1, Jul 1 and Oct 1."""
    return day.day == 1 and day.month in QUARTER_START_MONTHS


def artifact_file_name(day: date) -> str:
    """ShareNote-yyyy-MM-dd.csv for the run date"""
    return f"{ARTIFACT_PREFIX}-{day:%Y}-{day:%m}-{day:%d}.csv"
