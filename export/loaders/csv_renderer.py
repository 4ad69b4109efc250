"""
Render staff records to the Gainsight CSV layout
"""

import os
import tempfile
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union
import pandas as pd
from core.exceptions import RenderError
from schemas.staff import StaffRecord
import logging

logger = logging.getLogger(__name__)

# (record field, CSV header). Header text and order are read by the
# downstream consumer and must not change.
CSV_COLUMNS: Tuple[Tuple[str, str], ...] = (
    ("f_name", "FName"),
    ("l_name", "LName"),
    ("email", "Email"),
    ("account_name", "ACCOUNT NAME"),
    ("product", "PRODUCT"),
    ("platform_id", "PLATFORM ID"),
    ("role", "Role"),
    ("phone", "Phone"),
    ("status", "Status"),
)

CSV_HEADERS: List[str] = [header for _, header in CSV_COLUMNS]
LINE_TERMINATOR = "\r\n"


def _current_umask() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return umask


class CsvRenderer:
    """
    Write staff records to a CSV file.

    Ensures:
    - Fixed header text and column order
    - Header-only file for an empty record set
    - No partial file at the target path: rows are written to a temp file
      in the same directory and moved into place once complete
    """

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def to_frame(self, records: Iterable[StaffRecord]) -> pd.DataFrame:
        rows = [
            [getattr(record, field) for field, _ in CSV_COLUMNS]
            for record in records
        ]
        return pd.DataFrame(rows, columns=CSV_HEADERS, dtype=object)

    def render(self, records: Optional[Iterable[StaffRecord]], path: Union[str, Path, None]) -> bool:
        """
        Write records to path.

        Returns:
            True when the file is complete at path, False on I/O or encoding failure

        Raises:
            ValueError: records is None or path is blank
        """
        if records is None:
            raise ValueError("records must not be None")
        if path is None or not str(path).strip():
            raise ValueError("CSV path must be provided")

        target = Path(path)
        tmp_path: Optional[str] = None

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            frame = self.to_frame(records)

            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{target.name}.",
                suffix=".tmp",
                dir=str(target.parent)
            )
            with os.fdopen(fd, "w", encoding=self.encoding, newline="") as fh:
                frame.to_csv(fh, index=False, lineterminator=LINE_TERMINATOR)
                fh.flush()
                os.fsync(fh.fileno())

            # mkstemp creates 0600; give the artifact the usual umask-derived mode
            os.chmod(tmp_path, 0o666 & ~_current_umask())
            os.replace(tmp_path, target)
            tmp_path = None

            logger.info(f"Wrote {len(frame)} records to {target}")
            return True

        except (OSError, ValueError) as e:
            # ValueError covers UnicodeEncodeError from the text writer
            error = RenderError(
                "Failed to write CSV file",
                context={"file_path": str(target)},
                original_exception=e
            )
            logger.error(str(error), extra={"error_context": error.to_dict()})
            return False

        finally:
            if tmp_path is not None:
                self._discard(tmp_path)

    @staticmethod
    def _discard(tmp_path: str) -> None:
        try:
            os.remove(tmp_path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove temporary file {tmp_path}: {str(e)}")
