"""
Move the CSV artifact into its terminal folder.

Which folder holds the file is the only persisted record of a run's
outcome: Archive after a successful upload, Failed once retries are spent.
"""

import errno
import os
import shutil
from pathlib import Path
from typing import Union
from core.exceptions import ArchiveError
import logging

logger = logging.getLogger(__name__)


class FileRouter:
    """Route artifacts to the Archive or Failed folder, replacing same-named files."""

    def __init__(self, archive_folder: Union[str, Path], failed_folder: Union[str, Path]):
        self.archive_folder = Path(archive_folder)
        self.failed_folder = Path(failed_folder)

    def route(self, local_path: Union[str, Path], succeeded: bool) -> Path:
        """
        Move local_path according to the upload outcome.

        Returns:
            The artifact's new path

        Raises:
            ArchiveError: the move failed
        """
        if succeeded:
            return self.move_to_archive(local_path)
        return self.move_to_failed(local_path)

    def move_to_archive(self, local_path: Union[str, Path]) -> Path:
        return self._move(local_path, self.archive_folder)

    def move_to_failed(self, local_path: Union[str, Path]) -> Path:
        return self._move(local_path, self.failed_folder)

    @staticmethod
    def _move(local_path: Union[str, Path], folder: Path) -> Path:
        if not str(local_path).strip():
            raise ValueError("File path must be provided.")

        source = Path(local_path)
        destination = folder / source.name
        try:
            folder.mkdir(parents=True, exist_ok=True)
            try:
                os.replace(source, destination)
            except OSError as e:
                if e.errno != errno.EXDEV:
                    raise
                # os.replace cannot cross filesystems
                if destination.exists():
                    destination.unlink()
                shutil.move(str(source), str(destination))
        except OSError as e:
            raise ArchiveError(
                f"Failed to move file to {folder.name} folder",
                context={"file_path": str(source), "destination": str(folder)},
                original_exception=e
            )

        logger.info(f"Moved {source.name} to {folder}")
        return destination
