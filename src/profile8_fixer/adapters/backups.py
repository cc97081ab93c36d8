"""Filesystem backup manager implementing the application port."""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from profile8_fixer.application.results import BackupRecord
from profile8_fixer.errors import BackupError

logger = logging.getLogger(__name__)

STAMP_FORMAT = "%Y%m%d_%H%M%S"
PARTIAL_SUFFIX = ".partial"


def backup_name(target_name: str, stamp: str, attempt: int = 0) -> str:
    """Return the backup filename for ``target_name`` at ``stamp``."""
    name = f"{target_name}.bak.{stamp}"
    return f"{name}.{attempt}" if attempt else name


class FilesystemBackupManager:
    """Copy the target next to itself and into a central backup directory.

    Parameters
    ----------
    clock : Callable[[], datetime], default=datetime.now
        Time source for the shared run timestamp.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self._clock = clock

    def create_backups(
        self, target_path: Path, central_backup_dir: Path
    ) -> tuple[BackupRecord, BackupRecord]:
        """Create the sibling and central backups of ``target_path``.

        Parameters
        ----------
        target_path : Path
            Existing file to back up.
        central_backup_dir : Path
            Directory for the second copy; created when absent.

        Returns
        -------
        tuple[BackupRecord, BackupRecord]
            Sibling record, then central record.

        Raises
        ------
        BackupError
            If the source is unreadable or a destination is unwritable. No
            backup file of this call is left behind.
        """
        if not target_path.is_file():
            raise BackupError(f"Cannot back up missing file: {target_path}")

        created_at = self._clock().replace(microsecond=0)
        stamp = created_at.strftime(STAMP_FORMAT)
        written: list[Path] = []
        try:
            central_backup_dir.mkdir(parents=True, exist_ok=True)
            sibling = self._copy(target_path, target_path.parent, stamp, written)
            central = self._copy(target_path, central_backup_dir, stamp, written)
        except OSError as exc:
            self._discard(written)
            raise BackupError(f"Failed to create backups of {target_path}: {exc}") from exc

        logger.info("Backup created: %s", sibling, extra={"status": "ok"})
        logger.info("Backup copy created: %s", central, extra={"status": "ok"})
        return (
            BackupRecord(source_path=target_path, destination_path=sibling, created_at=created_at),
            BackupRecord(source_path=target_path, destination_path=central, created_at=created_at),
        )

    def _copy(
        self, source: Path, directory: Path, stamp: str, written: list[Path]
    ) -> Path:
        destination = self._free_destination(directory, source.name, stamp)
        partial = destination.with_name(destination.name + PARTIAL_SUFFIX)
        written.append(partial)
        shutil.copy2(source, partial)
        if partial.stat().st_size != source.stat().st_size:
            raise OSError(f"short copy to {partial}")
        partial.rename(destination)
        written[-1] = destination
        return destination

    @staticmethod
    def _free_destination(directory: Path, target_name: str, stamp: str) -> Path:
        attempt = 0
        while True:
            candidate = directory / backup_name(target_name, stamp, attempt)
            if not candidate.exists():
                return candidate
            attempt += 1

    @staticmethod
    def _discard(paths: list[Path]) -> None:
        for path in paths:
            try:
                path.unlink(missing_ok=True)
            except OSError:
                logger.warning("Could not remove incomplete backup %s", path)
