"""Unit tests for the filesystem backup manager."""

from __future__ import annotations

import shutil
from datetime import datetime
from pathlib import Path

import pytest

from profile8_fixer.adapters import backups as backups_module
from profile8_fixer.adapters.backups import FilesystemBackupManager, backup_name
from profile8_fixer.errors import BackupError

FIXED_NOW = datetime(2026, 10, 17, 21, 5, 9, 123456)


def _manager() -> FilesystemBackupManager:
    return FilesystemBackupManager(clock=lambda: FIXED_NOW)


def test_creates_sibling_and_central_copies(tmp_path: Path) -> None:
    """Write two byte-identical, timestamped copies and return their records."""
    target = tmp_path / "Public" / "profile8.lsf"
    target.parent.mkdir()
    target.write_bytes(b"LSOF\x00\x01payload")
    central = tmp_path / "bg3_backups"

    sibling, copy = _manager().create_backups(target, central)

    assert sibling.destination_path == target.parent / "profile8.lsf.bak.20261017_210509"
    assert copy.destination_path == central / "profile8.lsf.bak.20261017_210509"
    assert sibling.destination_path.read_bytes() == target.read_bytes()
    assert copy.destination_path.read_bytes() == target.read_bytes()
    assert sibling.created_at == copy.created_at == FIXED_NOW.replace(microsecond=0)
    assert sibling.source_path == target


def test_repeated_runs_in_same_second_do_not_overwrite(tmp_path: Path) -> None:
    """Append a counter instead of overwriting an existing backup."""
    target = tmp_path / "profile8.lsf"
    target.write_bytes(b"first")
    central = tmp_path / "central"
    manager = _manager()

    first, _ = manager.create_backups(target, central)
    target.write_bytes(b"second")
    second, second_central = manager.create_backups(target, central)

    assert first.destination_path.read_bytes() == b"first"
    assert second.destination_path.name == backup_name("profile8.lsf", "20261017_210509", 1)
    assert second.destination_path.read_bytes() == b"second"
    assert second_central.destination_path.read_bytes() == b"second"


def test_missing_source_raises_backup_error(tmp_path: Path) -> None:
    """Refuse to back up a file that does not exist."""
    with pytest.raises(BackupError, match="missing file"):
        _manager().create_backups(tmp_path / "absent.lsf", tmp_path / "central")


def test_failed_central_copy_leaves_no_backups(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Remove the sibling copy when the central copy cannot be written."""
    target = tmp_path / "profile8.lsf"
    target.write_bytes(b"data")
    central = tmp_path / "central"
    real_copy2 = shutil.copy2

    def flaky_copy2(src: Path, dst: Path) -> Path:
        if Path(dst).parent == central:
            raise PermissionError("read-only")
        return real_copy2(src, dst)

    monkeypatch.setattr(backups_module.shutil, "copy2", flaky_copy2)

    with pytest.raises(BackupError, match="read-only"):
        _manager().create_backups(target, central)

    assert sorted(p.name for p in tmp_path.iterdir() if p.is_file()) == ["profile8.lsf"]
    assert list(central.iterdir()) == []


def test_unwritable_backup_dir_raises(tmp_path: Path) -> None:
    """Surface a BackupError when the central directory path is a file."""
    target = tmp_path / "profile8.lsf"
    target.write_bytes(b"data")
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x")

    with pytest.raises(BackupError):
        _manager().create_backups(target, blocker / "nested")

    assert not any(p.name.startswith("profile8.lsf.bak") for p in tmp_path.iterdir())
