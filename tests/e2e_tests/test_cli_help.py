"""End-to-end smoke test for CLI help output."""

from __future__ import annotations

import os
import subprocess

import profile8_fixer


def test_package_import_smoke() -> None:
    """Ensure package can be imported in the test process."""
    assert profile8_fixer.__version__


def test_cli_help_smoke() -> None:
    """Ensure the installed CLI entrypoint responds to --help."""
    result = subprocess.run(
        ["fix-profile8", "--help"],
        capture_output=True,
        text=True,
        check=False,
    )

    assert result.returncode == 0, result.stderr
    assert "DisabledSingleSaveSessions" in result.stdout


def test_cli_missing_profile_fails_cleanly(tmp_path) -> None:
    """Ensure a missing profile exits 1 with a user-facing message."""
    result = subprocess.run(
        [
            "fix-profile8",
            "fix",
            "--profile",
            str(tmp_path / "profile8.lsf"),
            "--tool",
            str(tmp_path / "missing-divine"),
            "--color",
            "never",
        ],
        capture_output=True,
        text=True,
        check=False,
        env={**os.environ, "HOME": str(tmp_path), "BACKUP_DIR": str(tmp_path / "bk")},
    )

    assert result.returncode == 1
    assert "not found" in result.stderr
