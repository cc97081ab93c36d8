"""Environment-derived defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from profile8_fixer.types import Environment

PROFILE_FILENAME = "profile8.lsf"
TOOL_NAMES = ("divine", "Divine", "ConverterApp")
FORMAT_ID = "bg3"
TARGET_TAG = "node"
IDENTITY_KEY = "id"
IDENTITY_VALUE = "DisabledSingleSaveSessions"


def _documents_dir(home: Path) -> Path:
    return home / "Documents"


@dataclass(frozen=True)
class Settings:
    """Process-level defaults resolved once from the environment.

    Parameters
    ----------
    profiles_root : Path
        BG3 ``PlayerProfiles`` directory searched by auto-detection.
    default_profile : Path
        Profile path used when none is given.
    backup_dir : Path
        Central backup directory (``BACKUP_DIR`` overrides).
    keep_workdir : bool
        Retain the scratch directory (``KEEP_WORKDIR`` set and non-empty).
    no_color : bool
        ``NO_COLOR`` set; disables automatic color.
    """

    profiles_root: Path
    default_profile: Path
    backup_dir: Path
    keep_workdir: bool = False
    no_color: bool = False

    @classmethod
    def from_env(
        cls,
        environ: Environment | None = None,
        home: Path | None = None,
    ) -> Settings:
        """Build settings from environment variables."""
        env = os.environ if environ is None else environ
        home_dir = home or Path.home()
        documents = _documents_dir(home_dir)
        profiles_root = (
            documents / "Larian Studios" / "Baldur's Gate 3" / "PlayerProfiles"
        )
        raw_backup = env.get("BACKUP_DIR", "").strip()
        return cls(
            profiles_root=profiles_root,
            default_profile=profiles_root / "Public" / PROFILE_FILENAME,
            backup_dir=Path(raw_backup).expanduser() if raw_backup else documents / "bg3_backups",
            keep_workdir=bool(env.get("KEEP_WORKDIR")),
            no_color=bool(env.get("NO_COLOR")),
        )
