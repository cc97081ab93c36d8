"""Pydantic schemas for runtime validation of run inputs."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from profile8_fixer.types import ColorMode


class FixProfileConfig(BaseModel):
    """Validated input for a single profile fixing run."""

    model_config = ConfigDict(extra="forbid")

    profile_path: Path | None = None
    tool_path: Path | None = None
    work_dir: Path | None = None
    backup_dir: Path | None = None
    auto_install: bool = True
    force: bool = True
    keep_workdir: bool = False
    atomic_commit: bool = False
    timeout: float | None = Field(default=None, gt=0.0)
    verbose: bool = False
    color: ColorMode = "auto"

    @field_validator("profile_path", "tool_path", "work_dir", "backup_dir", mode="before")
    @classmethod
    def _expand_user(cls, value: object) -> object:
        if value is None:
            return None
        if isinstance(value, str | Path) and not str(value).strip():
            raise ValueError("path cannot be empty.")
        if isinstance(value, str | Path):
            return Path(value).expanduser()
        return value


class ReleaseAsset(BaseModel):
    """Downloadable asset of a GitHub release."""

    model_config = ConfigDict(extra="ignore")

    name: str = ""
    browser_download_url: str | None = None


class ReleaseInfo(BaseModel):
    """Subset of the GitHub ``releases/latest`` payload."""

    model_config = ConfigDict(extra="ignore")

    tag_name: str | None = None
    assets: list[ReleaseAsset] = Field(default_factory=list)
