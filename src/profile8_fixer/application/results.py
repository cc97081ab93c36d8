"""Application-layer records and result objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from profile8_fixer.application.state import PipelineState
from profile8_fixer.types import Environment, FormatId


@dataclass(frozen=True)
class ToolDescriptor:
    """Resolved converter tool.

    Parameters
    ----------
    executable : Path
        Converter binary, or managed-runtime artifact when ``launcher`` is set.
    launcher : str | None, default=None
        Launcher command required to run ``executable`` (e.g. ``dotnet``).
    environment : Mapping[str, str], default={}
        Extra environment variables for the converter process.
    """

    executable: Path
    launcher: str | None = None
    environment: Environment = field(default_factory=dict)

    @property
    def requires_launcher(self) -> bool:
        return self.launcher is not None


@dataclass(frozen=True)
class BackupRecord:
    """One backup copy of the target."""

    source_path: Path
    destination_path: Path
    created_at: datetime


@dataclass(frozen=True)
class ConversionJob:
    """Single converter invocation request."""

    source_path: Path
    destination_path: Path
    format_id: FormatId


@dataclass(frozen=True)
class ConversionResult:
    """Structured converter outcome."""

    job: ConversionJob
    argv: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    duration_seconds: float

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@dataclass(frozen=True)
class StepOutcome:
    """Outcome of one pipeline state."""

    state: PipelineState
    ok: bool
    detail: str = ""


@dataclass
class PipelineRun:
    """Mutable record of an in-progress run."""

    scratch_dir: Path | None = None
    state: PipelineState = PipelineState.START
    steps: list[StepOutcome] = field(default_factory=list)
    tool: ToolDescriptor | None = None
    target_path: Path | None = None
    backups: tuple[BackupRecord, ...] = ()
    removed_count: int | None = None
    exit_status: int | None = None
    scratch_retained: bool = False


@dataclass(frozen=True)
class PipelineResult:
    """Successful run summary."""

    target_path: Path
    backups: tuple[BackupRecord, ...]
    removed_count: int
    steps: tuple[StepOutcome, ...]
    scratch_dir: Path
    scratch_retained: bool = False
