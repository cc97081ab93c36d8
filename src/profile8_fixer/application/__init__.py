"""Application-layer use-case and option objects."""

from __future__ import annotations

from pathlib import Path

from profile8_fixer.application.options import (
    CommitStrategy,
    FixOptions,
    NodeSelector,
    ZeroMatchPolicy,
)
from profile8_fixer.application.ports import (
    BackupManager,
    ResourceConverter,
    TargetLocator,
    ToolLocator,
    TreeMutator,
)
from profile8_fixer.application.results import PipelineResult
from profile8_fixer.application.state import PipelineState


def build_fix_options(
    *,
    backup_dir: Path,
    work_dir: Path | None = None,
    keep_workdir: bool = False,
    force: bool = True,
    atomic_commit: bool = False,
    handle_signals: bool = True,
) -> FixOptions:
    """Build typed fix options via lazy use-case import."""
    from profile8_fixer.application.use_cases import build_fix_options as _impl

    return _impl(
        backup_dir=backup_dir,
        work_dir=work_dir,
        keep_workdir=keep_workdir,
        force=force,
        atomic_commit=atomic_commit,
        handle_signals=handle_signals,
    )


def fix_profile(
    *,
    tool_locator: ToolLocator,
    target_locator: TargetLocator,
    options: FixOptions,
    backups: BackupManager | None = None,
    converter: ResourceConverter | None = None,
    mutator: TreeMutator | None = None,
) -> PipelineResult:
    """Run the fixing pipeline via lazy use-case import."""
    from profile8_fixer.application.use_cases import fix_profile as _impl

    return _impl(
        tool_locator=tool_locator,
        target_locator=target_locator,
        options=options,
        backups=backups,
        converter=converter,
        mutator=mutator,
    )


__all__ = [
    "CommitStrategy",
    "FixOptions",
    "NodeSelector",
    "PipelineResult",
    "PipelineState",
    "ZeroMatchPolicy",
    "build_fix_options",
    "fix_profile",
]
