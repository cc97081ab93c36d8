"""Top-level API for pruning BG3 profile nodes."""

from __future__ import annotations

from pathlib import Path

from profile8_fixer.application.results import PipelineResult

__version__ = "0.1.0"


def fix_profile(
    profile_path: Path | None = None,
    *,
    tool_path: Path | None = None,
    force: bool = True,
    **params: object,
) -> PipelineResult:
    """Remove ``DisabledSingleSaveSessions`` nodes from ``profile8.lsf``.

    Parameters
    ----------
    profile_path : Path | None, default=None
        Profile to edit; auto-detected when omitted.
    tool_path : Path | None, default=None
        Converter path; searched on ``PATH`` or installed when omitted.
    force : bool, default=True
        Continue when no node matches; ``False`` aborts with ``NoMatchError``.
    **params : object
        Further ``FixProfileConfig`` fields (``work_dir``, ``backup_dir``,
        ``timeout``, ``atomic_commit``, ...).

    Returns
    -------
    PipelineResult
        Summary of the committed run.
    """
    from .api import fix_profile_file as _impl

    return _impl(profile_path, tool_path=tool_path, force=force, **params)


__all__ = ["fix_profile", "PipelineResult"]
