"""Error taxonomy for profile fixing runs.

Every fatal error carries an ``exit_code`` the CLI uses as process status.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from profile8_fixer.application.state import PipelineState


class ProfileFixerError(Exception):
    """Base class for fatal pipeline errors."""

    exit_code: int = 1

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.state: PipelineState | None = None


class NotFoundError(ProfileFixerError):
    """Converter tool or target profile could not be located."""


class ToolInstallError(NotFoundError):
    """Automatic converter installation failed."""


class BackupError(ProfileFixerError):
    """Backup copies could not be created."""


class NoMatchError(ProfileFixerError):
    """No node was removed while the zero-match policy is strict."""


class ConversionError(ProfileFixerError):
    """External converter failed.

    Parameters
    ----------
    message : str
        Human-readable failure summary.
    diagnostics : str, default=""
        Captured diagnostic stream of the converter.
    returncode : int | None, default=None
        Converter exit status when the process ran at all.
    """

    exit_code = 2

    def __init__(
        self,
        message: str,
        *,
        diagnostics: str = "",
        returncode: int | None = None,
    ) -> None:
        super().__init__(message)
        self.diagnostics = diagnostics
        self.returncode = returncode


class TreeError(ConversionError):
    """Intermediate tree document could not be parsed or written."""


class CommitError(ProfileFixerError):
    """Overwriting the target with the converted resource failed."""

    exit_code = 3


class RunCancelledError(ProfileFixerError):
    """Run interrupted by a termination signal."""

    exit_code = 130


class CleanupWarning(UserWarning):
    """Scratch directory could not be removed."""
