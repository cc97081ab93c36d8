"""External LSLib converter invoked as a blocking subprocess."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import time
from collections.abc import Callable
from pathlib import Path

from profile8_fixer.application.results import (
    ConversionJob,
    ConversionResult,
    ToolDescriptor,
)
from profile8_fixer.errors import ConversionError

logger = logging.getLogger(__name__)

CONVERT_ACTION = "convert-resource"


def build_argv(tool: ToolDescriptor, job: ConversionJob, launcher_path: str | None = None) -> list[str]:
    """Build the converter argument list for ``job``.

    Parameters
    ----------
    tool : ToolDescriptor
        Resolved converter.
    job : ConversionJob
        Source, destination and format of the conversion.
    launcher_path : str | None, default=None
        Resolved launcher executable, required when the tool has a launcher.

    Returns
    -------
    list[str]
        ``[launcher] tool -a convert-resource -g FORMAT -s SOURCE -d DEST``.
    """
    prefix = [launcher_path or tool.launcher or ""] if tool.requires_launcher else []
    return [
        *prefix,
        str(tool.executable),
        "-a",
        CONVERT_ACTION,
        "-g",
        job.format_id,
        "-s",
        str(job.source_path),
        "-d",
        str(job.destination_path),
    ]


class SubprocessResourceConverter:
    """Run the converter synchronously and translate its exit status.

    Parameters
    ----------
    timeout : float | None, default=None
        Seconds before the converter is killed; ``None`` waits indefinitely.
    which : Callable[[str], str | None], default=shutil.which
        Launcher lookup.
    """

    def __init__(
        self,
        timeout: float | None = None,
        which: Callable[[str], str | None] = shutil.which,
    ) -> None:
        self._timeout = timeout
        self._which = which

    def convert(
        self,
        tool: ToolDescriptor,
        source_path: Path,
        dest_path: Path,
        format_id: str,
    ) -> ConversionResult:
        """Convert ``source_path`` into ``dest_path``.

        Raises
        ------
        ConversionError
            On non-zero exit, missing launcher, spawn failure, timeout or a
            missing destination. Any partial destination is deleted.
        """
        job = ConversionJob(
            source_path=source_path,
            destination_path=dest_path,
            format_id=format_id,
        )
        launcher_path: str | None = None
        if tool.launcher is not None:
            launcher_path = self._which(tool.launcher)
            if launcher_path is None:
                raise ConversionError(
                    f"{tool.launcher} not found, but is required to run: {tool.executable}"
                )

        # Output left by an earlier run must never pass as this run's result.
        _discard(dest_path)
        if dest_path.exists():
            raise ConversionError(f"Could not clear stale converter output {dest_path}")

        argv = build_argv(tool, job, launcher_path)
        env = {**os.environ, **tool.environment}
        logger.debug("Running converter: %s", " ".join(argv))

        started = time.monotonic()
        try:
            completed = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                errors="replace",
                env=env,
                timeout=self._timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            _discard(dest_path)
            raise ConversionError(
                f"Converter timed out after {self._timeout:g}s converting {source_path.name}",
                diagnostics=_as_text(exc.stderr) or _as_text(exc.stdout),
            ) from exc
        except OSError as exc:
            _discard(dest_path)
            raise ConversionError(f"Could not run converter {tool.executable}: {exc}") from exc

        result = ConversionResult(
            job=job,
            argv=tuple(argv),
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            duration_seconds=time.monotonic() - started,
        )
        if result.stdout:
            logger.debug("converter stdout:\n%s", result.stdout.rstrip())
        if result.stderr:
            logger.debug("converter stderr:\n%s", result.stderr.rstrip())

        if not result.ok:
            _discard(dest_path)
            raise ConversionError(
                f"Converter exited with status {result.returncode} converting "
                f"{source_path.name} -> {dest_path.name}",
                diagnostics=(result.stderr or result.stdout).strip(),
                returncode=result.returncode,
            )
        if not dest_path.is_file():
            raise ConversionError(
                f"Converter reported success but did not write {dest_path}",
                diagnostics=(result.stderr or result.stdout).strip(),
                returncode=result.returncode,
            )
        return result


def _as_text(stream: str | bytes | None) -> str:
    if stream is None:
        return ""
    if isinstance(stream, bytes):
        return stream.decode("utf-8", errors="replace")
    return stream


def _discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError:
        logger.warning("Could not remove invalid converter output %s", path)
