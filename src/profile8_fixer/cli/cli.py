#!/usr/bin/env python3
"""
profile8_fixer.cli

Typer-based CLI removing ``DisabledSingleSaveSessions`` nodes from a Baldur's
Gate 3 ``profile8.lsf``.

Examples
--------
Fix the auto-detected profile with a converter on PATH:

    fix-profile8 fix

Explicit paths, abort when nothing matches:

    fix-profile8 fix --tool /path/to/Divine --profile /path/to/profile8.lsf --strict
"""

from __future__ import annotations

import shutil
import traceback
from pathlib import Path

import typer
from pydantic import ValidationError

from profile8_fixer.errors import ConversionError, ProfileFixerError
from profile8_fixer.infrastructure.logging import configure_logging
from profile8_fixer.schemas import FixProfileConfig
from profile8_fixer.settings import Settings

app = typer.Typer(
    name="fix-profile8",
    help="Remove DisabledSingleSaveSessions nodes from a BG3 profile8.lsf.",
    no_args_is_help=True,
)


def _print_run_error(exc: Exception, debug: bool) -> int:
    """Print a user-friendly run error.

    Parameters
    ----------
    exc : Exception
        Exception raised during the run.
    debug : bool
        Whether to include traceback details.

    Returns
    -------
    int
        Process exit code.
    """
    state = getattr(exc, "state", None)
    where = f" ({state.value})" if state is not None else ""
    typer.echo(f"{typer.style('ERROR', fg='red')}{where} {type(exc).__name__}: {exc}", err=True)
    if isinstance(exc, ConversionError) and exc.diagnostics:
        typer.echo(exc.diagnostics, err=True)
    if debug:
        typer.echo("\nTraceback:", err=True)
        typer.echo("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)), err=True)
    code = getattr(exc, "exit_code", None)
    if isinstance(code, int) and code > 0:
        return code
    return 1


# -----------------------------
# Global options
# -----------------------------
@app.callback()
def _main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Show full tracebacks on error."),
) -> None:
    """Initialize shared CLI state."""
    ctx.obj = {"debug": debug}


# -----------------------------
# Commands
# -----------------------------
@app.command("fix")
def fix_cmd(
    ctx: typer.Context,
    profile: Path | None = typer.Option(
        None,
        "--profile",
        help="Path to profile8.lsf (default: auto-detect under PlayerProfiles).",
    ),
    tool: Path | None = typer.Option(
        None,
        "--tool",
        help="Path to Divine/ConverterApp; a .dll runs through dotnet.",
    ),
    workdir: Path | None = typer.Option(
        None, "--workdir", help="Scratch directory for intermediate files."
    ),
    backup_dir: Path | None = typer.Option(
        None, "--backup-dir", help="Central backup directory (default: BACKUP_DIR or ~/Documents/bg3_backups)."
    ),
    no_auto_install: bool = typer.Option(
        False, "--no-auto-install", help="Do not download LSLib when no tool is found."
    ),
    force: bool = typer.Option(
        True,
        "--force/--strict",
        help="Continue when no node matches (--force, default) or abort (--strict).",
    ),
    keep_workdir: bool = typer.Option(
        False, "--keep-workdir", help="Keep the scratch directory (also KEEP_WORKDIR=1)."
    ),
    timeout: float | None = typer.Option(
        None, "--timeout", help="Seconds before a converter call is killed."
    ),
    atomic_commit: bool = typer.Option(
        False,
        "--atomic-commit",
        help="Replace the profile with an atomic rename instead of copying over it.",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Show converter output and debug logs."),
    color: str = typer.Option("auto", "--color", help="Color mode: auto, always or never."),
) -> None:
    """Back up, decode, prune, re-encode and replace the profile."""
    debug: bool = bool(ctx.obj.get("debug", False))
    settings = Settings.from_env()

    try:
        config = FixProfileConfig(
            profile_path=profile,
            tool_path=tool,
            work_dir=workdir,
            backup_dir=backup_dir,
            auto_install=not no_auto_install,
            force=force,
            keep_workdir=keep_workdir,
            atomic_commit=atomic_commit,
            timeout=timeout,
            verbose=verbose,
            color=color,
        )
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc

    configure_logging(config.verbose, config.color, no_color=settings.no_color)

    try:
        from profile8_fixer.api import fix_profile8

        result = fix_profile8(config, settings)
    except ProfileFixerError as exc:
        raise typer.Exit(code=_print_run_error(exc, debug))
    except Exception as exc:
        # Unexpected crash: still show a clean message; debug prints traceback.
        raise typer.Exit(code=_print_run_error(exc, debug))

    typer.echo(f"Removed {result.removed_count} node(s) from {result.target_path}")
    for record in result.backups:
        typer.echo(f"Backup: {record.destination_path}")


@app.command("doctor")
def doctor_cmd(
    tool: Path | None = typer.Option(None, "--tool", help="Converter path to check."),
    profile: Path | None = typer.Option(None, "--profile", help="Profile path to check."),
) -> None:
    """Print resolved converter, launcher, profile and backup locations."""
    from profile8_fixer.adapters.locators import ConverterToolLocator, ProfileLocator
    from profile8_fixer.errors import NotFoundError

    settings = Settings.from_env()

    locator = ConverterToolLocator(tool, auto_install=False)
    try:
        descriptor = locator.locate(Path.cwd())
        typer.echo(f"tool: {descriptor.executable}")
        if descriptor.launcher:
            launcher = shutil.which(descriptor.launcher)
            typer.echo(f"launcher: {descriptor.launcher} ({launcher or '<not installed>'})")
    except NotFoundError:
        typer.echo("tool: <not found>")

    try:
        found = ProfileLocator(profile or settings.default_profile, settings.profiles_root).locate()
        typer.echo(f"profile: {found}")
    except NotFoundError:
        typer.echo("profile: <not found>")

    typer.echo(f"backup dir: {settings.backup_dir}")


if __name__ == "__main__":
    app()
