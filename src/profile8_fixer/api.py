"""Public API wiring default adapters into the fixing use-case."""

from __future__ import annotations

from pathlib import Path

from pydantic import ValidationError

from profile8_fixer.adapters.converters import SubprocessResourceConverter
from profile8_fixer.adapters.locators import ConverterToolLocator, ProfileLocator
from profile8_fixer.application.results import PipelineResult
from profile8_fixer.application.use_cases import build_fix_options, fix_profile
from profile8_fixer.errors import ProfileFixerError
from profile8_fixer.infrastructure.installer import ReleaseInstaller
from profile8_fixer.schemas import FixProfileConfig
from profile8_fixer.settings import Settings


def validate_config(**params: object) -> FixProfileConfig:
    """Validate raw run parameters.

    Raises
    ------
    ProfileFixerError
        If a parameter is invalid.
    """
    try:
        return FixProfileConfig.model_validate(params)
    except ValidationError as exc:
        raise ProfileFixerError(f"Invalid run parameters: {exc}") from exc


def build_tool_locator(config: FixProfileConfig) -> ConverterToolLocator:
    """Create the default converter locator for ``config``."""
    return ConverterToolLocator(
        config.tool_path,
        auto_install=config.auto_install,
        installer=ReleaseInstaller(),
    )


def build_profile_locator(config: FixProfileConfig, settings: Settings) -> ProfileLocator:
    """Create the default profile locator for ``config``."""
    return ProfileLocator(
        config.profile_path or settings.default_profile,
        profiles_root=settings.profiles_root,
    )


def fix_profile8(
    config: FixProfileConfig,
    settings: Settings | None = None,
    *,
    handle_signals: bool = True,
) -> PipelineResult:
    """Remove ``DisabledSingleSaveSessions`` nodes from a BG3 profile.

    Parameters
    ----------
    config : FixProfileConfig
        Validated run parameters.
    settings : Settings | None, default=None
        Environment defaults; read from ``os.environ`` when omitted.
    handle_signals : bool, default=True
        Install SIGINT/SIGTERM cancellation handlers while running.

    Returns
    -------
    PipelineResult
        Summary of the committed run.
    """
    env = settings or Settings.from_env()
    options = build_fix_options(
        backup_dir=config.backup_dir or env.backup_dir,
        work_dir=config.work_dir,
        keep_workdir=config.keep_workdir or env.keep_workdir,
        force=config.force,
        atomic_commit=config.atomic_commit,
        handle_signals=handle_signals,
    )
    return fix_profile(
        tool_locator=build_tool_locator(config),
        target_locator=build_profile_locator(config, env),
        options=options,
        converter=SubprocessResourceConverter(timeout=config.timeout),
    )


def fix_profile_file(
    profile_path: Path | None = None,
    *,
    tool_path: Path | None = None,
    force: bool = True,
    **params: object,
) -> PipelineResult:
    """Validate keyword parameters and run :func:`fix_profile8`."""
    config = validate_config(profile_path=profile_path, tool_path=tool_path, force=force, **params)
    return fix_profile8(config)
