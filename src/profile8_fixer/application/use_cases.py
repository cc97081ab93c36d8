"""Application use-case orchestrating the profile fixing pipeline."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import warnings
from pathlib import Path

from profile8_fixer.adapters.backups import FilesystemBackupManager
from profile8_fixer.adapters.converters import SubprocessResourceConverter
from profile8_fixer.adapters.tree import LxmlTreeMutator
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
from profile8_fixer.application.results import (
    PipelineResult,
    PipelineRun,
    StepOutcome,
)
from profile8_fixer.application.state import PipelineState, can_transition
from profile8_fixer.errors import (
    CleanupWarning,
    CommitError,
    NoMatchError,
    ProfileFixerError,
)
from profile8_fixer.infrastructure.signals import cancel_on_signals

logger = logging.getLogger(__name__)

SCRATCH_PREFIX = "profile8-"


class PipelineOrchestrator:
    """Run backup, decode, prune, encode and commit against one profile.

    The target is never written before ``COMMIT``; every intermediate lives in
    a run-owned scratch directory that is released on every exit path unless
    retention is requested.

    Parameters
    ----------
    tool_locator : ToolLocator
        Resolves the converter.
    target_locator : TargetLocator
        Resolves the profile to edit.
    options : FixOptions
        Run options.
    backups, converter, mutator : optional
        Port implementations; filesystem, subprocess and lxml defaults.
    """

    def __init__(
        self,
        *,
        tool_locator: ToolLocator,
        target_locator: TargetLocator,
        options: FixOptions,
        backups: BackupManager | None = None,
        converter: ResourceConverter | None = None,
        mutator: TreeMutator | None = None,
    ) -> None:
        self._tool_locator = tool_locator
        self._target_locator = target_locator
        self._options = options
        self._backups = backups or FilesystemBackupManager()
        self._converter = converter or SubprocessResourceConverter()
        self._mutator = mutator or LxmlTreeMutator()
        self.run_record = PipelineRun()

    def run(self) -> PipelineResult:
        """Execute one run.

        Returns
        -------
        PipelineResult
            Summary of a committed run.

        Raises
        ------
        ProfileFixerError
            Fatal failure; ``error.state`` names the failing step. Cleanup has
            already run when this propagates.
        """
        record = self.run_record = PipelineRun()
        failed = False
        with cancel_on_signals(self._options.handle_signals):
            try:
                scratch = record.scratch_dir = self._create_scratch()
                target = self._execute(record, scratch)
            except ProfileFixerError as exc:
                failed = True
                exc.state = record.state
                record.exit_status = exc.exit_code
                self._fail(record, str(exc))
                raise
            except BaseException as exc:
                failed = True
                record.exit_status = 130 if isinstance(exc, KeyboardInterrupt) else 1
                self._fail(record, f"{type(exc).__name__}: {exc}")
                raise
            finally:
                self._cleanup(record, failed)

        record.exit_status = 0
        return PipelineResult(
            target_path=target,
            backups=record.backups,
            removed_count=record.removed_count or 0,
            steps=tuple(record.steps),
            scratch_dir=scratch,
            scratch_retained=record.scratch_retained,
        )

    def _execute(self, record: PipelineRun, scratch: Path) -> Path:
        options = self._options
        selector = options.selector

        self._enter(record, PipelineState.RESOLVE_TOOL)
        tool = record.tool = self._tool_locator.locate(scratch)
        self._complete(record, str(tool.executable))

        self._enter(record, PipelineState.RESOLVE_TARGET)
        target = record.target_path = self._target_locator.locate()
        self._complete(record, str(target))

        self._enter(record, PipelineState.BACKUP)
        record.backups = tuple(self._backups.create_backups(target, options.backup_dir))
        self._complete(record, ", ".join(str(b.destination_path) for b in record.backups))

        tree_path = scratch / f"{target.stem}.lsx"
        binary_path = scratch / f"{target.stem}.lsf"

        self._enter(record, PipelineState.DECODE_TO_TREE)
        logger.info("Converting LSF -> LSX...")
        self._converter.convert(tool, target, tree_path, options.format_id)
        self._complete(record, str(tree_path))

        self._enter(record, PipelineState.MUTATE)
        logger.info("Removing %s nodes...", selector.value)
        removed = record.removed_count = self._prune(tree_path, selector)
        self._complete(record, f"removed {removed}")

        self._enter(record, PipelineState.ENCODE_TO_BINARY)
        logger.info("Converting LSX -> LSF...")
        self._converter.convert(tool, tree_path, binary_path, options.format_id)
        self._complete(record, str(binary_path))

        self._enter(record, PipelineState.COMMIT)
        self._commit(binary_path, target, record)
        self._complete(record, str(target))
        logger.info("Replaced %s successfully.", target.name, extra={"status": "ok"})
        return target

    def _prune(self, tree_path: Path, selector: NodeSelector) -> int:
        document = self._mutator.load(tree_path)
        found = self._mutator.count_nodes(document, selector.key, selector.value, selector.tag)
        logger.debug("Found %d %s node(s) in %s", found, selector.value, tree_path.name)
        removed = self._mutator.prune_nodes(document, selector.key, selector.value, selector.tag)
        if removed == 0:
            if self._options.zero_match_policy is ZeroMatchPolicy.STRICT:
                raise NoMatchError(
                    f"No {selector.value} nodes found. Aborting to keep original safe."
                )
            logger.warning("No %s nodes found. Continuing.", selector.value)
        else:
            logger.info("Removed %d node(s).", removed, extra={"status": "ok"})
        self._mutator.save(document, tree_path)
        return removed

    def _commit(self, produced: Path, target: Path, record: PipelineRun) -> None:
        try:
            if self._options.commit_strategy is CommitStrategy.ATOMIC:
                try:
                    atomic_replace(produced, target)
                    return
                except OSError as exc:
                    logger.warning("Atomic replace failed (%s); copying over target.", exc)
            shutil.copy2(produced, target)
        except OSError as exc:
            restore = record.backups[0].destination_path if record.backups else None
            raise CommitError(
                f"Failed to replace {target}: {exc}. Restore from backup: {restore}"
            ) from exc

    def _create_scratch(self) -> Path:
        work_dir = self._options.work_dir
        try:
            if work_dir is None:
                return Path(tempfile.mkdtemp(prefix=SCRATCH_PREFIX))
            work_dir.mkdir(parents=True, exist_ok=True)
            return work_dir
        except OSError as exc:
            raise ProfileFixerError(f"Could not create work directory: {exc}") from exc

    def _cleanup(self, record: PipelineRun, failed: bool) -> None:
        self._transition(record, PipelineState.CLEANUP)
        scratch = record.scratch_dir
        if scratch is not None:
            if self._options.keep_workdir:
                record.scratch_retained = True
                logger.info("Keeping work directory: %s", scratch)
            else:
                try:
                    shutil.rmtree(scratch)
                except OSError as exc:
                    message = f"Could not remove work directory {scratch}: {exc}"
                    logger.warning("%s", message)
                    warnings.warn(message, CleanupWarning, stacklevel=2)
        record.steps.append(StepOutcome(PipelineState.CLEANUP, ok=True))
        self._transition(record, PipelineState.FAILURE if failed else PipelineState.DONE)

    def _enter(self, record: PipelineRun, state: PipelineState) -> None:
        self._transition(record, state)
        logger.debug("step: %s", state.value)

    @staticmethod
    def _complete(record: PipelineRun, detail: str = "") -> None:
        record.steps.append(StepOutcome(record.state, ok=True, detail=detail))

    @staticmethod
    def _fail(record: PipelineRun, detail: str) -> None:
        record.steps.append(StepOutcome(record.state, ok=False, detail=detail))
        record.state = PipelineState.FAILURE

    @staticmethod
    def _transition(record: PipelineRun, state: PipelineState) -> None:
        if not can_transition(record.state, state):
            raise RuntimeError(f"Illegal pipeline transition {record.state.value} -> {state.value}")
        record.state = state


def atomic_replace(source: Path, target: Path) -> None:
    """Copy ``source`` next to ``target`` then rename it over ``target``."""
    handle = tempfile.NamedTemporaryFile(
        dir=target.parent,
        prefix=f".{target.name}.",
        suffix=".tmp",
        delete=False,
    )
    handle.close()
    staged = Path(handle.name)
    try:
        shutil.copy2(source, staged)
        os.replace(staged, target)
    except OSError:
        staged.unlink(missing_ok=True)
        raise


def build_fix_options(
    *,
    backup_dir: Path,
    work_dir: Path | None = None,
    keep_workdir: bool = False,
    force: bool = True,
    atomic_commit: bool = False,
    handle_signals: bool = True,
) -> FixOptions:
    """Build typed option object from command/API params."""
    return FixOptions(
        backup_dir=backup_dir,
        work_dir=work_dir,
        keep_workdir=keep_workdir,
        zero_match_policy=ZeroMatchPolicy.CONTINUE if force else ZeroMatchPolicy.STRICT,
        commit_strategy=CommitStrategy.ATOMIC if atomic_commit else CommitStrategy.COPY,
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
    """Use-case: prune the configured nodes from one profile."""
    return PipelineOrchestrator(
        tool_locator=tool_locator,
        target_locator=target_locator,
        options=options,
        backups=backups,
        converter=converter,
        mutator=mutator,
    ).run()
