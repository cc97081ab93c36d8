"""Typed option objects shared across the fixing use-case."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from profile8_fixer.settings import (
    FORMAT_ID,
    IDENTITY_KEY,
    IDENTITY_VALUE,
    TARGET_TAG,
)
from profile8_fixer.types import FormatId


class ZeroMatchPolicy(str, Enum):
    """What to do when no node matched the selector."""

    CONTINUE = "continue"
    STRICT = "strict"


class CommitStrategy(str, Enum):
    """How the converted resource replaces the target."""

    COPY = "copy"
    ATOMIC = "atomic"


@dataclass(frozen=True)
class NodeSelector:
    """Identity predicate for nodes to prune."""

    tag: str = TARGET_TAG
    key: str = IDENTITY_KEY
    value: str = IDENTITY_VALUE


@dataclass(frozen=True)
class FixOptions:
    """Options for one pipeline run."""

    backup_dir: Path
    work_dir: Path | None = None
    keep_workdir: bool = False
    zero_match_policy: ZeroMatchPolicy = ZeroMatchPolicy.CONTINUE
    commit_strategy: CommitStrategy = CommitStrategy.COPY
    format_id: FormatId = FORMAT_ID
    selector: NodeSelector = NodeSelector()
    handle_signals: bool = True
