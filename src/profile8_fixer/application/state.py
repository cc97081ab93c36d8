"""Pipeline state machine."""

from __future__ import annotations

from enum import Enum


class PipelineState(str, Enum):
    """States of a fixing run, in execution order."""

    START = "start"
    RESOLVE_TOOL = "resolve-tool"
    RESOLVE_TARGET = "resolve-target"
    BACKUP = "backup"
    DECODE_TO_TREE = "decode-to-tree"
    MUTATE = "mutate"
    ENCODE_TO_BINARY = "encode-to-binary"
    COMMIT = "commit"
    CLEANUP = "cleanup"
    DONE = "done"
    FAILURE = "failure"


_LINEAR = (
    PipelineState.START,
    PipelineState.RESOLVE_TOOL,
    PipelineState.RESOLVE_TARGET,
    PipelineState.BACKUP,
    PipelineState.DECODE_TO_TREE,
    PipelineState.MUTATE,
    PipelineState.ENCODE_TO_BINARY,
    PipelineState.COMMIT,
    PipelineState.CLEANUP,
    PipelineState.DONE,
)


def allowed_transitions(state: PipelineState) -> frozenset[PipelineState]:
    """Return the states reachable from ``state``."""
    if state is PipelineState.DONE:
        return frozenset()
    if state is PipelineState.FAILURE:
        return frozenset({PipelineState.CLEANUP})
    if state is PipelineState.CLEANUP:
        return frozenset({PipelineState.DONE, PipelineState.FAILURE})
    index = _LINEAR.index(state)
    return frozenset({_LINEAR[index + 1], PipelineState.FAILURE})


def can_transition(current: PipelineState, target: PipelineState) -> bool:
    """Check whether ``current -> target`` is a legal transition."""
    return target in allowed_transitions(current)
