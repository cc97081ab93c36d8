"""Unit tests for pipeline state transitions."""

from __future__ import annotations

import pytest

from profile8_fixer.application.state import (
    PipelineState,
    allowed_transitions,
    can_transition,
)

LINEAR = [
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
]


@pytest.mark.parametrize(("current", "following"), list(zip(LINEAR, LINEAR[1:])))
def test_linear_progression(current: PipelineState, following: PipelineState) -> None:
    """Allow each state to advance to its successor."""
    assert can_transition(current, following)


@pytest.mark.parametrize("state", LINEAR[:-1])
def test_failure_reachable_from_every_state_but_done(state: PipelineState) -> None:
    """Allow FAILURE from every state except DONE."""
    assert can_transition(state, PipelineState.FAILURE)


def test_done_is_terminal() -> None:
    """Allow nothing after DONE."""
    assert allowed_transitions(PipelineState.DONE) == frozenset()


def test_failure_only_goes_to_cleanup() -> None:
    """Route every failure through CLEANUP."""
    assert allowed_transitions(PipelineState.FAILURE) == frozenset({PipelineState.CLEANUP})


def test_steps_cannot_be_skipped() -> None:
    """Reject jumping from BACKUP straight to COMMIT."""
    assert not can_transition(PipelineState.BACKUP, PipelineState.COMMIT)
    assert not can_transition(PipelineState.START, PipelineState.COMMIT)
