"""Tests for the request lifecycle."""

import pytest

from agentwire.a2a.lifecycle import RequestLifecycle, RequestPhase
from agentwire.exceptions import RequestStateError


def test_happy_path():
    lc = RequestLifecycle("r1")
    for phase in (
        RequestPhase.VALIDATED,
        RequestPhase.SESSION_RESOLVED,
        RequestPhase.EXECUTED,
        RequestPhase.RESPONDED,
    ):
        lc.transition(phase)
    assert lc.phase == RequestPhase.RESPONDED
    assert lc.is_terminal


def test_cannot_skip_phases():
    lc = RequestLifecycle("r1")
    with pytest.raises(RequestStateError):
        lc.transition(RequestPhase.EXECUTED)


def test_fail_from_any_phase():
    lc = RequestLifecycle("r1")
    lc.transition(RequestPhase.VALIDATED)
    lc.fail()
    assert lc.phase == RequestPhase.FAILED


def test_fail_after_responded_is_noop():
    lc = RequestLifecycle("r1")
    lc.transition(RequestPhase.VALIDATED)
    lc.transition(RequestPhase.SESSION_RESOLVED)
    lc.transition(RequestPhase.EXECUTED)
    lc.transition(RequestPhase.RESPONDED)
    lc.fail()
    assert lc.phase == RequestPhase.RESPONDED


def test_listeners_notified():
    seen = []
    lc = RequestLifecycle("r1")
    lc.on_transition(lambda ref, old, new: seen.append((ref, old, new)))
    lc.transition(RequestPhase.VALIDATED)
    assert seen == [("r1", RequestPhase.RECEIVED, RequestPhase.VALIDATED)]
