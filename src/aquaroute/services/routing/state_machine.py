"""States and transitions of a single route resolution."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from .models import ResolutionMethod


class ResolutionState(str, Enum):
    PROBING = "PROBING"
    ATTEMPT_GENETIC = "ATTEMPT_GENETIC"
    ATTEMPT_STANDARD = "ATTEMPT_STANDARD"
    ATTEMPT_NEAREST = "ATTEMPT_NEAREST"
    LOCAL_FALLBACK = "LOCAL_FALLBACK"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


TERMINAL_STATES = frozenset({ResolutionState.SUCCESS, ResolutionState.FAILED})

STATE_METHODS: dict[ResolutionState, ResolutionMethod] = {
    ResolutionState.ATTEMPT_GENETIC: ResolutionMethod.GENETIC,
    ResolutionState.ATTEMPT_STANDARD: ResolutionMethod.STANDARD,
    ResolutionState.ATTEMPT_NEAREST: ResolutionMethod.NEAREST_LOOKUP,
    ResolutionState.LOCAL_FALLBACK: ResolutionMethod.LOCAL_FALLBACK,
}

# Where each state goes when its attempt fails.
_ON_FAILURE: dict[ResolutionState, ResolutionState] = {
    ResolutionState.ATTEMPT_GENETIC: ResolutionState.ATTEMPT_STANDARD,
    ResolutionState.ATTEMPT_STANDARD: ResolutionState.ATTEMPT_NEAREST,
    ResolutionState.ATTEMPT_NEAREST: ResolutionState.LOCAL_FALLBACK,
    ResolutionState.LOCAL_FALLBACK: ResolutionState.FAILED,
}


def method_for(state: ResolutionState) -> Optional[ResolutionMethod]:
    return STATE_METHODS.get(state)


def next_state(state: ResolutionState, succeeded: bool) -> ResolutionState:
    """Pure transition function.

    The probe outcome never changes the path: probing always continues with
    the genetic attempt. Any successful attempt ends in SUCCESS.
    """
    if state in TERMINAL_STATES:
        raise ValueError(f"{state.value} is terminal")
    if state is ResolutionState.PROBING:
        return ResolutionState.ATTEMPT_GENETIC
    if succeeded:
        return ResolutionState.SUCCESS
    return _ON_FAILURE[state]
