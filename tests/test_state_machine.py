import pytest

from aquaroute.services.routing.models import ResolutionMethod
from aquaroute.services.routing.state_machine import ResolutionState, method_for, next_state


def test_probe_result_never_gates_the_strategies():
    assert next_state(ResolutionState.PROBING, True) is ResolutionState.ATTEMPT_GENETIC
    assert next_state(ResolutionState.PROBING, False) is ResolutionState.ATTEMPT_GENETIC


def test_failures_walk_the_fixed_priority_order():
    state = ResolutionState.ATTEMPT_GENETIC
    visited = [state]
    while state not in (ResolutionState.SUCCESS, ResolutionState.FAILED):
        state = next_state(state, False)
        visited.append(state)

    assert visited == [
        ResolutionState.ATTEMPT_GENETIC,
        ResolutionState.ATTEMPT_STANDARD,
        ResolutionState.ATTEMPT_NEAREST,
        ResolutionState.LOCAL_FALLBACK,
        ResolutionState.FAILED,
    ]


@pytest.mark.parametrize(
    "state",
    [
        ResolutionState.ATTEMPT_GENETIC,
        ResolutionState.ATTEMPT_STANDARD,
        ResolutionState.ATTEMPT_NEAREST,
        ResolutionState.LOCAL_FALLBACK,
    ],
)
def test_first_success_short_circuits(state):
    assert next_state(state, True) is ResolutionState.SUCCESS


def test_terminal_states_have_no_transition():
    with pytest.raises(ValueError):
        next_state(ResolutionState.SUCCESS, True)
    with pytest.raises(ValueError):
        next_state(ResolutionState.FAILED, False)


def test_states_map_to_methods():
    assert method_for(ResolutionState.ATTEMPT_NEAREST) is ResolutionMethod.NEAREST_LOOKUP
    assert method_for(ResolutionState.LOCAL_FALLBACK) is ResolutionMethod.LOCAL_FALLBACK
    assert method_for(ResolutionState.PROBING) is None
