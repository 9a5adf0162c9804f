import numpy as np
import pytest

from stoch_offload.dtmc import DTMCCreator, gain_and_bias, stationary_distribution
from stoch_offload.models import Action, ActionKind, UserEquipmentState, all_states
from stoch_offload.symbols import GAMMA, GAMMA_C


def build_chain(config):
    return DTMCCreator(config.get_state_manager_config()).create()


def kinds(actions):
    return {a.kind for a in actions}


def test_chain_covers_state_space(simple_config):
    chain = build_chain(simple_config)

    assert chain.states == all_states(simple_config.state_config)
    assert len(chain.states) == 120
    for source, action in chain.pairs():
        for edge in chain.edges(source, action):
            assert edge.destination in chain


def test_legal_actions_single_queue(simple_config):
    chain = build_chain(simple_config)
    s = UserEquipmentState.single_queue

    assert kinds(chain.actions(s(0, 0, 0))) == {ActionKind.NO_OPERATION}
    assert kinds(chain.actions(s(1, 0, 0))) == {
        ActionKind.NO_OPERATION, ActionKind.ADD_TO_CPU, ActionKind.ADD_TO_TRANSMISSION_UNIT,
    }
    assert len(chain.actions(s(2, 0, 0))) == 4
    assert kinds(chain.actions(s(2, 1, 0))) == {ActionKind.NO_OPERATION, ActionKind.ADD_TO_CPU}
    assert kinds(chain.actions(s(2, 0, 1))) == {ActionKind.NO_OPERATION, ActionKind.ADD_TO_TRANSMISSION_UNIT}
    assert kinds(chain.actions(s(5, 3, 2))) == {ActionKind.NO_OPERATION}


def test_power_cap_removes_actions(config_factory):
    chain = build_chain(config_factory(p_max=2.0))
    s = UserEquipmentState.single_queue

    assert ActionKind.ADD_TO_BOTH_UNITS not in kinds(chain.actions(s(2, 0, 0)))
    assert kinds(chain.actions(s(2, 1, 0))) == {ActionKind.NO_OPERATION}
    assert kinds(chain.actions(s(2, 0, 0))) == {
        ActionKind.NO_OPERATION, ActionKind.ADD_TO_CPU, ActionKind.ADD_TO_TRANSMISSION_UNIT,
    }


def test_missing_transmission_unit(config_factory):
    chain = build_chain(config_factory(packets=0))

    for state in chain.states:
        assert state.tu_state == 0
        assert not any(a.uses_tu for a in chain.actions(state))


def test_two_queue_actions(two_queue_config):
    chain = build_chain(two_queue_config)
    actions = chain.actions(UserEquipmentState((1, 2), 0, 0))

    assert Action.add_to_both_units(cpu_queue=1, tu_queue=1) in actions
    assert Action.add_to_both_units(cpu_queue=0, tu_queue=1) in actions
    assert Action.add_to_both_units(cpu_queue=0, tu_queue=0) not in actions
    assert Action.add_to_cpu(0) in actions and Action.add_to_cpu(1) in actions


@pytest.mark.parametrize("fixture_name", ["simple_config", "two_queue_config"])
def test_edge_count_bounded(fixture_name, request):
    config = request.getfixturevalue(fixture_name)
    chain = build_chain(config)
    manager = chain.state_manager

    for source, action in chain.pairs():
        admitted = manager.admit(source, action)
        k = config.state_config.number_of_queues + int(admitted.tu_state > 0)
        assert len(chain.edges(source, action)) == 2 ** k


def test_gamma_symbols_only_for_stochastic_cpu(config_factory):
    def has_gamma(chain):
        return any(
            GAMMA in edge.symbols or GAMMA_C in edge.symbols
            for pair in chain.pairs()
            for edge in chain.edges(*pair)
        )

    assert not has_gamma(build_chain(config_factory(gamma=1.0)))
    assert has_gamma(build_chain(config_factory(gamma=0.5)))


def test_stationary_distribution():
    P = np.array([[0.9, 0.1], [0.5, 0.5]])

    pi = stationary_distribution(P)

    assert pi == pytest.approx([5.0 / 6.0, 1.0 / 6.0])
    assert pi @ P == pytest.approx(pi)


def test_gain_and_bias():
    P = np.array([[0.9, 0.1], [0.5, 0.5]])
    cost = np.array([1.0, 3.0])

    gain, bias = gain_and_bias(P, cost)

    assert gain == pytest.approx(4.0 / 3.0)
    assert bias == pytest.approx([0.0, 10.0 / 3.0])
    assert gain + bias == pytest.approx(cost + P @ bias)
