import pytest

from stoch_offload.models import Action, UserEquipmentState, UserEquipmentStateManager
from stoch_offload.policy import (
    ALL_BASELINES,
    GreedyLocalFirstPolicy,
    GreedyOffloadFirstPolicy,
    LocalOnlyPolicy,
    StochasticPolicy,
    TransmitOnlyPolicy,
)


def legal(config, state):
    return UserEquipmentStateManager(config.get_state_manager_config()).legal_actions(state)


def choose(policy, config, state):
    distribution = policy.distribution_for(state, legal(config, state))
    assert sum(distribution.values()) == pytest.approx(1.0)
    (action, _), = distribution.items()
    return action


def test_baseline_registry():
    assert set(ALL_BASELINES) == {"local_only", "transmit_only", "greedy_offload_first", "greedy_local_first"}


@pytest.mark.parametrize("policy, queue, expected", [
    (LocalOnlyPolicy(), 2, Action.add_to_cpu()),
    (TransmitOnlyPolicy(), 2, Action.add_to_transmission_unit()),
    (GreedyOffloadFirstPolicy(), 2, Action.add_to_both_units()),
    (GreedyLocalFirstPolicy(), 2, Action.add_to_both_units()),
    (GreedyOffloadFirstPolicy(), 1, Action.add_to_transmission_unit()),
    (GreedyLocalFirstPolicy(), 1, Action.add_to_cpu()),
    (LocalOnlyPolicy(), 0, Action.no_operation()),
])
def test_idle_units(simple_config, policy, queue, expected):
    state = UserEquipmentState.single_queue(queue, 0, 0)

    assert choose(policy, simple_config, state) == expected


def test_busy_units(simple_config):
    cpu_busy = UserEquipmentState.single_queue(3, 0, 2)
    tu_busy = UserEquipmentState.single_queue(3, 1, 0)

    assert choose(LocalOnlyPolicy(), simple_config, cpu_busy) == Action.no_operation()
    assert choose(GreedyLocalFirstPolicy(), simple_config, cpu_busy) == Action.add_to_transmission_unit()
    assert choose(TransmitOnlyPolicy(), simple_config, tu_busy) == Action.no_operation()
    assert choose(GreedyOffloadFirstPolicy(), simple_config, tu_busy) == Action.add_to_cpu()


def test_power_cap_downgrades_greedy_choice(config_factory):
    config = config_factory(p_max=2.0)
    state = UserEquipmentState.single_queue(3, 0, 0)

    assert choose(GreedyOffloadFirstPolicy(), config, state) == Action.add_to_transmission_unit()
    assert choose(GreedyLocalFirstPolicy(), config, state) == Action.add_to_cpu()


def test_longest_queue_first(two_queue_config):
    state = UserEquipmentState((1, 2), 0, 0)

    assert choose(TransmitOnlyPolicy(), two_queue_config, state) == Action.add_to_transmission_unit(1)
    assert choose(LocalOnlyPolicy(), two_queue_config, state) == Action.add_to_cpu(1)
    assert choose(GreedyOffloadFirstPolicy(), two_queue_config, state) == \
        Action.add_to_both_units(cpu_queue=1, tu_queue=1)


def test_lowest_index_on_ties(two_queue_config):
    state = UserEquipmentState((2, 2), 0, 0)

    assert choose(LocalOnlyPolicy(), two_queue_config, state) == Action.add_to_cpu(0)


def test_stochastic_policy_lookup_and_fallback(simple_config):
    known = UserEquipmentState.single_queue(2, 0, 0)
    unknown = UserEquipmentState.single_queue(1, 0, 0)
    policy = StochasticPolicy(
        {known: {Action.add_to_cpu(): 0.25, Action.add_to_both_units(): 0.75}},
        eta=1.0,
    )

    assert policy.distribution_for(known, legal(simple_config, known)) == {
        Action.add_to_cpu(): 0.25, Action.add_to_both_units(): 0.75,
    }
    fallback = policy.distribution_for(unknown, legal(simple_config, unknown))
    assert set(fallback) == set(legal(simple_config, unknown))
    assert all(p == pytest.approx(1.0 / 3.0) for p in fallback.values())


def test_stochastic_policy_table_is_read_only():
    state = UserEquipmentState.single_queue(1, 0, 0)
    policy = StochasticPolicy({state: {Action.no_operation(): 1.0}}, eta=0.0)

    with pytest.raises(TypeError):
        policy.table[state] = {}
