import pytest

from stoch_offload.config import (
    Constant,
    Linspace,
    UserEquipmentComponentsConfig,
    UserEquipmentStateConfig,
)
from stoch_offload.exceptions import InvalidConfigurationError
from stoch_offload.models import UserEquipmentState, all_states

sample_state_config = UserEquipmentStateConfig.single_queue(
    task_queue_capacity=5,
    tu_number_of_packets=4,
    cpu_number_of_sections=3,
)


def test_state_uniqueness():
    states = all_states(sample_state_config)

    assert len(states) == len(set(states))
    assert len(states) == 6 * 5 * 4 == sample_state_config.number_of_states


def test_states_within_capacity():
    for state in all_states(sample_state_config):
        assert 0 <= state.queue_lengths[0] <= 5
        assert 0 <= state.tu_state <= 4
        assert 0 <= state.cpu_state <= 3


def test_enumeration_is_deterministic():
    assert all_states(sample_state_config) == all_states(sample_state_config)


def test_multi_queue_state_count():
    config = UserEquipmentStateConfig(
        task_queue_capacities=(2, 3),
        tu_number_of_packets=1,
        cpu_number_of_sections=0,
    )
    states = all_states(config)

    assert len(set(states)) == len(states) == 3 * 4 * 2 * 1
    assert UserEquipmentState((2, 3), 1, 0) in states


def test_absent_resources_collapse_dimensions():
    config = UserEquipmentStateConfig.single_queue(4, 0, 0)

    assert [s.queue_lengths[0] for s in all_states(config)] == [0, 1, 2, 3, 4]


@pytest.mark.parametrize("queue, packets, sections", [(-1, 1, 1), (0, 1, 1), (3, -1, 1), (3, 1, -2)])
def test_bad_capacities_are_rejected(queue, packets, sections):
    with pytest.raises(InvalidConfigurationError):
        UserEquipmentStateConfig.single_queue(queue, packets, sections)


@pytest.mark.parametrize("kwargs", [
    dict(alpha=0.0),
    dict(alpha=1.2),
    dict(beta=-0.1),
    dict(beta=1.01),
    dict(gamma=0.0),
    dict(p_tx=0.0),
    dict(eta=-1.0),
])
def test_bad_components_are_rejected(kwargs):
    with pytest.raises(InvalidConfigurationError):
        UserEquipmentComponentsConfig.single_queue(**kwargs)


def test_alpha_count_must_match_queue_count(two_queue_config):
    with pytest.raises(InvalidConfigurationError):
        two_queue_config.with_alpha([0.3])


def test_configuration_errors_are_value_errors():
    with pytest.raises(ValueError):
        UserEquipmentComponentsConfig.single_queue(alpha=2.0)


def test_with_helpers_do_not_mutate(simple_config):
    changed = simple_config.with_alpha([0.4]).with_eta(2.0)

    assert changed.alpha == (0.4,)
    assert changed.eta == 2.0
    assert simple_config.alpha == (0.1,)
    assert simple_config.eta == 0.0


def test_power_budget_defaults_to_p_max(small_config):
    assert small_config.eta is None
    assert small_config.power_budget == small_config.components_config.p_max


def test_parameter_ranges():
    assert Constant(0.3).values() == [0.3]
    assert Linspace(0.1, 0.5, 5).values() == pytest.approx([0.1, 0.2, 0.3, 0.4, 0.5])
    assert Linspace(0.2, 0.2, 1).values() == [0.2]
    with pytest.raises(InvalidConfigurationError):
        Linspace(0.1, 0.5, 1)
    with pytest.raises(InvalidConfigurationError):
        Linspace(0.1, 0.5, 0)
