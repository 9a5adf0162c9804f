import pytest

from stoch_offload.config import UserEquipmentStateConfig
from stoch_offload.dtmc import DTMCCreator
from stoch_offload.exceptions import InvalidStateError, InvalidTransitionError, UnknownSymbolError
from stoch_offload.models import Action, UserEquipmentState
from stoch_offload.symbols import BETA, BETA_C, ParameterSymbol, symbol_mapping
from stoch_offload.transition_calculator import IndependentTransitionCalculator


def get_symbol_mapping(system_config):
    return {
        BETA: system_config.beta,
        BETA_C: 1.0 - system_config.beta,
        ParameterSymbol.alpha(): system_config.alpha[0],
        ParameterSymbol.alpha_c(): 1.0 - system_config.alpha[0],
    }


def make_calculator(system_config, mapping=None):
    chain = DTMCCreator(system_config.get_state_manager_config()).create()
    return IndependentTransitionCalculator(mapping or symbol_mapping(system_config), chain)


def test_transmission_admission_without_arrival(simple_config):
    calculator = make_calculator(simple_config, get_symbol_mapping(simple_config))

    value = calculator.get_independent_transition_fraction(
        UserEquipmentState.single_queue(2, 0, 0),
        UserEquipmentState.single_queue(1, 1, 0),
        Action.add_to_transmission_unit(),
    )

    expected = (1.0 - simple_config.beta) * (1.0 - simple_config.alpha[0])
    assert value == pytest.approx(expected, abs=1e-6)


def test_double_label(simple_config):
    state_config = UserEquipmentStateConfig.single_queue(
        task_queue_capacity=10,
        tu_number_of_packets=1,
        cpu_number_of_sections=17,
    )
    system_config = simple_config.with_user_equipment_state_config(state_config)
    calculator = make_calculator(system_config, get_symbol_mapping(system_config))

    value = calculator.get_independent_transition_fraction(
        UserEquipmentState.single_queue(1, 0, 0),
        UserEquipmentState.single_queue(1, 0, 0),
        Action.add_to_transmission_unit(),
    )

    assert value == pytest.approx(system_config.alpha[0] * system_config.beta, abs=1e-6)


def test_dropped_arrival_aliases_onto_same_destination(simple_config):
    calculator = make_calculator(simple_config)
    full = UserEquipmentState.single_queue(5, 0, 0)

    # arrival (dropped) and no arrival both leave the state unchanged
    assert calculator.get_independent_transition_fraction(full, full, Action.no_operation()) == pytest.approx(1.0)
    assert len(calculator.chain.edges(full, Action.no_operation())) == 2


@pytest.mark.parametrize("fixture_name", ["simple_config", "small_config", "two_queue_config"])
def test_outgoing_probabilities_sum_to_one(fixture_name, request):
    config = request.getfixturevalue(fixture_name)
    calculator = make_calculator(config)

    for (source, action), distribution in calculator.resolve().items():
        assert sum(distribution.values()) == pytest.approx(1.0, abs=1e-6), (source, action)
        assert all(0.0 <= p <= 1.0 for p in distribution.values())


def test_stochastic_cpu_sums_to_one(config_factory):
    config = config_factory(queue=3, packets=2, sections=3, alpha=0.4, beta=0.5, gamma=0.7)
    calculator = make_calculator(config)

    for distribution in calculator.resolve().values():
        assert sum(distribution.values()) == pytest.approx(1.0, abs=1e-6)

    value = calculator.get_independent_transition_fraction(
        UserEquipmentState.single_queue(1, 0, 0),
        UserEquipmentState.single_queue(0, 0, 1),
        Action.add_to_cpu(),
    )
    assert value == pytest.approx((1.0 - 0.7) * (1.0 - 0.4))


def test_unreachable_destination_is_zero(simple_config):
    calculator = make_calculator(simple_config)

    value = calculator.get_independent_transition_fraction(
        UserEquipmentState.single_queue(2, 0, 0),
        UserEquipmentState.single_queue(0, 0, 0),
        Action.add_to_transmission_unit(),
    )
    assert value == 0.0


def test_unknown_symbol(simple_config):
    mapping = {ParameterSymbol.alpha(): 0.1, ParameterSymbol.alpha_c(): 0.9}
    calculator = make_calculator(simple_config, mapping)

    with pytest.raises(UnknownSymbolError):
        calculator.get_independent_transition_fraction(
            UserEquipmentState.single_queue(2, 0, 0),
            UserEquipmentState.single_queue(1, 1, 0),
            Action.add_to_transmission_unit(),
        )


def test_states_outside_chain(simple_config):
    calculator = make_calculator(simple_config)
    inside = UserEquipmentState.single_queue(1, 0, 0)
    outside = UserEquipmentState.single_queue(6, 0, 0)

    with pytest.raises(InvalidStateError):
        calculator.get_independent_transition_fraction(outside, inside, Action.no_operation())
    with pytest.raises(InvalidStateError):
        calculator.get_independent_transition_fraction(inside, outside, Action.no_operation())


def test_illegal_action(simple_config):
    calculator = make_calculator(simple_config)
    empty = UserEquipmentState.single_queue(0, 0, 0)

    with pytest.raises(InvalidTransitionError):
        calculator.get_independent_transition_fraction(empty, empty, Action.add_to_cpu())


def test_resolution_is_idempotent(simple_config):
    calculator = make_calculator(simple_config)
    args = (
        UserEquipmentState.single_queue(3, 2, 1),
        UserEquipmentState.single_queue(3, 2, 2),
        Action.no_operation(),
    )

    first = calculator.get_independent_transition_fraction(*args)
    second = calculator.get_independent_transition_fraction(*args)

    assert first == second
    assert first == pytest.approx((1.0 - simple_config.beta) * (1.0 - simple_config.alpha[0]))


def test_chain_is_reused_across_parameter_values(simple_config):
    chain = DTMCCreator(simple_config.get_state_manager_config()).create()
    source = UserEquipmentState.single_queue(2, 0, 0)
    dest = UserEquipmentState.single_queue(1, 1, 0)

    values = []
    for alpha in (0.1, 0.5, 0.9):
        config = simple_config.with_alpha([alpha])
        calculator = IndependentTransitionCalculator(symbol_mapping(config), chain)
        values.append(calculator.get_independent_transition_fraction(source, dest, Action.add_to_transmission_unit()))

    assert values == pytest.approx([0.1 * 0.9, 0.1 * 0.5, 0.1 * 0.1])
