import pytest

from stoch_offload.config import (
    EnvironmentParameters,
    OffloadingSystemConfig,
    UserEquipmentComponentsConfig,
    UserEquipmentConfig,
    UserEquipmentStateConfig,
)


def make_config(queue=5, packets=4, sections=3, alpha=0.1, beta=0.9, eta=0.0,
                p_tx=1.5, p_local=1.5, p_max=500.0, gamma=1.0, t_rx=0.0):
    return OffloadingSystemConfig(
        user_equipment_config=UserEquipmentConfig(
            state_config=UserEquipmentStateConfig.single_queue(
                task_queue_capacity=queue,
                tu_number_of_packets=packets,
                cpu_number_of_sections=sections,
            ),
            components_config=UserEquipmentComponentsConfig.single_queue(
                alpha=alpha, beta=beta, eta=eta,
                p_tx=p_tx, p_local=p_local, p_max=p_max, gamma=gamma,
            ),
        ),
        environment_parameters=EnvironmentParameters(n_cloud=1, t_rx=t_rx),
    )


@pytest.fixture
def simple_config():
    # eta is not used by the baselines, set to whatever
    return make_config()


@pytest.fixture
def small_config():
    return make_config(queue=3, packets=1, sections=2, alpha=0.3, beta=0.7, eta=None)


@pytest.fixture
def two_queue_config():
    return OffloadingSystemConfig(
        user_equipment_config=UserEquipmentConfig(
            state_config=UserEquipmentStateConfig(
                task_queue_capacities=(2, 3),
                tu_number_of_packets=2,
                cpu_number_of_sections=1,
            ),
            components_config=UserEquipmentComponentsConfig(
                alpha=(0.2, 0.1), beta=0.6, eta=None,
                p_tx=1.5, p_local=1.5, p_max=500.0,
            ),
        ),
    )


@pytest.fixture
def config_factory():
    return make_config
