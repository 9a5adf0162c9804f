"""
scenario_config.py

Named system configurations used by the sweep scripts:
- small:     tiny single-queue system, fast enough for quick checks
- paper:     single queue, 4-packet offload vs 3-section local processing
- slow_cpu:  long local processing, offloading should dominate
- two_queue: two task queues sharing one TU and one CPU
"""

from typing import Dict

from .config import (
    EnvironmentParameters,
    OffloadingSystemConfig,
    UserEquipmentComponentsConfig,
    UserEquipmentConfig,
    UserEquipmentStateConfig,
)


def _single_queue(queue: int, packets: int, sections: int, alpha: float, beta: float,
                  t_rx: float = 0.0) -> OffloadingSystemConfig:
    return OffloadingSystemConfig.single_queue(
        state_config=UserEquipmentStateConfig.single_queue(
            task_queue_capacity=queue,
            tu_number_of_packets=packets,
            cpu_number_of_sections=sections,
        ),
        components_config=UserEquipmentComponentsConfig.single_queue(alpha=alpha, beta=beta),
        environment_parameters=EnvironmentParameters(n_cloud=1, t_rx=t_rx),
    )


SMALL = _single_queue(queue=3, packets=1, sections=2, alpha=0.3, beta=0.7)

PAPER = _single_queue(queue=5, packets=4, sections=3, alpha=0.1, beta=0.9)

SLOW_CPU = _single_queue(queue=8, packets=2, sections=10, alpha=0.3, beta=0.8, t_rx=1.0)

TWO_QUEUE = OffloadingSystemConfig(
    user_equipment_config=UserEquipmentConfig(
        state_config=UserEquipmentStateConfig(
            task_queue_capacities=(3, 3),
            tu_number_of_packets=2,
            cpu_number_of_sections=2,
        ),
        components_config=UserEquipmentComponentsConfig(
            alpha=(0.15, 0.15),
            beta=0.8,
            eta=None,
            p_tx=1.5,
            p_local=1.5,
            p_max=500.0,
        ),
    ),
    environment_parameters=EnvironmentParameters(n_cloud=1, t_rx=0.0),
)


ALL_SCENARIOS: Dict[str, OffloadingSystemConfig] = {
    "small": SMALL,
    "paper": PAPER,
    "slow_cpu": SLOW_CPU,
    "two_queue": TWO_QUEUE,
}


def get_scenario(scenario_key: str) -> OffloadingSystemConfig:
    """Get a preset configuration by key."""
    if scenario_key not in ALL_SCENARIOS:
        raise ValueError(
            f"Unknown scenario: {scenario_key}. "
            f"Available: {list(ALL_SCENARIOS.keys())}"
        )
    return ALL_SCENARIOS[scenario_key]


def list_scenarios() -> None:
    """Print all available presets."""
    print("\nAvailable Scenarios:")
    print("=" * 80)
    for key, config in ALL_SCENARIOS.items():
        sc = config.state_config
        print(f"\n[{key}]")
        print(f"  Queues: {list(sc.task_queue_capacities)}  "
              f"TU packets: {sc.tu_number_of_packets}  CPU sections: {sc.cpu_number_of_sections}")
        print(f"  alpha={list(config.alpha)}  beta={config.beta}  t_rx={config.t_rx}")
        print(f"  States: {sc.number_of_states}")
    print("\n" + "=" * 80)
