"""
config.py

Immutable configuration tree of the offloading system:

- `UserEquipmentStateConfig` – shape of the state space (queues, TU, CPU)
- `UserEquipmentComponentsConfig` – stochastic parameters and power figures
- `EnvironmentParameters` – cloud side (replicas, round-trip latency)
- `OffloadingSystemConfig` – everything above, plus `with_*` copy helpers
- `ParameterRange` – constant or linearly spaced values for sweeps

Every dataclass validates itself on construction and raises
`InvalidConfigurationError`; nothing is clamped.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .EnvConfig import EnvConfig
from .exceptions import InvalidConfigurationError


def _check_probability(name: str, value: float, allow_zero: bool) -> None:
    low_ok = value >= 0.0 if allow_zero else value > 0.0
    if not (low_ok and value <= 1.0):
        interval = "[0, 1]" if allow_zero else "(0, 1]"
        raise InvalidConfigurationError(f"{name} must be in {interval}, got {value}")


@dataclass(frozen=True)
class UserEquipmentStateConfig:
    """Capacities that span the state space."""
    task_queue_capacities: Tuple[int, ...]
    tu_number_of_packets: int
    cpu_number_of_sections: int

    def __post_init__(self):
        object.__setattr__(self, "task_queue_capacities", tuple(self.task_queue_capacities))
        if not self.task_queue_capacities:
            raise InvalidConfigurationError("At least one task queue is required")
        for capacity in self.task_queue_capacities:
            if capacity < 1:
                raise InvalidConfigurationError(
                    f"Task queue capacity must be a positive integer, got {capacity}"
                )
        if self.tu_number_of_packets < 0:
            raise InvalidConfigurationError(
                f"TU number of packets must be >= 0, got {self.tu_number_of_packets}"
            )
        if self.cpu_number_of_sections < 0:
            raise InvalidConfigurationError(
                f"CPU number of sections must be >= 0, got {self.cpu_number_of_sections}"
            )

    @classmethod
    def single_queue(
        cls,
        task_queue_capacity: int = EnvConfig.TASK_QUEUE_CAPACITY,
        tu_number_of_packets: int = EnvConfig.TU_NUMBER_OF_PACKETS,
        cpu_number_of_sections: int = EnvConfig.CPU_NUMBER_OF_SECTIONS,
    ) -> "UserEquipmentStateConfig":
        return cls(
            task_queue_capacities=(task_queue_capacity,),
            tu_number_of_packets=tu_number_of_packets,
            cpu_number_of_sections=cpu_number_of_sections,
        )

    @property
    def number_of_queues(self) -> int:
        return len(self.task_queue_capacities)

    @property
    def number_of_states(self) -> int:
        count = (self.tu_number_of_packets + 1) * (self.cpu_number_of_sections + 1)
        for capacity in self.task_queue_capacities:
            count *= capacity + 1
        return count


@dataclass(frozen=True)
class UserEquipmentComponentsConfig:
    """Stochastic parameters and power figures of the UE."""
    alpha: Tuple[float, ...]
    beta: float
    eta: Optional[float]
    p_tx: float
    p_local: float
    p_max: float
    gamma: float = 1.0

    def __post_init__(self):
        object.__setattr__(self, "alpha", tuple(float(a) for a in self.alpha))
        if not self.alpha:
            raise InvalidConfigurationError("At least one arrival probability is required")
        for i, a in enumerate(self.alpha):
            _check_probability(f"alpha[{i}]", a, allow_zero=False)
        _check_probability("beta", self.beta, allow_zero=True)
        _check_probability("gamma", self.gamma, allow_zero=False)
        for name in ("p_tx", "p_local", "p_max"):
            if getattr(self, name) <= 0.0:
                raise InvalidConfigurationError(f"{name} must be positive, got {getattr(self, name)}")
        if self.eta is not None and self.eta < 0.0:
            raise InvalidConfigurationError(f"eta must be >= 0, got {self.eta}")

    @classmethod
    def single_queue(
        cls,
        alpha: float = EnvConfig.ALPHA,
        beta: float = EnvConfig.BETA,
        eta: Optional[float] = EnvConfig.ETA,
        p_tx: float = EnvConfig.P_TX,
        p_local: float = EnvConfig.P_LOCAL,
        p_max: float = EnvConfig.P_MAX,
        gamma: float = EnvConfig.GAMMA,
    ) -> "UserEquipmentComponentsConfig":
        return cls(
            alpha=(alpha,), beta=beta, eta=eta,
            p_tx=p_tx, p_local=p_local, p_max=p_max, gamma=gamma,
        )


@dataclass(frozen=True)
class EnvironmentParameters:
    """Cloud side of the system."""
    n_cloud: int = EnvConfig.N_CLOUD
    t_rx: float = EnvConfig.T_RX

    def __post_init__(self):
        if self.n_cloud < 1:
            raise InvalidConfigurationError(f"n_cloud must be >= 1, got {self.n_cloud}")
        if self.t_rx < 0.0:
            raise InvalidConfigurationError(f"t_rx must be >= 0, got {self.t_rx}")


@dataclass(frozen=True)
class UserEquipmentConfig:
    state_config: UserEquipmentStateConfig
    components_config: UserEquipmentComponentsConfig


@dataclass(frozen=True)
class StateManagerConfig:
    """
    Everything that fixes the *structure* of the DTMC.

    Arrival and success probabilities are deliberately absent: the same
    structure is resolved against many parameter values during a sweep.
    """
    state_config: UserEquipmentStateConfig
    p_tx: float
    p_local: float
    p_max: float
    stochastic_cpu: bool = False


@dataclass(frozen=True)
class OffloadingSystemConfig:
    user_equipment_config: UserEquipmentConfig
    environment_parameters: EnvironmentParameters = field(default_factory=EnvironmentParameters)

    def __post_init__(self):
        n_queues = self.state_config.number_of_queues
        if len(self.alpha) != n_queues:
            raise InvalidConfigurationError(
                f"Expected {n_queues} arrival probabilities (one per queue), got {len(self.alpha)}"
            )

    # ---- shortcuts ----
    @property
    def state_config(self) -> UserEquipmentStateConfig:
        return self.user_equipment_config.state_config

    @property
    def components_config(self) -> UserEquipmentComponentsConfig:
        return self.user_equipment_config.components_config

    @property
    def alpha(self) -> Tuple[float, ...]:
        return self.components_config.alpha

    @property
    def beta(self) -> float:
        return self.components_config.beta

    @property
    def gamma(self) -> float:
        return self.components_config.gamma

    @property
    def eta(self) -> Optional[float]:
        return self.components_config.eta

    @property
    def power_budget(self) -> float:
        """eta, or p_max when no budget is set."""
        eta = self.components_config.eta
        return self.components_config.p_max if eta is None else eta

    @property
    def t_rx(self) -> float:
        return self.environment_parameters.t_rx

    def get_state_manager_config(self) -> StateManagerConfig:
        components = self.components_config
        return StateManagerConfig(
            state_config=self.state_config,
            p_tx=components.p_tx,
            p_local=components.p_local,
            p_max=components.p_max,
            stochastic_cpu=components.gamma < 1.0,
        )

    # ---- copy helpers ----
    def with_alpha(self, alpha: Sequence[float]) -> "OffloadingSystemConfig":
        components = replace(self.components_config, alpha=tuple(alpha))
        return self._with_components(components)

    def with_eta(self, eta: Optional[float]) -> "OffloadingSystemConfig":
        return self._with_components(replace(self.components_config, eta=eta))

    def with_beta(self, beta: float) -> "OffloadingSystemConfig":
        return self._with_components(replace(self.components_config, beta=beta))

    def with_user_equipment_state_config(
        self, state_config: UserEquipmentStateConfig
    ) -> "OffloadingSystemConfig":
        ue_config = replace(self.user_equipment_config, state_config=state_config)
        return replace(self, user_equipment_config=ue_config)

    def _with_components(self, components: UserEquipmentComponentsConfig) -> "OffloadingSystemConfig":
        ue_config = replace(self.user_equipment_config, components_config=components)
        return replace(self, user_equipment_config=ue_config)

    @classmethod
    def single_queue(
        cls,
        state_config: Optional[UserEquipmentStateConfig] = None,
        components_config: Optional[UserEquipmentComponentsConfig] = None,
        environment_parameters: Optional[EnvironmentParameters] = None,
    ) -> "OffloadingSystemConfig":
        """Single-queue system, any part left out takes the `EnvConfig` defaults."""
        return cls(
            user_equipment_config=UserEquipmentConfig(
                state_config=state_config or UserEquipmentStateConfig.single_queue(),
                components_config=components_config or UserEquipmentComponentsConfig.single_queue(),
            ),
            environment_parameters=environment_parameters or EnvironmentParameters(),
        )


# ----------------------------------------------------------------------------
# Parameter ranges
# ----------------------------------------------------------------------------

class ParameterRange(ABC):
    """A swept parameter: one constant, or `count` evenly spaced values."""

    @abstractmethod
    def values(self) -> List[float]: ...


@dataclass(frozen=True)
class Constant(ParameterRange):
    value: float

    def values(self) -> List[float]:
        return [float(self.value)]


@dataclass(frozen=True)
class Linspace(ParameterRange):
    start: float
    end: float
    count: int

    def __post_init__(self):
        if self.count < 1:
            raise InvalidConfigurationError(f"Range count must be >= 1, got {self.count}")
        if self.count == 1 and self.start != self.end:
            raise InvalidConfigurationError(
                f"A single-point range needs start == end, got {self.start} and {self.end}"
            )

    def values(self) -> List[float]:
        return [float(v) for v in np.linspace(self.start, self.end, self.count)]
