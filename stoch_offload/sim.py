from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np

from .config import OffloadingSystemConfig
from .EnvConfig import EnvConfig
from .exceptions import InvalidConfigurationError, InvalidTransitionError
from .models import Action, Outcome, UserEquipmentState, UserEquipmentStateManager, delay_cost
from .policy import Policy


@dataclass
class SimulationResult:
    average_delay: float
    average_queue_length: float
    average_power: float
    number_of_ticks: int
    arrived_tasks: int = 0
    dropped_tasks: int = 0
    offloaded_tasks: int = 0
    locally_processed_tasks: int = 0
    trace: List[Tuple[UserEquipmentState, Action]] = field(default_factory=list)


class Simulator:
    def __init__(self, config: OffloadingSystemConfig, seed: int = EnvConfig.SEED):
        """Single-UE tick simulator over the enumerated state space."""
        self.config = config
        self.seed = seed
        self.state_manager = UserEquipmentStateManager(config.get_state_manager_config())
        self.alpha = np.array(config.alpha)
        self.n_queues = len(config.alpha)
        self._legal: Dict[UserEquipmentState, Tuple[Action, ...]] = {
            s: self.state_manager.legal_actions(s) for s in self.state_manager.all_states()
        }

    def initial_state(self) -> UserEquipmentState:
        return UserEquipmentState((0,) * self.n_queues, 0, 0)

    # ----------------------------------------------------------
    def _choose(self, policy: Policy, state: UserEquipmentState, u: float) -> Action:
        legal = self._legal[state]
        distribution = policy.distribution_for(state, legal)
        cumulative = 0.0
        chosen = None
        for action, p in distribution.items():
            if p <= 0.0:
                continue
            chosen = action
            cumulative += p
            if u < cumulative:
                break
        if chosen is None or chosen not in legal:
            raise InvalidTransitionError(f"{policy} chose {chosen} in state {state}")
        return chosen

    def simulate_policy(
        self,
        policy: Policy,
        number_of_ticks: int,
        initial_state: Optional[UserEquipmentState] = None,
        record_trace: bool = False,
    ) -> SimulationResult:
        """
        Run `policy` for `number_of_ticks` ticks.

        Every tick consumes the same uniforms in the same order (action, TU,
        CPU, one per queue), so two policies run with the same seed see the
        same arrivals and channel draws.
        """
        if number_of_ticks < 1:
            raise InvalidConfigurationError(f"number_of_ticks must be >= 1, got {number_of_ticks}")

        rng = np.random.default_rng(self.seed)
        state = initial_state or self.initial_state()
        capacities = self.config.state_config.task_queue_capacities
        beta, gamma, t_rx = self.config.beta, self.config.gamma, self.config.t_rx

        delay_sum = queue_sum = power_sum = 0.0
        arrived = dropped = offloaded = local = 0
        trace = []

        for _ in range(number_of_ticks):
            u = rng.random(3 + self.n_queues)
            action = self._choose(policy, state, u[0])
            if record_trace:
                trace.append((state, action))

            delay_sum += delay_cost(state, action, t_rx)
            queue_sum += state.total_queue_length
            admitted = self.state_manager.admit(state, action)
            power_sum += self.state_manager.power(admitted)
            offloaded += int(action.uses_tu)
            local += int(action.uses_cpu)

            arrivals = tuple(bool(x) for x in u[3:] < self.alpha)
            arrived += sum(arrivals)
            dropped += sum(1 for q, c, a in zip(admitted.queue_lengths, capacities, arrivals) if a and q == c)

            outcome = Outcome(tu_success=bool(u[1] < beta), cpu_success=bool(u[2] < gamma), arrivals=arrivals)
            state = self.state_manager.next_state(admitted, outcome)

        # Little's law: mean number waiting / offered arrival rate
        mean_delay_cost = delay_sum / number_of_ticks
        return SimulationResult(
            average_delay=mean_delay_cost / float(self.alpha.sum()),
            average_queue_length=queue_sum / number_of_ticks,
            average_power=power_sum / number_of_ticks,
            number_of_ticks=number_of_ticks,
            arrived_tasks=arrived,
            dropped_tasks=dropped,
            offloaded_tasks=offloaded,
            locally_processed_tasks=local,
            trace=trace,
        )
