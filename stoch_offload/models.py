"""
models.py

System model of the user equipment:

- `UserEquipmentState` – queue lengths + TU state + CPU state
- `Action` / `ActionKind` – the closed action alphabet
- `Outcome` – the stochastic events of one tick
- `all_states` – enumeration of the state space
- `UserEquipmentStateManager` – legality, admission and the deterministic
  outcome -> next state map shared by the DTMC builder and the simulator
"""

import itertools
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple

from .config import StateManagerConfig, UserEquipmentStateConfig
from .exceptions import InvalidConfigurationError, InvalidTransitionError
from .symbols import BETA, BETA_C, GAMMA, GAMMA_C, ParameterSymbol


@dataclass(frozen=True)
class UserEquipmentState:
    """
    tu_state:  0 = idle, k = sending packet k of the offloaded task
    cpu_state: 0 = idle, k = processing section k of the local task
    """
    queue_lengths: Tuple[int, ...]
    tu_state: int
    cpu_state: int

    @classmethod
    def single_queue(cls, task_queue_length: int, tu_state: int, cpu_state: int) -> "UserEquipmentState":
        return cls((task_queue_length,), tu_state, cpu_state)

    @property
    def total_queue_length(self) -> int:
        return sum(self.queue_lengths)

    def __str__(self) -> str:
        queues = ",".join(str(q) for q in self.queue_lengths)
        return f"({queues}|{self.tu_state},{self.cpu_state})"


class ActionKind(Enum):
    NO_OPERATION = "NoOperation"
    ADD_TO_CPU = "AddToCPU"
    ADD_TO_TRANSMISSION_UNIT = "AddToTransmissionUnit"
    ADD_TO_BOTH_UNITS = "AddToBothUnits"


@dataclass(frozen=True)
class Action:
    """One admission decision; the queue indices say where tasks are taken from."""
    kind: ActionKind
    cpu_queue: Optional[int] = None
    tu_queue: Optional[int] = None

    @classmethod
    def no_operation(cls) -> "Action":
        return cls(ActionKind.NO_OPERATION)

    @classmethod
    def add_to_cpu(cls, queue_index: int = 0) -> "Action":
        return cls(ActionKind.ADD_TO_CPU, cpu_queue=queue_index)

    @classmethod
    def add_to_transmission_unit(cls, queue_index: int = 0) -> "Action":
        return cls(ActionKind.ADD_TO_TRANSMISSION_UNIT, tu_queue=queue_index)

    @classmethod
    def add_to_both_units(cls, cpu_queue: int = 0, tu_queue: int = 0) -> "Action":
        return cls(ActionKind.ADD_TO_BOTH_UNITS, cpu_queue=cpu_queue, tu_queue=tu_queue)

    @property
    def uses_cpu(self) -> bool:
        return self.kind in (ActionKind.ADD_TO_CPU, ActionKind.ADD_TO_BOTH_UNITS)

    @property
    def uses_tu(self) -> bool:
        return self.kind in (ActionKind.ADD_TO_TRANSMISSION_UNIT, ActionKind.ADD_TO_BOTH_UNITS)

    def source_queues(self) -> Tuple[int, ...]:
        if self.kind is ActionKind.NO_OPERATION:
            return ()
        if self.kind is ActionKind.ADD_TO_CPU:
            return (self.cpu_queue,)
        if self.kind is ActionKind.ADD_TO_TRANSMISSION_UNIT:
            return (self.tu_queue,)
        if self.kind is ActionKind.ADD_TO_BOTH_UNITS:
            return (self.tu_queue, self.cpu_queue)
        raise ValueError(f"Unknown action kind {self.kind}")

    def __str__(self) -> str:
        queues = self.source_queues()
        if not queues:
            return self.kind.value
        return f"{self.kind.value}{list(queues)}"


@dataclass(frozen=True)
class Outcome:
    """Stochastic events of one tick. Flags of idle units are ignored."""
    tu_success: bool
    cpu_success: bool
    arrivals: Tuple[bool, ...]


def all_states(state_config: UserEquipmentStateConfig) -> Tuple[UserEquipmentState, ...]:
    """Every state of the space, in a fixed order, each exactly once."""
    if state_config.tu_number_of_packets < 0 or state_config.cpu_number_of_sections < 0:
        raise InvalidConfigurationError("Capacities must be non-negative")
    if any(c < 0 for c in state_config.task_queue_capacities):
        raise InvalidConfigurationError("Capacities must be non-negative")

    queue_ranges = [range(c + 1) for c in state_config.task_queue_capacities]
    states = []
    for queue_lengths in itertools.product(*queue_ranges):
        for tu_state in range(state_config.tu_number_of_packets + 1):
            for cpu_state in range(state_config.cpu_number_of_sections + 1):
                states.append(UserEquipmentState(tuple(queue_lengths), tu_state, cpu_state))
    return tuple(states)


def delay_cost(state: UserEquipmentState, action: Action, t_rx: float) -> float:
    """
    Delay accrued in one tick: every queued task waits one tick, and every
    task handed to the TU will wait `t_rx` more for the cloud reply.
    """
    cost = float(state.total_queue_length)
    if action.uses_tu:
        cost += t_rx
    return cost


class UserEquipmentStateManager:
    """Pure transition logic of the UE; holds no mutable state."""

    def __init__(self, config: StateManagerConfig):
        self.config = config
        self.state_config = config.state_config

    # ----------------------------------------------------------
    def all_states(self) -> Tuple[UserEquipmentState, ...]:
        return all_states(self.state_config)

    def contains(self, state: UserEquipmentState) -> bool:
        sc = self.state_config
        if len(state.queue_lengths) != sc.number_of_queues:
            return False
        if not all(0 <= q <= c for q, c in zip(state.queue_lengths, sc.task_queue_capacities)):
            return False
        return 0 <= state.tu_state <= sc.tu_number_of_packets and 0 <= state.cpu_state <= sc.cpu_number_of_sections

    def power(self, state: UserEquipmentState) -> float:
        """Power drawn while the units of `state` are busy."""
        p = 0.0
        if state.tu_state > 0:
            p += self.config.p_tx
        if state.cpu_state > 0:
            p += self.config.p_local
        return p

    # ----------------------------------------------------------
    def candidate_actions(self) -> List[Action]:
        """Every action of the alphabet for this queue count, legal or not."""
        queues = range(self.state_config.number_of_queues)
        actions = [Action.no_operation()]
        actions += [Action.add_to_cpu(j) for j in queues]
        actions += [Action.add_to_transmission_unit(i) for i in queues]
        actions += [Action.add_to_both_units(cpu_queue=j, tu_queue=i) for i in queues for j in queues]
        return actions

    def is_legal(self, state: UserEquipmentState, action: Action) -> bool:
        sc = self.state_config
        kind = action.kind
        if kind is ActionKind.NO_OPERATION:
            return True

        if action.uses_cpu and (sc.cpu_number_of_sections == 0 or state.cpu_state != 0):
            return False
        if action.uses_tu and (sc.tu_number_of_packets == 0 or state.tu_state != 0):
            return False

        needed = [0] * sc.number_of_queues
        for q in action.source_queues():
            if q is None or not 0 <= q < sc.number_of_queues:
                return False
            needed[q] += 1
        if any(n > length for n, length in zip(needed, state.queue_lengths)):
            return False

        return self.power(self._admit(state, action)) <= self.config.p_max

    def legal_actions(self, state: UserEquipmentState) -> Tuple[Action, ...]:
        return tuple(a for a in self.candidate_actions() if self.is_legal(state, a))

    # ----------------------------------------------------------
    def admit(self, state: UserEquipmentState, action: Action) -> UserEquipmentState:
        """State right after the action moved tasks into the units."""
        if not self.is_legal(state, action):
            raise InvalidTransitionError(f"Action {action} is not legal in state {state}")
        return self._admit(state, action)

    def _admit(self, state: UserEquipmentState, action: Action) -> UserEquipmentState:
        queue_lengths = list(state.queue_lengths)
        for q in action.source_queues():
            queue_lengths[q] -= 1
        tu_state = 1 if action.uses_tu else state.tu_state
        cpu_state = 1 if action.uses_cpu else state.cpu_state
        return UserEquipmentState(tuple(queue_lengths), tu_state, cpu_state)

    def next_state(self, admitted: UserEquipmentState, outcome: Outcome) -> UserEquipmentState:
        """Apply one tick of TU, CPU and arrivals to a post-admission state."""
        sc = self.state_config

        tu_state = admitted.tu_state
        if tu_state > 0 and outcome.tu_success:
            tu_state = 0 if tu_state == sc.tu_number_of_packets else tu_state + 1

        cpu_state = admitted.cpu_state
        cpu_success = outcome.cpu_success or not self.config.stochastic_cpu
        if cpu_state > 0 and cpu_success:
            cpu_state = 0 if cpu_state == sc.cpu_number_of_sections else cpu_state + 1

        queue_lengths = tuple(
            min(q + 1, capacity) if arrived else q
            for q, capacity, arrived in zip(admitted.queue_lengths, sc.task_queue_capacities, outcome.arrivals)
        )
        return UserEquipmentState(queue_lengths, tu_state, cpu_state)

    def step(self, state: UserEquipmentState, action: Action, outcome: Outcome) -> UserEquipmentState:
        return self.next_state(self.admit(state, action), outcome)

    # ----------------------------------------------------------
    def outcomes(self, admitted: UserEquipmentState) -> Iterator[Tuple[Outcome, Tuple[ParameterSymbol, ...]]]:
        """
        Every combination of the binary events relevant to `admitted`, with
        the symbol product giving its likelihood. At most 2^k outcomes.
        """
        tu_events = [(True, BETA), (False, BETA_C)] if admitted.tu_state > 0 else [(False, None)]
        if admitted.cpu_state > 0 and self.config.stochastic_cpu:
            cpu_events = [(True, GAMMA), (False, GAMMA_C)]
        else:
            cpu_events = [(False, None)]
        arrival_events = [
            [(True, ParameterSymbol.alpha(i)), (False, ParameterSymbol.alpha_c(i))]
            for i in range(self.state_config.number_of_queues)
        ]

        for tu, cpu, *arrivals in itertools.product(tu_events, cpu_events, *arrival_events):
            outcome = Outcome(
                tu_success=tu[0],
                cpu_success=cpu[0],
                arrivals=tuple(a[0] for a in arrivals),
            )
            symbols = tuple(s for s in (tu[1], cpu[1], *(a[1] for a in arrivals)) if s is not None)
            yield outcome, symbols
