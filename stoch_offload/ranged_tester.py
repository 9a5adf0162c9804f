"""
ranged_tester.py

Alpha sweep: for every combination of per-queue arrival probabilities,
build -> resolve -> solve the LP -> simulate the optimal policy next to the
four baselines, and collect the average delays.
"""

import itertools
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from .config import OffloadingSystemConfig, ParameterRange
from .dtmc import DiscreteTimeMarkovChain, DTMCCreator
from .EnvConfig import EnvConfig
from .exceptions import InvalidConfigurationError
from .lp import OptimalPolicyFinder, check_precision
from .policy import ALL_BASELINES
from .sim import Simulator
from .workers import map_in_pool

logger = logging.getLogger(__name__)

STOCHASTIC = "stochastic"
POLICY_NAMES = tuple(ALL_BASELINES) + (STOCHASTIC,)


@dataclass
class AlphaDelayResult:
    alpha: Tuple[float, ...]
    delays: Dict[str, float]


@dataclass
class RangedAlphaResult:
    alpha_ranges: List[ParameterRange]
    alphas: List[Tuple[float, ...]] = field(default_factory=list)
    delays: Dict[str, List[float]] = field(default_factory=dict)

    @property
    def local_only_delays(self) -> List[float]:
        return self.delays["local_only"]

    @property
    def offload_only_delays(self) -> List[float]:
        return self.delays["transmit_only"]

    @property
    def greedy_offload_first_delays(self) -> List[float]:
        return self.delays["greedy_offload_first"]

    @property
    def greedy_local_first_delays(self) -> List[float]:
        return self.delays["greedy_local_first"]

    @property
    def stochastic_delays(self) -> List[float]:
        return self.delays[STOCHASTIC]

    def to_dataframe(self) -> pd.DataFrame:
        """One row per alpha combination, one column per queue and per policy."""
        n_queues = len(self.alpha_ranges)
        data = {f"alpha_{i}": [a[i] for a in self.alphas] for i in range(n_queues)}
        for name in POLICY_NAMES:
            data[f"{name}_delay"] = self.delays[name]
        return pd.DataFrame(data)


def delays_for_alpha(
    config: OffloadingSystemConfig,
    precision: int,
    simulation_ticks: int,
    seed: int,
    chain: Optional[DiscreteTimeMarkovChain] = None,
) -> AlphaDelayResult:
    """One sweep point: every baseline and the LP policy on the same seed."""
    simulator = Simulator(config, seed=seed)
    stochastic = OptimalPolicyFinder.find_optimal_policy_for_given_eta(config, precision, chain=chain)
    logger.info("Running simulations for alpha = %s", list(config.alpha))

    delays = {
        name: simulator.simulate_policy(policy, simulation_ticks).average_delay
        for name, policy in ALL_BASELINES.items()
    }
    delays[STOCHASTIC] = simulator.simulate_policy(stochastic, simulation_ticks).average_delay
    return AlphaDelayResult(alpha=tuple(config.alpha), delays=delays)


def _alpha_point_worker(args) -> AlphaDelayResult:
    config, precision, simulation_ticks, seed, chain = args
    return delays_for_alpha(config, precision, simulation_ticks, seed, chain)


class RangedAlphaTester:
    def __init__(
        self,
        base_system_config: OffloadingSystemConfig,
        alpha_ranges: Sequence[ParameterRange],
        precision: int = EnvConfig.PRECISION,
        simulation_ticks: int = EnvConfig.SIMULATION_TICKS,
        assertions_enabled: bool = False,
        error_window_multiplier: float = EnvConfig.ERROR_WINDOW_MULTIPLIER,
        num_workers: int = 1,
        seed: int = EnvConfig.SEED,
    ):
        if not alpha_ranges:
            raise InvalidConfigurationError("At least one alpha range is required")
        n_queues = base_system_config.state_config.number_of_queues
        if len(alpha_ranges) != n_queues:
            raise InvalidConfigurationError(
                f"Expected {n_queues} alpha ranges (one per queue), got {len(alpha_ranges)}"
            )
        check_precision(precision)
        if simulation_ticks < 1:
            raise InvalidConfigurationError(f"simulation_ticks must be >= 1, got {simulation_ticks}")
        if num_workers < 1:
            raise InvalidConfigurationError(f"num_workers must be >= 1, got {num_workers}")
        self.base_system_config = base_system_config
        self.alpha_ranges = list(alpha_ranges)
        self.precision = precision
        self.simulation_ticks = simulation_ticks
        self.assertions_enabled = assertions_enabled
        self.error_window_multiplier = error_window_multiplier
        self.num_workers = num_workers
        self.seed = seed

    def alpha_combinations(self) -> List[Tuple[float, ...]]:
        return list(itertools.product(*(r.values() for r in self.alpha_ranges)))

    def run(self) -> RangedAlphaResult:
        combinations = self.alpha_combinations()
        configs = [self.base_system_config.with_alpha(alpha) for alpha in combinations]

        # in-process runs share one structural chain; workers build their own
        chain = None
        if self.num_workers == 1:
            chain = DTMCCreator(self.base_system_config.get_state_manager_config()).create()

        worker_args = [
            (config, self.precision, self.simulation_ticks, self.seed + i, chain)
            for i, config in enumerate(configs)
        ]
        point_results = map_in_pool(_alpha_point_worker, worker_args, self.num_workers)

        result = RangedAlphaResult(alpha_ranges=self.alpha_ranges)
        result.delays = {name: [] for name in POLICY_NAMES}
        for point in point_results:
            if self.assertions_enabled:
                self.validate_alpha_delay_result(point)
            result.alphas.append(point.alpha)
            for name in POLICY_NAMES:
                result.delays[name].append(point.delays[name])
        return result

    def validate_alpha_delay_result(self, point: AlphaDelayResult) -> None:
        stochastic = point.delays[STOCHASTIC] * self.error_window_multiplier
        for name in ALL_BASELINES:
            baseline = point.delays[name]
            if not stochastic < baseline:
                raise AssertionError(
                    f"alpha={list(point.alpha)}: stochastic delay {point.delays[STOCHASTIC]:.4f} "
                    f"x {self.error_window_multiplier} is not below {name} delay {baseline:.4f}"
                )
