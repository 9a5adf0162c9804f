#!/usr/bin/env python3
"""
run_sweep.py

Runs parameter sweeps on a preset system and writes the delays to CSV.
Supports:
- Alpha sweep: LP-optimal policy vs the four baselines, per arrival probability
- Eta sweep: LP-optimal policy per power budget, at the preset's alpha

Usage:
    # List available presets
    python run_sweep.py --list

    # Alpha sweep on the single-queue preset, 5 points, 4 worker processes
    python run_sweep.py --scenario paper --alpha 0.05 0.4 5 --workers 4

    # Same, failing if the optimal policy does not beat every baseline
    python run_sweep.py --scenario paper --alpha 0.05 0.4 5 --assert-dominance

    # Eta sweep: 6 budgets between 0.5 W and 3 W
    python run_sweep.py --scenario slow_cpu --eta 0.5 3.0 6
"""

import argparse
import logging
import os
import sys

import pandas as pd

from stoch_offload.config import Constant, Linspace
from stoch_offload.EnvConfig import EnvConfig
from stoch_offload.lp import RangedOptimalPolicyFinder
from stoch_offload.ranged_tester import POLICY_NAMES, RangedAlphaTester
from stoch_offload.scenario_config import ALL_SCENARIOS, get_scenario, list_scenarios
from stoch_offload.sim import Simulator


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s | %(levelname)s | %(message)s",
        datefmt="%H:%M:%S",
    )


def to_range(values):
    start, end, count = float(values[0]), float(values[1]), int(values[2])
    return Constant(start) if count == 1 and start == end else Linspace(start, end, count)


def run_alpha_sweep(args) -> pd.DataFrame:
    config = get_scenario(args.scenario)
    n_queues = config.state_config.number_of_queues
    alpha_range = to_range(args.alpha)

    print(f"\n{'='*80}")
    print(f"ALPHA SWEEP ON: {args.scenario}")
    print(f"{'='*80}")
    print(f"alpha: {alpha_range.values()} (per queue, {n_queues} queue(s))")
    print(f"Simulation ticks: {args.ticks}  Precision: {args.precision}  Workers: {args.workers}")
    print(f"{'='*80}\n")

    tester = RangedAlphaTester(
        base_system_config=config,
        alpha_ranges=[alpha_range] * n_queues,
        precision=args.precision,
        simulation_ticks=args.ticks,
        assertions_enabled=args.assert_dominance,
        error_window_multiplier=args.error_window,
        num_workers=args.workers,
        seed=args.seed,
    )
    df = tester.run().to_dataframe()

    print(f"\n{'='*80}")
    print("SWEEP SUMMARY (average delay, ticks)")
    print(f"{'='*80}")
    for name in POLICY_NAMES:
        print(f"  {name:22s} mean={df[f'{name}_delay'].mean():8.4f}")
    print(f"{'='*80}\n")
    return df


def run_eta_sweep(args) -> pd.DataFrame:
    config = get_scenario(args.scenario)
    eta_range = to_range(args.eta)

    print(f"\n{'='*80}")
    print(f"ETA SWEEP ON: {args.scenario}")
    print(f"{'='*80}")
    print(f"eta: {eta_range.values()}  alpha: {list(config.alpha)}")
    print(f"{'='*80}\n")

    policies = RangedOptimalPolicyFinder.find_optimal_policies_for_eta_range(
        config, eta_range, args.precision, num_workers=args.workers
    )
    simulator = Simulator(config, seed=args.seed)

    rows = []
    for eta, policy in zip(eta_range.values(), policies):
        result = simulator.simulate_policy(policy, args.ticks)
        rows.append({
            "eta": eta,
            "lp_delay_cost": policy.expected_delay_cost,
            "lp_power": policy.expected_power,
            "simulated_delay": result.average_delay,
            "simulated_power": result.average_power,
        })
        print(f"  eta={eta:7.3f} | delay={result.average_delay:8.4f} | power={result.average_power:7.4f} W")
    return pd.DataFrame(rows)


def main():
    parser = argparse.ArgumentParser(
        description="Sweep arrival probability or power budget on a preset offloading system",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--list", action="store_true", help="List all available presets")
    parser.add_argument("--scenario", type=str, help="Preset key (e.g. 'small', 'paper')")
    parser.add_argument("--alpha", nargs=3, metavar=("START", "END", "COUNT"),
                        help="Alpha sweep, applied to every queue")
    parser.add_argument("--eta", nargs=3, metavar=("START", "END", "COUNT"),
                        help="Power budget sweep")
    parser.add_argument("--ticks", type=int, default=EnvConfig.SIMULATION_TICKS,
                        help=f"Simulation ticks per policy (default: {EnvConfig.SIMULATION_TICKS})")
    parser.add_argument("--precision", type=int, default=EnvConfig.PRECISION,
                        help=f"LP precision (default: {EnvConfig.PRECISION})")
    parser.add_argument("--workers", type=int, default=1, help="Worker processes (default: 1)")
    parser.add_argument("--seed", type=int, default=EnvConfig.SEED, help="Base simulation seed")
    parser.add_argument("--assert-dominance", action="store_true",
                        help="Fail if the optimal policy does not beat every baseline")
    parser.add_argument("--error-window", type=float, default=EnvConfig.ERROR_WINDOW_MULTIPLIER,
                        help="Multiplier applied to the optimal delay before comparing")
    parser.add_argument("--output", type=str, default="results/sweep.csv", help="CSV output path")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args()
    setup_logging(args.verbose)

    if args.list:
        list_scenarios()
        return

    if not args.scenario:
        parser.print_help()
        print("\nERROR: --scenario is required (or use --list to see options)")
        sys.exit(1)

    if args.scenario not in ALL_SCENARIOS:
        print(f"ERROR: Unknown scenario '{args.scenario}'")
        print(f"\nAvailable scenarios: {list(ALL_SCENARIOS.keys())}")
        sys.exit(1)

    if bool(args.alpha) == bool(args.eta):
        print("ERROR: pass exactly one of --alpha or --eta")
        sys.exit(1)

    df = run_alpha_sweep(args) if args.alpha else run_eta_sweep(args)

    out_dir = os.path.dirname(args.output)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    df.to_csv(args.output, index=False)
    print(f"✅ Saved sweep results to {args.output}")


if __name__ == "__main__":
    main()
