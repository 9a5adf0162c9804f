#!/usr/bin/env python3
"""
plot_sweep.py

Plots a CSV written by run_sweep.py:
- alpha sweep: average delay per policy against alpha of the first queue
- eta sweep: simulated delay and power against the budget

Usage:
    python plot_sweep.py --input results/sweep.csv --output results/sweep.png
"""

import argparse
import os

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd

COLORS = {
    "local_only": "#ff7f0e",            # Orange
    "transmit_only": "#2ca02c",         # Green
    "greedy_offload_first": "#9467bd",  # Purple
    "greedy_local_first": "#8c564b",    # Brown
    "stochastic": "#1f77b4",            # Blue
}


def plot_alpha_sweep(df: pd.DataFrame, ax) -> None:
    x = df["alpha_0"]
    for name, color in COLORS.items():
        column = f"{name}_delay"
        if column not in df:
            continue
        style = "-" if name == "stochastic" else "--"
        ax.plot(x, df[column], style, marker="o", color=color, label=name.replace("_", " "))
    ax.set_xlabel("alpha (arrival probability)")
    ax.set_ylabel("Average delay (ticks)")
    ax.legend()


def plot_eta_sweep(df: pd.DataFrame, ax) -> None:
    ax.plot(df["eta"], df["simulated_delay"], marker="o", color=COLORS["stochastic"], label="delay")
    ax.set_xlabel("eta (power budget, W)")
    ax.set_ylabel("Average delay (ticks)")
    ax2 = ax.twinx()
    ax2.plot(df["eta"], df["simulated_power"], marker="s", color="#d62728", label="power")
    ax2.set_ylabel("Average power (W)")
    ax.legend(loc="upper left")
    ax2.legend(loc="upper right")


def main():
    parser = argparse.ArgumentParser(description="Plot sweep results")
    parser.add_argument("--input", type=str, default="results/sweep.csv")
    parser.add_argument("--output", type=str, default="results/sweep.png")
    args = parser.parse_args()

    df = pd.read_csv(args.input)
    fig, ax = plt.subplots(figsize=(8, 5))
    if "eta" in df.columns:
        plot_eta_sweep(df, ax)
        ax.set_title("Optimal policy vs power budget")
    else:
        plot_alpha_sweep(df, ax)
        ax.set_title("Average delay vs arrival probability")
    ax.grid(True, alpha=0.3)
    fig.tight_layout()

    out_dir = os.path.dirname(args.output)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    fig.savefig(args.output, dpi=150)
    print(f"✅ Saved plot to {args.output}")


if __name__ == "__main__":
    main()
