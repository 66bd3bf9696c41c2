"""Figures for simulated customers, priorities, server load and theory vs. simulation."""

from __future__ import annotations

from pathlib import Path
from typing import List, Mapping, Optional, Sequence

import matplotlib.pyplot as plt
import pandas as pd

from mmcsim import QueueMetrics, SimulationResult

PRIORITY_COLORS = {1: "#3b82f6", 2: "#10b981", 3: "#ef4444"}
METRIC_LABELS = ["lq", "ls", "wq", "ws"]

SERIES = [
    ("wait_time", "Wait time"),
    ("response_time", "Response time"),
    ("turnaround_time", "Turnaround time"),
    ("service_time", "Service time"),
]


def plot_customer_series(
    df: pd.DataFrame, column: str, ylabel: str, out: Path, use_priority: bool = False
) -> None:
    """Line of `column` against customer id, points coloured by priority when enabled."""
    df = df.sort_values("id")
    fig, ax = plt.subplots(figsize=(8, 4))
    ax.plot(df["id"], df[column], color="#94a3b8", linewidth=1)
    if use_priority:
        for priority, group in df.groupby("priority"):
            ax.scatter(
                group["id"],
                group[column],
                s=12,
                color=PRIORITY_COLORS.get(int(priority), "#3b82f6"),
                label=f"Priority {int(priority)}",
                zorder=3,
            )
        ax.legend()
    else:
        ax.scatter(df["id"], df[column], s=12, color=PRIORITY_COLORS[1], zorder=3)
    ax.set_xlabel("Customer ID")
    ax.set_ylabel(ylabel)
    ax.set_title(f"{ylabel} per customer")
    fig.tight_layout()
    fig.savefig(out, dpi=150)
    plt.close(fig)


def plot_priority_averages(summary: pd.DataFrame, out: Path) -> None:
    fig, axes = plt.subplots(2, 2, figsize=(10, 6), sharex=True)
    axes = axes.flatten()
    priorities = summary["priority"].astype(int).tolist()
    colors = [PRIORITY_COLORS.get(p, "#3b82f6") for p in priorities]
    for ax, (column, label) in zip(axes, SERIES):
        ax.bar(priorities, summary[column], color=colors)
        ax.set_title(f"Average {label.lower()}")
        ax.set_xlabel("Priority level")
        ax.set_xticks(priorities)
    fig.suptitle("Averages by priority level")
    fig.tight_layout()
    fig.savefig(out, dpi=150)
    plt.close(fig)


def plot_server_load(load: pd.DataFrame, out: Path) -> None:
    labels = [f"Server {int(s)}" for s in load["server"]]
    colors = [f"C{i % 10}" for i in range(len(labels))]

    fig, (ax_pie, ax_bar) = plt.subplots(1, 2, figsize=(10, 4))
    served = load["customers"] > 0
    ax_pie.pie(
        load.loc[served, "customers"],
        labels=[label for label, keep in zip(labels, served) if keep],
        colors=[color for color, keep in zip(colors, served) if keep],
        autopct="%1.0f%%",
    )
    ax_pie.set_title("Server load distribution")
    ax_bar.bar(labels, load["customers"], color=colors)
    ax_bar.set_ylabel("Number of customers")
    ax_bar.set_title("Customers per server")
    fig.tight_layout()
    fig.savefig(out, dpi=150)
    plt.close(fig)


def plot_bar_comparison(
    theory: Mapping[str, float],
    sim: Mapping[str, float],
    out: Path,
    errors: Optional[Sequence[float]] = None,
) -> None:
    theory_values = [theory[k] for k in METRIC_LABELS]
    sim_values = [sim[k] for k in METRIC_LABELS]
    errors = list(errors) if errors is not None else [0.0] * len(METRIC_LABELS)

    x = range(len(METRIC_LABELS))
    width = 0.35

    fig, ax = plt.subplots(figsize=(8, 4))
    ax.bar([i - width / 2 for i in x], theory_values, width=width, label="Analytical")
    ax.bar(
        [i + width / 2 for i in x],
        sim_values,
        width=width,
        label="Simulation",
        yerr=errors,
        capsize=5,
        error_kw={"elinewidth": 1, "alpha": 0.8},
    )
    ax.set_xticks(list(x))
    ax.set_xticklabels([k.capitalize() for k in METRIC_LABELS])
    ax.set_ylabel("Value")
    ax.set_title("Analytical vs. simulation")
    ax.legend()
    fig.tight_layout()
    fig.savefig(out, dpi=150)
    plt.close(fig)


def plot_metrics_vs_servers(summary: pd.DataFrame, out: Path) -> None:
    """Simulated means (with IC95 bars) and Erlang-C values against c."""
    c_values = summary["servers"].astype(int).tolist()
    fig, ax = plt.subplots(figsize=(10, 5))
    for label in METRIC_LABELS:
        ax.errorbar(
            c_values,
            summary[f"{label}_mean"],
            yerr=summary[f"{label}_ci95"],
            marker="o",
            capsize=4,
            label=f"{label.capitalize()} (sim)",
        )
        theory_col = f"{label}_theory"
        if theory_col in summary and summary[theory_col].notna().any():
            ax.plot(
                c_values,
                summary[theory_col],
                linestyle="--",
                marker="x",
                label=f"{label.capitalize()} (theory)",
            )
    ax.set_xlabel("c")
    ax.set_ylabel("Lq, Ls, Wq, Ws")
    ax.set_xticks(c_values)
    ax.set_title("Metrics vs. number of servers")
    ax.legend(loc="upper right")
    fig.tight_layout()
    fig.savefig(out, dpi=150)
    plt.close(fig)


def write_reports(
    result: SimulationResult,
    reports_dir: Path,
    theory: Optional[QueueMetrics] = None,
    sim_means: Optional[Mapping[str, float]] = None,
    errors: Optional[Mapping[str, float]] = None,
) -> List[Path]:
    """
    Write every figure for one run into `reports_dir` and return their paths.

    `sim_means` and `errors` (IC95 half-widths keyed by metric) replace the single-run
    metrics in the analytical comparison when several replications were made.
    """
    reports_dir.mkdir(parents=True, exist_ok=True)
    df = result.customers_frame()
    written: List[Path] = []

    for column, label in SERIES:
        out = reports_dir / f"{column}.png"
        plot_customer_series(df, column, label, out, use_priority=result.use_priority)
        written.append(out)

    if result.use_priority:
        out = reports_dir / "priority_averages.png"
        plot_priority_averages(result.priority_summary(), out)
        written.append(out)

    out = reports_dir / "server_load.png"
    plot_server_load(result.server_load(), out)
    written.append(out)

    if theory is not None:
        out = reports_dir / "analytical_vs_sim.png"
        sim = sim_means if sim_means is not None else result.metrics.as_dict()
        bars = [errors[k] for k in METRIC_LABELS] if errors is not None else None
        plot_bar_comparison(theory.as_dict(), sim, out, errors=bars)
        written.append(out)

    return written
