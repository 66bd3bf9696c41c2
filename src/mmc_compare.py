"""Batch comparison of simulated and Erlang-C metrics while sweeping c."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Iterable, List, Optional

import pandas as pd
from tqdm import trange

from mmc_plots import plot_metrics_vs_servers
from mmcsim import (
    InvalidParameter,
    QueueMetrics,
    QueueParams,
    ci95_halfwidth,
    compute_steady_state_metrics,
    erlang_c,
    get_params,
    list_scenarios,
    run_queue_simulation,
)

logger = logging.getLogger("mmc_compare")

SUMMARY_METRICS = ["lq", "ls", "wq", "ws", "utilization", "waited_fraction"]


def parse_c_list(spec: str) -> List[int]:
    values = []
    for chunk in spec.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        try:
            c = int(chunk)
        except ValueError as exc:
            raise argparse.ArgumentTypeError(f"Invalid c value '{chunk}'.") from exc
        if c < 1:
            raise argparse.ArgumentTypeError("Every c must be >= 1.")
        values.append(c)
    if not values:
        raise argparse.ArgumentTypeError("Provide at least one server count via --c-list.")
    return sorted(set(values))


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compare M/M/c metrics across c.")
    parser.add_argument(
        "--arrival-mean", type=float, help="Mean interarrival time (required unless --scenario)."
    )
    parser.add_argument(
        "--service-mean", type=float, help="Mean service time (required unless --scenario)."
    )
    parser.add_argument(
        "--scenario",
        type=str,
        choices=list(list_scenarios()),
        help="Scenario shortcut. If provided, lambda is adjusted to keep rho constant per server.",
    )
    parser.add_argument(
        "--c-list",
        type=parse_c_list,
        default="1,2,3,4",
        help='Comma-separated list of server counts to evaluate (e.g. "1,2,3,4").',
    )
    parser.add_argument("--customers", type=int, default=1000, help="Customers per replication.")
    parser.add_argument("--priority", action="store_true", help="Enable priority scheduling.")
    parser.add_argument("--seed", type=int, default=123, help="Base random seed.")
    parser.add_argument("--replications", type=int, default=20, help="Replications per c.")
    parser.add_argument(
        "--reports-dir",
        type=Path,
        default=None,
        help="Directory where the metrics-vs-c figure will be written.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    return parser.parse_args(argv)


def resolve_base_rates(args: argparse.Namespace) -> tuple[float, float, float | None, bool]:
    """Return lambda, mu, the per-server rho target (scenario only) and the priority flag."""
    try:
        if args.scenario:
            params = get_params(args.scenario, n_customers=args.customers, seed=args.seed)
            return params.lam, params.mu, params.rho, params.use_priority or args.priority
        if args.arrival_mean is None or args.service_mean is None:
            raise SystemExit(
                "Either --scenario or both --arrival-mean and --service-mean must be provided."
            )
        params = QueueParams.from_means(
            arrival_mean=args.arrival_mean,
            service_mean=args.service_mean,
            servers=1,
            n_customers=args.customers,
            seed=args.seed,
        )
    except InvalidParameter as exc:
        raise SystemExit(f"Invalid parameter {exc}") from exc
    return params.lam, params.mu, None, args.priority


def run_replications_for_c(
    lam: float, mu: float, c: int, use_priority: bool, args: argparse.Namespace
) -> Iterable[dict]:
    for rep in trange(args.replications, desc=f"c={c}", unit="rep"):
        result = run_queue_simulation(
            lam, mu, c, use_priority, args.customers, seed=args.seed + rep
        )
        payload = result.as_dict()
        payload["replication"] = rep
        yield payload


def theory_columns(lam: float, mu: float, c: int) -> dict:
    theory = compute_steady_state_metrics(lam, mu, c)
    if not isinstance(theory, QueueMetrics):
        logger.warning("c=%d is unstable (rho=%.4f); no analytical reference.", c, theory.rho)
        return {
            "lq_theory": float("nan"),
            "ls_theory": float("nan"),
            "wq_theory": float("nan"),
            "ws_theory": float("nan"),
            "utilization_theory": float("nan"),
            "waited_fraction_theory": float("nan"),
        }
    return {
        "lq_theory": theory.lq,
        "ls_theory": theory.ls,
        "wq_theory": theory.wq,
        "ws_theory": theory.ws,
        "utilization_theory": theory.utilization,
        "waited_fraction_theory": erlang_c(lam, mu, c),
    }


def summarize_by_c(df: pd.DataFrame) -> pd.DataFrame:
    rows = []
    for c, group in df.groupby("servers"):
        row = {
            "servers": int(c),
            "replications": len(group),
            "lam": float(group["lam"].iloc[0]),
            "mu": float(group["mu"].iloc[0]),
            "rho": float(group["rho"].iloc[0]),
        }
        for metric in SUMMARY_METRICS:
            series = group[metric]
            row[f"{metric}_mean"] = float(series.mean())
            row[f"{metric}_ci95"] = ci95_halfwidth(series)
            row[f"{metric}_theory"] = float(group[f"{metric}_theory"].iloc[0])
        rows.append(row)
    return pd.DataFrame(rows).sort_values("servers")


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(message)s")
    if args.replications < 1:
        raise SystemExit("--replications must be >= 1.")
    if args.customers < 1:
        raise SystemExit("--customers must be >= 1.")
    lam_base, mu, target_rho, use_priority = resolve_base_rates(args)

    all_results = []
    for c in args.c_list:
        lam = lam_base
        if target_rho is not None:
            lam = target_rho * c * mu
        theory = theory_columns(lam, mu, c)
        for rep in run_replications_for_c(lam, mu, c, use_priority, args):
            rep.update(theory)
            all_results.append(rep)

    summary = summarize_by_c(pd.DataFrame(all_results))

    columns = ["servers", "rho"] + [
        f"{m}_{suffix}" for m in ["wq", "ws", "waited_fraction"] for suffix in ("mean", "ci95", "theory")
    ]
    print(summary[columns].to_string(index=False, float_format="%.4f"))

    if args.reports_dir is not None:
        args.reports_dir.mkdir(parents=True, exist_ok=True)
        out = args.reports_dir / "metrics_vs_c.png"
        plot_metrics_vs_servers(summary, out)
        print(f"\nFigure saved in {out.resolve()}")


if __name__ == "__main__":
    main()
