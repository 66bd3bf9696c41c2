"""Command line interface to run M/M/c simulations next to the Erlang-C metrics."""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path
from typing import Iterable, List

import pandas as pd
from tqdm import trange

from mmc_plots import write_reports
from mmcsim import (
    InvalidParameter,
    QueueMetrics,
    QueueParams,
    SimulationResult,
    Unstable,
    ci95_halfwidth,
    compute_steady_state_metrics,
    get_params,
    list_scenarios,
    relative_error,
    run_params,
)

logger = logging.getLogger("mmc_run")

METRIC_KEYS = ["lq", "ls", "wq", "ws", "utilization", "idle_time", "rho"]


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Simulate an M/M/c queue and compare it with the Erlang-C metrics."
    )
    parser.add_argument(
        "--arrival-mean",
        type=float,
        help="Mean time between arrivals 1/lambda (required unless --scenario).",
    )
    parser.add_argument(
        "--service-mean",
        type=float,
        help="Mean service time 1/mu (required unless --scenario).",
    )
    parser.add_argument("--servers", type=int, default=2, help="Number of parallel servers c.")
    parser.add_argument(
        "--scenario",
        type=str,
        choices=list(list_scenarios()),
        help="Named scenario shortcut (overrides the means, servers and priority flag).",
    )
    parser.add_argument(
        "--customers", type=int, default=100, help="Number of customers per replication."
    )
    parser.add_argument(
        "--priority",
        action="store_true",
        help="Assign random priorities 1-3; lower numbers are served first.",
    )
    parser.add_argument(
        "--seed", type=int, default=None, help="Base random seed (unseeded when omitted)."
    )
    parser.add_argument("--replications", type=int, default=1, help="Number of replications.")
    parser.add_argument(
        "--show-customers",
        action="store_true",
        help="Print the customer table of the first replication.",
    )
    parser.add_argument(
        "--reports-dir",
        type=Path,
        default=None,
        help="Directory where figures of the first replication will be written.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    return parser.parse_args(argv)


def resolve_params(args: argparse.Namespace) -> QueueParams:
    """Return the validated parameters described by the command line."""
    if args.replications < 1:
        raise SystemExit("--replications must be >= 1.")
    try:
        if args.scenario:
            return get_params(args.scenario, n_customers=args.customers, seed=args.seed)
        if args.arrival_mean is None or args.service_mean is None:
            raise SystemExit(
                "Either --scenario or both --arrival-mean and --service-mean must be provided."
            )
        return QueueParams.from_means(
            arrival_mean=args.arrival_mean,
            service_mean=args.service_mean,
            servers=args.servers,
            n_customers=args.customers,
            use_priority=args.priority,
            seed=args.seed,
        )
    except InvalidParameter as exc:
        raise SystemExit(f"Invalid parameter {exc}") from exc


def warn_if_unstable(params: QueueParams) -> bool:
    """Log a warning when λ >= cμ. The simulation still runs."""
    if params.is_stable:
        return False
    logger.warning(
        "Unstable queue: arrival rate %.4f >= service capacity %.4f (c*mu). "
        "The queue grows without bound in theory.",
        params.lam,
        params.servers * params.mu,
    )
    return True


def run_replications(params: QueueParams, replications: int) -> Iterable[SimulationResult]:
    """Yield one SimulationResult per replication, seeding each with seed + rep."""
    for rep in trange(replications, desc="Simulating", unit="rep", disable=replications == 1):
        seed = params.seed + rep if params.seed is not None else None
        yield run_params(replace(params, seed=seed))


def summarize(results: Iterable[SimulationResult]) -> pd.DataFrame:
    return pd.DataFrame([r.as_dict() for r in results])


def print_metrics(title: str, values: dict, errors: dict | None = None) -> None:
    print(f"\n{title}:")
    for key in METRIC_KEYS:
        line = f"  {key:<11}: {values[key]:>12.6f}"
        if errors and key in errors:
            line += f"  +/- {errors[key]:.6f}"
        print(line)


def main(argv: List[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(message)s")

    params = resolve_params(args)
    warn_if_unstable(params)

    theory = compute_steady_state_metrics(params.lam, params.mu, params.servers)
    results = list(run_replications(params, args.replications))
    df = summarize(results)

    print(f"\nM/M/{params.servers}: lambda={params.lam:.6f} mu={params.mu:.6f} "
          f"customers={params.n_customers} priority={params.use_priority}")

    if isinstance(theory, Unstable):
        print(f"\nAnalytical metrics unavailable. {theory.message}")
    else:
        print_metrics("Analytical (Erlang-C)", theory.as_dict())
        occupancy = theory.occupancy()
        print(
            f"  customers in queue: {occupancy['in_queue']}, "
            f"in service: {occupancy['in_service']}"
        )

    sim_means = df[METRIC_KEYS].mean()
    errors = {k: ci95_halfwidth(df[k]) for k in METRIC_KEYS} if len(df) > 1 else None
    print_metrics(f"Simulation (mean of {len(df)} replication(s))", sim_means, errors)

    if isinstance(theory, QueueMetrics):
        print("\nRelative errors:")
        reference = theory.as_dict()
        for key in ["lq", "ls", "wq", "ws", "utilization"]:
            err = relative_error(sim_means[key], reference[key])
            print(f"  {key:<11}: {err * 100:>9.3f}%")

    first = results[0]
    if first.use_priority:
        print("\nAverages by priority (replication 1):")
        print(first.priority_summary().to_string(index=False, float_format="%.4f"))

    print("\nServer load (replication 1):")
    print(first.server_load().to_string(index=False, float_format="%.4f"))

    if args.show_customers:
        print("\nCustomers (replication 1):")
        table = first.customers_frame().drop(columns=["state"])
        print(table.to_string(index=False, float_format="%.4f"))

    if args.reports_dir is not None:
        analytical = theory if isinstance(theory, QueueMetrics) else None
        written = write_reports(
            first, args.reports_dir, theory=analytical, sim_means=sim_means, errors=errors
        )
        print(f"\n{len(written)} figure(s) saved in {args.reports_dir.resolve()}")


if __name__ == "__main__":
    main()
