"""Discrete-event simulation core for an M/M/c queue with optional priorities."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from .customers import Customer, generate_population
from .metrics import QueueMetrics
from .params import QueueParams, require_count, validate_rates
from .scheduler import schedule
from .variates import PRIORITY_LEVELS, make_rng

logger = logging.getLogger(__name__)

TIME_COLUMNS = ["wait_time", "response_time", "turnaround_time", "service_time"]


@dataclass
class SimulationResult:
    """Resolved customers of one run plus the metrics derived from them."""

    customers: List[Customer]
    metrics: QueueMetrics
    lam: float
    mu: float
    servers: int
    use_priority: bool
    seed: Optional[int] = None

    @property
    def n_customers(self) -> int:
        return len(self.customers)

    @property
    def waited_fraction(self) -> float:
        """Share of customers that did not start service on arrival."""
        if not self.customers:
            return 0.0
        return sum(1 for c in self.customers if c.wait_time > 0) / len(self.customers)

    def as_dict(self) -> Dict[str, float]:
        payload = {
            "lam": self.lam,
            "mu": self.mu,
            "servers": self.servers,
            "use_priority": self.use_priority,
            "seed": self.seed,
            "n_customers": self.n_customers,
            "waited_fraction": self.waited_fraction,
        }
        payload.update(self.metrics.as_dict())
        return payload

    def customers_frame(self) -> pd.DataFrame:
        """Customer table, one row per customer in arrival order."""
        return pd.DataFrame([c.as_dict() for c in self.customers])

    def priority_summary(self) -> pd.DataFrame:
        """Customer count and mean times for every priority level that occurs."""
        df = self.customers_frame()
        grouped = df.groupby("priority")
        summary = grouped[TIME_COLUMNS].mean()
        summary.insert(0, "count", grouped.size())
        summary = summary.reindex([p for p in PRIORITY_LEVELS if p in summary.index])
        return summary.reset_index()

    def server_load(self) -> pd.DataFrame:
        """Customers served, busy time and utilisation for each of the c servers."""
        df = self.customers_frame()
        df["busy_time"] = df["end_time"] - df["start_service_time"]
        grouped = df.groupby("server")
        load = pd.DataFrame(
            {"customers": grouped.size(), "busy_time": grouped["busy_time"].sum()}
        )
        load = load.reindex(range(1, self.servers + 1), fill_value=0)
        load.index.name = "server"
        load["share"] = load["customers"] / len(df)
        max_end = float(df["end_time"].max())
        load["utilization"] = load["busy_time"] / max_end * 100.0 if max_end > 0 else 0.0
        return load.reset_index()


def aggregate_metrics(
    customers: List[Customer], lam: float, mu: float, servers: int
) -> QueueMetrics:
    """
    Empirical metrics of a resolved run.

    Lq and Ls follow Little's law applied to the observed mean wait and turnaround.
    Utilisation is total busy time over the makespan times c.
    """
    wait = np.array([c.wait_time for c in customers], dtype=float)
    turnaround = np.array([c.turnaround_time for c in customers], dtype=float)
    busy = np.array([c.end_time - c.start_service_time for c in customers], dtype=float)
    ends = np.array([c.end_time for c in customers], dtype=float)

    avg_wait = float(np.mean(wait))
    avg_turnaround = float(np.mean(turnaround))
    max_end = float(ends.max())
    utilization = float(busy.sum()) / (max_end * servers) * 100.0 if max_end > 0 else 0.0

    return QueueMetrics(
        lq=avg_wait * lam,
        ls=avg_turnaround * lam,
        wq=avg_wait,
        ws=avg_turnaround,
        utilization=utilization,
        idle_time=100.0 - utilization,
        rho=lam / (mu * servers),
    )


def run_queue_simulation(
    lam: float,
    mu: float,
    servers: int,
    use_priority: bool = False,
    n_customers: int = 100,
    *,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
) -> SimulationResult:
    """
    Generate `n_customers` arrivals, schedule them on `servers` units and measure.

    Pass `rng` or `seed` for a reproducible run; with neither the run is unseeded.
    An injected `rng` takes precedence and the result then records no seed.
    Unstable configurations (λ >= cμ) are simulated as well.
    """
    validate_rates(lam, mu, servers)
    require_count("n_customers", n_customers)
    if rng is None:
        rng = make_rng(seed)
    else:
        seed = None

    logger.debug(
        "Simulating M/M/%d: lam=%g mu=%g n=%d priority=%s seed=%s",
        servers,
        lam,
        mu,
        n_customers,
        use_priority,
        seed,
    )
    customers = generate_population(lam, mu, use_priority, n_customers, rng)
    # Stable sort: ties in arrival time keep generation order.
    customers.sort(key=lambda c: c.arrival_time)
    schedule(customers, servers, use_priority)

    metrics = aggregate_metrics(customers, lam, mu, servers)
    logger.debug("Simulation finished: %s", metrics)
    return SimulationResult(
        customers=customers,
        metrics=metrics,
        lam=lam,
        mu=mu,
        servers=servers,
        use_priority=use_priority,
        seed=seed,
    )


def run_params(params: QueueParams, rng: Optional[np.random.Generator] = None) -> SimulationResult:
    """Run one replication described by `params`."""
    return run_queue_simulation(
        params.lam,
        params.mu,
        params.servers,
        params.use_priority,
        params.n_customers,
        rng=rng,
        seed=params.seed,
    )
