"""Closed-form metrics for the M/M/c queue (Erlang-C)."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Dict, Mapping, Union

import numpy as np

from .params import validate_rates


@dataclass(frozen=True)
class QueueMetrics:
    """Steady-state (or empirical) performance figures of an M/M/c system."""

    lq: float
    ls: float
    wq: float
    ws: float
    utilization: float
    idle_time: float
    rho: float

    def as_dict(self) -> Mapping[str, float]:
        """Return the metrics as a plain dictionary (handy for printing)."""
        return asdict(self)

    def occupancy(self) -> Dict[str, int]:
        """Whole-customer picture of the system: round(Lq) waiting, round(Ls - Lq) in service."""
        return {
            "in_queue": int(round(self.lq)),
            "in_service": int(round(self.ls - self.lq)),
        }


@dataclass(frozen=True)
class Unstable:
    """Result of the calculator when ρ >= 1 and no steady state exists."""

    lam: float
    mu: float
    servers: int
    rho: float

    @property
    def message(self) -> str:
        return (
            f"Unstable system: rho = {self.rho:.4f} >= 1 "
            f"(lambda = {self.lam:g}, c*mu = {self.servers * self.mu:g})."
        )


AnalyticalResult = Union[QueueMetrics, Unstable]


def _log_erlang_terms(a: float, c: int) -> tuple[float, float]:
    """
    Return (log Σ_{n<c} aⁿ/n!, log a^c/c!).

    Working with logarithms keeps the terms finite for offered loads in the thousands.
    """
    n = np.arange(c)
    log_terms = n * math.log(a) - np.array([math.lgamma(k + 1) for k in range(c)])
    log_head = float(np.logaddexp.reduce(log_terms))
    log_tail = c * math.log(a) - math.lgamma(c + 1)
    return log_head, log_tail


def erlang_p0(lam: float, mu: float, c: int) -> float:
    """Probability that the system is empty. Only meaningful when ρ < 1."""
    a = lam / mu
    rho = a / c
    log_head, log_tail = _log_erlang_terms(a, c)
    return math.exp(-float(np.logaddexp(log_head, log_tail - math.log1p(-rho))))


def erlang_c(lam: float, mu: float, c: int) -> float:
    """Probability that an arriving customer has to wait (Erlang-C formula)."""
    a = lam / mu
    rho = a / c
    log_head, log_tail = _log_erlang_terms(a, c)
    # C = 1 / (1 + Σ_{n<c} aⁿ/n! · (1-ρ) / (a^c/c!))
    log_ratio = log_head - log_tail + math.log1p(-rho)
    return math.exp(-float(np.logaddexp(0.0, log_ratio)))


def compute_steady_state_metrics(lam: float, mu: float, c: int) -> AnalyticalResult:
    """
    Compute M/M/c steady-state metrics using the Erlang-C formulas.

    Returns:
        `QueueMetrics` for a stable system, otherwise an `Unstable` result.

    Raises:
        InvalidParameter: when a rate is not positive or c is not an integer >= 1.
    """
    validate_rates(lam, mu, c)

    rho = lam / (c * mu)
    if rho >= 1.0:
        return Unstable(lam=lam, mu=mu, servers=c, rho=rho)

    a = lam / mu
    lq = erlang_c(lam, mu, c) * rho / (1.0 - rho)
    ls = lq + a
    wq = lq / lam
    ws = wq + 1.0 / mu

    return QueueMetrics(
        lq=lq,
        ls=ls,
        wq=wq,
        ws=ws,
        utilization=rho * 100.0,
        idle_time=(1.0 - rho) * 100.0,
        rho=rho,
    )
