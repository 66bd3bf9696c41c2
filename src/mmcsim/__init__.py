"""Analytical and simulated metrics for the M/M/c queue."""

from .customers import Customer, CustomerState, CustomerStateError, generate_population
from .metrics import (
    AnalyticalResult,
    QueueMetrics,
    Unstable,
    compute_steady_state_metrics,
    erlang_c,
    erlang_p0,
)
from .mmc_core import SimulationResult, aggregate_metrics, run_params, run_queue_simulation
from .params import InvalidParameter, QueueParams
from .scenarios import Scenario, get_params, list_scenarios
from .scheduler import PendingQueue, QueueProcessor, ServerState, schedule
from .variates import ci95_halfwidth, make_rng, relative_error

__all__ = [
    "AnalyticalResult",
    "Customer",
    "CustomerState",
    "CustomerStateError",
    "InvalidParameter",
    "PendingQueue",
    "QueueMetrics",
    "QueueParams",
    "QueueProcessor",
    "Scenario",
    "ServerState",
    "SimulationResult",
    "Unstable",
    "aggregate_metrics",
    "ci95_halfwidth",
    "compute_steady_state_metrics",
    "erlang_c",
    "erlang_p0",
    "generate_population",
    "get_params",
    "list_scenarios",
    "make_rng",
    "relative_error",
    "run_params",
    "run_queue_simulation",
    "schedule",
]
