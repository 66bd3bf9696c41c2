"""Pre-defined queue configurations with varying traffic intensities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from .params import QueueParams


@dataclass(frozen=True)
class Scenario:
    name: str
    arrival_mean: float
    service_mean: float
    servers: int
    use_priority: bool = False


SCENARIOS: Dict[str, Scenario] = {
    "A": Scenario(name="A", arrival_mean=2.0, service_mean=1.0, servers=2),  # ρ = 0.25
    "B": Scenario(name="B", arrival_mean=1.0, service_mean=1.5, servers=2),  # ρ = 0.75
    "C": Scenario(name="C", arrival_mean=1.0, service_mean=2.85, servers=3),  # ρ = 0.95
    "P": Scenario(name="P", arrival_mean=1.0, service_mean=1.8, servers=2, use_priority=True),
}


def list_scenarios() -> Iterable[str]:
    """Return available scenario identifiers."""
    return sorted(SCENARIOS.keys())


def get_params(name: str, n_customers: int = 100, seed: Optional[int] = None) -> QueueParams:
    """Return `QueueParams` for a named scenario."""
    key = name.upper()
    if key not in SCENARIOS:
        raise KeyError(f"Scenario '{name}' is not defined. Available: {list_scenarios()}")
    scenario = SCENARIOS[key]
    return QueueParams.from_means(
        arrival_mean=scenario.arrival_mean,
        service_mean=scenario.service_mean,
        servers=scenario.servers,
        n_customers=n_customers,
        use_priority=scenario.use_priority,
        seed=seed,
    )
