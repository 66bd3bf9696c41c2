"""Customer records and the arrival/service population generator."""

from __future__ import annotations

import enum
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List

import numpy as np

from .params import require_count, require_positive
from .variates import draw_priority, exponential


class CustomerState(enum.Enum):
    GENERATED = "generated"
    QUEUED = "queued"
    IN_SERVICE = "in_service"
    DEPARTED = "departed"


class CustomerStateError(RuntimeError):
    """Raised on an out-of-order customer transition."""


@dataclass
class Customer:
    """One customer and its timeline; timing fields stay at zero until service starts."""

    id: int
    arrival_time: float
    service_time: float
    priority: int = 1
    wait_time: float = 0.0
    start_service_time: float = 0.0
    end_time: float = 0.0
    server: int = 0
    response_time: float = 0.0
    turnaround_time: float = 0.0
    state: CustomerState = field(default=CustomerState.GENERATED, compare=False)

    def _expect(self, state: CustomerState) -> None:
        if self.state is not state:
            raise CustomerStateError(
                f"Customer {self.id} is {self.state.value}, expected {state.value}."
            )

    def enqueue(self) -> None:
        self._expect(CustomerState.GENERATED)
        self.state = CustomerState.QUEUED

    def start_service(self, server: int, now: float, available_at: float) -> None:
        """Bind the customer to `server` at time `now` and resolve its timeline."""
        self._expect(CustomerState.QUEUED)
        start = max(now, available_at)
        self.wait_time = max(0.0, now - self.arrival_time)
        self.start_service_time = start
        self.end_time = start + self.service_time
        self.server = server
        self.response_time = start - self.arrival_time
        self.turnaround_time = self.end_time - self.arrival_time
        self.state = CustomerState.IN_SERVICE

    def depart(self) -> None:
        self._expect(CustomerState.IN_SERVICE)
        self.state = CustomerState.DEPARTED

    def as_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["state"] = self.state.value
        return payload


def generate_population(
    lam: float,
    mu: float,
    use_priority: bool,
    n: int,
    rng: np.random.Generator,
) -> List[Customer]:
    """
    Draw `n` customers in generation order.

    Arrival times accumulate Exp(λ) interarrival gaps from a clock at 0; each service
    time is an independent Exp(μ) draw. Priorities are uniform over {1, 2, 3} when
    enabled and fixed at 1 otherwise.
    """
    require_positive("lam", lam)
    require_positive("mu", mu)
    require_count("n_customers", n)

    clock = 0.0
    customers: List[Customer] = []
    for i in range(1, n + 1):
        clock += exponential(lam, rng)
        service_time = exponential(mu, rng)
        priority = draw_priority(rng, enabled=use_priority)
        customers.append(
            Customer(id=i, arrival_time=clock, service_time=service_time, priority=priority)
        )
    return customers
