"""Input parameters for the M/M/c models and their validation."""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from typing import Optional


class InvalidParameter(ValueError):
    """Raised when an input is outside the domain of the queueing model."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


def require_positive(field: str, value: float) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidParameter(field, "must be a number.")
    if not math.isfinite(value) or value <= 0:
        raise InvalidParameter(field, "must be a finite number > 0.")


def require_count(field: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidParameter(field, "must be an integer.")
    if value < 1:
        raise InvalidParameter(field, "must be >= 1.")


def validate_rates(lam: float, mu: float, servers: int) -> None:
    """Check the (λ, μ, c) triple shared by the calculator and the simulator."""
    require_positive("lam", lam)
    require_positive("mu", mu)
    require_count("servers", servers)


@dataclass(frozen=True)
class QueueParams:
    """Simulation parameters bundled for convenience."""

    lam: float
    mu: float
    servers: int
    n_customers: int = 100
    use_priority: bool = False
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        validate_rates(self.lam, self.mu, self.servers)
        require_count("n_customers", self.n_customers)

    @classmethod
    def from_means(
        cls,
        arrival_mean: float,
        service_mean: float,
        servers: int,
        n_customers: int = 100,
        use_priority: bool = False,
        seed: Optional[int] = None,
    ) -> "QueueParams":
        """Build parameters from mean interarrival and mean service times."""
        require_positive("arrival_mean", arrival_mean)
        require_positive("service_mean", service_mean)
        return cls(
            lam=1.0 / arrival_mean,
            mu=1.0 / service_mean,
            servers=servers,
            n_customers=n_customers,
            use_priority=use_priority,
            seed=seed,
        )

    @property
    def rho(self) -> float:
        """Traffic intensity λ/(cμ)."""
        return self.lam / (self.servers * self.mu)

    @property
    def is_stable(self) -> bool:
        return self.rho < 1.0
