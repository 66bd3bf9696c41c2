"""Priority-aware assignment of arriving customers to c parallel servers."""

from __future__ import annotations

import heapq
import itertools
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .customers import Customer

logger = logging.getLogger(__name__)


@dataclass
class ServerState:
    """One service unit. `index` is 1-based."""

    index: int
    available_at: float = 0.0
    busy: bool = False
    busy_time: float = 0.0
    served: int = 0
    current: Optional[Customer] = None

    def assign(self, customer: Customer, now: float) -> None:
        # Whoever held the server has finished by now (available_at <= now).
        if self.current is not None:
            self.current.depart()
        customer.start_service(self.index, now, self.available_at)
        self.available_at = customer.end_time
        self.busy = True
        self.busy_time += customer.service_time
        self.served += 1
        self.current = customer

    def release(self) -> None:
        if self.current is not None:
            self.current.depart()
            self.current = None
        self.busy = False


class PendingQueue:
    """
    Waiting room backed by a binary heap.

    Entries are keyed by (priority, enqueue sequence) in priority mode and by the
    enqueue sequence alone otherwise, so customers of equal priority leave in the
    order they joined.
    """

    def __init__(self, use_priority: bool):
        self.use_priority = use_priority
        self._heap: List[Tuple[int, int, Customer]] = []
        self._sequence = itertools.count()

    def push(self, customer: Customer) -> None:
        customer.enqueue()
        key = customer.priority if self.use_priority else 0
        heapq.heappush(self._heap, (key, next(self._sequence), customer))

    def pop(self) -> Customer:
        return heapq.heappop(self._heap)[2]

    def __len__(self) -> int:
        return len(self._heap)


class QueueProcessor:
    """Owns the server pool and the pending queue for a single run."""

    def __init__(self, servers: int, use_priority: bool):
        self.servers = [ServerState(index=i + 1) for i in range(servers)]
        self.pending = PendingQueue(use_priority)

    def free_server(self, now: float) -> Optional[ServerState]:
        """Lowest-index server that is free at `now`, if any."""
        for server in self.servers:
            if server.available_at <= now:
                return server
        return None

    def next_release(self) -> float:
        return min(server.available_at for server in self.servers)

    def drain(self, now: float) -> int:
        """Start service for as many queued customers as free servers allow at `now`."""
        started = 0
        while len(self.pending):
            server = self.free_server(now)
            if server is None:
                break
            server.assign(self.pending.pop(), now)
            started += 1
        return started

    def run(self, customers: Iterable[Customer]) -> None:
        for customer in customers:
            self.pending.push(customer)
            self.drain(customer.arrival_time)

        while len(self.pending):
            self.drain(self.next_release())

        for server in self.servers:
            server.release()


def schedule(customers: List[Customer], servers: int, use_priority: bool) -> List[ServerState]:
    """
    Resolve the timeline of `customers` (already sorted by arrival) in place.

    Returns the final state of the server pool.
    """
    processor = QueueProcessor(servers, use_priority)
    processor.run(customers)
    logger.debug(
        "Scheduled %d customers on %d servers (priority=%s)",
        len(customers),
        servers,
        use_priority,
    )
    return processor.servers
