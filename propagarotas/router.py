"""Least-cost routing by information propagation over a simulated network.

Every router starts out knowing itself and its direct neighbours, with the
link delay as the cost. A starter router sends its table to all neighbours.
Any router whose table improves on receiving a neighbour's table sends its
own table on. The exchange stops when no table changes any more.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import random
from dataclasses import dataclass, field
from typing import Any

from .message import RoutingMessage

__all__ = [
    "extract_node_number",
    "RouterStatistics",
    "Router",
    "Network",
    "START_MESSAGE_NAME",
    "PROPAGATION_MESSAGE_NAME",
    "TOTAL_NODES",
]

logger = logging.getLogger(__name__)

START_MESSAGE_NAME = "IniciarPI"
PROPAGATION_MESSAGE_NAME = "PropagacaoInformacao"
TOTAL_NODES = 8
_INT_MAX = 2**31 - 1
_RULE = "=========================================="


def _to_int(digits: str) -> int:
    number = int(digits)
    if number > _INT_MAX:
        raise ValueError(f"node number {digits} is out of range")
    return number


def extract_node_number(name: str) -> int:
    """Node number in a name such as ``no3`` or ``no[3]``, or -1 if none.

    Raises ValueError when the part after the last dot starts with ``no``
    but has no number after it.
    """
    pos = name.find("no")
    if pos != -1 and pos + 2 < len(name):
        digits = "".join(c for c in name[pos + 2:] if "0" <= c <= "9")
        if digits:
            return _to_int(digits)

    pos = name.rfind(".")
    if pos != -1 and pos + 1 < len(name):
        module_name = name[pos + 1:]
        if module_name.startswith("no") and len(module_name) > 2:
            rest = module_name[2:].lstrip()
            sign = ""
            if rest[:1] in ("+", "-"):
                sign, rest = rest[0], rest[1:]
            leading = ""
            for c in rest:
                if not "0" <= c <= "9":
                    break
                leading += c
            if not leading:
                raise ValueError(f"no node number in {name!r}")
            return _to_int(sign + leading)

    return -1


@dataclass(frozen=True)
class RouterStatistics:
    """Figures a router records when the simulation finishes."""

    messages_sent: int
    messages_received: int
    convergence_time: float
    converged: bool
    known_destinations: int
    final_phase: int
    final_global_clock: float


@dataclass(frozen=True)
class _Gate:
    peer: Router
    delay: float


@dataclass
class Router:
    """One node of the network, running the propagation algorithm."""

    name: str
    is_starter: bool = False
    module_id: int = 0
    gates: list[_Gate] = field(default_factory=list)
    routing_table: dict[int, float] = field(default_factory=dict)
    next_hops: dict[int, int] = field(default_factory=dict)
    neighbor_costs: dict[int, float] = field(default_factory=dict)
    known_destinations: list[int] = field(default_factory=list)
    messages_sent: int = 0
    messages_received: int = 0
    start_time: float = 0.0
    convergence_time: float = 0.0
    converged: bool = False
    global_clock: float = 0.0
    phase: int = 0
    statistics: RouterStatistics | None = None

    def __post_init__(self) -> None:
        self._network: Network | None = None

    def _net(self) -> Network:
        if self._network is None:
            raise RuntimeError(f"router {self.name!r} is not initialized")
        return self._network

    def initialize(self, network: Network) -> None:
        """Build the initial table from the direct links and schedule the start."""
        self._network = network
        self.routing_table.clear()
        self.next_hops.clear()
        self.neighbor_costs.clear()
        self.known_destinations.clear()
        self.messages_sent = 0
        self.messages_received = 0
        self.start_time = network.now
        self.converged = False
        self.global_clock = 0.0
        self.phase = 0

        number = extract_node_number(self.name)
        if number == -1:
            logger.error("could not extract a node number from %r", self.name)
            return

        self.routing_table[number] = 0.0
        self.next_hops[number] = number
        self.known_destinations.append(number)

        for gate in self.gates:
            neighbor = extract_node_number(gate.peer.name)
            if neighbor != -1:
                self.routing_table[neighbor] = gate.delay
                self.next_hops[neighbor] = neighbor
                self.neighbor_costs[neighbor] = gate.delay
                self.known_destinations.append(neighbor)

        self._log_table("INICIAL - PI")

        if self.is_starter:
            logger.info("%s starting information propagation", self.name)
            delay = network.rng.uniform(0, 0.01)
            network.schedule(
                network.now + delay, self, RoutingMessage(name=START_MESSAGE_NAME)
            )

    def handle_message(self, message: Any) -> None:
        """Handle the start signal or a neighbour's routing table."""
        self._net()
        if getattr(message, "name", None) == START_MESSAGE_NAME:
            logger.info("%s starting propagation to neighbours", self.name)
            self._propagate()
            return
        if not isinstance(message, RoutingMessage):
            raise TypeError(
                f"cannot cast {type(message).__name__} to RoutingMessage"
            )
        self.messages_received += 1
        logger.debug("%s received message #%d", self.name, self.messages_received)
        self._process(message)

    def _propagate(self) -> None:
        network = self._net()
        self.global_clock = network.now
        self.phase += 1
        logger.info(
            "%s - phase %d - global clock %s", self.name, self.phase, self.global_clock
        )
        origin = extract_node_number(self.name)
        entries = sorted(self.routing_table.items())
        for index in range(len(self.gates)):
            packet = RoutingMessage(
                name=PROPAGATION_MESSAGE_NAME,
                origin=origin,
                destinations=[dest for dest, _ in entries],
                costs=[cost for _, cost in entries],
            )
            network.send(self, index, packet)
            self.messages_sent += 1
            logger.debug("%s sent message #%d", self.name, self.messages_sent)
        logger.info(
            "%s propagated its table to %d neighbours in phase %d",
            self.name,
            len(self.gates),
            self.phase,
        )

    def _process(self, message: RoutingMessage) -> None:
        network = self._net()
        neighbor = message.origin
        arrival = network.now
        if arrival > self.global_clock:
            self.global_clock = arrival
        logger.info(
            "%s received a table from no%d at %s", self.name, neighbor, arrival
        )

        neighbor_table = message.table()
        link_cost = self.neighbor_costs.get(neighbor, 0.0)
        updated = False
        for destination, cost in sorted(neighbor_table.items()):
            new_cost = link_cost + cost
            current = self.routing_table.get(destination)
            if current is None or new_cost < current:
                logger.info(
                    "%s updated route to no%d via no%d (cost %s) in phase %d",
                    self.name,
                    destination,
                    neighbor,
                    new_cost,
                    self.phase,
                )
                self.routing_table[destination] = new_cost
                self.next_hops[destination] = neighbor
                updated = True
                if destination not in self.known_destinations:
                    self.known_destinations.append(destination)

        if updated:
            self._log_table("Após PI")
            self._propagate()

        self._check_convergence()

    def _check_convergence(self) -> None:
        if len(self.routing_table) >= TOTAL_NODES and not self.converged:
            self.converged = True
            self.convergence_time = self._net().now - self.start_time
            logger.info("%s converged in %ss", self.name, self.convergence_time)
            self._log_consistency()

    def _log_table(self, reason: str) -> None:
        logger.debug("=== Routing table of %s (%s) ===", self.name, reason)
        for destination, cost in sorted(self.routing_table.items()):
            logger.debug(
                "  destination no%d | cost %s | next hop no%s",
                destination,
                cost,
                self.next_hops.get(destination),
            )
        logger.debug(_RULE)

    def _log_consistency(self) -> None:
        logger.debug("=== Consistency check - %s ===", self.name)
        own = extract_node_number(self.name)
        for destination, cost in sorted(self.routing_table.items()):
            if destination == own:
                continue
            hop = self.next_hops.get(destination, 0)
            if self.neighbor_costs.get(hop, 0.0) > 0:
                logger.debug(
                    "  destination no%d: via no%d (cost %s)", destination, hop, cost
                )
        logger.debug(_RULE)

    def finish(self) -> RouterStatistics:
        """Record and return the router's final statistics."""
        stats = RouterStatistics(
            messages_sent=self.messages_sent,
            messages_received=self.messages_received,
            convergence_time=self.convergence_time,
            converged=self.converged,
            known_destinations=len(self.known_destinations),
            final_phase=self.phase,
            final_global_clock=self.global_clock,
        )
        logger.info("=== Final statistics - %s ===", self.name)
        logger.info("messages sent: %d", stats.messages_sent)
        logger.info("messages received: %d", stats.messages_received)
        logger.info("convergence time: %ss", stats.convergence_time)
        logger.info("converged: %s", "SIM" if stats.converged else "NÃO")
        logger.info("known destinations: %d", stats.known_destinations)
        logger.info("final phase: %d", stats.final_phase)
        logger.info("final global clock: %ss", stats.final_global_clock)
        self.statistics = stats
        return stats


class Network:
    """Routers joined by bidirectional delay links, driven by an event queue."""

    def __init__(self, seed: int | None = None) -> None:
        self.routers: dict[str, Router] = {}
        self.rng = random.Random(seed)
        self.now = 0.0
        self._queue: list[tuple[float, int, Router, Any]] = []
        self._sequence = itertools.count()
        self._initialized = False

    def add_router(self, name: str, is_starter: bool = False) -> Router:
        """Create a router called ``name`` and add it to the network."""
        if self._initialized:
            raise RuntimeError("cannot add routers once the network has started")
        if name in self.routers:
            raise ValueError(f"duplicate router name {name!r}")
        router = Router(name, bool(is_starter), module_id=len(self.routers) + 1)
        self.routers[name] = router
        return router

    def _lookup(self, name: str) -> Router:
        try:
            return self.routers[name]
        except KeyError:
            raise ValueError(f"no router named {name!r}") from None

    def connect(self, first: str, second: str, delay: float) -> None:
        """Join two routers with a link of the given delay in both directions."""
        if self._initialized:
            raise RuntimeError("cannot add links once the network has started")
        a, b = self._lookup(first), self._lookup(second)
        if a is b:
            raise ValueError(f"cannot connect {first!r} to itself")
        delay = float(delay)
        if delay < 0:
            raise ValueError(f"link delay cannot be negative: {delay}")
        a.gates.append(_Gate(b, delay))
        b.gates.append(_Gate(a, delay))

    def schedule(self, time: float, router: Router, message: Any) -> None:
        """Queue ``message`` for delivery to ``router`` at ``time``."""
        if time < self.now:
            raise ValueError(f"cannot schedule in the past: {time} < {self.now}")
        heapq.heappush(self._queue, (time, next(self._sequence), router, message))

    def send(self, router: Router, gate: int, message: Any) -> None:
        """Send ``message`` out of ``router``'s gate number ``gate``."""
        if not 0 <= gate < len(router.gates):
            raise IndexError(f"router {router.name!r} has no gate {gate}")
        link = router.gates[gate]
        self.schedule(self.now + link.delay, link.peer, message)

    def _initialize(self) -> None:
        if not self._initialized:
            self._initialized = True
            for router in self.routers.values():
                router.initialize(self)

    def run(self, until: float | None = None) -> int:
        """Run events up to time ``until`` (or until none are left).

        Returns the number of events handled.
        """
        self._initialize()
        handled = 0
        while self._queue:
            time, _, router, message = self._queue[0]
            if until is not None and time > until:
                break
            heapq.heappop(self._queue)
            self.now = time
            router.handle_message(message)
            handled += 1
        return handled

    def finish(self) -> dict[str, RouterStatistics]:
        """Finish every router and return their statistics by name."""
        return {name: router.finish() for name, router in self.routers.items()}