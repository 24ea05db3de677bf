"""
Uniform-cost search over the agent's knowledge map.

The search is Dijkstra-family, not A*: the priority of a cell is its
accumulated cost. Moving into a cell costs 1 plus the cell's hazard score,
and the hazard may be negative (corpse risk), so some routes are cheaper
than their step count.

Only cells the agent can explain are traversable: known cells and frontier
cells. Unknown cells behind the frontier and cells occupied by other agents
are obstacles. Frontier cells are leaves of the search: they can be reached
but are never expanded, since the agent cannot know what lies beyond them.

The search never stops early. It drains the whole reachable region, so the
distance table and the nearest frontier cell are complete when it returns;
the explore mode relies on that.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Tuple

import numpy as np

from sleuth.grid import Coord, Grid, manhattan
from sleuth.knowledge import KnowledgeMap

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------

@dataclass
class Diagnostics:
    """Scalar statistics of one search, for display."""
    cells_visited: int
    elapsed_ms: float
    elapsed_ticks: int
    success: bool

    def __repr__(self) -> str:
        verdict = "route possible" if self.success else "route impossible"
        return (f"Diagnostics({verdict}, visited={self.cells_visited}, "
                f"{self.elapsed_ms:.3f} ms)")


DiagnosticsSink = Callable[[Diagnostics], None]


def log_diagnostics(diagnostics: Diagnostics) -> None:
    """Default sink: one DEBUG line per search."""
    logger.debug("search %s: visited=%d elapsed=%.3fms ticks=%d",
                 "succeeded" if diagnostics.success else "failed",
                 diagnostics.cells_visited, diagnostics.elapsed_ms,
                 diagnostics.elapsed_ticks)


class DiagnosticsLog:
    """Sink that keeps every record, e.g. for summaries and tests."""

    def __init__(self):
        self.records: List[Diagnostics] = []

    def __call__(self, diagnostics: Diagnostics) -> None:
        self.records.append(diagnostics)

    def __len__(self) -> int:
        return len(self.records)

    @property
    def last(self) -> Optional[Diagnostics]:
        return self.records[-1] if self.records else None

    @property
    def total_visited(self) -> int:
        return sum(d.cells_visited for d in self.records)


# ---------------------------------------------------------------------------
# Search state and result
# ---------------------------------------------------------------------------

@dataclass
class SearchState:
    """Transient state of one search, kept on the result for inspection."""
    dist: np.ndarray
    prev: Dict[Coord, Coord] = field(default_factory=dict)
    best_frontier: Optional[Coord] = None

    def distance(self, pos: Coord) -> float:
        row, col = pos
        if not (0 <= row < self.dist.shape[0] and 0 <= col < self.dist.shape[1]):
            return float("inf")
        return float(self.dist[pos])

    def reachable(self) -> List[Coord]:
        """Cells with a finite distance, row-major."""
        return [(int(r), int(c)) for r, c in zip(*np.nonzero(np.isfinite(self.dist)))]


@dataclass
class PathResult:
    """
    Outcome of a search.

    route is a stack: route[-1] is the next immediate step and route[0] the
    target. The origin is not included. Iterating the result yields the
    remaining steps in travel order, lazily, and starts over on each
    iteration.
    """
    found: bool
    route: List[Coord]
    cells_visited: int
    elapsed_ms: float
    elapsed_ticks: int
    target: Optional[Coord] = None
    cost: float = float("inf")
    search: Optional[SearchState] = None

    def __iter__(self) -> Iterator[Coord]:
        return reversed(self.route)

    def __len__(self) -> int:
        return len(self.route)

    def __bool__(self) -> bool:
        return self.found

    def next_step(self) -> Optional[Coord]:
        """Pop the next cell off the route, or None when it is consumed."""
        return self.route.pop() if self.route else None

    @property
    def diagnostics(self) -> Diagnostics:
        return Diagnostics(self.cells_visited, self.elapsed_ms,
                           self.elapsed_ticks, self.found)

    def __repr__(self) -> str:
        if self.found:
            return (f"PathResult(target={self.target}, steps={len(self.route)}, "
                    f"cost={self.cost:g}, visited={self.cells_visited})")
        return f"PathResult(target={self.target}, not found, visited={self.cells_visited})"


class _PriorityQueue:
    """Min-priority queue without duplicates; re-pushing a cell updates it."""

    _REMOVED = None

    def __init__(self):
        self._heap: List[list] = []
        self._entries: Dict[Coord, list] = {}
        self._counter = itertools.count()

    def push(self, item: Coord, priority: float) -> None:
        entry = self._entries.pop(item, None)
        if entry is not None:
            entry[-1] = self._REMOVED
        entry = [priority, next(self._counter), item]
        self._entries[item] = entry
        heapq.heappush(self._heap, entry)

    def pop(self) -> Coord:
        while self._heap:
            _, _, item = heapq.heappop(self._heap)
            if item is not self._REMOVED:
                del self._entries[item]
                return item
        raise KeyError("pop from an empty priority queue")

    def __len__(self) -> int:
        return len(self._entries)


# ---------------------------------------------------------------------------
# Pathfinder
# ---------------------------------------------------------------------------

class Pathfinder:
    """
    Computes hazard-weighted routes for one agent.

    Parameters
    ----------
    grid : Grid
        Shared ground truth; only its occupancy layer is read and written.
    knowledge : KnowledgeMap
        The agent's beliefs, which define traversability and step costs.
    sink : callable, optional
        Receives a Diagnostics record after every search.
    """

    def __init__(self, grid: Grid, knowledge: KnowledgeMap,
                 sink: Optional[DiagnosticsSink] = None):
        self.grid = grid
        self.knowledge = knowledge
        self.sink = sink if sink is not None else log_diagnostics

    def find_path(self, origin: Coord, target: Coord) -> PathResult:
        """Cheapest route from origin to target under current knowledge."""
        search, visited, elapsed_ns = self._search(origin, target)
        cost = search.distance(target)
        return self._finish(search, origin, target, cost, visited, elapsed_ns)

    def explore(self, origin: Coord) -> PathResult:
        """Route to the frontier cell with the lowest accumulated cost."""
        search, visited, elapsed_ns = self._search(origin, None)
        target = search.best_frontier
        cost = search.distance(target) if target is not None else float("inf")
        return self._finish(search, origin, target, cost, visited, elapsed_ns)

    def _search(self, origin: Coord,
                target: Optional[Coord]) -> Tuple[SearchState, int, int]:
        if not self.knowledge.in_bounds(origin):
            raise ValueError(f"search origin {origin} is outside the grid")
        t0 = time.perf_counter_ns()
        search = SearchState(dist=np.full(self.grid.shape, np.inf))
        search.dist[origin] = 0.0
        self.grid.set_occupied(origin[0], origin[1], True)

        queue = _PriorityQueue()
        queue.push(origin, 0.0)
        visited = 0

        while queue:
            u = queue.pop()
            visited += 1
            if u == target:
                continue
            if u != origin and self.knowledge.is_frontier(u):
                continue
            for v in self.knowledge.neighbors(u):
                self._relax(search, queue, u, v)

        return search, visited, time.perf_counter_ns() - t0

    def _relax(self, search: SearchState, queue: _PriorityQueue,
               u: Coord, v: Coord) -> None:
        if not self.knowledge.is_traversable(v):
            return
        if self.grid.is_occupied(v[0], v[1]):
            return

        candidate = search.dist[u] + self.knowledge.hazard(v) + 1
        if candidate < search.dist[v]:
            search.dist[v] = candidate
            search.prev[v] = u
            priority = candidate + manhattan(v, v)
            queue.push(v, priority)

            if self.knowledge.is_frontier(v):
                best = search.best_frontier
                if best is None or search.dist[v] < search.dist[best]:
                    search.best_frontier = v

    def _finish(self, search: SearchState, origin: Coord, target: Optional[Coord],
                cost: float, visited: int, elapsed_ns: int) -> PathResult:
        found = target is not None and np.isfinite(cost)
        route: List[Coord] = []
        if found:
            cur = target
            while cur != origin:
                route.append(cur)
                cur = search.prev[cur]

        result = PathResult(
            found=bool(found),
            route=route,
            cells_visited=visited,
            elapsed_ms=elapsed_ns / 1e6,
            elapsed_ticks=elapsed_ns,
            target=target,
            cost=float(cost),
            search=search,
        )
        if not found:
            logger.debug("no route from %s to %s", origin, target)
        self.sink(result.diagnostics)
        return result
