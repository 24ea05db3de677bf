"""
Detective agent — the exploration control loop.

The agent implements the feedback loop of the case:

    arrive → observe → select target → plan route → walk route → arrive ...

State machine:

    SLEEPING → EXPLORING ⇄ (select, plan, walk) → GOING_HOME → CASE_CLOSED
                   └──────────── precipice ────────────→ FALLEN

Each agent owns its knowledge map; the grid, including its occupancy
layer, is shared. Walking a route is exposed as a generator that advances
one cell per iteration, so the caller decides the pacing between steps.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from sleuth.frontier import STRATEGIES, FrontierSelector
from sleuth.grid import Coord, Grid
from sleuth.knowledge import AgentState, AgentStatus, KnowledgeMap
from sleuth.pathfinder import (
    Diagnostics, DiagnosticsLog, DiagnosticsSink, PathResult, Pathfinder,
    log_diagnostics,
)
from sleuth.propagator import KnowledgePropagator, PropagationRules

logger = logging.getLogger(__name__)

NEAREST = "nearest"


@dataclass
class AgentConfig:
    """Configuration for a detective agent."""
    strategy: str = "riskiest"      # a key of STRATEGIES, or "nearest"
    seed: Optional[int] = None
    home: Optional[Coord] = None    # defaults to the grid's home cell
    max_steps: int = 500
    rules: PropagationRules = field(default_factory=PropagationRules)


@dataclass
class CaseResult:
    """Result of running one agent on a case."""
    status: AgentStatus
    steps: int
    routes: int
    path: List[Coord]
    found_knife: bool
    found_corpse: bool
    diagnostics: List[Diagnostics]

    @property
    def solved(self) -> bool:
        return self.status == AgentStatus.CASE_CLOSED

    def summary(self) -> str:
        lines = [
            "═" * 55,
            "  Detective — Case Result",
            "═" * 55,
            f"  Status:            {self.status.value}",
            f"  Solved:            {'Yes' if self.solved else 'No'}",
            f"  Knife found:       {'Yes' if self.found_knife else 'No'}",
            f"  Body found:        {'Yes' if self.found_corpse else 'No'}",
            f"  Steps walked:      {self.steps}",
            f"  Routes planned:    {self.routes}",
        ]
        if self.diagnostics:
            visited = [d.cells_visited for d in self.diagnostics]
            failed = sum(1 for d in self.diagnostics if not d.success)
            lines.append(f"  Searches:          {len(self.diagnostics)} ({failed} impossible)")
            lines.append(f"  Avg cells visited: {sum(visited) / len(visited):.1f}")
            lines.append(f"  Search time:       "
                         f"{sum(d.elapsed_ms for d in self.diagnostics):.2f} ms")
        lines.append("═" * 55)
        return "\n".join(lines)


class DetectiveAgent:
    """
    An agent that explores a case grid until it has found the knife and the
    corpse, then walks home.

    Parameters
    ----------
    grid : Grid
        The shared ground truth.
    start : Coord
        Cell the agent spawns on; it is claimed in the occupancy layer.
    config : AgentConfig, optional
    sink : callable, optional
        Extra diagnostics sink; records are always kept on the agent too.
    """

    def __init__(self, grid: Grid, start: Coord,
                 config: Optional[AgentConfig] = None,
                 sink: Optional[DiagnosticsSink] = None):
        self.config = config or AgentConfig()
        if not grid.in_bounds(start):
            raise ValueError(f"start cell {start} is outside the {grid.rows}x{grid.cols} grid")
        if grid.is_occupied(start[0], start[1]):
            raise ValueError(f"start cell {start} is already held by another agent")
        strategy = self.config.strategy
        if strategy != NEAREST and strategy not in STRATEGIES:
            raise ValueError(f"unknown strategy {strategy!r}")

        self.grid = grid
        self.rng = random.Random(self.config.seed)
        self.knowledge = KnowledgeMap(grid.rows, grid.cols)
        home = self.config.home if self.config.home is not None else grid.home
        self.state = AgentState(position=start, home=home)
        self.propagator = KnowledgePropagator(grid, self.knowledge, self.state,
                                              self.config.rules)
        # Nearest-frontier agents still need the selector for the trip home
        self.selector = FrontierSelector(
            "riskiest" if strategy == NEAREST else strategy, self.rng,
        )
        self.diagnostics = DiagnosticsLog()
        self._sink = sink if sink is not None else log_diagnostics
        self.pathfinder = Pathfinder(grid, self.knowledge, sink=self._record)

        self.path: List[Coord] = [start]
        self.routes = 0
        grid.set_occupied(start[0], start[1], True)

    def _record(self, diagnostics: Diagnostics) -> None:
        self.diagnostics(diagnostics)
        self._sink(diagnostics)

    @property
    def status(self) -> AgentStatus:
        return self.state.status

    @property
    def position(self) -> Coord:
        return self.state.position

    @property
    def finished(self) -> bool:
        return self.state.status in (AgentStatus.CASE_CLOSED, AgentStatus.FALLEN)

    def wake(self) -> None:
        """Start exploring from the spawn cell."""
        if self.state.status != AgentStatus.SLEEPING:
            return
        self.state.status = AgentStatus.EXPLORING
        logger.info("exploring from %s", self.position)
        self.propagator.observe(self.position)

    def plan(self) -> Optional[PathResult]:
        """
        Choose the next target and compute a route to it.

        Returns None when there is nothing left to do: the case is closed,
        the frontier is exhausted, or no target can be reached.
        """
        if self.finished or self.state.status == AgentStatus.SLEEPING:
            return None

        if self.config.strategy == NEAREST and not self.state.evidence_complete:
            result = self.pathfinder.explore(self.position)
            return result if result.found else None

        unreachable = set()
        while True:
            target = self.selector.select_target(self.state, self.knowledge,
                                                 exclude=unreachable)
            if target is None:
                return None
            result = self.pathfinder.find_path(self.position, target)
            if result.found:
                self._check_home()
                return result
            logger.info("route impossible from %s to %s", self.position, target)
            if self.state.status == AgentStatus.GOING_HOME:
                return None
            unreachable.add(target)

    def follow(self, result: PathResult) -> Iterator[Coord]:
        """
        Walk a route one cell per iteration, yielding each new position.

        The walk stops when the route is consumed, when the next cell has
        been claimed by another agent, or when the agent falls.
        """
        while not self.finished:
            step = result.next_step()
            if step is None:
                return
            if self.grid.is_occupied(step[0], step[1]):
                logger.info("route blocked at %s, dropping the rest", step)
                return
            self._move_to(step)
            yield step

    def _move_to(self, step: Coord) -> None:
        row, col = self.position
        self.grid.set_occupied(row, col, False)
        self.grid.set_occupied(step[0], step[1], True)
        self.state.position = step
        self.state.steps += 1
        self.path.append(step)
        if not self.knowledge.belief(step).is_certain:
            self.propagator.observe(step)
        self._check_home()

    def _check_home(self) -> None:
        if self.state.status == AgentStatus.GOING_HOME and self.position == self.state.home:
            self.state.status = AgentStatus.CASE_CLOSED
            logger.info("case closed after %d steps", self.state.steps)

    def run(self, max_steps: Optional[int] = None,
            verbose: bool = False) -> CaseResult:
        """
        Run the whole case synchronously.

        Plans and walks routes until the agent is finished, has nothing
        left to explore, or has walked max_steps cells.
        """
        limit = max_steps if max_steps is not None else self.config.max_steps
        self.wake()

        while not self.finished and self.state.steps < limit:
            result = self.plan()
            if result is None:
                break
            self.routes += 1
            if verbose:
                print(f"  [route {self.routes:3d}] {self.position} → {result.target}  "
                      f"steps={len(result):2d}  cost={result.cost:g}  "
                      f"visited={result.cells_visited}")

            moved = 0
            for _ in self.follow(result):
                moved += 1
                if self.state.steps >= limit:
                    break
            if moved == 0 and not self.finished:
                break

        return CaseResult(
            status=self.state.status,
            steps=self.state.steps,
            routes=self.routes,
            path=list(self.path),
            found_knife=self.state.found_knife,
            found_corpse=self.state.found_corpse,
            diagnostics=list(self.diagnostics.records),
        )
