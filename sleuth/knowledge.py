"""
Knowledge map — the agent's private, incrementally-updated belief over the grid.

One CellBelief per grid coordinate, stored row-major in a flat list. A
belief starts fully unknown, may accumulate hazard estimates while it sits
on the frontier, and becomes certain (a copy of the ground truth) exactly
when the agent stands on the cell. It never goes back.

Hazard accumulators are not probabilities:
- precipice_risk grows near gravel and is wiped out by neighboring grass
- corpse_risk goes negative near blood; more negative means a corpse is
  more likely close by

The hazard score of a cell is precipice_risk + corpse_risk. It is both the
exploration-priority signal and the traversal penalty used by the pathfinder.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

import numpy as np

from sleuth.grid import Content, Coord, Terrain, neighbors


@dataclass
class CellBelief:
    """What the agent believes about one cell."""
    terrain: Terrain = Terrain.UNKNOWN
    content: Content = Content.UNKNOWN
    precipice_risk: int = 0
    corpse_risk: int = 0
    is_frontier: bool = False
    ruled_out_precipice: bool = False
    ruled_out_corpse: bool = False

    @property
    def hazard(self) -> int:
        return self.precipice_risk + self.corpse_risk

    @property
    def is_certain(self) -> bool:
        return self.terrain != Terrain.UNKNOWN


class AgentStatus(Enum):
    """High-level state of the detective."""
    SLEEPING = "sleeping"
    EXPLORING = "exploring"
    GOING_HOME = "going_home"
    CASE_CLOSED = "case_closed"
    FALLEN = "fallen"


@dataclass
class AgentState:
    """Discovery flags and lifecycle of one agent."""
    position: Coord
    home: Coord = (0, 0)
    found_knife: bool = False
    found_corpse: bool = False
    case_closed: bool = False   # latched once the home route is issued
    status: AgentStatus = AgentStatus.SLEEPING
    steps: int = 0

    @property
    def evidence_complete(self) -> bool:
        return self.found_knife and self.found_corpse


class KnowledgeMap:
    """
    Dense store of CellBelief records plus the frontier set.

    The frontier set keeps insertion order: the frontier selector scans it
    in that order and its tie-break depends on it.
    """

    def __init__(self, rows: int, cols: int):
        if rows <= 0 or cols <= 0:
            raise ValueError(f"knowledge map must be at least 1x1, got {rows}x{cols}")
        self.rows = rows
        self.cols = cols
        self._cells: List[CellBelief] = [CellBelief() for _ in range(rows * cols)]
        self._frontier: Dict[Coord, None] = {}

    def _index(self, pos: Coord) -> int:
        return pos[0] * self.cols + pos[1]

    def in_bounds(self, pos: Coord) -> bool:
        row, col = pos
        return 0 <= row < self.rows and 0 <= col < self.cols

    def belief(self, pos: Coord) -> Optional[CellBelief]:
        if not self.in_bounds(pos):
            return None
        return self._cells[self._index(pos)]

    def hazard(self, pos: Coord) -> int:
        belief = self.belief(pos)
        return belief.hazard if belief is not None else 0

    def neighbors(self, pos: Coord) -> List[Coord]:
        return neighbors(pos, self.rows, self.cols)

    # --- Frontier set ---

    @property
    def frontier(self) -> Tuple[Coord, ...]:
        """Snapshot of the frontier set in insertion order."""
        return tuple(self._frontier)

    def is_frontier(self, pos: Coord) -> bool:
        return pos in self._frontier

    def add_frontier(self, pos: Coord) -> None:
        self._cells[self._index(pos)].is_frontier = True
        if pos not in self._frontier:
            self._frontier[pos] = None

    def discard_frontier(self, pos: Coord) -> None:
        self._cells[self._index(pos)].is_frontier = False
        self._frontier.pop(pos, None)

    # --- Queries ---

    def is_traversable(self, pos: Coord) -> bool:
        """Known terrain or frontier: the part of the world the agent can explain."""
        belief = self.belief(pos)
        if belief is None:
            return False
        return belief.is_frontier or belief.is_certain

    def known_cells(self) -> List[Coord]:
        return [
            (r, c)
            for r in range(self.rows)
            for c in range(self.cols)
            if self._cells[r * self.cols + c].is_certain
        ]

    def hazard_array(self) -> np.ndarray:
        """Hazard score of every cell as a (rows, cols) array."""
        values = [belief.hazard for belief in self._cells]
        return np.array(values, dtype=float).reshape(self.rows, self.cols)

    def check_invariants(self) -> None:
        """Fail fast on propagation-rule regressions."""
        for i, belief in enumerate(self._cells):
            pos = divmod(i, self.cols)
            assert belief.precipice_risk >= 0, \
                f"negative precipice risk {belief.precipice_risk} at {pos}"
            assert not belief.ruled_out_precipice or belief.precipice_risk == 0, \
                f"precipice ruled out at {pos} but risk is {belief.precipice_risk}"
            assert belief.is_frontier == (pos in self._frontier), \
                f"frontier flag out of sync at {pos}"
            if belief.is_certain:
                assert not belief.is_frontier, f"certain cell {pos} on the frontier"
                assert belief.hazard == 0, f"certain cell {pos} carries hazard {belief.hazard}"

    def render(self) -> str:
        """ASCII view: '?' unknown, 'F' frontier, terrain symbol when known."""
        symbols = {
            Terrain.GRASS: ".",
            Terrain.GRAVEL: ":",
            Terrain.PRECIPICE: "#",
        }
        lines = []
        for r in range(self.rows):
            row_str = ""
            for c in range(self.cols):
                belief = self._cells[r * self.cols + c]
                if belief.is_frontier:
                    row_str += "F"
                elif belief.is_certain:
                    row_str += symbols.get(belief.terrain, "?")
                else:
                    row_str += "?"
            lines.append(row_str)
        return "\n".join(lines)

    def summary(self) -> str:
        """Human-readable summary of the current beliefs."""
        hazards = self.hazard_array()
        lines = [
            "═" * 50,
            "  Knowledge Map Summary",
            "═" * 50,
            f"  Known cells:     {len(self.known_cells())}/{self.rows * self.cols}",
            f"  Frontier cells:  {len(self._frontier)}",
            f"  Max hazard:      {hazards.max():.0f}",
            f"  Min hazard:      {hazards.min():.0f}",
            "",
            self.render(),
            "═" * 50,
        ]
        return "\n".join(lines)
