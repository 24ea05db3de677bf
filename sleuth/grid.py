"""
Ground-truth grid for the detective case.

Each cell holds a terrain type and a content item:
- Terrain: grass is safe, gravel surrounds precipices, precipices are fatal
- Content: blood surrounds the corpse, the knife lies near a blood stain,
  the house marks where the detective starts and must return

The grid belongs to the environment, not to the agent. The agent only
reads a cell's ground truth when it physically stands on it, and the
occupancy flags are the one piece of state shared between agents.

Out-of-range queries never raise: they return VOID_CELL, a safe,
non-traversable, zero-cost sentinel.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

Coord = Tuple[int, int]


# ---------------------------------------------------------------------------
# Directions, terrain and content
# ---------------------------------------------------------------------------

class Direction(IntEnum):
    """The four axis-aligned neighbor directions."""
    UP = 0
    RIGHT = 1
    DOWN = 2
    LEFT = 3

    def delta(self) -> Tuple[int, int]:
        """Row, col displacement for this direction."""
        return {
            Direction.UP: (-1, 0),
            Direction.RIGHT: (0, 1),
            Direction.DOWN: (1, 0),
            Direction.LEFT: (0, -1),
        }[self]

    @staticmethod
    def all() -> List["Direction"]:
        return [Direction.UP, Direction.RIGHT, Direction.DOWN, Direction.LEFT]


class Terrain(IntEnum):
    """Ground type of a cell."""
    GRASS = 0
    PRECIPICE = 1
    GRAVEL = 2
    UNKNOWN = 3


class Content(IntEnum):
    """Item lying on a cell."""
    NOTHING = 0
    BLOOD = 1
    KNIFE = 2
    CORPSE = 3
    HOUSE = 4
    UNKNOWN = 5


@dataclass(frozen=True)
class Cell:
    """Ground truth of one grid position."""
    terrain: Terrain
    content: Content

    def __repr__(self) -> str:
        return f"Cell({self.terrain.name}, {self.content.name})"


VOID_CELL = Cell(Terrain.UNKNOWN, Content.NOTHING)


def manhattan(a: Coord, b: Coord) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def neighbors(pos: Coord, rows: int, cols: int) -> List[Coord]:
    """In-bounds 4-neighbors of pos on a rows x cols grid, in Direction.all() order."""
    row, col = pos
    result = []
    for direction in Direction.all():
        dr, dc = direction.delta()
        r, c = row + dr, col + dc
        if 0 <= r < rows and 0 <= c < cols:
            result.append((r, c))
    return result


@dataclass
class GridConfig:
    """Configuration for building a case grid."""
    rows: int = 5
    cols: int = 5
    terrain: Dict[Coord, Terrain] = field(default_factory=dict)    # default GRASS
    contents: Dict[Coord, Content] = field(default_factory=dict)   # default NOTHING
    home: Coord = (0, 0)


class Grid:
    """
    Fixed-size store of ground-truth terrain and content.

    Storage is dense numpy arrays indexed (row, col). Occupancy is a
    separate boolean layer that agents claim and release.
    """

    def __init__(self, config: GridConfig):
        if config.rows <= 0 or config.cols <= 0:
            raise ValueError(f"grid must be at least 1x1, got {config.rows}x{config.cols}")
        self.config = config
        self.rows = config.rows
        self.cols = config.cols
        self.home = config.home
        self._build_grid()

    def _build_grid(self) -> None:
        """Construct the internal arrays from the config overrides."""
        c = self.config
        self.terrain = np.full((c.rows, c.cols), Terrain.GRASS, dtype=int)
        self.content = np.full((c.rows, c.cols), Content.NOTHING, dtype=int)
        self.occupied = np.zeros((c.rows, c.cols), dtype=bool)

        for pos in list(c.terrain) + list(c.contents):
            if not self.in_bounds(pos):
                raise ValueError(f"override at {pos} is outside the {c.rows}x{c.cols} grid")

        for pos, terrain in c.terrain.items():
            if terrain == Terrain.UNKNOWN:
                raise ValueError(f"ground truth at {pos} cannot be UNKNOWN")
            self.terrain[pos] = terrain
        for pos, content in c.contents.items():
            if content == Content.UNKNOWN:
                raise ValueError(f"ground truth at {pos} cannot be UNKNOWN")
            self.content[pos] = content

        if self.in_bounds(c.home) and c.home not in c.contents:
            self.content[c.home] = Content.HOUSE

    @property
    def shape(self) -> Tuple[int, int]:
        return self.rows, self.cols

    def in_bounds(self, pos: Coord) -> bool:
        row, col = pos
        return 0 <= row < self.rows and 0 <= col < self.cols

    def cell_at(self, pos: Coord) -> Cell:
        if not self.in_bounds(pos):
            return VOID_CELL
        return Cell(Terrain(self.terrain[pos]), Content(self.content[pos]))

    def terrain_at(self, row: int, col: int) -> Terrain:
        return self.cell_at((row, col)).terrain

    def content_at(self, row: int, col: int) -> Content:
        return self.cell_at((row, col)).content

    def set_occupied(self, row: int, col: int, flag: bool) -> None:
        if self.in_bounds((row, col)):
            self.occupied[row, col] = flag

    def is_occupied(self, row: int, col: int) -> bool:
        if not self.in_bounds((row, col)):
            return False
        return bool(self.occupied[row, col])

    def neighbors(self, pos: Coord) -> List[Coord]:
        return neighbors(pos, self.rows, self.cols)

    def find(self, content: Content) -> List[Coord]:
        """All cells holding the given content."""
        return [(int(r), int(c)) for r, c in zip(*np.nonzero(self.content == content))]

    def render(self, agents: Iterable[Coord] = ()) -> str:
        """ASCII rendering of the grid for debugging."""
        terrain_symbols = {
            Terrain.GRASS: ".",
            Terrain.GRAVEL: ":",
            Terrain.PRECIPICE: "#",
        }
        content_symbols = {
            Content.BLOOD: "b",
            Content.KNIFE: "k",
            Content.CORPSE: "C",
            Content.HOUSE: "H",
        }
        agents = set(agents)
        lines = []
        for r in range(self.rows):
            row_str = ""
            for c in range(self.cols):
                if (r, c) in agents:
                    row_str += "A"
                elif Content(self.content[r, c]) in content_symbols:
                    row_str += content_symbols[Content(self.content[r, c])]
                else:
                    row_str += terrain_symbols.get(Terrain(self.terrain[r, c]), "?")
            lines.append(row_str)
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Random case generation
# ---------------------------------------------------------------------------

def generate_world(rows: int = 10, cols: int = 10, seed: Optional[int] = None,
                   precipices: int = 3) -> Grid:
    """
    Build a random case.

    The whole field is grass with the house at (0, 0). The corpse is placed
    away from the house, blood stains every cell around it, and the knife
    lies next to one of the blood stains. Each precipice attempt drops a
    precipice on a random cell that holds no evidence and rings it with
    gravel; gravel never covers an existing precipice.
    """
    if rows < 3 or cols < 3:
        raise ValueError(f"random cases need at least a 3x3 grid, got {rows}x{cols}")
    rng = np.random.default_rng(seed)
    grid = Grid(GridConfig(rows=rows, cols=cols, home=(0, 0)))

    corpse = (int(rng.integers(2, rows)), int(rng.integers(2, cols)))
    grid.content[corpse] = Content.CORPSE

    stains = grid.neighbors(corpse)
    for pos in stains:
        grid.content[pos] = Content.BLOOD

    stain = stains[int(rng.integers(len(stains)))]
    candidates = [pos for pos in grid.neighbors(stain) if pos != corpse]
    knife = candidates[int(rng.integers(len(candidates)))]
    grid.content[knife] = Content.KNIFE

    evidence = (Content.CORPSE, Content.KNIFE, Content.BLOOD)
    for _ in range(precipices):
        pos = (int(rng.integers(1, rows)), int(rng.integers(1, cols)))
        if Content(grid.content[pos]) in evidence:
            continue
        grid.terrain[pos] = Terrain.PRECIPICE
        for nb in grid.neighbors(pos):
            if grid.terrain[nb] != Terrain.PRECIPICE:
                grid.terrain[nb] = Terrain.GRAVEL

    return grid


# ---------------------------------------------------------------------------
# Pre-built cases
# ---------------------------------------------------------------------------

def make_open_field(rows: int = 3, cols: int = 3) -> Grid:
    """
    An all-grass field with nothing on it but the house.

        H . .
        . . .
        . . .
    """
    return Grid(GridConfig(rows=rows, cols=cols))


def make_gravel_case() -> Grid:
    """
    5x5 case with one precipice ringed by gravel.

        H . . . .
        . . : . .
        . : # : .
        . . : . .
        k b C . .
    """
    config = GridConfig(
        rows=5, cols=5,
        terrain={
            (2, 2): Terrain.PRECIPICE,
            (1, 2): Terrain.GRAVEL, (3, 2): Terrain.GRAVEL,
            (2, 1): Terrain.GRAVEL, (2, 3): Terrain.GRAVEL,
        },
        contents={
            (4, 0): Content.KNIFE,
            (4, 1): Content.BLOOD,
            (4, 2): Content.CORPSE,
        },
    )
    return Grid(config)


def make_blood_trail_case() -> Grid:
    """
    6x6 case with the corpse surrounded by blood and no precipices.

        H . . . . .
        . . . . . .
        . . k b . .
        . . b C b .
        . . . b . .
        . . . . . .
    """
    config = GridConfig(
        rows=6, cols=6,
        contents={
            (3, 3): Content.CORPSE,
            (2, 3): Content.BLOOD, (4, 3): Content.BLOOD,
            (3, 2): Content.BLOOD, (3, 4): Content.BLOOD,
            (2, 2): Content.KNIFE,
        },
    )
    return Grid(config)
